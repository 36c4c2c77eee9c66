"""
# Database Management Module

This module provides the **MongoDB infrastructure** for the Household Hub API. The
`DatabaseManager` class owns the Motor client for the lifetime of the process and is the
single gateway repositories use to reach collections.

## Architecture Overview

```
┌──────────────┐      ┌──────────────────────┐      ┌──────────────────┐
│ Repositories │─────▶│   DatabaseManager    │─────▶│ Motor connection │
│  (per domain)│      │     (singleton)      │      │       pool       │
└──────────────┘      └──────────────────────┘      └──────────────────┘
```

## Responsibilities

1. **Connection lifecycle**: `connect()` with exponential-backoff retries, `disconnect()`.
2. **Collection access**: `get_collection(name)`; raises if not connected.
3. **Index bootstrap**: `create_indexes()` at startup. Failures propagate so the
   application refuses to start without the uniqueness guarantees it depends on.
4. **Query logging**: `log_query_start/success/error` with sensitive keys redacted.

## Usage

```python
from household_hub.database import db_manager

await db_manager.connect()
await db_manager.create_indexes()
settings_collection = db_manager.get_collection("family_settings")
```
"""

import asyncio
import logging
import time
from typing import Any, Dict, Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo.errors import ConnectionFailure, DuplicateKeyError, PyMongoError, ServerSelectionTimeoutError

from household_hub.config import settings
from household_hub.managers.logging_manager import get_logger

db_logger = get_logger(prefix="[DATABASE]")
perf_logger = get_logger(prefix="[DB_PERFORMANCE]")
health_logger = get_logger(prefix="[DB_HEALTH]")

MAX_POOL_SIZE = 50
MIN_POOL_SIZE = 5

SENSITIVE_FIELDS = {
    "password",
    "token",
    "secret",
    "key",
    "credential",
    "api_key",
    "apikey",
}


class DatabaseManager:
    """
    Manages the MongoDB connection, collection access and startup indexes.

    **Lifecycle:**
    1. `connect()` during application startup.
    2. `create_indexes()` once connected.
    3. `get_collection()` from repositories.
    4. `disconnect()` during shutdown.

    Attributes:
        client (Optional[AsyncIOMotorClient]): `None` until `connect()` succeeds.
        database (Optional[AsyncIOMotorDatabase]): The selected database.
    """

    def __init__(self):
        self.client: Optional[AsyncIOMotorClient] = None
        self.database: Optional[AsyncIOMotorDatabase] = None
        self._connection_retries = 3

    def _build_connection_string(self) -> str:
        if settings.MONGODB_USERNAME and settings.MONGODB_PASSWORD:
            password = settings.MONGODB_PASSWORD.get_secret_value()
            db_logger.debug("Using authenticated connection to MongoDB")
            return f"mongodb://{settings.MONGODB_USERNAME}:{password}@{settings.MONGODB_URL.replace('mongodb://', '')}"
        db_logger.debug("Using unauthenticated connection to MongoDB")
        return settings.MONGODB_URL

    async def connect(self):
        """
        Establish the MongoDB connection with exponential backoff.

        Up to three attempts are made, waiting 1s then 2s between them. The connection
        is verified with a `ping` before the method returns.

        Raises:
            ServerSelectionTimeoutError: MongoDB unreachable after every attempt.
            ConnectionFailure: Authentication failed or the connection was refused.
        """
        start_time = time.time()
        db_logger.info("Starting MongoDB connection process")

        for attempt in range(self._connection_retries):
            attempt_start = time.time()
            try:
                db_logger.info("Connection attempt %d/%d to MongoDB", attempt + 1, self._connection_retries)
                db_logger.info(
                    "MongoDB connection config - URL: %s, Database: %s, ServerTimeout: %dms, ConnTimeout: %dms",
                    settings.MONGODB_URL,
                    settings.MONGODB_DATABASE,
                    settings.MONGODB_SERVER_SELECTION_TIMEOUT,
                    settings.MONGODB_CONNECTION_TIMEOUT,
                )

                self.client = AsyncIOMotorClient(
                    self._build_connection_string(),
                    serverSelectionTimeoutMS=settings.MONGODB_SERVER_SELECTION_TIMEOUT,
                    connectTimeoutMS=settings.MONGODB_CONNECTION_TIMEOUT,
                    maxPoolSize=MAX_POOL_SIZE,
                    minPoolSize=MIN_POOL_SIZE,
                )
                self.database = self.client[settings.MONGODB_DATABASE]

                ping_start = time.time()
                await self.client.admin.command("ping")
                ping_duration = time.time() - ping_start

                perf_logger.info(
                    "MongoDB connection established successfully in %.3fs (ping: %.3fs)",
                    time.time() - start_time,
                    ping_duration,
                )
                db_logger.info("Successfully connected to MongoDB database: %s", settings.MONGODB_DATABASE)
                return

            except (ServerSelectionTimeoutError, ConnectionFailure) as e:
                perf_logger.warning(
                    "Connection attempt %d failed after %.3fs", attempt + 1, time.time() - attempt_start
                )
                db_logger.warning(
                    "Failed to connect to MongoDB (attempt %d/%d): %s", attempt + 1, self._connection_retries, e
                )
                if attempt == self._connection_retries - 1:
                    db_logger.error("All connection attempts failed after %.3fs", time.time() - start_time)
                    raise

                backoff_time = 2**attempt
                db_logger.info("Waiting %.1fs before retry (exponential backoff)", backoff_time)
                await asyncio.sleep(backoff_time)

    async def disconnect(self):
        """Close the Motor client. Safe to call when not connected."""
        if self.client is None:
            db_logger.warning("Disconnect called but no active MongoDB connection found")
            return

        start_time = time.time()
        self.client.close()
        self.client = None
        self.database = None
        perf_logger.info("MongoDB disconnection completed in %.3fs", time.time() - start_time)
        db_logger.info("Successfully disconnected from MongoDB")

    async def health_check(self) -> bool:
        """Ping MongoDB. Returns False instead of raising when unreachable."""
        if self.client is None:
            health_logger.warning("Health check failed: No database client available")
            return False

        start_time = time.time()
        try:
            await self.client.admin.command("ping")
        except PyMongoError as e:
            perf_logger.warning("Database health check failed after %.3fs", time.time() - start_time)
            health_logger.error("Database health check failed: %s", e)
            return False

        perf_logger.debug("Database health check completed in %.3fs", time.time() - start_time)
        return True

    def get_collection(self, collection_name: str) -> AsyncIOMotorCollection:
        """
        Return the named collection of the connected database.

        Raises:
            ConnectionError: If `connect()` has not been called.
        """
        if self.database is None:
            db_logger.error("Attempted to get collection '%s' without database connection", collection_name)
            raise ConnectionError("Database not connected. Call connect() first.")

        return self.database[collection_name]

    async def create_indexes(self):
        """
        Create the indexes the application depends on.

        Any failure is logged and re-raised: the family settings uniqueness index backs
        the one-record-per-family guarantee, so startup must not continue without it.
        """
        # Deferred import: the repository module imports this package.
        from household_hub.database.family_settings_repository import FamilySettingsRepository

        start_time = time.time()
        db_logger.info("Starting database index creation process")

        try:
            await FamilySettingsRepository(self).ensure_indexes()

            memberships = self.get_collection(settings.FAMILY_MEMBERSHIPS_COLLECTION)
            await memberships.create_index(
                [("familyId", 1), ("userId", 1)], name="idx_family_memberships_family_user", unique=True
            )
            await memberships.create_index("userId", name="idx_family_memberships_user_id")

            perf_logger.info("Database index creation completed successfully in %.3fs", time.time() - start_time)
            db_logger.info("Database indexes created successfully")

        except (PyMongoError, ConnectionError) as e:
            db_logger.error("Failed to create database indexes after %.3fs: %s", time.time() - start_time, e)
            raise

    # Database operation logging utilities
    def log_query_start(
        self, collection_name: str, operation: str, query: Optional[Dict] = None, options: Optional[Dict] = None
    ) -> float:
        """Log the start of a query and return the start time for duration tracking."""
        start_time = time.time()
        db_logger.debug(
            "Starting %s operation on collection '%s' - Query: %s, Options: %s",
            operation,
            collection_name,
            self._sanitize_query_for_logging(query) if query else {},
            self._sanitize_query_for_logging(options) if options else {},
        )
        return start_time

    def log_query_success(
        self,
        collection_name: str,
        operation: str,
        start_time: float,
        result_count: Optional[int] = None,
        result_info: Optional[str] = None,
    ):
        duration = time.time() - start_time

        if result_count is not None:
            perf_logger.info(
                "%s on '%s' completed successfully in %.3fs - %d records",
                operation,
                collection_name,
                duration,
                result_count,
            )
        else:
            perf_logger.info("%s on '%s' completed successfully in %.3fs", operation, collection_name, duration)

        if result_info:
            db_logger.debug("Additional result info for %s on '%s': %s", operation, collection_name, result_info)

    def log_query_error(
        self, collection_name: str, operation: str, start_time: float, error: Exception, query: Optional[Dict] = None
    ):
        """
        Log a failed query with its (sanitized) filter and duration.

        This is the single log record for a persistence fault; callers re-raise without
        logging again. Duplicate-key violations are expected outcomes of the unique
        indexes and are logged as warnings.
        """
        duration = time.time() - start_time
        level = logging.WARNING if isinstance(error, DuplicateKeyError) else logging.ERROR
        db_logger.log(
            level,
            "%s operation failed on collection '%s' after %.3fs - Error: %s, Query: %s",
            operation,
            collection_name,
            duration,
            error,
            self._sanitize_query_for_logging(query) if query else {},
        )

    def _sanitize_query_for_logging(self, query: Dict[str, Any]) -> Dict[str, Any]:
        """Replace values of sensitive keys (e.g. `apiSecret`) with a redaction marker."""
        if not isinstance(query, dict):
            return {}

        sanitized: Dict[str, Any] = {}
        for key, value in query.items():
            if any(field in str(key).lower() for field in SENSITIVE_FIELDS):
                sanitized[key] = "[REDACTED]"
            elif isinstance(value, dict):
                sanitized[key] = self._sanitize_query_for_logging(value)
            elif isinstance(value, list):
                sanitized[key] = [
                    self._sanitize_query_for_logging(item) if isinstance(item, dict) else item for item in value
                ]
            else:
                sanitized[key] = value

        return sanitized


# Global database manager instance
db_manager = DatabaseManager()
