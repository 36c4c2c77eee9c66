"""
Persistence for family settings.

One document per family, enforced by the unique index `idx_family_settings_family_id`
on `familyId`. The repository never interprets persistence failures: every
`PyMongoError` (including `DuplicateKeyError`) is logged once through the database
manager and propagated to the caller, which does not log it again.
"""

from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, List, Optional, Union

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from household_hub.config import settings
from household_hub.database.manager import DatabaseManager
from household_hub.database.manager import db_manager as default_db_manager
from household_hub.managers.logging_manager import get_logger
from household_hub.models.family_settings_models import (
    ALL_FEATURES,
    AISettings,
    FamilySettingsDocument,
    FeatureKey,
    default_ai_settings,
)
from household_hub.utils.objectid_utils import to_object_id

logger = get_logger(prefix="[FamilySettingsRepository]")

FAMILY_ID_INDEX_NAME = "idx_family_settings_family_id"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FamilySettingsRepository:
    """MongoDB repository for `FamilySettingsDocument` records."""

    def __init__(self, db_manager: Optional[DatabaseManager] = None):
        self.db_manager = db_manager or default_db_manager
        self.collection_name = settings.FAMILY_SETTINGS_COLLECTION

    @property
    def collection(self) -> AsyncIOMotorCollection:
        return self.db_manager.get_collection(self.collection_name)

    async def ensure_indexes(self) -> None:
        """
        Create the unique `familyId` index. Idempotent.

        Raises:
            PyMongoError: Index creation failed. Callers at startup treat this as fatal.
        """
        await self.collection.create_index("familyId", name=FAMILY_ID_INDEX_NAME, unique=True)
        logger.info("Family settings indexes created successfully")

    async def find_by_family_id(self, family_id: Union[str, ObjectId]) -> Optional[FamilySettingsDocument]:
        query = {"familyId": to_object_id(family_id, "familyId")}
        start_time = self.db_manager.log_query_start(self.collection_name, "find_one", query)
        try:
            doc = await self.collection.find_one(query)
        except PyMongoError as e:
            self.db_manager.log_query_error(self.collection_name, "find_one", start_time, e, query)
            raise

        self.db_manager.log_query_success(self.collection_name, "find_one", start_time, 1 if doc else 0)
        return FamilySettingsDocument.from_mongo(doc) if doc else None

    async def create_default_settings(self, family_id: Union[str, ObjectId]) -> FamilySettingsDocument:
        """
        Insert a record with every feature enabled and the default AI settings.

        Not idempotent: a second call for the same family raises `DuplicateKeyError`.
        """
        now = _utcnow()
        document = FamilySettingsDocument(
            _id=ObjectId(),
            familyId=to_object_id(family_id, "familyId"),
            enabledFeatures=list(ALL_FEATURES),
            aiSettings=default_ai_settings(),
            createdAt=now,
            updatedAt=now,
        )
        doc = document.to_mongo()

        start_time = self.db_manager.log_query_start(self.collection_name, "insert_one", {"familyId": doc["familyId"]})
        try:
            await self.collection.insert_one(doc)
        except PyMongoError as e:
            self.db_manager.log_query_error(
                self.collection_name, "insert_one", start_time, e, {"familyId": doc["familyId"]}
            )
            raise

        self.db_manager.log_query_success(self.collection_name, "insert_one", start_time, 1)
        return document

    async def update_settings(
        self,
        family_id: Union[str, ObjectId],
        enabled_features: List[Union[FeatureKey, str]],
        ai_settings: Optional[AISettings] = None,
    ) -> FamilySettingsDocument:
        """
        Upsert a family's settings in a single atomic operation.

        `enabledFeatures` and `updatedAt` are always set. `aiSettings` is set only when
        supplied; otherwise the default block is written on insert and an existing block
        is left untouched.

        Raises:
            RuntimeError: The upsert returned no document.
        """
        family_oid = to_object_id(family_id, "familyId")
        now = _utcnow()

        set_doc: Dict[str, Any] = {
            "enabledFeatures": [FeatureKey(feature).value for feature in enabled_features],
            "updatedAt": now,
        }
        set_on_insert_doc: Dict[str, Any] = {
            "familyId": family_oid,
            "createdAt": now,
        }
        if ai_settings is not None:
            set_doc["aiSettings"] = ai_settings.to_document()
        else:
            set_on_insert_doc["aiSettings"] = default_ai_settings().to_document()

        query = {"familyId": family_oid}
        update = {"$set": set_doc, "$setOnInsert": set_on_insert_doc}

        start_time = self.db_manager.log_query_start(self.collection_name, "find_one_and_update", query, update)
        try:
            result = await self.collection.find_one_and_update(
                query,
                update,
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            self.db_manager.log_query_error(self.collection_name, "find_one_and_update", start_time, e, query)
            raise

        if not result:
            logger.error("Upsert for family %s returned no document", family_oid)
            raise RuntimeError("Failed to update family settings")

        self.db_manager.log_query_success(self.collection_name, "find_one_and_update", start_time, 1)
        return FamilySettingsDocument.from_mongo(result)

    async def delete_settings(self, family_id: Union[str, ObjectId]) -> bool:
        """Delete a family's settings. Returns True when a record was removed."""
        query = {"familyId": to_object_id(family_id, "familyId")}
        start_time = self.db_manager.log_query_start(self.collection_name, "delete_one", query)
        try:
            result = await self.collection.delete_one(query)
        except PyMongoError as e:
            self.db_manager.log_query_error(self.collection_name, "delete_one", start_time, e, query)
            raise

        self.db_manager.log_query_success(self.collection_name, "delete_one", start_time, result.deleted_count)
        return result.deleted_count > 0

    async def count_families(self) -> int:
        return await self.db_manager.get_collection(settings.FAMILIES_COLLECTION).count_documents({})

    async def find_family_ids_without_settings(self) -> AsyncIterator[ObjectId]:
        """Yield the `_id` of every family that has no settings record."""
        pipeline = [
            {
                "$lookup": {
                    "from": self.collection_name,
                    "localField": "_id",
                    "foreignField": "familyId",
                    "as": "settings",
                }
            },
            {"$match": {"settings": {"$size": 0}}},
            {"$project": {"_id": 1}},
        ]
        families = self.db_manager.get_collection(settings.FAMILIES_COLLECTION)
        async for doc in families.aggregate(pipeline):
            yield doc["_id"]
