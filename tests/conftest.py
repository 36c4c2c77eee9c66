"""
Shared fixtures.

The environment is populated before `household_hub` is imported, because settings are
validated at import time.
"""

import copy
import os
from datetime import datetime, timezone
from unittest.mock import MagicMock

os.environ.setdefault("MONGODB_URL", "mongodb://localhost:27017")
os.environ.setdefault("SECRET_KEY", "household-hub-test-signing-key")
os.environ.setdefault("DEFAULT_LOG_LEVEL", "DEBUG")

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from household_hub.config import settings
from household_hub.database.manager import DatabaseManager
from household_hub.models.family_settings_models import ALL_FEATURES


class FakeCollection:
    """In-memory stand-in for the handful of collection methods the repositories use."""

    def __init__(self, unique_field=None):
        self.docs = []
        self.unique_field = unique_field
        self.indexes = []

    def _matches(self, doc, query):
        return all(doc.get(key) == value for key, value in query.items())

    def _first(self, query):
        return next((doc for doc in self.docs if self._matches(doc, query)), None)

    async def find_one(self, query, projection=None):
        doc = self._first(query)
        return copy.deepcopy(doc) if doc else None

    async def insert_one(self, doc):
        if self.unique_field and any(d.get(self.unique_field) == doc.get(self.unique_field) for d in self.docs):
            raise DuplicateKeyError("E11000 duplicate key error")
        stored = copy.deepcopy(doc)
        stored.setdefault("_id", ObjectId())
        self.docs.append(stored)
        return MagicMock(inserted_id=stored["_id"])

    async def find_one_and_update(self, query, update, upsert=False, return_document=None):
        doc = self._first(query)
        if doc is not None:
            doc.update(copy.deepcopy(update.get("$set", {})))
        elif upsert:
            doc = dict(query)
            doc.update(copy.deepcopy(update.get("$setOnInsert", {})))
            doc.update(copy.deepcopy(update.get("$set", {})))
            doc.setdefault("_id", ObjectId())
            self.docs.append(doc)
        else:
            return None
        return copy.deepcopy(doc)

    async def delete_one(self, query):
        doc = self._first(query)
        if doc is not None:
            self.docs.remove(doc)
        return MagicMock(deleted_count=1 if doc is not None else 0)

    async def create_index(self, keys, **kwargs):
        self.indexes.append((keys, kwargs))
        return kwargs.get("name")


class FakeDatabase(dict):
    def __missing__(self, name):
        unique_field = "familyId" if name == settings.FAMILY_SETTINGS_COLLECTION else None
        self[name] = FakeCollection(unique_field=unique_field)
        return self[name]


@pytest.fixture
def fake_db_manager():
    """A real `DatabaseManager` whose database is an in-memory `FakeDatabase`."""
    manager = DatabaseManager()
    manager.database = FakeDatabase()
    return manager


@pytest.fixture
def family_id():
    return ObjectId()


@pytest.fixture
def settings_doc(family_id):
    """A stored settings document with a configured AI block."""
    now = datetime.now(timezone.utc)
    return {
        "_id": ObjectId(),
        "familyId": family_id,
        "enabledFeatures": [feature.value for feature in ALL_FEATURES],
        "aiSettings": {
            "apiEndpoint": "http://localhost:11434/v1",
            "apiSecret": "sk-super-secret",
            "modelName": "llama3",
            "aiName": "Friday",
            "provider": "Ollama",
        },
        "createdAt": now,
        "updatedAt": now,
    }
