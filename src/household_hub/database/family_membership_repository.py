"""Read access to family memberships, used by the role authorization dependency."""

from typing import Optional, Union

from bson import ObjectId
from pymongo.errors import PyMongoError

from household_hub.config import settings
from household_hub.database.manager import DatabaseManager
from household_hub.database.manager import db_manager as default_db_manager
from household_hub.models.family_models import FamilyMembership
from household_hub.utils.objectid_utils import to_object_id


class FamilyMembershipRepository:
    def __init__(self, db_manager: Optional[DatabaseManager] = None):
        self.db_manager = db_manager or default_db_manager
        self.collection_name = settings.FAMILY_MEMBERSHIPS_COLLECTION

    async def find_by_family_and_user(
        self, family_id: Union[str, ObjectId], user_id: Union[str, ObjectId]
    ) -> Optional[FamilyMembership]:
        """Return the user's membership in the family, or None."""
        query = {"familyId": to_object_id(family_id, "familyId"), "userId": to_object_id(user_id, "userId")}
        start_time = self.db_manager.log_query_start(self.collection_name, "find_one", query)
        try:
            doc = await self.db_manager.get_collection(self.collection_name).find_one(query)
        except PyMongoError as e:
            self.db_manager.log_query_error(self.collection_name, "find_one", start_time, e, query)
            raise

        self.db_manager.log_query_success(self.collection_name, "find_one", start_time, 1 if doc else 0)
        return FamilyMembership.model_validate(doc) if doc else None
