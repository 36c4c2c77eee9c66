"""Family membership types used by the authorization dependencies."""

from enum import Enum

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field


class FamilyRole(str, Enum):
    """Role of a user within a family. Parents administer the family."""

    PARENT = "Parent"
    CHILD = "Child"


class FamilyMembership(BaseModel):
    """A user's membership record in the memberships collection."""

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    family_id: ObjectId = Field(..., alias="familyId")
    user_id: ObjectId = Field(..., alias="userId")
    role: FamilyRole
