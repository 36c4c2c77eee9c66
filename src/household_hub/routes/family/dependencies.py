"""
# Family Authorization Dependencies

Dependency factories guarding routes under `/families/{family_id}`.

- `require_family_role(*roles)`: the caller must be a member of the family with one of
  `roles`. A malformed family id is a 400; a missing membership (including a family that
  does not exist) or a disallowed role is a 403.
- `require_feature(feature)`: the caller must be a member and the family must have
  `feature` enabled.

**Usage:**
```python
@router.put("/families/{family_id}/settings")
async def update(membership: FamilyMembership = Depends(require_family_role(FamilyRole.PARENT))):
    ...
```
"""

from typing import Any, Callable, Dict

from fastapi import Depends

from household_hub.database.family_membership_repository import FamilyMembershipRepository
from household_hub.managers.logging_manager import get_logger
from household_hub.models.family_models import FamilyMembership, FamilyRole
from household_hub.models.family_settings_models import FeatureKey
from household_hub.routes.auth.dependencies import get_current_user_dep
from household_hub.services.family_settings_service import FamilySettingsService
from household_hub.utils.error_handling import HttpError
from household_hub.utils.objectid_utils import to_object_id

logger = get_logger(prefix="[Family Dependencies]")


def get_membership_repository() -> FamilyMembershipRepository:
    return FamilyMembershipRepository()


def get_family_settings_service() -> FamilySettingsService:
    return FamilySettingsService()


def _format_roles(roles) -> str:
    return " or ".join(FamilyRole(role).value for role in roles)


def require_family_role(*roles: FamilyRole) -> Callable:
    """
    Build a dependency that admits members of the path family holding one of `roles`.

    Args:
        *roles: Allowed roles. Defaults to every role when empty.

    Returns:
        Callable: A FastAPI dependency resolving to the caller's `FamilyMembership`.
    """
    allowed_roles = tuple(FamilyRole(role) for role in roles) or tuple(FamilyRole)

    async def dependency(
        family_id: str,
        current_user: Dict[str, Any] = Depends(get_current_user_dep),
        membership_repository: FamilyMembershipRepository = Depends(get_membership_repository),
    ) -> FamilyMembership:
        family_oid = to_object_id(family_id, "familyId")
        user_id = current_user["_id"]

        membership = await membership_repository.find_by_family_and_user(family_oid, user_id)
        if membership is None:
            logger.info("User %s denied access to family %s: not a member", user_id, family_oid)
            raise HttpError.forbidden("You are not a member of this family")

        if membership.role not in allowed_roles:
            logger.info("User %s denied access to family %s: role %s", user_id, family_oid, membership.role.value)
            raise HttpError.forbidden(
                f"You must be a {_format_roles(allowed_roles)} in this family to perform this action"
            )

        return membership

    return dependency


def require_feature(feature: FeatureKey) -> Callable:
    """Build a dependency that refuses requests when `feature` is disabled for the path family."""
    feature = FeatureKey(feature)

    async def dependency(
        membership: FamilyMembership = Depends(require_family_role()),
        service: FamilySettingsService = Depends(get_family_settings_service),
    ) -> FamilyMembership:
        if not await service.is_feature_enabled(membership.family_id, feature):
            raise HttpError.forbidden(f"The {feature.value} feature is disabled for this family")
        return membership

    return dependency
