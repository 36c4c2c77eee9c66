"""
# Family Settings Service

Business rules for per-family configuration.

## Operations

| Method | Behaviour |
|--------|-----------|
| `get_settings` | Fetch the record, provisioning defaults on first read |
| `update_settings` | Re-check feature keys, then one atomic upsert |
| `create_default_settings` | Explicit provisioning at family creation |
| `delete_settings` | Remove the record when a family is deleted |
| `is_feature_enabled` | Convenience check used by feature gating |
| `get_navigation` | Menu entries for the enabled, navigable features |

## Error Semantics

Malformed ids and unknown feature keys raise `HttpError` (400) before the repository
is touched. Repository failures are logged once by the data-access layer (with the
family id in the logged query) and pass through here unchanged. There are no retries.

## Lazy Provisioning Race

Two concurrent first reads for the same family can both miss and both insert. The
unique `familyId` index lets exactly one insert win; the loser catches the
`DuplicateKeyError` and returns the winner's record.
"""

from typing import List, Optional, Union

from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from household_hub.database.family_settings_repository import FamilySettingsRepository
from household_hub.managers.logging_manager import get_logger
from household_hub.models.family_settings_models import (
    ALL_FEATURES,
    FamilySettingsView,
    FeatureKey,
    NavigationItem,
    UpdateFamilySettingsRequest,
    get_feature_nav_name,
    get_feature_routes,
    get_navigable_features,
)
from household_hub.utils.error_handling import HttpError
from household_hub.utils.family_settings_mapper import to_family_settings_view
from household_hub.utils.objectid_utils import to_object_id

logger = get_logger(prefix="[FamilySettingsService]")


class FamilySettingsService:
    """Orchestrates validation, persistence and projection of family settings."""

    def __init__(self, repository: Optional[FamilySettingsRepository] = None):
        self.repository = repository or FamilySettingsRepository()

    async def get_settings(self, family_id: Union[str, ObjectId]) -> FamilySettingsView:
        family_oid = to_object_id(family_id, "familyId")
        logger.debug("Getting family settings for family %s", family_oid)

        family_settings = await self.repository.find_by_family_id(family_oid)
        if family_settings is None:
            logger.info("No settings found for family %s, creating default settings", family_oid)
            try:
                family_settings = await self.repository.create_default_settings(family_oid)
            except DuplicateKeyError:
                logger.info("Default settings for family %s were created concurrently, re-fetching", family_oid)
                family_settings = await self.repository.find_by_family_id(family_oid)
                if family_settings is None:
                    logger.error("Settings for family %s missing after a duplicate-key insert", family_oid)
                    raise

        return to_family_settings_view(family_settings)

    async def update_settings(
        self, family_id: Union[str, ObjectId], request: UpdateFamilySettingsRequest
    ) -> FamilySettingsView:
        """
        Replace a family's enabled features and, if given, its AI settings.

        Raises:
            HttpError: 400 for a malformed id or any unknown feature key. Nothing is written.
        """
        family_oid = to_object_id(family_id, "familyId")
        logger.info(
            "Updating family settings for family %s (enabled_features_count=%d, has_ai_settings=%s)",
            family_oid,
            len(request.enabled_features),
            request.ai_settings is not None,
        )

        # Callers may build the request without going through the validator.
        valid_values = {feature.value for feature in ALL_FEATURES}
        invalid_features = [
            str(getattr(feature, "value", feature))
            for feature in request.enabled_features
            if getattr(feature, "value", feature) not in valid_values
        ]
        if invalid_features:
            logger.warning("Rejected invalid feature keys for family %s: %s", family_oid, invalid_features)
            raise HttpError.bad_request(f"Invalid feature keys: {', '.join(invalid_features)}")

        # The AI secret is stored as provided.
        family_settings = await self.repository.update_settings(
            family_oid,
            list(request.enabled_features),
            request.ai_settings,
        )

        logger.info("Family settings updated successfully for family %s", family_oid)
        return to_family_settings_view(family_settings)

    async def create_default_settings(self, family_id: Union[str, ObjectId]) -> FamilySettingsView:
        """Provision defaults for a new family. A second call raises `DuplicateKeyError`."""
        family_oid = to_object_id(family_id, "familyId")
        logger.info("Creating default family settings for family %s", family_oid)

        family_settings = await self.repository.create_default_settings(family_oid)

        logger.info("Default family settings created successfully for family %s", family_oid)
        return to_family_settings_view(family_settings)

    async def delete_settings(self, family_id: Union[str, ObjectId]) -> bool:
        family_oid = to_object_id(family_id, "familyId")
        deleted = await self.repository.delete_settings(family_oid)
        logger.info("Deleted family settings for family %s: %s", family_oid, deleted)
        return deleted

    async def is_feature_enabled(self, family_id: Union[str, ObjectId], feature: FeatureKey) -> bool:
        family_settings = await self.get_settings(family_id)
        return FeatureKey(feature).value in family_settings.enabled_features

    async def get_navigation(self, family_id: Union[str, ObjectId]) -> List[NavigationItem]:
        """Navigation entries for the family's enabled features, in registry order."""
        family_settings = await self.get_settings(family_id)
        enabled = set(family_settings.enabled_features)
        routes = get_feature_routes()
        return [
            NavigationItem(feature=feature.value, navName=get_feature_nav_name(feature), route=routes[feature.value])
            for feature in get_navigable_features()
            if feature.value in enabled
        ]
