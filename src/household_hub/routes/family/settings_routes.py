"""
Family settings endpoints.

| Method | Path | Access |
|--------|------|--------|
| GET | `/families/{family_id}/settings` | Any family member |
| PUT | `/families/{family_id}/settings` | Parents only |
| GET | `/families/{family_id}/settings/ai` | Members, while `aiIntegration` is enabled |
| GET | `/families/{family_id}/navigation` | Any family member |

The PUT body is read as raw JSON and checked by `validate_update_family_settings`, so
an invalid payload yields a single-message 400 instead of FastAPI's 422 error list.
"""

from typing import List

from fastapi import APIRouter, Depends, Request

from household_hub.managers.logging_manager import get_logger
from household_hub.models.family_models import FamilyMembership, FamilyRole
from household_hub.models.family_settings_models import AISettingsView, FamilySettingsView, FeatureKey, NavigationItem
from household_hub.routes.family.dependencies import (
    get_family_settings_service,
    require_family_role,
    require_feature,
)
from household_hub.services.family_settings_service import FamilySettingsService
from household_hub.utils.error_handling import HttpError
from household_hub.validators.family_settings_validator import validate_update_family_settings

logger = get_logger(prefix="[Family Settings Routes]")

router = APIRouter(prefix="/families", tags=["Family Settings"])


@router.get("/{family_id}/settings", response_model=FamilySettingsView)
async def get_family_settings(
    membership: FamilyMembership = Depends(require_family_role(FamilyRole.PARENT, FamilyRole.CHILD)),
    service: FamilySettingsService = Depends(get_family_settings_service),
):
    """Return the family's settings, provisioning defaults on first access."""
    return await service.get_settings(membership.family_id)


@router.put("/{family_id}/settings", response_model=FamilySettingsView)
async def update_family_settings(
    request: Request,
    membership: FamilyMembership = Depends(require_family_role(FamilyRole.PARENT)),
    service: FamilySettingsService = Depends(get_family_settings_service),
):
    """
    Replace the family's enabled features and, optionally, its AI settings.

    Body: `{"enabledFeatures": [...], "aiSettings": {...}?}`.
    """
    try:
        payload = await request.json()
    except ValueError as e:
        raise HttpError.bad_request("Request body must be valid JSON") from e

    update_request = validate_update_family_settings(payload)
    logger.debug("Validated settings update for family %s", membership.family_id)
    return await service.update_settings(membership.family_id, update_request)


@router.get("/{family_id}/settings/ai", response_model=AISettingsView)
async def get_family_ai_settings(
    membership: FamilyMembership = Depends(require_feature(FeatureKey.AI_INTEGRATION)),
    service: FamilySettingsService = Depends(get_family_settings_service),
):
    """Return the AI integration settings; refused while the feature is disabled."""
    family_settings = await service.get_settings(membership.family_id)
    return family_settings.ai_settings


@router.get("/{family_id}/navigation", response_model=List[NavigationItem])
async def get_family_navigation(
    membership: FamilyMembership = Depends(require_family_role(FamilyRole.PARENT, FamilyRole.CHILD)),
    service: FamilySettingsService = Depends(get_family_settings_service),
):
    return await service.get_navigation(membership.family_id)
