"""
Validation of family settings update payloads.

`validate_update_family_settings` runs the raw JSON body through
`UpdateFamilySettingsRequest` and reports only the first violation, as a single
human-readable message in a 400 `HttpError`.
"""

from typing import Any, Dict

from pydantic import ValidationError

from household_hub.models.family_settings_models import UpdateFamilySettingsRequest
from household_hub.utils.error_handling import HttpError


def _format_error(error: Dict[str, Any]) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()))
    if error["type"] == "missing":
        return f"{location} is required"
    if error["type"] == "value_error":
        # Custom validator messages already name their field.
        return str(error.get("ctx", {}).get("error", error["msg"]))
    if not location:
        return f"Request body: {error['msg']}"
    return f"{location}: {error['msg']}"


def validate_update_family_settings(payload: Any) -> UpdateFamilySettingsRequest:
    """
    Validate an update payload.

    Args:
        payload: The decoded JSON request body.

    Returns:
        UpdateFamilySettingsRequest: Typed request with unknown fields dropped.

    Raises:
        HttpError: 400 carrying the first violated constraint.
    """
    try:
        return UpdateFamilySettingsRequest.model_validate(payload)
    except ValidationError as e:
        errors = e.errors()
        raise HttpError.bad_request(_format_error(errors[0]), {"error_count": len(errors)}) from e
