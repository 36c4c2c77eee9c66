"""
ObjectId helpers for the API boundary.

Identifiers travel as 24-character hex strings over HTTP and as `bson.ObjectId`
in the store. Every public service entry point runs incoming ids through
`to_object_id` before touching the repository, so a malformed id is reported
as a 400 and never reaches MongoDB.
"""

from typing import Any

from bson import ObjectId
from bson.errors import InvalidId

from household_hub.utils.error_handling import HttpError


def is_valid_object_id(value: Any) -> bool:
    """Return True for an `ObjectId` or a 24-character hex string."""
    if isinstance(value, ObjectId):
        return True
    return isinstance(value, str) and len(value) == 24 and ObjectId.is_valid(value)


def to_object_id(value: Any, field_name: str = "id") -> ObjectId:
    """
    Convert `value` to an `ObjectId`.

    Args:
        value: An `ObjectId` or its hex string form.
        field_name: Name reported in the error message.

    Returns:
        ObjectId: The parsed identifier.

    Raises:
        HttpError: 400 when `value` is not a valid ObjectId.
    """
    if isinstance(value, ObjectId):
        return value
    if not is_valid_object_id(value):
        raise HttpError.bad_request(f"Invalid {field_name} format", {"field": field_name, "value": str(value)})
    try:
        return ObjectId(value)
    except (InvalidId, TypeError) as e:
        raise HttpError.bad_request(f"Invalid {field_name} format", {"field": field_name}) from e


def validate_object_id(value: Any, field_name: str = "id") -> str:
    """Validate `value` and return its normalized (lowercase hex) string form."""
    return str(to_object_id(value, field_name))
