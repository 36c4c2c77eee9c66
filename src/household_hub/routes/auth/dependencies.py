"""
# Authentication Dependencies

FastAPI dependencies that turn a bearer token into the calling user.

## `get_current_user_dep`

1. Extracts the token from the `Authorization: Bearer ...` header.
2. Decodes it with python-jose using `SECRET_KEY` / `ALGORITHM`.
3. Reads the user id from the `sub` claim and loads the user document.

Any failure (missing token, bad signature, expired token, malformed `sub`, unknown
user) is reported as 401.

**Usage:**
```python
@router.get("/me")
async def me(current_user: dict = Depends(get_current_user_dep)):
    return {"id": str(current_user["_id"])}
```

Attributes:
    oauth2_scheme (OAuth2PasswordBearer): FastAPI bearer token extractor.
"""

from typing import Any, Dict, Optional

from bson import ObjectId
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from pymongo.errors import PyMongoError

from household_hub.config import settings
from household_hub.database import db_manager
from household_hub.managers.logging_manager import get_logger
from household_hub.utils.error_handling import HttpError

logger = get_logger(prefix="[Auth Dependencies]")

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Decode and verify a JWT access token.

    Raises:
        HttpError: 401 if the token cannot be verified.
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY.get_secret_value(), algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.debug("Rejected access token: %s", e)
        raise HttpError.unauthorized("Invalid or expired token") from e


async def get_current_user_dep(token: Optional[str] = Depends(oauth2_scheme)) -> Dict[str, Any]:
    """
    Resolve the authenticated user for the request.

    Returns:
        dict: The user document.

    Raises:
        HttpError: 401 when the caller is not authenticated.
    """
    if not token:
        raise HttpError.unauthorized()

    payload = decode_access_token(token)
    user_id = payload.get("sub")
    if not user_id or not ObjectId.is_valid(str(user_id)):
        raise HttpError.unauthorized("Invalid token subject")

    query = {"_id": ObjectId(str(user_id))}
    start_time = db_manager.log_query_start(settings.USERS_COLLECTION, "find_one", query)
    try:
        user = await db_manager.get_collection(settings.USERS_COLLECTION).find_one(query)
    except PyMongoError as e:
        db_manager.log_query_error(settings.USERS_COLLECTION, "find_one", start_time, e, query)
        raise
    db_manager.log_query_success(settings.USERS_COLLECTION, "find_one", start_time, 1 if user else 0)

    if not user:
        logger.warning("Token subject %s does not match any user", user_id)
        raise HttpError.unauthorized("User not found")

    return user
