"""
# Configuration Management Module

This module provides the configuration system for the Household Hub API. It is built on
**Pydantic Settings**: values are loaded from a configuration file or environment variables,
type-coerced, and validated once at import time.

## Configuration Loading Hierarchy

```
┌─────────────────────────────────────────────────────────────┐
│  1. Environment Variables (HIGHEST PRIORITY)                │
├─────────────────────────────────────────────────────────────┤
│  2. HOUSEHOLD_HUB_CONFIG_PATH (custom config file path)     │
├─────────────────────────────────────────────────────────────┤
│  3. .hub File (Project Root)                                │
├─────────────────────────────────────────────────────────────┤
│  4. .env File (Project Root)                                │
├─────────────────────────────────────────────────────────────┤
│  5. Default Values (LOWEST PRIORITY)                        │
└─────────────────────────────────────────────────────────────┘
```

If no configuration file is found the application runs in **environment-only mode**.

## Secret Management

- **`SecretStr`**: `SECRET_KEY` and `MONGODB_PASSWORD` are wrapped so they never appear in
  reprs or logs.
- **Startup validation**: `SECRET_KEY` must not be empty or an obvious placeholder, and
  `MONGODB_URL` must not be empty.

## Usage

```python
from household_hub.config import settings

collection_name = settings.FAMILY_SETTINGS_COLLECTION
secret = settings.SECRET_KEY.get_secret_value()
```

Attributes:
    HUB_FILENAME (str): Primary configuration filename (`.hub`).
    DEFAULT_ENV_FILENAME (str): Fallback configuration filename (`.env`).
    CONFIG_ENV_VAR (str): Environment variable naming a custom config file path.
    PROJECT_ROOT (Path): Repository root, used to locate `.hub` / `.env`.
    CONFIG_PATH (Optional[str]): The config file in use, or `None` (environment-only mode).
    settings (Settings): Global settings singleton.
"""

import os
from pathlib import Path
from typing import Any, List, Optional

from dotenv import load_dotenv
from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Constants ---
HUB_FILENAME: str = ".hub"
DEFAULT_ENV_FILENAME: str = ".env"
CONFIG_ENV_VAR: str = "HOUSEHOLD_HUB_CONFIG_PATH"
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent.parent


# --- Config file discovery (no logging) ---
def get_config_path() -> Optional[str]:
    """
    Determines the configuration file path based on a predefined precedence order.

    1.  **Environment Variable**: `HOUSEHOLD_HUB_CONFIG_PATH` (if set and the file exists).
    2.  **Hub Config**: `.hub` file in the project root directory.
    3.  **Dotenv Config**: `.env` file in the project root directory.
    4.  **Fallback**: `None`, triggering environment-variable-only mode.

    Returns:
        Optional[str]: The absolute path to the configuration file, or `None` if not found.
    """
    env_path: Optional[str] = os.environ.get(CONFIG_ENV_VAR)
    if env_path and os.path.exists(env_path):
        return env_path
    hub_path: Path = PROJECT_ROOT / HUB_FILENAME
    if hub_path.exists():
        return str(hub_path)
    env_path_file: Path = PROJECT_ROOT / DEFAULT_ENV_FILENAME
    if env_path_file.exists():
        return str(env_path_file)
    return None


CONFIG_PATH: Optional[str] = get_config_path()
if CONFIG_PATH:
    load_dotenv(dotenv_path=CONFIG_PATH, override=True)


class Settings(BaseSettings):
    """
    Application configuration settings model.

    **Configuration Groups:**
    *   **Server**: Host, port, debug mode, API prefix.
    *   **Security**: JWT signing key and algorithm used by the bearer-token dependency.
    *   **Database**: MongoDB connection details and collection names.
    *   **Logging**: Default log level.
    *   **Family settings**: Defaults applied to newly provisioned configuration records.
    """

    model_config = SettingsConfigDict(
        env_file=CONFIG_PATH if CONFIG_PATH else None,
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="allow",
    )

    # Server configuration
    HOST: str = "127.0.0.1"
    PORT: int = 8000
    DEBUG: bool = True
    ENVIRONMENT: str = "development"
    API_PREFIX: str = "/v1"

    # JWT configuration
    SECRET_KEY: SecretStr = SecretStr("")  # Must be set in .hub or environment
    ALGORITHM: str = "HS256"

    # MongoDB configuration
    MONGODB_URL: str = ""  # Must be set in .hub or environment
    MONGODB_DATABASE: str = "household_hub"
    MONGODB_CONNECTION_TIMEOUT: int = 10000
    MONGODB_SERVER_SELECTION_TIMEOUT: int = 5000
    MONGODB_USERNAME: Optional[str] = None
    MONGODB_PASSWORD: Optional[SecretStr] = None

    # Collections
    FAMILY_SETTINGS_COLLECTION: str = "family_settings"
    FAMILY_MEMBERSHIPS_COLLECTION: str = "family_memberships"
    FAMILIES_COLLECTION: str = "families"
    USERS_COLLECTION: str = "users"

    # Logging configuration
    DEFAULT_LOG_LEVEL: str = "INFO"

    # CORS configuration
    CORS_ENABLED: bool = True
    CORS_ORIGINS: str = "http://localhost:3000"  # Comma-separated allowed origins

    # Family settings defaults
    DEFAULT_AI_NAME: str = "Jarvis"

    @field_validator("SECRET_KEY", mode="before")
    @classmethod
    def no_hardcoded_secrets(cls, v: Any, info: Any) -> Any:
        """
        Validates that the signing secret is not hardcoded or empty.

        Raises:
            ValueError: If the value is empty, whitespace or a placeholder.
        """
        if not v or "change" in str(v).lower() or "0000" in str(v) or not str(v).strip():
            raise ValueError(f"{info.field_name} must be set via environment or .hub and not hardcoded!")
        return v

    @field_validator("MONGODB_URL", mode="before")
    @classmethod
    def no_empty_urls(cls, v: Any, info: Any) -> Any:
        """
        Validates that the MongoDB URL is not empty.

        Raises:
            ValueError: If the URL is empty or whitespace.
        """
        if not v or not str(v).strip():
            raise ValueError(f"{info.field_name} must be set via environment or .hub and not empty!")
        return v

    @property
    def is_production(self) -> bool:
        """`True` when `ENVIRONMENT` is `production` and debug mode is off."""
        return self.ENVIRONMENT.lower() == "production" and not self.DEBUG

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse `CORS_ORIGINS` into a list, dropping blanks."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


# Global settings instance
settings: Settings = Settings()
