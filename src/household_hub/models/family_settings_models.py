"""
# Family Settings Models

Domain types for per-family configuration: the closed set of optional application
features a family can switch on or off, and the AI-integration block a family uses to
connect its own model-inference backend.

## Domain Model Overview

- **FeatureKey**: One of nine optional capabilities. The set is closed; there is no
  runtime registration of new features.
- **Feature registry**: Static metadata per feature (web route, navigation item name,
  whether it appears in navigation).
- **AISettings**: Endpoint, credential, model and persona name for the family's AI
  backend. `api_secret` is stored as given and is never part of any outward view.
- **FamilySettingsDocument**: The stored record, one per family.
- **FamilySettingsView**: The outward projection returned by the API.

## Storage Layout

Documents in the settings collection use camelCase field names:

```json
{
    "_id": ObjectId("..."),
    "familyId": ObjectId("..."),
    "enabledFeatures": ["tasks", "rewards"],
    "aiSettings": {"apiEndpoint": "", "apiSecret": "", "modelName": "", "aiName": "Jarvis"},
    "createdAt": ISODate("..."),
    "updatedAt": ISODate("...")
}
```

Models accept both the camelCase alias and the Python field name (`populate_by_name`).

Attributes:
    ALL_FEATURES (Tuple[FeatureKey, ...]): Every feature key in canonical order.
    FEATURES_REGISTRY (Dict[FeatureKey, FeatureMetadata]): Route and navigation metadata.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from pydantic import AnyHttpUrl, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from household_hub.config import settings


class FeatureKey(str, Enum):
    """Optional application features a family can enable."""

    TASKS = "tasks"
    REWARDS = "rewards"
    SHOPPING_LISTS = "shoppingLists"
    RECIPES = "recipes"
    LOCATIONS = "locations"
    MEMORIES = "memories"
    DIARY = "diary"
    CHAT = "chat"
    AI_INTEGRATION = "aiIntegration"


ALL_FEATURES: Tuple[FeatureKey, ...] = tuple(FeatureKey)


class AIProvider(str, Enum):
    """Supported inference backends."""

    LM_STUDIO = "LM Studio"
    OLLAMA = "Ollama"


# --- Feature registry ---
class FeatureMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: FeatureKey
    route: str = Field(..., description="Web route of the feature, e.g. /app/tasks")
    nav_name: str = Field(..., description="Navigation item name shown in the sidebar")
    is_navigable: bool = Field(True, description="Whether the feature appears in navigation and settings")


FEATURES_REGISTRY: Dict[FeatureKey, FeatureMetadata] = {
    FeatureKey.TASKS: FeatureMetadata(key=FeatureKey.TASKS, route="/app/tasks", nav_name="tasks"),
    FeatureKey.REWARDS: FeatureMetadata(key=FeatureKey.REWARDS, route="/app/rewards", nav_name="rewards"),
    FeatureKey.SHOPPING_LISTS: FeatureMetadata(
        key=FeatureKey.SHOPPING_LISTS, route="/app/shopping-lists", nav_name="shoppingLists"
    ),
    FeatureKey.RECIPES: FeatureMetadata(key=FeatureKey.RECIPES, route="/app/recipes", nav_name="recipes"),
    FeatureKey.LOCATIONS: FeatureMetadata(key=FeatureKey.LOCATIONS, route="/app/locations", nav_name="locations"),
    FeatureKey.MEMORIES: FeatureMetadata(key=FeatureKey.MEMORIES, route="/app/memories", nav_name="memories"),
    FeatureKey.DIARY: FeatureMetadata(key=FeatureKey.DIARY, route="/app/diary", nav_name="diary"),
    FeatureKey.CHAT: FeatureMetadata(key=FeatureKey.CHAT, route="/app/chat", nav_name="chat"),
    FeatureKey.AI_INTEGRATION: FeatureMetadata(
        key=FeatureKey.AI_INTEGRATION, route="/app/ai-settings", nav_name="aiSettings"
    ),
}


def get_feature_metadata(feature: FeatureKey) -> FeatureMetadata:
    return FEATURES_REGISTRY[FeatureKey(feature)]


def get_feature_key_by_route(route_path: str) -> Optional[FeatureKey]:
    """Return the feature whose route prefixes `route_path`, or None."""
    for feature in ALL_FEATURES:
        if route_path.startswith(FEATURES_REGISTRY[feature].route):
            return feature
    return None


def get_feature_nav_name(feature: FeatureKey) -> str:
    return get_feature_metadata(feature).nav_name


def get_feature_routes() -> Dict[str, str]:
    """Map each feature key value to its web route."""
    return {feature.value: FEATURES_REGISTRY[feature].route for feature in ALL_FEATURES}


def get_navigable_features() -> List[FeatureKey]:
    return [feature for feature in ALL_FEATURES if FEATURES_REGISTRY[feature].is_navigable]


# --- Stored models ---
class AISettings(BaseModel):
    """
    AI-integration block as stored.

    The default block has empty strings, the configured persona name and no provider.
    """

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    api_endpoint: str = Field("", alias="apiEndpoint")
    api_secret: str = Field("", alias="apiSecret")
    model_name: str = Field("", alias="modelName")
    ai_name: str = Field(default_factory=lambda: settings.DEFAULT_AI_NAME, alias="aiName")
    provider: Optional[AIProvider] = None

    def to_document(self) -> Dict[str, Any]:
        """Serialize for MongoDB: camelCase keys, plain string enum values, no empty provider."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


def default_ai_settings() -> AISettings:
    return AISettings()


class FamilySettingsDocument(BaseModel):
    """A family's stored configuration record."""

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: Optional[ObjectId] = Field(None, alias="_id")
    family_id: ObjectId = Field(..., alias="familyId")
    enabled_features: List[FeatureKey] = Field(default_factory=lambda: list(ALL_FEATURES), alias="enabledFeatures")
    ai_settings: AISettings = Field(default_factory=default_ai_settings, alias="aiSettings")
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")

    @classmethod
    def from_mongo(cls, doc: Dict[str, Any]) -> "FamilySettingsDocument":
        return cls.model_validate(doc)

    def to_mongo(self) -> Dict[str, Any]:
        doc: Dict[str, Any] = {
            "familyId": self.family_id,
            "enabledFeatures": [feature.value for feature in self.enabled_features],
            "aiSettings": self.ai_settings.to_document(),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.id is not None:
            doc["_id"] = self.id
        return doc


# --- Request models ---
_http_url_adapter = TypeAdapter(AnyHttpUrl)


class AISettingsInput(AISettings):
    """
    AI-integration block as submitted by a client.

    All-or-nothing: every string field must be non-empty, `provider` must be one of
    the supported backends and `apiEndpoint` must be an absolute http(s) URL.
    """

    api_endpoint: str = Field(..., alias="apiEndpoint")
    api_secret: str = Field(..., alias="apiSecret")
    model_name: str = Field(..., alias="modelName")
    ai_name: str = Field(..., alias="aiName")
    provider: AIProvider

    @field_validator("api_endpoint", "api_secret", "model_name", "ai_name")
    @classmethod
    def validate_required(cls, v, info):
        if not v:
            alias = cls.model_fields[info.field_name].alias
            raise ValueError(f"aiSettings.{alias} is required")
        return v

    @field_validator("api_endpoint")
    @classmethod
    def validate_api_endpoint(cls, v):
        try:
            _http_url_adapter.validate_python(v)
        except ValidationError:
            raise ValueError("aiSettings.apiEndpoint must be a valid URL")
        return v


class UpdateFamilySettingsRequest(BaseModel):
    """
    Request model for replacing a family's settings.

    **Validation:**
    *   **enabledFeatures**: Required list of feature keys, at most nine, no duplicates.
    *   **aiSettings**: Optional. When present it must be complete (see `AISettingsInput`).
    *   Unknown fields are dropped.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    enabled_features: List[FeatureKey] = Field(..., alias="enabledFeatures", max_length=len(ALL_FEATURES))
    ai_settings: Optional[AISettingsInput] = Field(None, alias="aiSettings")

    @field_validator("enabled_features")
    @classmethod
    def validate_unique_features(cls, v):
        if len(set(v)) != len(v):
            raise ValueError("enabledFeatures must not contain duplicates")
        return v


# --- Views ---
class AISettingsView(BaseModel):
    """Outward AI settings. Has no secret field."""

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    api_endpoint: str = Field(..., alias="apiEndpoint")
    model_name: str = Field(..., alias="modelName")
    ai_name: str = Field(..., alias="aiName")


class FamilySettingsView(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    family_id: str = Field(..., alias="familyId")
    enabled_features: List[str] = Field(..., alias="enabledFeatures")
    ai_settings: AISettingsView = Field(..., alias="aiSettings")


class NavigationItem(BaseModel):
    """One entry of a family's navigation menu."""

    model_config = ConfigDict(populate_by_name=True)

    feature: str
    nav_name: str = Field(..., alias="navName")
    route: str
