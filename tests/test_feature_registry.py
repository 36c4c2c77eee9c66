"""
Tests for the feature key enumeration and registry helpers.
"""
import pytest

from household_hub.models.family_settings_models import (
    ALL_FEATURES,
    FEATURES_REGISTRY,
    FeatureKey,
    get_feature_key_by_route,
    get_feature_metadata,
    get_feature_nav_name,
    get_feature_routes,
    get_navigable_features,
)


def test_all_features_canonical_order():
    assert [feature.value for feature in ALL_FEATURES] == [
        "tasks",
        "rewards",
        "shoppingLists",
        "recipes",
        "locations",
        "memories",
        "diary",
        "chat",
        "aiIntegration",
    ]


def test_registry_covers_every_feature():
    assert set(FEATURES_REGISTRY) == set(FeatureKey)
    for feature, metadata in FEATURES_REGISTRY.items():
        assert metadata.key is feature
        assert metadata.route.startswith("/app/")


@pytest.mark.parametrize(
    "path, expected",
    [
        ("/app/tasks", FeatureKey.TASKS),
        ("/app/tasks/123/edit", FeatureKey.TASKS),
        ("/app/shopping-lists", FeatureKey.SHOPPING_LISTS),
        ("/app/ai-settings", FeatureKey.AI_INTEGRATION),
        ("/app/dashboard", None),
        ("/login", None),
    ],
)
def test_get_feature_key_by_route(path, expected):
    assert get_feature_key_by_route(path) == expected


def test_nav_names():
    assert get_feature_nav_name(FeatureKey.AI_INTEGRATION) == "aiSettings"
    assert get_feature_nav_name(FeatureKey.SHOPPING_LISTS) == "shoppingLists"
    assert get_feature_metadata("diary").nav_name == "diary"


def test_feature_routes_mapping():
    routes = get_feature_routes()
    assert len(routes) == 9
    assert routes["recipes"] == "/app/recipes"
    assert routes["aiIntegration"] == "/app/ai-settings"


def test_every_feature_is_navigable():
    assert get_navigable_features() == list(ALL_FEATURES)
