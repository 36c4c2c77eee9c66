"""
HTTP tests for the family settings routes.

The application runs without its lifespan (no MongoDB connection); repositories are
bound to the in-memory database through dependency overrides.
"""
import logging
from unittest.mock import patch

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from jose import jwt
from pymongo.errors import ServerSelectionTimeoutError

from household_hub.config import settings
from household_hub.database.family_membership_repository import FamilyMembershipRepository
from household_hub.database.family_settings_repository import FamilySettingsRepository
from household_hub.main import app
from household_hub.models.family_models import FamilyRole
from household_hub.routes.auth.dependencies import get_current_user_dep
from household_hub.routes.family.dependencies import get_family_settings_service, get_membership_repository
from household_hub.services.family_settings_service import FamilySettingsService

AI_PAYLOAD = {
    "apiEndpoint": "http://localhost:1234/v1",
    "apiSecret": "sk-never-returned",
    "modelName": "llama3",
    "aiName": "Friday",
    "provider": "LM Studio",
}


@pytest.fixture
def parent_id():
    return ObjectId()


@pytest.fixture
def child_id():
    return ObjectId()


@pytest.fixture
def family(fake_db_manager, family_id, parent_id, child_id):
    memberships = fake_db_manager.get_collection(settings.FAMILY_MEMBERSHIPS_COLLECTION)
    memberships.docs.append({"familyId": family_id, "userId": parent_id, "role": FamilyRole.PARENT.value})
    memberships.docs.append({"familyId": family_id, "userId": child_id, "role": FamilyRole.CHILD.value})
    return family_id


@pytest.fixture
def client(fake_db_manager):
    app.dependency_overrides[get_family_settings_service] = lambda: FamilySettingsService(
        FamilySettingsRepository(fake_db_manager)
    )
    app.dependency_overrides[get_membership_repository] = lambda: FamilyMembershipRepository(fake_db_manager)
    yield TestClient(app)
    app.dependency_overrides.clear()


def act_as(user_id):
    app.dependency_overrides[get_current_user_dep] = lambda: {"_id": user_id}


def settings_url(family_id):
    return f"{settings.API_PREFIX}/families/{family_id}/settings"


def test_fresh_family_gets_defaults(client, family, child_id):
    act_as(child_id)

    response = client.get(settings_url(family))

    assert response.status_code == 200
    body = response.json()
    assert body["familyId"] == str(family)
    assert len(body["enabledFeatures"]) == 9
    assert body["aiSettings"] == {"apiEndpoint": "", "modelName": "", "aiName": "Jarvis"}


def test_parent_updates_features(client, family, parent_id):
    act_as(parent_id)

    response = client.put(settings_url(family), json={"enabledFeatures": ["tasks", "rewards"]})
    assert response.status_code == 200
    assert response.json()["enabledFeatures"] == ["tasks", "rewards"]

    response = client.get(settings_url(family))
    assert response.json()["enabledFeatures"] == ["tasks", "rewards"]


def test_duplicate_features_rejected_without_mutation(client, family, parent_id):
    act_as(parent_id)
    client.get(settings_url(family))

    response = client.put(settings_url(family), json={"enabledFeatures": ["tasks", "tasks"]})

    assert response.status_code == 400
    assert response.json()["code"] == "BAD_REQUEST"
    assert "must not contain duplicates" in response.json()["error"]
    assert len(client.get(settings_url(family)).json()["enabledFeatures"]) == 9


def test_invalid_url_rejected(client, family, parent_id):
    act_as(parent_id)

    response = client.put(
        settings_url(family),
        json={"enabledFeatures": [], "aiSettings": {**AI_PAYLOAD, "apiEndpoint": "not-a-url", "provider": "Ollama"}},
    )

    assert response.status_code == 400
    assert "must be a valid URL" in response.json()["error"]


def test_malformed_json_body_rejected(client, family, parent_id):
    act_as(parent_id)

    response = client.put(settings_url(family), content=b"{not json", headers={"Content-Type": "application/json"})

    assert response.status_code == 400


def test_secret_is_never_returned(client, family, parent_id):
    act_as(parent_id)

    put_response = client.put(settings_url(family), json={"enabledFeatures": ["aiIntegration"], "aiSettings": AI_PAYLOAD})
    get_response = client.get(settings_url(family))

    for response in (put_response, get_response):
        assert response.status_code == 200
        assert "apiSecret" not in response.json()["aiSettings"]
        assert "sk-never-returned" not in response.text
    assert get_response.json()["aiSettings"] == {
        "apiEndpoint": "http://localhost:1234/v1",
        "modelName": "llama3",
        "aiName": "Friday",
    }


def test_child_cannot_update(client, family, child_id):
    act_as(child_id)

    response = client.put(settings_url(family), json={"enabledFeatures": ["tasks"]})

    assert response.status_code == 403
    assert response.json()["error"] == "You must be a Parent in this family to perform this action"


def test_non_member_is_forbidden(client, parent_id):
    act_as(parent_id)

    response = client.get(settings_url(ObjectId()))

    assert response.status_code == 403
    assert response.json()["error"] == "You are not a member of this family"


def test_invalid_family_id(client, parent_id):
    act_as(parent_id)

    response = client.get(settings_url("not-an-id"))

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid familyId format"


def test_missing_token_is_unauthorized(client, family):
    response = client.get(settings_url(family))

    assert response.status_code == 401
    assert response.json()["code"] == "UNAUTHORIZED"


def test_invalid_token_is_unauthorized(client, family):
    response = client.get(settings_url(family), headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401


def test_bearer_token_resolves_user(client, fake_db_manager, family, parent_id):
    fake_db_manager.get_collection(settings.USERS_COLLECTION).docs.append({"_id": parent_id, "name": "Parent"})
    token = jwt.encode({"sub": str(parent_id)}, settings.SECRET_KEY.get_secret_value(), algorithm=settings.ALGORITHM)

    with patch("household_hub.routes.auth.dependencies.db_manager", fake_db_manager):
        response = client.get(settings_url(family), headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200


def test_token_for_unknown_user_is_unauthorized(client, fake_db_manager, family):
    token = jwt.encode({"sub": str(ObjectId())}, settings.SECRET_KEY.get_secret_value(), algorithm=settings.ALGORITHM)

    with patch("household_hub.routes.auth.dependencies.db_manager", fake_db_manager):
        response = client.get(settings_url(family), headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_persistence_failure_maps_to_500(client, fake_db_manager, family, parent_id, caplog):
    act_as(parent_id)
    collection = fake_db_manager.get_collection(settings.FAMILY_SETTINGS_COLLECTION)

    async def unavailable(*args, **kwargs):
        raise ServerSelectionTimeoutError("no servers")

    collection.find_one = unavailable

    with caplog.at_level(logging.DEBUG):
        response = client.get(settings_url(family))

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error", "code": "INTERNAL_ERROR"}
    assert len([record for record in caplog.records if record.levelno >= logging.ERROR]) == 1



def test_ai_settings_route_follows_feature_toggle(client, family, parent_id, child_id):
    act_as(parent_id)
    client.put(settings_url(family), json={"enabledFeatures": ["aiIntegration"], "aiSettings": AI_PAYLOAD})

    act_as(child_id)
    response = client.get(f"{settings_url(family)}/ai")
    assert response.status_code == 200
    assert response.json() == {"apiEndpoint": "http://localhost:1234/v1", "modelName": "llama3", "aiName": "Friday"}

    act_as(parent_id)
    client.put(settings_url(family), json={"enabledFeatures": ["tasks"]})

    response = client.get(f"{settings_url(family)}/ai")
    assert response.status_code == 403
    assert response.json()["error"] == "The aiIntegration feature is disabled for this family"


def test_ai_settings_route_requires_membership(client, parent_id):
    act_as(parent_id)

    response = client.get(f"{settings_url(ObjectId())}/ai")

    assert response.status_code == 403
    assert response.json()["error"] == "You are not a member of this family"


def test_navigation_follows_enabled_features(client, family, parent_id, child_id):
    act_as(parent_id)
    client.put(settings_url(family), json={"enabledFeatures": ["chat", "recipes"]})

    act_as(child_id)
    response = client.get(f"{settings.API_PREFIX}/families/{family}/navigation")

    assert response.status_code == 200
    assert response.json() == [
        {"feature": "recipes", "navName": "recipes", "route": "/app/recipes"},
        {"feature": "chat", "navName": "chat", "route": "/app/chat"},
    ]
