"""
Tests for the default settings backfill command.
"""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError, OperationFailure

from household_hub.cli.backfill_settings_cli import backfill_family_settings, main
from household_hub.config import settings
from household_hub.database.family_settings_repository import FamilySettingsRepository


def make_repository(total, missing, create_side_effect=None):
    async def ids_without_settings():
        for family_id in missing:
            yield family_id

    repository = MagicMock(spec=FamilySettingsRepository)
    repository.count_families = AsyncMock(return_value=total)
    repository.find_family_ids_without_settings = MagicMock(side_effect=ids_without_settings)
    repository.create_default_settings = AsyncMock(side_effect=create_side_effect)
    return repository


@pytest.mark.asyncio
async def test_creates_missing_settings():
    missing = [ObjectId(), ObjectId()]
    repository = make_repository(total=5, missing=missing)

    stats = await backfill_family_settings(repository)

    assert stats.model_dump() == {
        "total_families": 5,
        "families_with_settings": 3,
        "families_without_settings": 2,
        "settings_created": 2,
        "errors": 0,
    }
    assert [call.args[0] for call in repository.create_default_settings.await_args_list] == missing


@pytest.mark.asyncio
async def test_dry_run_writes_nothing():
    repository = make_repository(total=3, missing=[ObjectId()])

    stats = await backfill_family_settings(repository, dry_run=True)

    assert stats.families_without_settings == 1
    assert stats.settings_created == 0
    repository.create_default_settings.assert_not_awaited()


@pytest.mark.asyncio
async def test_concurrently_provisioned_family_counts_as_having_settings():
    repository = make_repository(
        total=2, missing=[ObjectId(), ObjectId()], create_side_effect=[None, DuplicateKeyError("E11000")]
    )

    stats = await backfill_family_settings(repository)

    assert stats.families_with_settings == 1
    assert stats.settings_created == 1
    assert stats.errors == 0


@pytest.mark.asyncio
async def test_failures_are_counted():
    repository = make_repository(
        total=2, missing=[ObjectId(), ObjectId()], create_side_effect=[OperationFailure("write failed"), None]
    )

    stats = await backfill_family_settings(repository)

    assert stats.errors == 1
    assert stats.settings_created == 1


@pytest.mark.asyncio
async def test_backfill_against_in_memory_database(fake_db_manager):
    families = fake_db_manager.get_collection(settings.FAMILIES_COLLECTION)
    family_ids = [ObjectId(), ObjectId(), ObjectId()]
    families.docs.extend({"_id": family_id} for family_id in family_ids)

    repository = FamilySettingsRepository(fake_db_manager)
    await repository.create_default_settings(family_ids[0])

    async def count_documents(query):
        return len(families.docs)

    async def ids_without_settings():
        for family_id in family_ids:
            if await repository.find_by_family_id(family_id) is None:
                yield family_id

    families.count_documents = count_documents
    with patch.object(repository, "find_family_ids_without_settings", ids_without_settings):
        stats = await backfill_family_settings(repository)

    assert stats.settings_created == 2
    assert stats.families_with_settings == 1
    assert len(fake_db_manager.get_collection(settings.FAMILY_SETTINGS_COLLECTION).docs) == 3


@pytest.mark.parametrize("success, exit_code", [(True, 0), (False, 1)])
def test_main_exit_code(success, exit_code):
    with patch("household_hub.cli.backfill_settings_cli.run", new=AsyncMock(return_value=success)) as mock_run:
        with pytest.raises(SystemExit) as exc_info:
            main(["--dry-run"])

    assert exc_info.value.code == exit_code
    mock_run.assert_awaited_once_with(dry_run=True)
