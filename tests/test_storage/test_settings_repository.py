"""Tests for SettingsRepository."""

import pytest

from memstore.exceptions import ValidationError
from memstore.storage.settings_repository import SettingsRepository


@pytest.fixture
def repo(mock_database):
    return SettingsRepository(mock_database)


class TestGet:
    @pytest.mark.asyncio
    async def test_get_returns_mapping(self, repo, mock_database):
        mock_database.fetchval.return_value = {"autoRecall": True}
        assert await repo.get() == {"autoRecall": True}
        assert mock_database.fetchval.call_args.args[1] == "default"

    @pytest.mark.asyncio
    async def test_get_unset_returns_empty(self, repo, mock_database):
        mock_database.fetchval.return_value = None
        assert await repo.get() == {}


class TestMerge:
    @pytest.mark.asyncio
    async def test_merge_uses_shallow_jsonb_concat(self, repo, mock_database):
        mock_database.fetchval.return_value = {"autoRecall": True, "minScore": 0.5}

        result = await repo.merge({"minScore": 0.5})

        sql, row_id, patch = mock_database.fetchval.call_args.args
        assert "ON CONFLICT (id) DO UPDATE" in sql
        assert "settings.data || EXCLUDED.data" in sql
        assert row_id == "default"
        assert patch == {"minScore": 0.5}
        assert result == {"autoRecall": True, "minScore": 0.5}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("patch", [["a"], "text", 3, None])
    async def test_merge_rejects_non_object(self, repo, mock_database, patch):
        with pytest.raises(ValidationError):
            await repo.merge(patch)
        mock_database.fetchval.assert_not_called()
