"""Settings repository for the single-row JSON settings blob.

The ``settings`` table holds one logical record (id ``default``). It is
created by the migration and only ever mutated by shallow merge.
"""

import logging
from typing import Any

from memstore.exceptions import ValidationError
from memstore.storage.database import Database
from memstore.storage.schema import SETTINGS_ROW_ID

logger = logging.getLogger(__name__)


class SettingsRepository:
    """Repository for reading and merging the settings mapping."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def get(self) -> dict[str, Any]:
        """Return the settings mapping, or an empty mapping if unset."""
        data = await self._db.fetchval(
            "SELECT data FROM settings WHERE id = $1",
            SETTINGS_ROW_ID,
        )
        return dict(data) if data else {}

    async def merge(self, patch: dict[str, Any]) -> dict[str, Any]:
        """Shallow-merge a patch into the settings mapping.

        Top-level keys in ``patch`` overwrite existing keys; nested objects
        are replaced wholesale, never deep-merged. The row is created if the
        migration seed is missing.

        Args:
            patch: JSON object to merge.

        Returns:
            The resulting settings mapping.

        Raises:
            ValidationError: If ``patch`` is not a JSON object.
        """
        if not isinstance(patch, dict):
            raise ValidationError("settings patch must be a JSON object")

        sql = """
            INSERT INTO settings (id, data, updated_at)
            VALUES ($1, $2::jsonb, NOW())
            ON CONFLICT (id) DO UPDATE
            SET data = settings.data || EXCLUDED.data,
                updated_at = NOW()
            RETURNING data
        """
        data = await self._db.fetchval(sql, SETTINGS_ROW_ID, patch)

        logger.info(f"Settings merged (keys={sorted(patch)})")
        return dict(data) if data else {}
