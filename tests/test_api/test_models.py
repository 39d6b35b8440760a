"""Tests for API model construction."""

import datetime as dt

import pytest

from memstore.api.models import DocumentItem, MemoryV4, format_timestamp
from memstore.vectorstore.base import VectorSearchResult


class TestFormatTimestamp:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (dt.datetime(2026, 3, 1, 12, 0, 0, tzinfo=dt.timezone.utc), "2026-03-01T12:00:00.000Z"),
            (
                dt.datetime(2026, 3, 1, 12, 0, 0, 123987, tzinfo=dt.timezone.utc),
                "2026-03-01T12:00:00.123Z",
            ),
            (
                dt.datetime(2026, 3, 1, 14, 30, 0, tzinfo=dt.timezone(dt.timedelta(hours=2))),
                "2026-03-01T12:30:00.000Z",
            ),
            (dt.datetime(2026, 3, 1, 12, 0, 0), "2026-03-01T12:00:00.000Z"),
        ],
    )
    def test_utc_milliseconds(self, value, expected):
        assert format_timestamp(value) == expected

    def test_none(self):
        assert format_timestamp(None) is None


class TestFromConstructors:
    def test_document_item(self, make_document):
        item = DocumentItem.from_document(make_document())

        data = item.model_dump(by_alias=True)
        assert data["createdAt"] == "2026-03-01T12:00:00.000Z"
        assert data["updatedAt"] == "2026-03-01T12:00:00.000Z"

    def test_memory_without_timestamp(self):
        memory = MemoryV4.from_result(VectorSearchResult(document_id="a", score=0.5))

        assert memory.model_dump(by_alias=True)["createdAt"] is None
