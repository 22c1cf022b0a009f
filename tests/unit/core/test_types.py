"""Unit tests for shared data models."""

from __future__ import annotations

from core.types import CatalogRecord
from tests.catalog_fixtures import FORMAT, sample_key, sample_request


def test_alternate_key_ignores_data_version() -> None:
    """Keys differing only by version should share an alternate key."""
    key = sample_key("A")

    assert key.with_version(1).alternate_key() == key.with_version(7).alternate_key()


def test_record_to_data_key_drops_unset_sub_partition_slots() -> None:
    """Unset positional slots should not appear in the data key."""
    record = CatalogRecord(
        format_key=FORMAT.key,
        partition_value="2015-12-31",
        sub_partition_values=("A", "B", None, None),
        data_version=3,
        status="INVALID",
        latest_version=True,
    )

    assert record.to_data_key() == sample_key("A", "B").with_version(3)


def test_request_data_key_defaults_missing_sub_partitions() -> None:
    """A request without sub-partitions should map to an empty tuple."""
    assert sample_request().data_key() == sample_key()
