"""Transactional registration of unregistered data as INVALID."""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import replace
from typing import Protocol

from catalog.storage_keys import build_s3_key_prefix
from core.constants import MAX_SUB_PARTITION_VALUES, UNREGISTERED_DATA_STATUS
from core.errors import LakecatPersistenceError
from core.logging_config import get_logger
from core.types import (
    CatalogRecord,
    DataKey,
    FormatDescriptor,
    StorageDescriptor,
    StorageUnit,
)

_LOGGER = get_logger(__name__)


class CatalogSession(Protocol):
    """Write operations available inside a catalog transaction."""

    def save(self, record: CatalogRecord) -> CatalogRecord: ...

    def find_latest(self, data_key: DataKey) -> CatalogRecord | None: ...


class CatalogWriter(Protocol):
    """Catalog persistence able to open atomic transactions."""

    def transaction(self) -> AbstractContextManager[CatalogSession]: ...


def register_invalid_data(
    writer: CatalogWriter,
    previous_latest: CatalogRecord | None,
    format_descriptor: FormatDescriptor,
    unregistered_keys: tuple[DataKey, ...],
    storage: StorageDescriptor,
) -> tuple[CatalogRecord, ...]:
    """Register unregistered data versions in one transaction.

    The previous latest record loses its latest flag and only the highest
    new version becomes latest. When ``unregistered_keys`` is empty the
    catalog is left untouched. The latest record is read again inside the
    transaction; if another writer replaced it after ``previous_latest`` was
    read, nothing is committed.

    Args:
        writer: Catalog persistence.
        previous_latest: Latest record before registration, if any.
        format_descriptor: Format the data is registered under.
        unregistered_keys: Versioned keys in ascending version order.
        storage: Storage holding the data.

    Returns:
        Stored records in version order.

    Raises:
        LakecatPersistenceError: If the latest record changed since
            ``previous_latest`` was read, or if any write or the commit
            fails; nothing is committed in that case.
    """
    if not unregistered_keys:
        return ()
    created: list[CatalogRecord] = []
    with writer.transaction() as session:
        current_latest = _check_latest_unchanged(session, previous_latest, unregistered_keys[0])
        if current_latest is not None:
            session.save(replace(current_latest, latest_version=False))
        last_index = len(unregistered_keys) - 1
        for index, data_key in enumerate(unregistered_keys):
            record = _build_invalid_record(
                format_descriptor,
                data_key,
                storage,
                latest_version=index == last_index,
            )
            created.append(session.save(record))
    _LOGGER.info(
        "invalid_data_registered",
        storage_name=storage.name,
        record_count=len(created),
        superseded_version=previous_latest.data_version if previous_latest else None,
        latest_version=created[-1].data_version,
    )
    return tuple(created)


def _check_latest_unchanged(
    session: CatalogSession,
    previous_latest: CatalogRecord | None,
    data_key: DataKey,
) -> CatalogRecord | None:
    current = session.find_latest(data_key.alternate_key())
    expected_id = previous_latest.data_id if previous_latest else None
    current_id = current.data_id if current else None
    if current_id != expected_id:
        raise LakecatPersistenceError(
            f"Latest business object data for partition '{data_key.partition_value}' "
            f"changed since the storage scan began (expected data id {expected_id}, "
            f"found {current_id}). No changes were committed; retry the reconciliation."
        )
    return current


def _build_invalid_record(
    format_descriptor: FormatDescriptor,
    data_key: DataKey,
    storage: StorageDescriptor,
    latest_version: bool,
) -> CatalogRecord:
    if data_key.data_version is None:
        raise ValueError("Unregistered data keys must carry a data version.")
    storage_unit = StorageUnit(
        storage_name=storage.name,
        directory_path=build_s3_key_prefix(format_descriptor, data_key),
    )
    return CatalogRecord(
        format_key=format_descriptor.key,
        partition_value=data_key.partition_value,
        sub_partition_values=_sub_partition_slots(data_key.sub_partition_values),
        data_version=data_key.data_version,
        status=UNREGISTERED_DATA_STATUS,
        latest_version=latest_version,
        storage_units=(storage_unit,),
    )


def _sub_partition_slots(values: tuple[str, ...]) -> tuple[str | None, ...]:
    return tuple(
        values[slot] if slot < len(values) else None for slot in range(MAX_SUB_PARTITION_VALUES)
    )
