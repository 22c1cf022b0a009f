"""File-backed catalog repository with atomic transactions.

The catalog is a single JSON document under the data root. Reads load the
committed document; writes go through :meth:`JsonCatalogRepository.transaction`,
which stages changes on a private copy and commits them with one atomic file
replace. A revision counter detects concurrent commits: a transaction whose
base revision is stale fails instead of overwriting the other writer.
"""

from __future__ import annotations

import copy
import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, Mapping

from catalog.catalog_io import (
    format_from_payload,
    format_to_payload,
    read_catalog_file,
    record_from_payload,
    record_to_payload,
    storage_from_payload,
    storage_to_payload,
    write_catalog_file,
)
from core.constants import CATALOG_FILE_NAME, KNOWN_DATA_STATUSES, MAX_SUB_PARTITION_VALUES
from core.errors import LakecatPersistenceError
from core.logging_config import get_logger
from core.types import CatalogRecord, DataKey, FormatDescriptor, FormatKey, StorageDescriptor

_LOGGER = get_logger(__name__)
_COMMIT_LOCK = threading.Lock()


class CatalogTransaction:
    """Staged view of the catalog inside one transaction.

    Lookups see the transaction's own writes. Nothing is visible to other
    readers until the owning repository commits.
    """

    def __init__(self, document: dict[str, Any]) -> None:
        self._document = copy.deepcopy(document)
        self._base_revision = int(self._document["revision"])
        self._touched_keys: set[DataKey] = set()

    @property
    def base_revision(self) -> int:
        """Catalog revision the transaction started from."""
        return self._base_revision

    @property
    def touched_keys(self) -> frozenset[DataKey]:
        """Alternate keys of every record written in this transaction."""
        return frozenset(self._touched_keys)

    @property
    def document(self) -> dict[str, Any]:
        """Staged catalog document."""
        return self._document

    def find_format(self, key: FormatKey) -> FormatDescriptor | None:
        return _find_format(self._document, key)

    def find_storage(self, name: str) -> StorageDescriptor | None:
        return _find_storage(self._document, name)

    def find_latest(self, data_key: DataKey) -> CatalogRecord | None:
        return _find_latest(self._document, data_key)

    def save(self, record: CatalogRecord) -> CatalogRecord:
        """Insert or update a record and return it as stored.

        New records (``data_id`` None) receive a generated identifier and a
        creation timestamp, so the returned record reflects the stored state.

        Args:
            record: Record to persist.

        Returns:
            The stored record.

        Raises:
            LakecatPersistenceError: On duplicate versions or unknown ids.
        """
        _check_sub_partition_slots(record)
        _check_status(record)
        records = self._document["business_object_data"]
        if record.data_id is None:
            stored = self._insert(record)
            records.append(record_to_payload(stored))
        else:
            stored = record
            records[self._index_of(record.data_id)] = record_to_payload(stored)
        self._touched_keys.add(stored.to_data_key().alternate_key())
        return stored

    def save_format(self, descriptor: FormatDescriptor) -> FormatDescriptor:
        """Insert or replace a format by its alternate key."""
        formats = self._document["formats"]
        formats[:] = [
            item for item in formats if not _format_key_matches(item, descriptor.key)
        ]
        formats.append(format_to_payload(descriptor))
        return descriptor

    def save_storage(self, storage: StorageDescriptor) -> StorageDescriptor:
        """Insert or replace a storage by name."""
        storages = self._document["storages"]
        storages[:] = [item for item in storages if not _same_text(item["name"], storage.name)]
        storages.append(storage_to_payload(storage))
        return storage

    def _insert(self, record: CatalogRecord) -> CatalogRecord:
        data_key = record.to_data_key()
        for payload in self._document["business_object_data"]:
            if _data_key_matches(payload, data_key.alternate_key()) and int(
                payload["data_version"]
            ) == record.data_version:
                raise LakecatPersistenceError(
                    f"Business object data version {record.data_version} is already registered "
                    f"for {_data_key_label(data_key)}. Refusing to register a duplicate."
                )
        data_id = int(self._document["next_data_id"])
        self._document["next_data_id"] = data_id + 1
        created_at = datetime.now(timezone.utc).isoformat()
        return _with_generated_fields(record, data_id, created_at)

    def _index_of(self, data_id: int) -> int:
        for index, payload in enumerate(self._document["business_object_data"]):
            if payload.get("data_id") == data_id:
                return index
        raise LakecatPersistenceError(
            f"Business object data with id {data_id} does not exist in the catalog. "
            "Reload the record before updating it."
        )


class JsonCatalogRepository:
    """Catalog persistence backed by one JSON document."""

    def __init__(self, data_root: Path) -> None:
        """Initialize the repository.

        Args:
            data_root: Directory holding the catalog document.
        """
        self._data_root = data_root.expanduser().resolve()
        self._catalog_path = self._data_root / CATALOG_FILE_NAME

    @property
    def catalog_path(self) -> Path:
        return self._catalog_path

    def find_format(self, key: FormatKey) -> FormatDescriptor | None:
        """Return the format registered under ``key``, if any."""
        return _find_format(self._read(), key)

    def find_storage(self, name: str) -> StorageDescriptor | None:
        """Return the storage registered under ``name``, if any."""
        return _find_storage(self._read(), name)

    def find_latest(self, data_key: DataKey) -> CatalogRecord | None:
        """Return the latest-version record for the key's identity, if any."""
        return _find_latest(self._read(), data_key)

    def list_records(self, data_key: DataKey) -> list[CatalogRecord]:
        """List every registered version of an identity, oldest first."""
        alternate_key = data_key.alternate_key()
        records = [
            record_from_payload(payload)
            for payload in self._read()["business_object_data"]
            if _data_key_matches(payload, alternate_key)
        ]
        return sorted(records, key=lambda record: record.data_version)

    @contextmanager
    def transaction(self) -> Iterator[CatalogTransaction]:
        """Open a transaction committed atomically on normal exit.

        Any exception raised inside the block discards every staged change.

        Yields:
            Staged transaction view.

        Raises:
            LakecatPersistenceError: If the commit fails or the catalog was
                changed by another writer since the transaction began.
        """
        transaction = CatalogTransaction(self._read())
        yield transaction
        self._commit(transaction)

    def import_seed(
        self,
        formats: tuple[FormatDescriptor, ...],
        storages: tuple[StorageDescriptor, ...],
    ) -> None:
        """Register formats and storages in a single transaction."""
        with self.transaction() as transaction:
            for descriptor in formats:
                transaction.save_format(descriptor)
            for storage in storages:
                transaction.save_storage(storage)
        _LOGGER.info(
            "catalog_seed_imported",
            catalog_path=str(self._catalog_path),
            format_count=len(formats),
            storage_count=len(storages),
        )

    def _read(self) -> dict[str, Any]:
        return read_catalog_file(self._catalog_path)

    def _commit(self, transaction: CatalogTransaction) -> None:
        document = transaction.document
        for data_key in transaction.touched_keys:
            _check_single_latest(document, data_key)
        with _COMMIT_LOCK:
            current_revision = int(self._read()["revision"])
            if current_revision != transaction.base_revision:
                raise LakecatPersistenceError(
                    f"Catalog at {self._catalog_path} changed during the transaction "
                    f"(revision {transaction.base_revision} -> {current_revision}). "
                    "No changes were committed; retry the operation."
                )
            document["revision"] = current_revision + 1
            write_catalog_file(self._catalog_path, document)
        _LOGGER.info(
            "catalog_transaction_committed",
            catalog_path=str(self._catalog_path),
            revision=document["revision"],
            touched_identities=len(transaction.touched_keys),
        )


def _find_format(document: Mapping[str, Any], key: FormatKey) -> FormatDescriptor | None:
    for payload in document["formats"]:
        if _format_key_matches(payload, key):
            return format_from_payload(payload)
    return None


def _find_storage(document: Mapping[str, Any], name: str) -> StorageDescriptor | None:
    for payload in document["storages"]:
        if _same_text(payload["name"], name):
            return storage_from_payload(payload)
    return None


def _find_latest(document: Mapping[str, Any], data_key: DataKey) -> CatalogRecord | None:
    alternate_key = data_key.alternate_key()
    for payload in document["business_object_data"]:
        if payload["latest_version"] and _data_key_matches(payload, alternate_key):
            return record_from_payload(payload)
    return None


def _check_single_latest(document: Mapping[str, Any], data_key: DataKey) -> None:
    """Fail when an identity does not have exactly one max-version latest record."""
    matching = [
        payload
        for payload in document["business_object_data"]
        if _data_key_matches(payload, data_key)
    ]
    if not matching:
        return
    latest = [payload for payload in matching if payload["latest_version"]]
    max_version = max(int(payload["data_version"]) for payload in matching)
    if len(latest) != 1 or int(latest[0]["data_version"]) != max_version:
        raise LakecatPersistenceError(
            f"Refusing to commit {_data_key_label(data_key)}: expected exactly one latest "
            f"version at data version {max_version}, found {len(latest)}. "
            "No changes were committed."
        )


def _format_key_matches(payload: Mapping[str, Any], key: FormatKey) -> bool:
    return (
        _same_text(payload["namespace"], key.namespace)
        and _same_text(payload["definition_name"], key.definition_name)
        and _same_text(payload["format_usage"], key.format_usage)
        and _same_text(payload["format_file_type"], key.format_file_type)
        and int(payload["format_version"]) == key.format_version
    )


def _data_key_matches(payload: Mapping[str, Any], alternate_key: DataKey) -> bool:
    if not _format_key_matches(payload["format"], alternate_key.format_key):
        return False
    if payload["partition_value"] != alternate_key.partition_value:
        return False
    return list(payload["sub_partition_values"]) == list(_sub_partition_slots(alternate_key))


def _sub_partition_slots(data_key: DataKey) -> tuple[str | None, ...]:
    values: list[str | None] = list(data_key.sub_partition_values)
    values.extend([None] * (MAX_SUB_PARTITION_VALUES - len(values)))
    return tuple(values)


def _check_sub_partition_slots(record: CatalogRecord) -> None:
    if len(record.sub_partition_values) != MAX_SUB_PARTITION_VALUES:
        raise LakecatPersistenceError(
            f"Business object data must carry {MAX_SUB_PARTITION_VALUES} sub-partition slots, "
            f"got {len(record.sub_partition_values)}."
        )


def _check_status(record: CatalogRecord) -> None:
    if record.status not in KNOWN_DATA_STATUSES:
        raise LakecatPersistenceError(
            f"Unknown business object data status '{record.status}'. "
            f"Use one of: {', '.join(KNOWN_DATA_STATUSES)}."
        )


def _with_generated_fields(record: CatalogRecord, data_id: int, created_at: str) -> CatalogRecord:
    return replace(record, data_id=data_id, created_at=created_at)


def _same_text(left: object, right: str) -> bool:
    return str(left).upper() == right.upper()


def _data_key_label(data_key: DataKey) -> str:
    sub_partitions = "|".join(data_key.sub_partition_values)
    return (
        f"{data_key.namespace}/{data_key.definition_name}/{data_key.format_usage}/"
        f"{data_key.format_file_type}/v{data_key.format_version}/"
        f"{data_key.partition_value}[{sub_partitions}]"
    )
