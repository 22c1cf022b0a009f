"""Shared catalog fixtures and collaborator fakes for tests."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from catalog.repository import JsonCatalogRepository
from catalog.storage_keys import build_s3_key_prefix
from core.errors import LakecatNotificationError, LakecatStorageAccessError
from core.types import (
    CatalogRecord,
    DataKey,
    FormatDescriptor,
    FormatKey,
    ReconcileRequest,
    StatusChangeEvent,
    StorageDescriptor,
    StoragePlatform,
    StorageUnit,
)

FORMAT = FormatDescriptor(
    key=FormatKey(
        namespace="UT_NS",
        definition_name="UT_BDEF",
        format_usage="PRC",
        format_file_type="TXT",
        format_version=0,
    ),
    data_provider_name="UT_PROVIDER",
    partition_key="PRTN_CLMN001",
    sub_partition_keys=("PRTN_CLMN002", "PRTN_CLMN003", "PRTN_CLMN004", "PRTN_CLMN005"),
)
S3_STORAGE = StorageDescriptor(
    name="S3_MANAGED",
    platform=StoragePlatform.S3,
    attributes={"bucket.name": "ut-bucket"},
)
FILE_STORAGE = StorageDescriptor(name="LOCAL_DISK", platform=StoragePlatform.FILE)
PARTITION_VALUE = "2015-12-31"


def sample_request(**overrides: object) -> ReconcileRequest:
    request = ReconcileRequest(
        namespace="UT_NS",
        definition_name="UT_BDEF",
        format_usage="PRC",
        format_file_type="TXT",
        format_version=0,
        partition_value=PARTITION_VALUE,
        storage_name="S3_MANAGED",
    )
    return replace(request, **overrides)


def sample_key(*sub_partition_values: str) -> DataKey:
    return DataKey(
        namespace="UT_NS",
        definition_name="UT_BDEF",
        format_usage="PRC",
        format_file_type="TXT",
        format_version=0,
        partition_value=PARTITION_VALUE,
        sub_partition_values=tuple(sub_partition_values),
    )


def seeded_repository(data_root: Path) -> JsonCatalogRepository:
    repository = JsonCatalogRepository(data_root)
    repository.import_seed((FORMAT,), (S3_STORAGE, FILE_STORAGE))
    return repository


def register_versions(
    repository: JsonCatalogRepository,
    versions: range,
    data_key: DataKey | None = None,
    status: str = "VALID",
) -> list[CatalogRecord]:
    """Register existing data versions with the last one flagged latest."""
    key = data_key or sample_key()
    stored: list[CatalogRecord] = []
    last_version = versions[-1]
    with repository.transaction() as transaction:
        for version in versions:
            slots = list(key.sub_partition_values) + [None] * (4 - len(key.sub_partition_values))
            record = CatalogRecord(
                format_key=FORMAT.key,
                partition_value=key.partition_value,
                sub_partition_values=tuple(slots),
                data_version=version,
                status=status,
                latest_version=version == last_version,
                storage_units=(
                    StorageUnit(
                        storage_name=S3_STORAGE.name,
                        directory_path=build_s3_key_prefix(FORMAT, key.with_version(version)),
                    ),
                ),
            )
            stored.append(transaction.save(record))
    return stored


class FakeStorageLister:
    """In-memory object store keyed by object path."""

    def __init__(self) -> None:
        self.object_keys: list[str] = []
        self.probed_prefixes: list[str] = []

    def add_version(self, data_key: DataKey, version: int, file_count: int = 1) -> None:
        prefix = build_s3_key_prefix(FORMAT, data_key.with_version(version))
        for index in range(file_count):
            self.object_keys.append(f"{prefix}/part-{index:05d}.txt")

    def list_object_keys(self, storage: StorageDescriptor, prefix: str) -> list[str]:
        self.probed_prefixes.append(prefix)
        return sorted(key for key in self.object_keys if key.startswith(prefix))


class FailingStorageLister:
    """Lister whose every call fails like an unreachable bucket."""

    def __init__(self) -> None:
        self.calls = 0

    def list_object_keys(self, storage: StorageDescriptor, prefix: str) -> list[str]:
        self.calls += 1
        raise LakecatStorageAccessError(f"Access denied listing {prefix}")


class RecordingSink:
    """Notification sink that keeps every event."""

    def __init__(self) -> None:
        self.events: list[StatusChangeEvent] = []

    def notify(self, event: StatusChangeEvent) -> None:
        self.events.append(event)


class FailingSink:
    """Notification sink that rejects every event."""

    def notify(self, event: StatusChangeEvent) -> None:
        raise LakecatNotificationError("queue unavailable")
