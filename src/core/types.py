"""Shared typed models.

This module defines immutable data models used by the catalog,
storage, and reconciliation layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Mapping

from core.constants import S3_BUCKET_NAME_ATTRIBUTE


@dataclass(frozen=True)
class FormatKey:
    """Alternate key of a business object format.

    Attributes:
        namespace: Namespace code owning the business object definition.
        definition_name: Business object definition name.
        format_usage: Format usage, e.g. PRC.
        format_file_type: Format file type, e.g. TXT or GZ.
        format_version: Non-negative format version.
    """

    namespace: str
    definition_name: str
    format_usage: str
    format_file_type: str
    format_version: int


@dataclass(frozen=True)
class DataKey:
    """Identifies one business object data instance.

    When ``data_version`` is None the key is an alternate key that matches
    every version sharing the same format and partition values.

    Attributes:
        namespace: Namespace code.
        definition_name: Business object definition name.
        format_usage: Format usage.
        format_file_type: Format file type.
        format_version: Format version.
        partition_value: Primary partition value.
        sub_partition_values: Ordered sub-partition values, at most four.
        data_version: Business object data version, or None.
    """

    namespace: str
    definition_name: str
    format_usage: str
    format_file_type: str
    format_version: int
    partition_value: str
    sub_partition_values: tuple[str, ...] = ()
    data_version: int | None = None

    @property
    def format_key(self) -> FormatKey:
        """Return the format part of this data key."""
        return FormatKey(
            namespace=self.namespace,
            definition_name=self.definition_name,
            format_usage=self.format_usage,
            format_file_type=self.format_file_type,
            format_version=self.format_version,
        )

    def alternate_key(self) -> "DataKey":
        """Return this key without a data version."""
        return replace(self, data_version=None)

    def with_version(self, data_version: int) -> "DataKey":
        """Return this key pinned to ``data_version``."""
        return replace(self, data_version=data_version)


@dataclass(frozen=True)
class FormatDescriptor:
    """Resolved business object format.

    Attributes:
        key: Format alternate key.
        data_provider_name: Data provider owning the definition.
        partition_key: Schema column name of the primary partition.
        sub_partition_keys: Schema column names of the sub-partitions.
    """

    key: FormatKey
    data_provider_name: str
    partition_key: str
    sub_partition_keys: tuple[str, ...] = ()


class StoragePlatform(str, Enum):
    """Storage platform a storage is registered on."""

    S3 = "S3"
    GLACIER = "GLACIER"
    FILE = "FILE"

    @classmethod
    def from_code(cls, code: str) -> "StoragePlatform":
        """Parse a platform code case-insensitively.

        Raises:
            ValueError: If the code names no known platform.
        """
        normalized = code.strip().upper()
        for platform in cls:
            if platform.value == normalized:
                return platform
        known = ", ".join(platform.value for platform in cls)
        raise ValueError(f"unknown storage platform '{code}' (expected one of: {known})")


@dataclass(frozen=True)
class StorageDescriptor:
    """Registered storage with its platform tag and attributes.

    Attributes:
        name: Storage name.
        platform: Storage platform tag.
        attributes: Platform-specific parameters such as the bucket name.
    """

    name: str
    platform: StoragePlatform
    attributes: Mapping[str, str] = field(default_factory=dict)

    @property
    def bucket_name(self) -> str | None:
        """Return the S3 bucket configured for this storage, if any."""
        return self.attributes.get(S3_BUCKET_NAME_ATTRIBUTE)


@dataclass(frozen=True)
class StorageUnit:
    """Location of one business object data instance in a storage.

    Attributes:
        storage_name: Name of the storage holding the data.
        directory_path: Key prefix of the data inside the storage.
    """

    storage_name: str
    directory_path: str


@dataclass(frozen=True)
class CatalogRecord:
    """Persisted business object data entity.

    Attributes:
        data_id: Repository-assigned identifier, None before the first save.
        format_key: Format the data is registered under.
        partition_value: Primary partition value.
        sub_partition_values: Four positional sub-partition slots.
        data_version: Non-negative data version.
        status: Business object data status code.
        latest_version: Whether this is the latest version of its identity.
        storage_units: Storage locations of the data.
        created_at: Repository-assigned creation timestamp.
    """

    format_key: FormatKey
    partition_value: str
    data_version: int
    status: str
    latest_version: bool
    sub_partition_values: tuple[str | None, ...] = (None, None, None, None)
    storage_units: tuple[StorageUnit, ...] = ()
    data_id: int | None = None
    created_at: str | None = None

    def to_data_key(self) -> DataKey:
        """Convert this record into its versioned data key."""
        return DataKey(
            namespace=self.format_key.namespace,
            definition_name=self.format_key.definition_name,
            format_usage=self.format_key.format_usage,
            format_file_type=self.format_key.format_file_type,
            format_version=self.format_key.format_version,
            partition_value=self.partition_value,
            sub_partition_values=tuple(
                value for value in self.sub_partition_values if value is not None
            ),
            data_version=self.data_version,
        )


@dataclass(frozen=True)
class ReconcileRequest:
    """Inbound request to invalidate unregistered data.

    Fields are optional because raw requests are validated after parsing.

    Attributes:
        namespace: Namespace code.
        definition_name: Business object definition name.
        format_usage: Format usage.
        format_file_type: Format file type.
        format_version: Format version.
        partition_value: Primary partition value.
        sub_partition_values: Optional sub-partition values.
        storage_name: Storage to reconcile against.
    """

    namespace: str | None
    definition_name: str | None
    format_usage: str | None
    format_file_type: str | None
    format_version: int | None
    partition_value: str | None
    storage_name: str | None
    sub_partition_values: tuple[str, ...] | None = None

    def data_key(self) -> DataKey:
        """Return the version-less data key of a normalized request."""
        return DataKey(
            namespace=str(self.namespace),
            definition_name=str(self.definition_name),
            format_usage=str(self.format_usage),
            format_file_type=str(self.format_file_type),
            format_version=int(self.format_version or 0),
            partition_value=str(self.partition_value),
            sub_partition_values=tuple(self.sub_partition_values or ()),
        )


@dataclass(frozen=True)
class ReconcileResponse:
    """Result of one reconciliation.

    Attributes:
        request: Normalized request echoed back to the caller.
        registered_data: Records registered as INVALID, in version order.
    """

    request: ReconcileRequest
    registered_data: tuple[CatalogRecord, ...]


@dataclass(frozen=True)
class StatusChangeEvent:
    """Business object data status change notification.

    Attributes:
        data_key: Versioned key of the changed data.
        new_status: Status after the change.
        old_status: Status before the change, None for new registrations.
        event_time: ISO-8601 UTC timestamp of the change.
    """

    data_key: DataKey
    new_status: str
    old_status: str | None
    event_time: str
