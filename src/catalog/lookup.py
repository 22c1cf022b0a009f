"""Read-only catalog queries used by reconciliation.

This module resolves formats and storages into descriptors and finds the
latest registered version of a data identity.
"""

from __future__ import annotations

from typing import Protocol

from core.constants import NO_REGISTERED_VERSION
from core.errors import LakecatNotFoundError, LakecatPreconditionError
from core.logging_config import get_logger
from core.types import (
    CatalogRecord,
    DataKey,
    FormatDescriptor,
    FormatKey,
    StorageDescriptor,
    StoragePlatform,
)

_LOGGER = get_logger(__name__)


class CatalogReader(Protocol):
    """Read operations required from catalog persistence."""

    def find_format(self, key: FormatKey) -> FormatDescriptor | None: ...

    def find_storage(self, name: str) -> StorageDescriptor | None: ...

    def find_latest(self, data_key: DataKey) -> CatalogRecord | None: ...


class CatalogLookup:
    """Catalog queries with not-found and platform checks."""

    def __init__(self, reader: CatalogReader) -> None:
        self._reader = reader

    def resolve_format(self, key: FormatKey) -> FormatDescriptor:
        """Resolve a business object format.

        Args:
            key: Format alternate key.

        Returns:
            Resolved format descriptor.

        Raises:
            LakecatNotFoundError: If no format matches the key.
        """
        descriptor = self._reader.find_format(key)
        if descriptor is None:
            raise LakecatNotFoundError(
                f"Business object format with namespace '{key.namespace}', "
                f"business object definition name '{key.definition_name}', "
                f"format usage '{key.format_usage}', format file type "
                f"'{key.format_file_type}', and format version {key.format_version} "
                "does not exist."
            )
        _LOGGER.debug(
            "format_resolved",
            namespace=key.namespace,
            definition_name=key.definition_name,
            format_version=key.format_version,
        )
        return descriptor

    def resolve_storage(self, name: str) -> StorageDescriptor:
        """Resolve a storage usable for reconciliation.

        Args:
            name: Storage name.

        Returns:
            Resolved S3 storage descriptor.

        Raises:
            LakecatNotFoundError: If the storage is unknown.
            LakecatPreconditionError: If the storage is not an S3 storage or
                has no bucket configured.
        """
        storage = self._reader.find_storage(name)
        if storage is None:
            raise LakecatNotFoundError(f"Storage with name '{name}' does not exist.")
        match storage.platform:
            case StoragePlatform.S3:
                if not storage.bucket_name:
                    raise LakecatPreconditionError(
                        f"Storage '{name}' has no bucket configured. "
                        "Set the 'bucket.name' storage attribute and retry."
                    )
            case _:
                raise LakecatPreconditionError(
                    f"The specified storage '{name}' is not a {StoragePlatform.S3.value} "
                    f"storage platform (platform '{storage.platform.value}')."
                )
        _LOGGER.debug("storage_resolved", storage_name=storage.name, bucket=storage.bucket_name)
        return storage

    def latest_record(self, data_key: DataKey) -> CatalogRecord | None:
        """Return the latest registered record of the key's identity, if any."""
        return self._reader.find_latest(data_key.alternate_key())


def baseline_version(latest_record: CatalogRecord | None) -> int:
    """Return the highest registered data version, or -1 when none exists."""
    if latest_record is None:
        return NO_REGISTERED_VERSION
    return latest_record.data_version
