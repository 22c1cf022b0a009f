"""Catalog document persistence helpers.

This module isolates JSON catalog IO and entity (de)serialization.
It keeps the repository focused on lookups and transaction flow.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Mapping

from core.constants import CATALOG_DOCUMENT_VERSION, KNOWN_DATA_STATUSES
from core.errors import LakecatPersistenceError
from core.types import (
    CatalogRecord,
    FormatDescriptor,
    FormatKey,
    StorageDescriptor,
    StoragePlatform,
    StorageUnit,
)


def empty_catalog() -> dict[str, Any]:
    """Return the payload of a catalog with no entities."""
    return {
        "document_version": CATALOG_DOCUMENT_VERSION,
        "revision": 0,
        "next_data_id": 1,
        "formats": [],
        "storages": [],
        "business_object_data": [],
    }


def read_catalog_file(catalog_path: Path) -> dict[str, Any]:
    """Read and validate the catalog document.

    Args:
        catalog_path: Catalog JSON path.

    Returns:
        Parsed catalog object, or an empty catalog when the file is missing.

    Raises:
        LakecatPersistenceError: If the catalog cannot be read or parsed.
    """
    if not catalog_path.exists():
        return empty_catalog()
    try:
        payload = json.loads(catalog_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as error:
        raise LakecatPersistenceError(
            f"Failed to parse catalog at {catalog_path}: {error.msg}. "
            "Restore the catalog from backup."
        ) from error
    except OSError as error:
        raise LakecatPersistenceError(
            f"Failed to read catalog at {catalog_path}: {error}. Check file permissions."
        ) from error
    if not isinstance(payload, dict):
        raise LakecatPersistenceError(
            f"Failed to parse catalog at {catalog_path}: "
            "expected JSON object at top level. Restore the catalog from backup."
        )
    if payload.get("document_version") != CATALOG_DOCUMENT_VERSION:
        raise LakecatPersistenceError(
            f"Unsupported catalog document version {payload.get('document_version')!r} "
            f"at {catalog_path}. Expected {CATALOG_DOCUMENT_VERSION}."
        )
    return payload


def write_catalog_file(catalog_path: Path, payload: Mapping[str, Any]) -> None:
    """Atomically replace the catalog document.

    The payload is written to a sibling temporary file first, so readers see
    either the previous document or the new one, never a partial write.

    Args:
        catalog_path: Catalog JSON path.
        payload: Full catalog document.

    Raises:
        LakecatPersistenceError: If the write fails.
    """
    temp_path = catalog_path.with_name(f".{catalog_path.name}.{os.getpid()}.tmp")
    try:
        catalog_path.parent.mkdir(parents=True, exist_ok=True)
        temp_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
        os.replace(temp_path, catalog_path)
    except OSError as error:
        temp_path.unlink(missing_ok=True)
        raise LakecatPersistenceError(
            f"Failed to write catalog at {catalog_path}: {error}. "
            "No changes were committed; check disk space and permissions."
        ) from error


def format_key_to_payload(key: FormatKey) -> dict[str, object]:
    return {
        "namespace": key.namespace,
        "definition_name": key.definition_name,
        "format_usage": key.format_usage,
        "format_file_type": key.format_file_type,
        "format_version": key.format_version,
    }


def format_key_from_payload(payload: Mapping[str, Any]) -> FormatKey:
    return FormatKey(
        namespace=str(payload["namespace"]),
        definition_name=str(payload["definition_name"]),
        format_usage=str(payload["format_usage"]),
        format_file_type=str(payload["format_file_type"]),
        format_version=int(payload["format_version"]),
    )


def format_to_payload(descriptor: FormatDescriptor) -> dict[str, object]:
    """Serialize a format descriptor into a JSON-safe payload."""
    payload = format_key_to_payload(descriptor.key)
    payload["data_provider_name"] = descriptor.data_provider_name
    payload["partition_key"] = descriptor.partition_key
    payload["sub_partition_keys"] = list(descriptor.sub_partition_keys)
    return payload


def format_from_payload(payload: Mapping[str, Any]) -> FormatDescriptor:
    """Deserialize a format descriptor payload."""
    return FormatDescriptor(
        key=format_key_from_payload(payload),
        data_provider_name=str(payload["data_provider_name"]),
        partition_key=str(payload["partition_key"]),
        sub_partition_keys=tuple(str(item) for item in payload.get("sub_partition_keys", [])),
    )


def storage_to_payload(storage: StorageDescriptor) -> dict[str, object]:
    """Serialize a storage descriptor into a JSON-safe payload."""
    return {
        "name": storage.name,
        "platform": storage.platform.value,
        "attributes": dict(storage.attributes),
    }


def storage_from_payload(payload: Mapping[str, Any]) -> StorageDescriptor:
    """Deserialize a storage descriptor payload."""
    attributes = payload.get("attributes") or {}
    try:
        platform = StoragePlatform.from_code(str(payload["platform"]))
    except ValueError as error:
        raise LakecatPersistenceError(
            f"Storage '{payload['name']}' in the catalog has an {error}. "
            "Restore the catalog from backup or reload the catalog seed."
        ) from error
    return StorageDescriptor(
        name=str(payload["name"]),
        platform=platform,
        attributes={str(key): str(value) for key, value in dict(attributes).items()},
    )


def record_to_payload(record: CatalogRecord) -> dict[str, object]:
    """Serialize a catalog record into a JSON-safe payload."""
    return {
        "data_id": record.data_id,
        "format": format_key_to_payload(record.format_key),
        "partition_value": record.partition_value,
        "sub_partition_values": list(record.sub_partition_values),
        "data_version": record.data_version,
        "status": record.status,
        "latest_version": record.latest_version,
        "storage_units": [
            {"storage_name": unit.storage_name, "directory_path": unit.directory_path}
            for unit in record.storage_units
        ],
        "created_at": record.created_at,
    }


def record_from_payload(payload: Mapping[str, Any]) -> CatalogRecord:
    """Deserialize a catalog record payload."""
    status = str(payload["status"])
    if status not in KNOWN_DATA_STATUSES:
        raise LakecatPersistenceError(
            f"Business object data {payload.get('data_id')} in the catalog has unknown "
            f"status '{status}' (expected one of: {', '.join(KNOWN_DATA_STATUSES)}). "
            "Restore the catalog from backup."
        )
    return CatalogRecord(
        data_id=int(payload["data_id"]) if payload.get("data_id") is not None else None,
        format_key=format_key_from_payload(payload["format"]),
        partition_value=str(payload["partition_value"]),
        sub_partition_values=tuple(
            str(value) if value is not None else None
            for value in payload.get("sub_partition_values", [])
        ),
        data_version=int(payload["data_version"]),
        status=status,
        latest_version=bool(payload["latest_version"]),
        storage_units=tuple(
            StorageUnit(
                storage_name=str(unit["storage_name"]),
                directory_path=str(unit["directory_path"]),
            )
            for unit in payload.get("storage_units", [])
        ),
        created_at=str(payload["created_at"]) if payload.get("created_at") else None,
    )
