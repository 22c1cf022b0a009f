"""YAML catalog seed loading.

A seed file declares the formats and storages reconciliation needs:

    formats:
      - namespace: UT_NS
        definition_name: UT_BDEF
        format_usage: PRC
        format_file_type: TXT
        format_version: 0
        data_provider_name: UT_PROVIDER
        partition_key: PRTN_CLMN001
        sub_partition_keys: [PRTN_CLMN002]
    storages:
      - name: S3_MANAGED
        platform: S3
        attributes:
          bucket.name: my-bucket
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, cast

from core.constants import MAX_SUB_PARTITION_VALUES
from core.errors import LakecatConfigError, LakecatDependencyError
from core.types import FormatDescriptor, FormatKey, StorageDescriptor, StoragePlatform

_SEED_ROOT_KEYS = {"formats", "storages"}


@dataclass(frozen=True)
class CatalogSeed:
    """Parsed catalog seed."""

    formats: tuple[FormatDescriptor, ...]
    storages: tuple[StorageDescriptor, ...]


def load_catalog_seed(seed_path: str) -> CatalogSeed:
    """Load and validate a YAML catalog seed from disk.

    Args:
        seed_path: File path to YAML seed.

    Returns:
        Validated seed.

    Raises:
        LakecatDependencyError: If PyYAML is unavailable.
        LakecatConfigError: If the file is missing or malformed.
    """
    payload = _load_yaml_payload(seed_path)
    root_mapping = _expect_mapping(payload, "catalog seed root")
    unknown_keys = sorted(set(root_mapping) - _SEED_ROOT_KEYS)
    if unknown_keys:
        raise LakecatConfigError(
            f"Unsupported catalog seed keys: {', '.join(unknown_keys)}. "
            "Only 'formats' and 'storages' are allowed."
        )
    formats = tuple(
        _parse_format(_expect_mapping(item, f"formats[{index}]"), index)
        for index, item in enumerate(_expect_list(root_mapping.get("formats", []), "formats"))
    )
    storages = tuple(
        _parse_storage(_expect_mapping(item, f"storages[{index}]"), index)
        for index, item in enumerate(_expect_list(root_mapping.get("storages", []), "storages"))
    )
    return CatalogSeed(formats=formats, storages=storages)


def _load_yaml_payload(seed_path: str) -> object:
    try:
        import yaml  # type: ignore[import-untyped]
    except ImportError as error:  # pragma: no cover - dependency failure
        raise LakecatDependencyError(
            "Catalog seeding requires PyYAML. Install with 'pip install pyyaml'."
        ) from error
    seed_file = Path(seed_path).expanduser().resolve()
    if not seed_file.exists():
        raise LakecatConfigError(
            f"Catalog seed file does not exist at {seed_file}. Provide a valid YAML file path."
        )
    try:
        payload = cast(object, yaml.safe_load(seed_file.read_text(encoding="utf-8")))
    except OSError as error:
        raise LakecatConfigError(
            f"Failed to read catalog seed at {seed_file}: {error}. Check file permissions."
        ) from error
    except yaml.YAMLError as error:
        raise LakecatConfigError(
            f"Failed to parse YAML catalog seed at {seed_file}: {error}. Fix YAML syntax and retry."
        ) from error
    if payload is None:
        raise LakecatConfigError(
            f"Catalog seed at {seed_file} is empty. Define 'formats' or 'storages'."
        )
    return payload


def _parse_format(mapping: Mapping[str, object], index: int) -> FormatDescriptor:
    context = f"formats[{index}]"
    sub_partition_keys = tuple(
        _expect_text(item, f"{context}.sub_partition_keys")
        for item in _expect_list(mapping.get("sub_partition_keys", []), context)
    )
    if len(sub_partition_keys) > MAX_SUB_PARTITION_VALUES:
        raise LakecatConfigError(
            f"Invalid {context}: at most {MAX_SUB_PARTITION_VALUES} sub-partition keys "
            f"are supported, got {len(sub_partition_keys)}."
        )
    format_version = mapping.get("format_version")
    if not isinstance(format_version, int) or isinstance(format_version, bool) or format_version < 0:
        raise LakecatConfigError(
            f"Invalid {context}.format_version: expected a non-negative integer, "
            f"got {format_version!r}."
        )
    key = FormatKey(
        namespace=_expect_text(mapping.get("namespace"), f"{context}.namespace"),
        definition_name=_expect_text(mapping.get("definition_name"), f"{context}.definition_name"),
        format_usage=_expect_text(mapping.get("format_usage"), f"{context}.format_usage"),
        format_file_type=_expect_text(
            mapping.get("format_file_type"), f"{context}.format_file_type"
        ),
        format_version=format_version,
    )
    return FormatDescriptor(
        key=key,
        data_provider_name=_expect_text(
            mapping.get("data_provider_name"), f"{context}.data_provider_name"
        ),
        partition_key=_expect_text(mapping.get("partition_key"), f"{context}.partition_key"),
        sub_partition_keys=sub_partition_keys,
    )


def _parse_storage(mapping: Mapping[str, object], index: int) -> StorageDescriptor:
    context = f"storages[{index}]"
    attributes = _expect_mapping(mapping.get("attributes", {}), f"{context}.attributes")
    return StorageDescriptor(
        name=_expect_text(mapping.get("name"), f"{context}.name"),
        platform=_parse_platform(mapping.get("platform"), f"{context}.platform"),
        attributes={key: str(value) for key, value in attributes.items()},
    )


def _parse_platform(value: object, context: str) -> StoragePlatform:
    try:
        return StoragePlatform.from_code(_expect_text(value, context))
    except ValueError as error:
        raise LakecatConfigError(f"Invalid {context}: {error}.") from error


def _expect_mapping(value: object, context: str) -> Mapping[str, object]:
    if isinstance(value, Mapping):
        normalized_mapping = {}
        for key, payload in value.items():
            if not isinstance(key, str):
                raise LakecatConfigError(
                    f"Invalid {context}: expected string keys, got {type(key).__name__}."
                )
            normalized_mapping[key] = payload
        return normalized_mapping
    raise LakecatConfigError(f"Invalid {context}: expected mapping, got {type(value).__name__}.")


def _expect_list(value: object, context: str) -> list[object]:
    if isinstance(value, list):
        return value
    raise LakecatConfigError(f"Invalid {context}: expected list, got {type(value).__name__}.")


def _expect_text(value: object, context: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    raise LakecatConfigError(f"Invalid {context}: expected non-empty string.")
