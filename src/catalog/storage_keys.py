"""S3 key prefix construction for business object data.

The prefix layout is shared by producers writing data and by the
reconciliation scan probing for it, so it must stay deterministic:

    {namespace}/{data-provider}/{usage}/{file-type}/{definition}/
    frmt-v{format version}/data-v{data version}/
    {partition key}={partition value}[/{sub key}={sub value}...]
"""

from __future__ import annotations

from core.constants import (
    DATA_VERSION_PREFIX,
    FORMAT_VERSION_PREFIX,
    S3_KEY_PREFIX_DELIMITER,
)
from core.errors import LakecatValidationError
from core.types import DataKey, FormatDescriptor


def build_s3_key_prefix(format_descriptor: FormatDescriptor, data_key: DataKey) -> str:
    """Build the storage key prefix of one data version.

    Args:
        format_descriptor: Resolved format of the data.
        data_key: Versioned data key.

    Returns:
        Key prefix without a trailing delimiter.

    Raises:
        LakecatValidationError: If the key has no data version or more
            sub-partition values than the format schema defines.
    """
    if data_key.data_version is None:
        raise LakecatValidationError(
            "Cannot build a storage key prefix without a data version. "
            "Pin the data key to a version first."
        )
    sub_partition_keys = format_descriptor.sub_partition_keys
    if len(data_key.sub_partition_values) > len(sub_partition_keys):
        raise LakecatValidationError(
            f"Format {_format_label(format_descriptor)} defines "
            f"{len(sub_partition_keys)} sub-partition column(s) but "
            f"{len(data_key.sub_partition_values)} sub-partition value(s) were given. "
            "Remove the extra sub-partition values."
        )
    format_key = format_descriptor.key
    segments = [
        _path_token(format_key.namespace),
        _path_token(format_descriptor.data_provider_name),
        _path_token(format_key.format_usage),
        _path_token(format_key.format_file_type),
        _path_token(format_key.definition_name),
        f"{FORMAT_VERSION_PREFIX}{format_key.format_version}",
        f"{DATA_VERSION_PREFIX}{data_key.data_version}",
        _partition_segment(format_descriptor.partition_key, data_key.partition_value),
    ]
    for column_name, value in zip(sub_partition_keys, data_key.sub_partition_values):
        segments.append(_partition_segment(column_name, value))
    return S3_KEY_PREFIX_DELIMITER.join(segments)


def _path_token(value: str) -> str:
    """Lower-case an identifier and replace underscores with hyphens."""
    return value.lower().replace("_", "-")


def _partition_segment(column_name: str, value: str) -> str:
    return f"{_path_token(column_name)}={value}"


def _format_label(format_descriptor: FormatDescriptor) -> str:
    key = format_descriptor.key
    return (
        f"{key.namespace}/{key.definition_name}/{key.format_usage}/"
        f"{key.format_file_type}/v{key.format_version}"
    )
