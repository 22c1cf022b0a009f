"""Validation and normalization of reconciliation requests."""

from __future__ import annotations

from dataclasses import replace

from core.constants import MAX_SUB_PARTITION_VALUES
from core.errors import LakecatValidationError
from core.types import ReconcileRequest


def validate_request(request: ReconcileRequest | None) -> None:
    """Validate required fields and ranges of a raw request.

    Args:
        request: Raw request, possibly with missing fields.

    Raises:
        LakecatValidationError: On the first missing or malformed field.
    """
    if request is None:
        raise LakecatValidationError("The request is required.")
    _require_text(request.namespace, "namespace")
    _require_text(request.definition_name, "business object definition name")
    _require_text(request.format_usage, "business object format usage")
    _require_text(request.format_file_type, "business object format file type")
    if request.format_version is None:
        raise LakecatValidationError("The business object format version is required.")
    if request.format_version < 0:
        raise LakecatValidationError(
            "The business object format version must be greater than or equal to 0."
        )
    _require_text(request.partition_value, "partition value")
    _require_text(request.storage_name, "storage name")
    if request.sub_partition_values is None:
        return
    if len(request.sub_partition_values) > MAX_SUB_PARTITION_VALUES:
        raise LakecatValidationError(
            f"At most {MAX_SUB_PARTITION_VALUES} sub-partition values are allowed, "
            f"got {len(request.sub_partition_values)}."
        )
    for index, value in enumerate(request.sub_partition_values):
        if value is None or not value.strip():
            raise LakecatValidationError(f"The sub-partition value [{index}] must not be blank.")


def normalize_request(request: ReconcileRequest) -> ReconcileRequest:
    """Return a copy of a validated request with every string trimmed."""
    return replace(
        request,
        namespace=_strip(request.namespace),
        definition_name=_strip(request.definition_name),
        format_usage=_strip(request.format_usage),
        format_file_type=_strip(request.format_file_type),
        partition_value=_strip(request.partition_value),
        storage_name=_strip(request.storage_name),
        sub_partition_values=tuple(
            value.strip() for value in request.sub_partition_values or ()
        ),
    )


def _require_text(value: str | None, field_label: str) -> None:
    if value is None or not value.strip():
        raise LakecatValidationError(f"The {field_label} is required.")


def _strip(value: str | None) -> str | None:
    return value.strip() if value is not None else None
