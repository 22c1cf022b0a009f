"""Core constants used across Lakecat modules.

This module centralizes catalog vocabulary and file layout names.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path(".lakecat")
CATALOG_FILE_NAME = "catalog.json"
CATALOG_DOCUMENT_VERSION = 1
MAX_SUB_PARTITION_VALUES = 4
NO_REGISTERED_VERSION = -1
S3_BUCKET_NAME_ATTRIBUTE = "bucket.name"
S3_KEY_PREFIX_DELIMITER = "/"
FORMAT_VERSION_PREFIX = "frmt-v"
DATA_VERSION_PREFIX = "data-v"
STATUS_VALID = "VALID"
STATUS_INVALID = "INVALID"
STATUS_UPLOADING = "UPLOADING"
STATUS_PENDING_VALID = "PENDING_VALID"
STATUS_ARCHIVED = "ARCHIVED"
STATUS_DELETED = "DELETED"
STATUS_EXPIRED = "EXPIRED"
KNOWN_DATA_STATUSES = (
    STATUS_VALID,
    STATUS_INVALID,
    STATUS_UPLOADING,
    STATUS_PENDING_VALID,
    STATUS_ARCHIVED,
    STATUS_DELETED,
    STATUS_EXPIRED,
)
UNREGISTERED_DATA_STATUS = STATUS_INVALID
DATA_STATUS_CHANGE_EVENT_TYPE = "BUS_OBJCT_DATA_STTS_CHG"
