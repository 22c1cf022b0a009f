"""Public SDK surface for Lakecat.

This module provides a stable import path for SDK users.
It re-exports the primary client, service, and typed models.
"""

from __future__ import annotations

from catalog.repository import JsonCatalogRepository
from core.cancellation import CancellationToken
from core.config import LakecatConfig
from core.types import (
    CatalogRecord,
    DataKey,
    FormatDescriptor,
    FormatKey,
    ReconcileRequest,
    ReconcileResponse,
    StatusChangeEvent,
    StorageDescriptor,
    StoragePlatform,
    StorageUnit,
)
from reconcile.client import LakecatClient
from reconcile.response_payload import response_to_payload
from reconcile.service import InvalidateUnregisteredService
from storage.s3_lister import S3StorageLister

__all__ = [
    "CancellationToken",
    "CatalogRecord",
    "DataKey",
    "FormatDescriptor",
    "FormatKey",
    "InvalidateUnregisteredService",
    "JsonCatalogRepository",
    "LakecatClient",
    "LakecatConfig",
    "ReconcileRequest",
    "ReconcileResponse",
    "S3StorageLister",
    "StatusChangeEvent",
    "StorageDescriptor",
    "StoragePlatform",
    "StorageUnit",
    "response_to_payload",
]
