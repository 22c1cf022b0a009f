"""Python SDK for catalog reconciliation.

This module wires configuration into the catalog repository, S3 lister,
and notification sink, and exposes the operations used by the CLI.
"""

from __future__ import annotations

from catalog.catalog_seed import CatalogSeed, load_catalog_seed
from catalog.repository import JsonCatalogRepository
from core.cancellation import CancellationToken
from core.config import LakecatConfig
from core.types import CatalogRecord, DataKey, ReconcileRequest, ReconcileResponse
from reconcile.notifier import NotificationSink, build_notification_sink
from reconcile.service import InvalidateUnregisteredService
from storage.s3_lister import S3StorageLister, StorageLister


class LakecatClient:
    """Primary SDK entry point for reconciliation workflows."""

    def __init__(
        self,
        config: LakecatConfig | None = None,
        lister: StorageLister | None = None,
        sink: NotificationSink | None = None,
    ) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration.
            lister: Optional storage lister; boto3-backed when omitted.
            sink: Optional notification sink; chosen from config when omitted.
        """
        self._config = config or LakecatConfig.from_env()
        self._repository = JsonCatalogRepository(self._config.data_root)
        self._service = InvalidateUnregisteredService(
            self._repository,
            lister or S3StorageLister(self._config),
            sink or build_notification_sink(self._config),
        )

    @property
    def repository(self) -> JsonCatalogRepository:
        return self._repository

    def invalidate_unregistered(
        self,
        request: ReconcileRequest,
        timeout_seconds: float | None = None,
    ) -> ReconcileResponse:
        """Register data present in S3 but missing from the catalog as INVALID.

        Args:
            request: Reconciliation request.
            timeout_seconds: Optional probe deadline; falls back to config.

        Returns:
            Reconciliation response.
        """
        timeout = timeout_seconds or self._config.probe_timeout_seconds
        cancellation = CancellationToken.with_timeout(timeout)
        return self._service.invalidate_unregistered(request, cancellation)

    def list_versions(self, data_key: DataKey) -> list[CatalogRecord]:
        """List registered versions of a data identity, oldest first."""
        return self._repository.list_records(data_key)

    def load_catalog_seed(self, seed_path: str) -> CatalogSeed:
        """Import formats and storages from a YAML seed file."""
        seed = load_catalog_seed(seed_path)
        self._repository.import_seed(seed.formats, seed.storages)
        return seed
