"""Orchestration of unregistered data invalidation.

This module coordinates request validation, catalog lookups, storage
probing, INVALID registration, and status notifications.
"""

from __future__ import annotations

from typing import Protocol

from catalog.lookup import CatalogLookup, CatalogReader, baseline_version
from core.cancellation import CancellationToken
from core.errors import LakecatError
from core.logging_config import get_logger
from core.types import CatalogRecord, ReconcileRequest, ReconcileResponse
from reconcile.notifier import NotificationSink, NullNotificationSink, notify_registered_data
from reconcile.registrar import CatalogWriter, register_invalid_data
from reconcile.request_validation import normalize_request, validate_request
from reconcile.scanner import find_unregistered_keys
from storage.s3_lister import StorageLister

_LOGGER = get_logger(__name__)


class CatalogRepository(CatalogReader, CatalogWriter, Protocol):
    """Catalog persistence used by reconciliation."""


class InvalidateUnregisteredService:
    """Registers data found in S3 but missing from the catalog as INVALID."""

    def __init__(
        self,
        repository: CatalogRepository,
        lister: StorageLister,
        sink: NotificationSink | None = None,
    ) -> None:
        """Create the service.

        Args:
            repository: Catalog persistence.
            lister: Storage listing collaborator.
            sink: Optional notification sink; events are dropped when omitted.
        """
        self._repository = repository
        self._lookup = CatalogLookup(repository)
        self._lister = lister
        self._sink = sink or NullNotificationSink()

    def invalidate_unregistered(
        self,
        request: ReconcileRequest,
        cancellation: CancellationToken | None = None,
    ) -> ReconcileResponse:
        """Reconcile one data identity against its storage.

        Args:
            request: Raw reconciliation request.
            cancellation: Optional token honored while probing storage.

        Returns:
            Normalized request echo and the records registered as INVALID.

        Raises:
            LakecatValidationError: If the request is malformed.
            LakecatNotFoundError: If the format or storage does not exist.
            LakecatPreconditionError: If the storage is not an S3 storage.
            LakecatStorageAccessError: If listing storage fails.
            LakecatCancelledError: If probing is cancelled.
            LakecatPersistenceError: If registration cannot be committed.
        """
        validate_request(request)
        normalized = normalize_request(request)
        request_key = normalized.data_key()
        format_descriptor = self._lookup.resolve_format(request_key.format_key)
        storage = self._lookup.resolve_storage(str(normalized.storage_name))
        previous_latest = self._lookup.latest_record(request_key)
        baseline = baseline_version(previous_latest)
        unregistered_keys = find_unregistered_keys(
            request_key,
            format_descriptor,
            storage,
            baseline,
            self._lister,
            cancellation,
        )
        registered = register_invalid_data(
            self._repository,
            previous_latest,
            format_descriptor,
            unregistered_keys,
            storage,
        )
        notified_count = self._notify(registered)
        _LOGGER.info(
            "reconciliation_completed",
            namespace=normalized.namespace,
            definition_name=normalized.definition_name,
            partition_value=normalized.partition_value,
            storage_name=storage.name,
            baseline=baseline,
            registered_count=len(registered),
            notified_count=notified_count,
        )
        return ReconcileResponse(request=normalized, registered_data=registered)

    def _notify(self, registered: tuple[CatalogRecord, ...]) -> int:
        """Notify about committed records without failing the request."""
        try:
            return notify_registered_data(self._sink, registered)
        except LakecatError as error:
            _LOGGER.error(
                "notification_failed",
                error=str(error),
                registered_count=len(registered),
            )
            return 0
