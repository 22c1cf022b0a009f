"""S3 object listing for storage probes.

This module encapsulates boto3 client creation and prefix listing.
Listing never treats "nothing there" as an error; only transport and
permission failures raise.
"""

from __future__ import annotations

from typing import Any, Protocol

from core.config import LakecatConfig
from core.errors import (
    LakecatDependencyError,
    LakecatPreconditionError,
    LakecatStorageAccessError,
)
from core.logging_config import get_logger
from core.types import StorageDescriptor

_LOGGER = get_logger(__name__)


class StorageLister(Protocol):
    """Lists object keys stored under a prefix."""

    def list_object_keys(self, storage: StorageDescriptor, prefix: str) -> list[str]: ...


class S3StorageLister:
    """Boto3-backed storage lister."""

    def __init__(self, config: LakecatConfig, s3_client: Any | None = None) -> None:
        """Create a lister.

        Args:
            config: Runtime config with optional session settings.
            s3_client: Optional prebuilt boto3 S3 client.
        """
        self._config = config
        self._s3_client = s3_client

    def list_object_keys(self, storage: StorageDescriptor, prefix: str) -> list[str]:
        """List object keys under a prefix of the storage's bucket.

        Args:
            storage: S3 storage to list.
            prefix: Key prefix, usually ending with a delimiter.

        Returns:
            Sorted object keys; empty when nothing matches.

        Raises:
            LakecatPreconditionError: If the storage has no bucket.
            LakecatStorageAccessError: If the listing request fails.
        """
        bucket = storage.bucket_name
        if not bucket:
            raise LakecatPreconditionError(
                f"Storage '{storage.name}' has no bucket configured. "
                "Set the 'bucket.name' storage attribute and retry."
            )
        client = self._client()
        keys: list[str] = []
        try:
            paginator = client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=bucket, Prefix=prefix):
                for obj in page.get("Contents", []):
                    keys.append(obj["Key"])
        except Exception as error:
            raise LakecatStorageAccessError(
                f"Failed to list s3://{bucket}/{prefix} for storage '{storage.name}': {error}. "
                "Check AWS credentials and bucket permissions, then retry."
            ) from error
        _LOGGER.debug("s3_prefix_listed", bucket=bucket, prefix=prefix, key_count=len(keys))
        return sorted(keys)

    def _client(self) -> Any:
        if self._s3_client is None:
            self._s3_client = create_s3_client(self._config)
        return self._s3_client


def create_s3_client(config: LakecatConfig) -> Any:
    """Create boto3 S3 client.

    Args:
        config: Runtime config with optional session settings.

    Returns:
        Boto3 S3 client.

    Raises:
        LakecatDependencyError: If boto3 is missing.
    """
    session = create_boto3_session(config)
    client_kwargs: dict[str, str] = {}
    if config.s3_endpoint_url:
        client_kwargs["endpoint_url"] = config.s3_endpoint_url
    return session.client("s3", **client_kwargs)


def create_boto3_session(config: LakecatConfig) -> Any:
    """Create a boto3 session from profile and region settings."""
    try:
        import boto3
    except ImportError as error:
        raise LakecatDependencyError(
            "S3 support requires boto3, but it is not installed. "
            "Install boto3 to reconcile s3 storages."
        ) from error
    session_kwargs: dict[str, str] = {}
    if config.s3_profile:
        session_kwargs["profile_name"] = config.s3_profile
    if config.s3_region:
        session_kwargs["region_name"] = config.s3_region
    return boto3.session.Session(**session_kwargs)
