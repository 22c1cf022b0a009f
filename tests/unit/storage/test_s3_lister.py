"""Unit tests for the boto3-backed storage lister."""

from __future__ import annotations

import pytest

from core.config import LakecatConfig
from core.errors import LakecatPreconditionError, LakecatStorageAccessError
from core.types import StorageDescriptor, StoragePlatform
from storage.s3_lister import S3StorageLister
from tests.catalog_fixtures import S3_STORAGE


class _FakePaginator:
    def __init__(self, pages: list[dict[str, object]], error: Exception | None) -> None:
        self._pages = pages
        self._error = error
        self.calls: list[dict[str, str]] = []

    def paginate(self, **kwargs: str) -> list[dict[str, object]]:
        self.calls.append(kwargs)
        if self._error is not None:
            raise self._error
        return self._pages


class _FakeS3Client:
    def __init__(self, pages: list[dict[str, object]], error: Exception | None = None) -> None:
        self.paginator = _FakePaginator(pages, error)

    def get_paginator(self, operation_name: str) -> _FakePaginator:
        assert operation_name == "list_objects_v2"
        return self.paginator


def test_list_object_keys_collects_all_pages() -> None:
    """Lister should merge keys from every page in sorted order."""
    client = _FakeS3Client(
        [
            {"Contents": [{"Key": "p/data-v0/b.txt"}]},
            {"Contents": [{"Key": "p/data-v0/a.txt"}]},
        ]
    )
    lister = S3StorageLister(LakecatConfig.from_env(), s3_client=client)

    keys = lister.list_object_keys(S3_STORAGE, "p/data-v0/")

    assert keys == ["p/data-v0/a.txt", "p/data-v0/b.txt"]
    assert client.paginator.calls == [{"Bucket": "ut-bucket", "Prefix": "p/data-v0/"}]


def test_list_object_keys_returns_empty_for_missing_prefix() -> None:
    """Pages without Contents mean nothing is stored under the prefix."""
    lister = S3StorageLister(LakecatConfig.from_env(), s3_client=_FakeS3Client([{}]))

    assert lister.list_object_keys(S3_STORAGE, "p/data-v9/") == []


def test_list_object_keys_wraps_client_errors() -> None:
    """Transport failures should surface as storage access errors."""
    client = _FakeS3Client([], error=RuntimeError("AccessDenied"))
    lister = S3StorageLister(LakecatConfig.from_env(), s3_client=client)

    with pytest.raises(LakecatStorageAccessError, match="AccessDenied"):
        lister.list_object_keys(S3_STORAGE, "p/")


def test_list_object_keys_requires_bucket() -> None:
    """Storages without a bucket attribute cannot be listed."""
    lister = S3StorageLister(LakecatConfig.from_env(), s3_client=_FakeS3Client([]))

    with pytest.raises(LakecatPreconditionError):
        lister.list_object_keys(
            StorageDescriptor(name="S3_EMPTY", platform=StoragePlatform.S3), "p/"
        )
