"""Unit tests for the invalidate-unregistered orchestration."""

from __future__ import annotations

import pytest

from core.cancellation import CancellationToken
from core.config import LakecatConfig
from core.errors import (
    LakecatCancelledError,
    LakecatDependencyError,
    LakecatNotificationError,
    LakecatNotFoundError,
    LakecatPersistenceError,
    LakecatPreconditionError,
    LakecatStorageAccessError,
    LakecatValidationError,
)
from core.types import StatusChangeEvent, StorageDescriptor
from reconcile.notifier import SqsNotificationSink
from reconcile.response_payload import response_to_payload
from reconcile.service import InvalidateUnregisteredService
from tests.catalog_fixtures import (
    FailingSink,
    FailingStorageLister,
    FakeStorageLister,
    RecordingSink,
    register_versions,
    sample_key,
    sample_request,
    seeded_repository,
)


def _latest_flags(repository) -> dict[int, bool]:
    return {
        record.data_version: record.latest_version
        for record in repository.list_records(sample_key())
    }


def test_nothing_registered_and_version_zero_present(tmp_path) -> None:
    """Version 0 in storage with an empty catalog becomes one latest INVALID record."""
    repository = seeded_repository(tmp_path)
    lister = FakeStorageLister()
    lister.add_version(sample_key(), 0)
    service = InvalidateUnregisteredService(repository, lister, RecordingSink())

    response = service.invalidate_unregistered(sample_request())

    record = response.registered_data[0]
    assert len(response.registered_data) == 1
    assert (record.data_version, record.status, record.latest_version) == (0, "INVALID", True)


def test_registers_versions_above_existing_latest(tmp_path) -> None:
    """Versions 3 and 4 in storage above registered version 2 should be registered."""
    repository = seeded_repository(tmp_path)
    register_versions(repository, range(0, 3))
    lister = FakeStorageLister()
    for version in range(0, 5):
        lister.add_version(sample_key(), version)
    service = InvalidateUnregisteredService(repository, lister)

    response = service.invalidate_unregistered(sample_request())

    assert [record.data_version for record in response.registered_data] == [3, 4]
    assert _latest_flags(repository) == {0: False, 1: False, 2: False, 3: False, 4: True}


def test_empty_storage_leaves_catalog_unmodified(tmp_path) -> None:
    """Nothing in storage should yield an empty response and no catalog change."""
    repository = seeded_repository(tmp_path)
    register_versions(repository, range(0, 1))
    before = repository.catalog_path.read_text(encoding="utf-8")
    sink = RecordingSink()
    service = InvalidateUnregisteredService(repository, FakeStorageLister(), sink)

    response = service.invalidate_unregistered(sample_request())

    assert response.registered_data == () and sink.events == []
    assert repository.catalog_path.read_text(encoding="utf-8") == before


def test_second_run_is_a_no_op(tmp_path) -> None:
    """Re-running without new physical data should register nothing."""
    repository = seeded_repository(tmp_path)
    lister = FakeStorageLister()
    lister.add_version(sample_key(), 0)
    lister.add_version(sample_key(), 1)
    service = InvalidateUnregisteredService(repository, lister)
    service.invalidate_unregistered(sample_request())

    second = service.invalidate_unregistered(sample_request())

    assert second.registered_data == ()
    assert _latest_flags(repository) == {0: False, 1: True}


def test_scan_stops_at_gap(tmp_path) -> None:
    """Versions +1 and +3 present with +2 missing should register only +1."""
    repository = seeded_repository(tmp_path)
    register_versions(repository, range(0, 1))
    lister = FakeStorageLister()
    lister.add_version(sample_key(), 1)
    lister.add_version(sample_key(), 3)
    service = InvalidateUnregisteredService(repository, lister)

    response = service.invalidate_unregistered(sample_request())

    assert [record.data_version for record in response.registered_data] == [1]


def test_request_is_trimmed_before_lookup(tmp_path) -> None:
    """Padded request fields should resolve and be echoed trimmed."""
    repository = seeded_repository(tmp_path)
    lister = FakeStorageLister()
    lister.add_version(sample_key("A"), 0)
    service = InvalidateUnregisteredService(repository, lister)
    request = sample_request(
        namespace=" UT_NS ",
        storage_name=" S3_MANAGED ",
        sub_partition_values=(" A ",),
    )

    response = service.invalidate_unregistered(request)

    payload = response_to_payload(response)
    assert payload["namespace"] == "UT_NS" and payload["subPartitionValues"] == ["A"]
    assert payload["registeredBusinessObjectDataList"][0]["subPartitionValues"] == ["A"]


def test_notifications_follow_registration(tmp_path) -> None:
    """One notification per registered record should be sent in version order."""
    repository = seeded_repository(tmp_path)
    lister = FakeStorageLister()
    lister.add_version(sample_key(), 0)
    lister.add_version(sample_key(), 1)
    sink = RecordingSink()
    service = InvalidateUnregisteredService(repository, lister, sink)

    service.invalidate_unregistered(sample_request())

    assert [event.data_key.data_version for event in sink.events] == [0, 1]


def test_notification_failure_keeps_registration(tmp_path) -> None:
    """A failing sink must not undo committed registrations."""
    repository = seeded_repository(tmp_path)
    lister = FakeStorageLister()
    lister.add_version(sample_key(), 0)
    service = InvalidateUnregisteredService(repository, lister, FailingSink())

    response = service.invalidate_unregistered(sample_request())

    assert len(response.registered_data) == 1
    assert _latest_flags(repository) == {0: True}


def test_invalid_request_fails_before_any_probe(tmp_path) -> None:
    """Validation errors should occur before touching storage."""
    lister = FakeStorageLister()
    service = InvalidateUnregisteredService(seeded_repository(tmp_path), lister)

    with pytest.raises(LakecatValidationError):
        service.invalidate_unregistered(sample_request(partition_value=""))

    assert lister.probed_prefixes == []


def test_unknown_format_fails_with_not_found(tmp_path) -> None:
    """A request for an unregistered format should fail with not-found."""
    service = InvalidateUnregisteredService(seeded_repository(tmp_path), FakeStorageLister())

    with pytest.raises(LakecatNotFoundError):
        service.invalidate_unregistered(sample_request(format_usage="OTHER"))


def test_non_s3_storage_fails_before_probing(tmp_path) -> None:
    """A non-S3 storage should fail with a precondition error and no probe."""
    lister = FakeStorageLister()
    service = InvalidateUnregisteredService(seeded_repository(tmp_path), lister)

    with pytest.raises(LakecatPreconditionError):
        service.invalidate_unregistered(sample_request(storage_name="LOCAL_DISK"))

    assert lister.probed_prefixes == []


def test_storage_failure_registers_nothing(tmp_path) -> None:
    """Listing failures should propagate and leave the catalog unchanged."""
    repository = seeded_repository(tmp_path)
    service = InvalidateUnregisteredService(repository, FailingStorageLister())

    with pytest.raises(LakecatStorageAccessError):
        service.invalidate_unregistered(sample_request())

    assert repository.list_records(sample_key()) == []


def test_cancelled_probe_registers_nothing(tmp_path) -> None:
    """Cancellation during probing should leave the catalog unchanged."""
    repository = seeded_repository(tmp_path)
    lister = FakeStorageLister()
    lister.add_version(sample_key(), 0)
    token = CancellationToken()
    token.cancel()
    service = InvalidateUnregisteredService(repository, lister)

    with pytest.raises(LakecatCancelledError):
        service.invalidate_unregistered(sample_request(), token)

    assert repository.list_records(sample_key()) == []


class _FirstEventFailingSink:
    def __init__(self) -> None:
        self.delivered: list[StatusChangeEvent] = []

    def notify(self, event: StatusChangeEvent) -> None:
        if event.data_key.data_version == 0:
            raise LakecatNotificationError("queue unavailable")
        self.delivered.append(event)


class _RacingStorageLister(FakeStorageLister):
    """Lister that lets another writer register version 0 during the scan."""

    def __init__(self, repository) -> None:
        super().__init__()
        self._repository = repository

    def list_object_keys(self, storage: StorageDescriptor, prefix: str) -> list[str]:
        if not self.probed_prefixes:
            register_versions(self._repository, range(0, 1))
        return super().list_object_keys(storage, prefix)


def test_sqs_setup_failure_keeps_registration(tmp_path, monkeypatch) -> None:
    """A sink that cannot build its AWS client must not fail a committed request."""

    def _failing_session(config):
        raise LakecatDependencyError("S3 support requires boto3, but it is not installed.")

    monkeypatch.setattr("reconcile.notifier.create_boto3_session", _failing_session)
    repository = seeded_repository(tmp_path)
    lister = FakeStorageLister()
    lister.add_version(sample_key(), 0)
    sink = SqsNotificationSink("https://sqs.local/q", LakecatConfig.from_env())
    service = InvalidateUnregisteredService(repository, lister, sink)

    response = service.invalidate_unregistered(sample_request())

    assert [record.data_version for record in response.registered_data] == [0]
    assert _latest_flags(repository) == {0: True}


def test_failed_event_does_not_block_later_events(tmp_path) -> None:
    """Each registered version should get its own notification attempt."""
    repository = seeded_repository(tmp_path)
    lister = FakeStorageLister()
    for version in range(0, 3):
        lister.add_version(sample_key(), version)
    sink = _FirstEventFailingSink()
    service = InvalidateUnregisteredService(repository, lister, sink)

    response = service.invalidate_unregistered(sample_request())

    assert len(response.registered_data) == 3
    assert [event.data_key.data_version for event in sink.delivered] == [1, 2]


def test_concurrent_registration_during_scan_commits_nothing(tmp_path) -> None:
    """A latest version registered by another writer mid-scan should fail the request."""
    repository = seeded_repository(tmp_path)
    lister = _RacingStorageLister(repository)
    lister.add_version(sample_key(), 0)
    service = InvalidateUnregisteredService(repository, lister)

    with pytest.raises(LakecatPersistenceError, match="changed since the storage scan"):
        service.invalidate_unregistered(sample_request())

    records = repository.list_records(sample_key())
    assert [(record.data_version, record.status) for record in records] == [(0, "VALID")]
