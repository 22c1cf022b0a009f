"""Version probing for data present in storage but absent from the catalog.

Producers write data versions in increasing, contiguous order. The scan
relies on that: it probes baseline+1, baseline+2, ... and stops at the
first version with no objects. A sparse producer that skips a version will
have everything after the gap left unregistered.
"""

from __future__ import annotations

from catalog.storage_keys import build_s3_key_prefix
from core.cancellation import CancellationToken
from core.constants import S3_KEY_PREFIX_DELIMITER
from core.logging_config import get_logger
from core.types import DataKey, FormatDescriptor, StorageDescriptor
from storage.s3_lister import StorageLister

_LOGGER = get_logger(__name__)


def find_unregistered_keys(
    request_key: DataKey,
    format_descriptor: FormatDescriptor,
    storage: StorageDescriptor,
    baseline: int,
    lister: StorageLister,
    cancellation: CancellationToken | None = None,
) -> tuple[DataKey, ...]:
    """Find every contiguous data version above ``baseline`` present in storage.

    Args:
        request_key: Version-less key of the identity to scan.
        format_descriptor: Resolved format used to build storage prefixes.
        storage: Storage to probe.
        baseline: Latest registered data version, or -1 when none.
        lister: Storage listing collaborator.
        cancellation: Optional token checked before every probe.

    Returns:
        Versioned keys for baseline+1 .. baseline+k in ascending order.

    Raises:
        LakecatCancelledError: If the token is cancelled mid-scan.
        LakecatStorageAccessError: If a listing fails; the scan aborts.
    """
    unregistered: list[DataKey] = []
    offset = 1
    while True:
        if cancellation is not None:
            cancellation.raise_if_cancelled("Storage probe")
        candidate = request_key.with_version(baseline + offset)
        prefix = build_s3_key_prefix(format_descriptor, candidate)
        object_keys = lister.list_object_keys(storage, prefix + S3_KEY_PREFIX_DELIMITER)
        _LOGGER.debug(
            "storage_probe",
            storage_name=storage.name,
            prefix=prefix,
            data_version=candidate.data_version,
            object_count=len(object_keys),
        )
        if not object_keys:
            break
        unregistered.append(candidate)
        offset += 1
    if unregistered:
        _LOGGER.info(
            "unregistered_versions_found",
            storage_name=storage.name,
            baseline=baseline,
            first_version=unregistered[0].data_version,
            last_version=unregistered[-1].data_version,
        )
    return tuple(unregistered)
