"""Runtime configuration model for Lakecat.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import DEFAULT_DATA_ROOT
from core.errors import LakecatConfigError


@dataclass(frozen=True)
class LakecatConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Local root directory holding the catalog document.
        s3_region: Optional default AWS region for S3 and SQS clients.
        s3_profile: Optional AWS profile for boto3 session initialization.
        s3_endpoint_url: Optional endpoint override for S3-compatible stores.
        probe_timeout_seconds: Optional deadline for the storage probe loop.
        notification_queue_url: Optional SQS queue receiving status events.
        notification_log_path: Optional JSONL file receiving status events.
    """

    data_root: Path
    s3_region: str | None
    s3_profile: str | None
    s3_endpoint_url: str | None = None
    probe_timeout_seconds: float | None = None
    notification_queue_url: str | None = None
    notification_log_path: Path | None = None

    @classmethod
    def from_env(cls) -> "LakecatConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            LakecatConfigError: If environment values are invalid.
        """
        data_root_value = os.getenv("LAKECAT_DATA_ROOT", str(DEFAULT_DATA_ROOT))
        timeout_value = os.getenv("LAKECAT_PROBE_TIMEOUT_SECONDS")
        notification_log_value = os.getenv("LAKECAT_NOTIFICATION_LOG")
        return cls(
            data_root=Path(data_root_value).expanduser().resolve(),
            s3_region=_optional_env("LAKECAT_S3_REGION"),
            s3_profile=_optional_env("LAKECAT_S3_PROFILE"),
            s3_endpoint_url=_optional_env("LAKECAT_S3_ENDPOINT_URL"),
            probe_timeout_seconds=parse_probe_timeout(timeout_value),
            notification_queue_url=_optional_env("LAKECAT_NOTIFICATION_QUEUE_URL"),
            notification_log_path=Path(notification_log_value).expanduser().resolve()
            if notification_log_value
            else None,
        )


def parse_probe_timeout(raw_value: str | None) -> float | None:
    """Parse the probe timeout environment value.

    Args:
        raw_value: Raw string from environment or CLI, or None.

    Returns:
        Positive timeout in seconds, or None when unset.

    Raises:
        LakecatConfigError: If value is not a positive number.
    """
    if raw_value is None or not raw_value.strip():
        return None
    try:
        timeout = float(raw_value)
    except ValueError as error:
        raise LakecatConfigError(
            "Invalid LAKECAT_PROBE_TIMEOUT_SECONDS value: "
            f"expected number, got '{raw_value}'. "
            "Set LAKECAT_PROBE_TIMEOUT_SECONDS to a positive number of seconds."
        ) from error
    if timeout <= 0:
        raise LakecatConfigError(
            f"Invalid LAKECAT_PROBE_TIMEOUT_SECONDS value: {raw_value} must be greater than 0. "
            "Unset the variable to disable the probe deadline."
        )
    return timeout


def _optional_env(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()
