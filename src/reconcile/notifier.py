"""Status change notifications for newly registered data.

Sinks receive one event per registered record. Delivery is
fire-and-forget from the reconciliation's point of view: a sink raises
:class:`LakecatNotificationError` for its own event, the failure is logged,
and the remaining events are still sent. Committed registrations are never
rolled back.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Protocol

from core.config import LakecatConfig
from core.constants import DATA_STATUS_CHANGE_EVENT_TYPE, UNREGISTERED_DATA_STATUS
from core.errors import LakecatNotificationError
from core.logging_config import get_logger
from core.types import CatalogRecord, StatusChangeEvent
from storage.s3_lister import create_boto3_session

_LOGGER = get_logger(__name__)


class NotificationSink(Protocol):
    """Receives business object data status change events."""

    def notify(self, event: StatusChangeEvent) -> None: ...


class NullNotificationSink:
    """Sink that drops every event."""

    def notify(self, event: StatusChangeEvent) -> None:
        _LOGGER.debug("notification_dropped", data_version=event.data_key.data_version)


class JsonlNotificationSink:
    """Appends events as JSON lines to a local file."""

    def __init__(self, log_path: Path) -> None:
        self._log_path = log_path

    def notify(self, event: StatusChangeEvent) -> None:
        try:
            self._log_path.parent.mkdir(parents=True, exist_ok=True)
            with self._log_path.open("a", encoding="utf-8") as handle:
                handle.write(json.dumps(event_to_payload(event), sort_keys=True) + "\n")
        except OSError as error:
            raise LakecatNotificationError(
                f"Failed to append notification to {self._log_path}: {error}. "
                "Check the LAKECAT_NOTIFICATION_LOG path."
            ) from error


class SqsNotificationSink:
    """Publishes events as JSON messages to an SQS queue."""

    def __init__(
        self, queue_url: str, config: LakecatConfig, sqs_client: Any | None = None
    ) -> None:
        self._queue_url = queue_url
        self._config = config
        self._sqs_client = sqs_client

    def notify(self, event: StatusChangeEvent) -> None:
        try:
            self._client().send_message(
                QueueUrl=self._queue_url,
                MessageBody=json.dumps(event_to_payload(event), sort_keys=True),
            )
        except Exception as error:
            raise LakecatNotificationError(
                f"Failed to publish notification to {self._queue_url}: {error}. "
                "Check the queue URL and AWS credentials."
            ) from error

    def _client(self) -> Any:
        if self._sqs_client is None:
            self._sqs_client = create_boto3_session(self._config).client("sqs")
        return self._sqs_client


def build_notification_sink(config: LakecatConfig) -> NotificationSink:
    """Select the sink configured in the environment.

    SQS wins over a local log file; with neither configured events are dropped.
    """
    if config.notification_queue_url:
        return SqsNotificationSink(config.notification_queue_url, config)
    if config.notification_log_path:
        return JsonlNotificationSink(config.notification_log_path)
    return NullNotificationSink()


def notify_registered_data(
    sink: NotificationSink,
    records: Iterable[CatalogRecord],
) -> int:
    """Send one INVALID status event per newly registered record.

    A sink failure only affects its own event: it is logged as
    ``notification_failed`` and the loop moves on to the next record.

    Args:
        sink: Notification sink.
        records: Newly registered records in version order.

    Returns:
        Number of events delivered.
    """
    sent = 0
    for record in records:
        event = StatusChangeEvent(
            data_key=record.to_data_key(),
            new_status=UNREGISTERED_DATA_STATUS,
            old_status=None,
            event_time=datetime.now(timezone.utc).isoformat(),
        )
        try:
            sink.notify(event)
        except LakecatNotificationError as error:
            _LOGGER.error(
                "notification_failed",
                event_type=DATA_STATUS_CHANGE_EVENT_TYPE,
                data_version=record.data_version,
                error=str(error),
            )
            continue
        sent += 1
        _LOGGER.info(
            "notification_sent",
            event_type=DATA_STATUS_CHANGE_EVENT_TYPE,
            data_version=record.data_version,
            new_status=event.new_status,
        )
    return sent


def event_to_payload(event: StatusChangeEvent) -> dict[str, object]:
    """Serialize an event into the JSON message published to consumers."""
    data_key = event.data_key
    return {
        "eventType": DATA_STATUS_CHANGE_EVENT_TYPE,
        "eventTime": event.event_time,
        "businessObjectDataKey": {
            "namespace": data_key.namespace,
            "businessObjectDefinitionName": data_key.definition_name,
            "businessObjectFormatUsage": data_key.format_usage,
            "businessObjectFormatFileType": data_key.format_file_type,
            "businessObjectFormatVersion": data_key.format_version,
            "partitionValue": data_key.partition_value,
            "subPartitionValues": list(data_key.sub_partition_values),
            "businessObjectDataVersion": data_key.data_version,
        },
        "newBusinessObjectDataStatus": event.new_status,
        "oldBusinessObjectDataStatus": event.old_status,
    }
