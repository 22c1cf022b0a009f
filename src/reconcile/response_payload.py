"""JSON rendering of reconciliation responses.

Keys follow the catalog API naming so callers of the CLI can feed the
output to tools that already consume the catalog's business object data.
"""

from __future__ import annotations

from core.types import CatalogRecord, ReconcileResponse


def response_to_payload(response: ReconcileResponse) -> dict[str, object]:
    """Render a reconciliation response as a JSON-safe payload."""
    request = response.request
    return {
        "namespace": request.namespace,
        "businessObjectDefinitionName": request.definition_name,
        "businessObjectFormatUsage": request.format_usage,
        "businessObjectFormatFileType": request.format_file_type,
        "businessObjectFormatVersion": request.format_version,
        "partitionValue": request.partition_value,
        "subPartitionValues": list(request.sub_partition_values or ()),
        "storageName": request.storage_name,
        "registeredBusinessObjectDataList": [
            record_to_api_payload(record) for record in response.registered_data
        ],
    }


def record_to_api_payload(record: CatalogRecord) -> dict[str, object]:
    """Render one registered record as a business object data payload."""
    data_key = record.to_data_key()
    return {
        "id": record.data_id,
        "namespace": data_key.namespace,
        "businessObjectDefinitionName": data_key.definition_name,
        "businessObjectFormatUsage": data_key.format_usage,
        "businessObjectFormatFileType": data_key.format_file_type,
        "businessObjectFormatVersion": data_key.format_version,
        "partitionValue": data_key.partition_value,
        "subPartitionValues": list(data_key.sub_partition_values),
        "version": record.data_version,
        "latestVersion": record.latest_version,
        "status": record.status,
        "storageUnits": [
            {"storageName": unit.storage_name, "storageDirectoryPath": unit.directory_path}
            for unit in record.storage_units
        ],
    }
