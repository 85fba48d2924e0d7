"""
Status records for processed submissions, stored in DynamoDB.
"""

import logging
from typing import Any, Dict

import boto3

try:
    from errors import RecordPersistError
    from models import StatusRecord
except ImportError:
    # Adjust path when imported as a package
    from submission_processor.errors import RecordPersistError
    from submission_processor.models import StatusRecord

logger = logging.getLogger(__name__)


class StatusRecorder:
    """Writes one status item per invocation, keyed by user and assignment.

    Two item layouts are supported. "low_level" uses typed attribute values
    through the DynamoDB client with an epoch-seconds timestamp. "simple"
    uses plain values through the table resource with an ISO-8601 timestamp.
    """

    def __init__(
        self,
        table_name: str,
        record_format: str = "low_level",
        dynamodb_client=None,
        dynamodb_resource=None,
        region_name: str = None
    ):
        if record_format not in ("low_level", "simple"):
            raise ValueError(f"Unsupported record format: {record_format}")

        self.table_name = table_name
        self.record_format = record_format
        self.region_name = region_name
        self._client = dynamodb_client
        self._resource = dynamodb_resource

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client("dynamodb", region_name=self.region_name)
        return self._client

    @property
    def table(self):
        if self._resource is None:
            self._resource = boto3.resource("dynamodb", region_name=self.region_name)
        return self._resource.Table(self.table_name)

    @staticmethod
    def low_level_item(record: StatusRecord) -> Dict[str, Dict[str, str]]:
        item = {
            "userId": {"S": record.user_id},
            "assignmentId": {"S": record.assignment_id},
            "status": {"S": record.status.value},
            "timestamp": {"N": str(record.epoch_seconds)},
        }
        if record.locator is not None:
            item["objectPath"] = {"S": record.locator}
        if record.error_message is not None:
            item["errorMessage"] = {"S": record.error_message}
        return item

    @staticmethod
    def simple_item(record: StatusRecord) -> Dict[str, Any]:
        return {
            "userId": record.user_id,
            "assignmentId": record.assignment_id,
            "objectPath": record.locator,
            "status": record.status.value,
            "errorMessage": record.error_message,
            "timestamp": record.timestamp.isoformat(),
        }

    def put(self, record: StatusRecord) -> None:
        """Write a status record, replacing any item with the same key.

        Args:
            record: Outcome of the invocation
        """
        try:
            if self.record_format == "low_level":
                self.client.put_item(TableName=self.table_name, Item=self.low_level_item(record))
            else:
                self.table.put_item(Item=self.simple_item(record))
        except Exception as e:
            raise RecordPersistError(
                f"Failed to write status record to {self.table_name}: {e}"
            ) from e

        logger.info(
            "Recorded %s for %s/%s in %s",
            record.status.value, record.user_id, record.assignment_id, self.table_name
        )
