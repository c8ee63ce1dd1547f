import json
import logging
from typing import Any, Mapping

import boto3
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def get_sqs_client():
    """Create SQS client."""
    return boto3.client("sqs")


def send_task_message(
    queue_url: str,
    message: Mapping[str, Any],
    label: str,
    client=None,
) -> str:
    """Publish a JSON task message, labelled for filtering in the console."""
    sqs = client or get_sqs_client()
    response = sqs.send_message(
        QueueUrl=queue_url,
        MessageBody=json.dumps(message, ensure_ascii=False),
        MessageAttributes={
            "Label": {"DataType": "String", "StringValue": label},
            "ContentType": {"DataType": "String", "StringValue": "application/json"},
        },
    )
    return response["MessageId"]


def receive_task_messages(
    queue_url: str,
    visibility_timeout: int,
    wait_time_seconds: int,
    max_messages: int = 1,
    client=None,
) -> list[dict]:
    """Long-poll the queue and return raw SQS message dicts (may be empty)."""
    sqs = client or get_sqs_client()
    response = sqs.receive_message(
        QueueUrl=queue_url,
        MaxNumberOfMessages=max_messages,
        VisibilityTimeout=visibility_timeout,
        WaitTimeSeconds=wait_time_seconds,
        MessageAttributeNames=["All"],
    )
    return response.get("Messages", [])


def delete_message(queue_url: str, receipt_handle: str, client=None) -> None:
    """Acknowledge a message so it is not redelivered."""
    sqs = client or get_sqs_client()
    sqs.delete_message(QueueUrl=queue_url, ReceiptHandle=receipt_handle)


class SqsReceiver:
    """Lease handle for one received message.

    Renewing extends the message's visibility timeout; closing releases the
    receiver's own client connection.
    """

    def __init__(self, queue_url: str, receipt_handle: str, lease_seconds: int, client=None):
        self.queue_url = queue_url
        self.receipt_handle = receipt_handle
        self.lease_seconds = lease_seconds
        self._client = client or get_sqs_client()

    def renew_lease(self) -> None:
        self._client.change_message_visibility(
            QueueUrl=self.queue_url,
            ReceiptHandle=self.receipt_handle,
            VisibilityTimeout=self.lease_seconds,
        )
        logger.debug("Renewed lease on %s for %ds", self.queue_url, self.lease_seconds)

    def close(self) -> None:
        self._client.close()
