"""Pull crawl tasks from SQS and hand each one to a CrawlWorker."""

import logging
import time
from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError

from common.config import Config
from common.sqs import SqsReceiver, delete_message, get_sqs_client, receive_task_messages
from crawl_country.crawl_country import CrawlWorker

logger = logging.getLogger(__name__)


def handle_queue_message(
    worker: CrawlWorker,
    message: dict,
    queue_url: str,
    config: Config,
    client=None,
) -> bool:
    """
    Process one received message.

    The message is deleted once the crawl finishes or when it is invalid.
    If the crawl raises, or the delete fails because the lease was lost, it
    stays on the queue and is redelivered after its lease expires.

    Returns:
        True if the message was deleted.
    """
    sqs = client or get_sqs_client()
    receipt_handle = message["ReceiptHandle"]

    try:
        receiver = SqsReceiver(queue_url, receipt_handle, config.queue.lease_seconds)
        worker.run_message(message.get("Body"), receiver)
    except Exception as e:
        logger.error("Crawl failed for message %s, leaving it for redelivery: %s", message.get("MessageId"), e)
        return False

    try:
        delete_message(queue_url, receipt_handle, client=sqs)
    except (BotoCoreError, ClientError) as e:
        logger.warning("Could not delete message %s, it will be redelivered: %s", message.get("MessageId"), e)
        return False
    return True


def consume_messages(
    worker: CrawlWorker,
    queue_url: str,
    config: Config,
    once: bool = False,
    max_messages: Optional[int] = None,
    client=None,
) -> int:
    """
    Poll the queue and process messages one at a time.

    A failed poll is logged and retried after queue.wait_time_seconds.

    Returns:
        Number of messages handled (deleted or left for redelivery).
    """
    sqs = client or get_sqs_client()
    handled = 0

    while max_messages is None or handled < max_messages:
        try:
            messages = receive_task_messages(
                queue_url,
                visibility_timeout=config.queue.lease_seconds,
                wait_time_seconds=config.queue.wait_time_seconds,
                client=sqs,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("Error receiving messages from %s: %s", queue_url, e)
            messages = []
            time.sleep(config.queue.wait_time_seconds)
        else:
            if not messages:
                logger.info("No messages received")

        for message in messages:
            handle_queue_message(worker, message, queue_url, config, client=sqs)
            handled += 1
        if once:
            break

    logger.info("Handled %d messages", handled)
    return handled
