from __future__ import annotations

import asyncio
import json

import boto3

from app.core.config import Config
from app.core.middlewares import logger


def _build_sqs_client():
    client_kwargs: dict[str, str] = {}
    if Config.AWS_REGION:
        client_kwargs["region_name"] = Config.AWS_REGION
    if Config.AWS_ACCESS_KEY and Config.AWS_SECRET_KEY:
        client_kwargs["aws_access_key_id"] = Config.AWS_ACCESS_KEY
        client_kwargs["aws_secret_access_key"] = Config.AWS_SECRET_KEY
    return boto3.client("sqs", **client_kwargs)


def _send_event(event_data: dict, deduplication_id: str | None = None) -> bool:
    if not Config.PAYMENT_EVENTS_QUEUE_URL:
        logger.info(f"[event_publisher] queue not configured, skipping {event_data.get('event_type')}")
        return False

    sqs = _build_sqs_client()
    message = {
        "QueueUrl": Config.PAYMENT_EVENTS_QUEUE_URL,
        "MessageBody": json.dumps(event_data),
    }
    if Config.PAYMENT_EVENTS_QUEUE_URL.endswith(".fifo"):
        message["MessageGroupId"] = str(event_data.get("payment_id") or "payment-events")
        message["MessageDeduplicationId"] = str(deduplication_id or event_data.get("payment_id"))
    try:
        sqs.send_message(**message)
    except Exception as exc:
        logger.error(f"[event_publisher] send_message failed: {exc}, event_data={event_data}")
        raise
    logger.info(f"[event_publisher] sent {event_data.get('event_type')}")
    return True


async def publish_installment_paid_event(event_data: dict) -> bool:
    return await asyncio.to_thread(
        _send_event, event_data, f"installment-paid-{event_data.get('installment_id')}"
    )


async def publish_payment_settled_event(event_data: dict) -> bool:
    return await asyncio.to_thread(
        _send_event, event_data, f"payment-settled-{event_data.get('payment_id')}"
    )
