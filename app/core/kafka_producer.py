# app/core/kafka_producer.py
"""
Event publishing for the write-side services.

The Kafka producer is created once at process start. If the broker is not
reachable at that point the service keeps running with publishing disabled:
event delivery is secondary to the durability of the originating write.
"""

import json
import logging
from typing import Any, Optional

from kafka import KafkaProducer

from app.core.broker import ROUTING_KEY_HEADER
from app.core.config import settings

logger = logging.getLogger(__name__)

PUBLISH_MAX_BLOCK_MS = 1000

_producer: Optional[KafkaProducer] = None


def create_kafka_producer() -> KafkaProducer:
    return KafkaProducer(
        bootstrap_servers=settings.KAFKA_BOOTSTRAP_SERVERS,
        value_serializer=lambda v: json.dumps(v, default=str).encode("utf-8"),
        key_serializer=lambda k: k.encode("utf-8") if k is not None else None,
        # Fail fast on connection issues instead of stalling requests
        request_timeout_ms=5000,
        # send() waits at most this long for metadata or buffer space
        max_block_ms=PUBLISH_MAX_BLOCK_MS,
    )


def init_kafka_singleton() -> Optional[KafkaProducer]:
    """Performs the one producer handshake at startup."""
    global _producer
    if not settings.EVENT_BUS_ENABLED:
        logger.info("Event bus disabled, events will not be published")
        return None
    try:
        _producer = create_kafka_producer()
        logger.info(f"Kafka producer connected to {settings.KAFKA_BOOTSTRAP_SERVERS}")
    except Exception as e:
        logger.warning(
            f"Kafka producer unavailable ({e}). Service will run without publishing events."
        )
        _producer = None
    return _producer


def get_kafka_singleton() -> Optional[KafkaProducer]:
    return _producer


def close_kafka_singleton() -> None:
    global _producer
    if _producer is None:
        return
    try:
        _producer.flush(timeout=5)  # Ensure buffered messages are sent
        _producer.close(timeout=5)
    finally:
        _producer = None


class EventPublisher:
    """
    Fire-and-forget publisher bound to one exchange (Kafka topic).

    The routing key travels in a message header; the message key is the
    entity id so every event for one entity lands on the same partition.
    """

    def __init__(self, producer: Optional[KafkaProducer], exchange: str = settings.EVENTS_EXCHANGE):
        self._producer = producer
        self.exchange = exchange

    def publish(
        self,
        routing_key: str,
        message: Any,
        key: Optional[str] = None,
        headers: Optional[list] = None,
    ) -> bool:
        """
        Publish one message. Never raises: failures are logged and reported
        through the return value only.
        """
        if self._producer is None:
            logger.warning(f"Kafka producer unavailable, skipping {routing_key} publish")
            return False

        payload = message.to_payload() if hasattr(message, "to_payload") else message
        record_headers = [(ROUTING_KEY_HEADER, routing_key.encode("utf-8"))]
        if headers:
            record_headers.extend(headers)

        try:
            self._producer.send(
                self.exchange, value=payload, key=key, headers=record_headers
            )
            logger.debug(f"Published {routing_key} to {self.exchange} (key={key})")
            return True
        except Exception as e:
            logger.error(f"Failed to publish {routing_key} event: {e}", exc_info=True)
            return False


def get_event_publisher() -> EventPublisher:
    """FastAPI dependency returning a publisher over the process producer."""
    return EventPublisher(get_kafka_singleton())
