# app/core/broker.py
"""
Broker topology for the activities event bus.

The bus is modelled as a topic exchange on top of Kafka:

- the exchange is a Kafka topic,
- the routing key travels in the `routing_key` record header,
- the durable queue is a consumer group,
- a binding is an AMQP-style pattern (`*` = one word, `#` = zero or more)
  matched against the routing key on the consumer side,
- records that cannot be projected go to a dead-letter topic.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from kafka import KafkaConsumer
from kafka.admin import KafkaAdminClient, NewTopic
from kafka.errors import KafkaError, TopicAlreadyExistsError
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from app.schemas.events import EventOperation

logger = logging.getLogger(__name__)

ROUTING_KEY_HEADER = "routing_key"
ERROR_HEADER = "error"

ACTIVITY_ROUTING_KEYS = {
    EventOperation.create: "activity.created",
    EventOperation.update: "activity.updated",
    EventOperation.delete: "activity.deleted",
}
SESSION_ROUTING_KEYS = {
    EventOperation.create: "activity.session.created",
    EventOperation.update: "activity.session.updated",
    EventOperation.delete: "activity.session.deleted",
}
ENROLLMENT_CREATED = "enrollment.created"
ENROLLMENT_CANCELLED = "enrollment.cancelled"

# Routing keys under this prefix describe catalog changes the projector handles
CATALOG_PATTERN = "activity.#"


def topic_matches(pattern: str, routing_key: str) -> bool:
    """Topic-exchange matching of a binding pattern against a routing key."""
    return _match(pattern.split("."), routing_key.split("."))


def _match(pattern: Sequence[str], words: Sequence[str]) -> bool:
    if not pattern:
        return not words
    head, rest = pattern[0], pattern[1:]
    if head == "#":
        return any(_match(rest, words[i:]) for i in range(len(words) + 1))
    if not words:
        return False
    if head == "*" or head == words[0]:
        return _match(rest, words[1:])
    return False


def header_value(headers: Optional[Sequence], name: str) -> str:
    for key, value in headers or ():
        if key == name:
            return value.decode("utf-8") if isinstance(value, bytes) else str(value)
    return ""


@dataclass(frozen=True)
class BrokerTopology:
    exchange: str
    queue: str
    binding: str
    dead_letter: str

    @classmethod
    def from_settings(cls, settings) -> "BrokerTopology":
        return cls(
            exchange=settings.EVENTS_EXCHANGE,
            queue=settings.EVENTS_QUEUE,
            binding=settings.EVENTS_BINDING,
            dead_letter=settings.EVENTS_DEAD_LETTER,
        )

    def binds(self, routing_key: str) -> bool:
        return topic_matches(self.binding, routing_key)

    def ensure_topics(
        self,
        admin: KafkaAdminClient,
        partitions: int = 3,
        replication_factor: int = 1,
    ) -> List[str]:
        """Creates the exchange and dead-letter topics, skipping existing ones."""
        created = []
        for name in (self.exchange, self.dead_letter):
            topic = NewTopic(
                name=name,
                num_partitions=partitions,
                replication_factor=replication_factor,
            )
            try:
                admin.create_topics([topic])
                created.append(name)
                logger.info(f"Created topic {name}")
            except TopicAlreadyExistsError:
                logger.info(f"Topic {name} already exists, skipping")
        return created


def create_kafka_consumer(topology: BrokerTopology, bootstrap_servers: str) -> KafkaConsumer:
    consumer = KafkaConsumer(
        bootstrap_servers=bootstrap_servers,
        group_id=topology.queue,
        auto_offset_reset="earliest",
        # Offsets are committed by the worker once a batch has settled
        enable_auto_commit=False,
    )
    consumer.subscribe([topology.exchange])
    return consumer


def connect_consumer(
    factory: Callable[[], KafkaConsumer],
    max_attempts: int,
    initial_delay: float,
    max_delay: float,
    sleep: Callable[[float], None] = time.sleep,
) -> Optional[KafkaConsumer]:
    """
    Connects with capped exponential backoff.

    Returns None once the attempts are exhausted so the caller can keep
    serving reads without a live consumer.
    """
    retrying = Retrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=initial_delay, max=max_delay),
        retry=retry_if_exception_type(KafkaError),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        sleep=sleep,
        reraise=True,
    )
    try:
        consumer = retrying(factory)
    except KafkaError as e:
        logger.warning(
            f"Broker connection failed after {max_attempts} attempts ({e}). "
            "Search will keep serving reads without a live consumer."
        )
        return None
    logger.info(
        f"Broker connected after {retrying.statistics.get('attempt_number', 1)} attempt(s)"
    )
    return consumer
