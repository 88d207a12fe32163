# app/workers/search_projector.py
"""
Search Projector Worker

Consumes catalog events from the activities exchange and keeps the search
index and caches in sync.

Offsets are committed only once every record of a polled batch has reached a
terminal state (projected, skipped or dead-lettered). Transient failures are
retried with exponential backoff before a record is dead-lettered.
"""

import logging
import threading
import time
from typing import Callable, Optional

from kafka import KafkaConsumer, KafkaProducer
from kafka.errors import KafkaError
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from app.core.broker import (
    ERROR_HEADER,
    ROUTING_KEY_HEADER,
    BrokerTopology,
    connect_consumer,
    create_kafka_consumer,
    header_value,
)
from app.core.config import settings
from app.services.search.origin_client import ActivitiesOriginClient
from app.services.search.projector import (
    CacheInvalidator,
    PoisonMessageError,
    ProjectionError,
    ProjectionOutcome,
    SearchProjector,
)
from app.services.search.solr_repository import SolrRepository

logger = logging.getLogger(__name__)

POLL_TIMEOUT_MS = 1000


class DeadLetterError(Exception):
    """The dead-letter topic did not acknowledge a record."""


class ProjectorWorker:
    def __init__(
        self,
        projector: SearchProjector,
        topology: BrokerTopology,
        consumer_factory: Callable[[], KafkaConsumer],
        dead_letter_factory: Callable[[], Optional[KafkaProducer]],
        max_attempts: int = settings.PROJECTOR_MAX_ATTEMPTS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.projector = projector
        self.topology = topology
        self.consumer_factory = consumer_factory
        self.dead_letter_factory = dead_letter_factory
        self.dead_letter_producer: Optional[KafkaProducer] = None
        self.max_attempts = max_attempts
        self.sleep = sleep

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=0.5, max=10),
            retry=retry_if_exception_type(ProjectionError),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            sleep=self.sleep,
            reraise=True,
        )

    def process_record(self, record) -> ProjectionOutcome:
        routing_key = header_value(record.headers, ROUTING_KEY_HEADER)
        try:
            return self._retrying()(self.projector.process, record.value, routing_key)
        except PoisonMessageError as e:
            logger.error(f"Rejecting malformed record at offset {record.offset}: {e}")
            self.dead_letter(record, routing_key, e)
        except ProjectionError as e:
            logger.error(
                f"Giving up on record at offset {record.offset} after "
                f"{self.max_attempts} attempts: {e}",
                exc_info=True,
            )
            self.dead_letter(record, routing_key, e)
        except Exception as e:
            logger.error(
                f"Unexpected error projecting record at offset {record.offset}: {e}",
                exc_info=True,
            )
            self.dead_letter(record, routing_key, e)
        return ProjectionOutcome.REJECTED

    def dead_letter(self, record, routing_key: str, error: Exception) -> None:
        """Forwards the original body to the dead-letter topic and waits for the ack."""
        if self.dead_letter_producer is None:
            raise DeadLetterError("No dead-letter producer available")
        headers = [
            (ROUTING_KEY_HEADER, routing_key.encode("utf-8")),
            (ERROR_HEADER, str(error).encode("utf-8")),
        ]
        try:
            future = self.dead_letter_producer.send(
                self.topology.dead_letter, value=record.value, key=record.key, headers=headers
            )
            future.get(timeout=10)
        except KafkaError as e:
            raise DeadLetterError(f"Dead-letter publish failed: {e}") from e
        logger.warning(f"Record at offset {record.offset} moved to {self.topology.dead_letter}")

    def process_batch(self, consumer: KafkaConsumer, batch: dict) -> None:
        for partition, records in batch.items():
            for record in records:
                try:
                    self.process_record(record)
                except DeadLetterError as e:
                    # Rewind so the record is redelivered instead of committed
                    logger.error(f"{e}. Rewinding {partition} to offset {record.offset}")
                    consumer.seek(partition, record.offset)
                    break
        consumer.commit()

    def run(self, stop_event: threading.Event) -> None:
        consumer = connect_consumer(
            self.consumer_factory,
            max_attempts=settings.BROKER_CONNECT_MAX_ATTEMPTS,
            initial_delay=settings.BROKER_CONNECT_INITIAL_DELAY,
            max_delay=settings.BROKER_CONNECT_MAX_DELAY,
            sleep=self.sleep,
        )
        if consumer is None:
            return
        # Created once the broker is known to be reachable
        self.dead_letter_producer = self.dead_letter_factory()

        logger.info(
            f"Projector listening on {self.topology.exchange} "
            f"(group={self.topology.queue}, binding={self.topology.binding!r})"
        )
        try:
            while not stop_event.is_set():
                try:
                    batch = consumer.poll(timeout_ms=POLL_TIMEOUT_MS)
                    if batch:
                        self.process_batch(consumer, batch)
                except KafkaError as e:
                    # Uncommitted records are redelivered after the group settles
                    logger.error(f"Consumer error, resuming poll loop: {e}", exc_info=True)
                    self.sleep(1)
        finally:
            consumer.close()
            if self.dead_letter_producer is not None:
                self.dead_letter_producer.close(timeout=5)
            logger.info("Projector stopped")


def create_dead_letter_producer() -> Optional[KafkaProducer]:
    try:
        return KafkaProducer(
            bootstrap_servers=settings.KAFKA_BOOTSTRAP_SERVERS,
            request_timeout_ms=5000,
            max_block_ms=5000,
        )
    except KafkaError as e:
        logger.warning(f"Dead-letter producer unavailable ({e}); failed records will be redelivered")
        return None


def build_projector_worker(invalidator: CacheInvalidator) -> ProjectorWorker:
    topology = BrokerTopology.from_settings(settings)
    projector = SearchProjector(
        source=ActivitiesOriginClient(),
        index=SolrRepository(),
        invalidator=invalidator,
        binding=topology.binding,
    )
    return ProjectorWorker(
        projector=projector,
        topology=topology,
        consumer_factory=lambda: create_kafka_consumer(
            topology, settings.KAFKA_BOOTSTRAP_SERVERS
        ),
        dead_letter_factory=create_dead_letter_producer,
    )


def start_projector_thread(
    worker: ProjectorWorker, stop_event: threading.Event
) -> threading.Thread:
    thread = threading.Thread(
        target=worker.run, args=(stop_event,), name="search-projector", daemon=True
    )
    thread.start()
    return thread
