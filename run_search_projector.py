#!/usr/bin/env python3
"""
Search Projector Service

Standalone process that consumes catalog events from the activities exchange
and projects them into the search index. Use it instead of the in-process
projector of the search API when the two should scale independently
(set PROJECTOR_ENABLED=false on the API in that case).
"""
import logging
import signal
import threading

from app.core.config import settings
from app.db.redis import redis_client
from app.services.search import LocalCache, RedisCache, SearchService, SolrRepository
from app.workers.search_projector import build_projector_worker

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def run_projector() -> None:
    logger.info("=" * 60)
    logger.info("Search Projector Service Starting...")
    logger.info(f"Kafka Bootstrap Servers: {settings.KAFKA_BOOTSTRAP_SERVERS}")
    logger.info(f"Exchange: {settings.EVENTS_EXCHANGE} (group {settings.EVENTS_QUEUE})")
    logger.info(f"Solr: {settings.SOLR_URL}")
    logger.info("=" * 60)

    # No local tier here: this process serves no reads, only the shared cache is busted
    invalidator = SearchService(
        repository=SolrRepository(),
        local_cache=LocalCache(max_size=1),
        shared_cache=RedisCache(redis_client),
    )
    worker = build_projector_worker(invalidator)

    stop_event = threading.Event()
    signal.signal(signal.SIGTERM, lambda *_: stop_event.set())
    try:
        worker.run(stop_event)
    except KeyboardInterrupt:
        logger.info("Shutting down...")
        stop_event.set()


if __name__ == "__main__":
    run_projector()
