# app/search_main.py
import logging
import threading
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.deps import get_search_service
from app.api.v1.api import search_api_router, search_health_router
from app.core.config import settings
from app.middleware.error_handler import register_error_handlers
from app.workers.search_projector import build_projector_worker, start_projector_thread

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Search service starting up...")
    stop_event = threading.Event()
    projector_thread = None

    if settings.PROJECTOR_ENABLED:
        # The projector busts the same cache instance the read path uses
        worker = build_projector_worker(invalidator=get_search_service())
        projector_thread = start_projector_thread(worker, stop_event)
        logger.info("Search projector started")
    else:
        logger.info("Search projector disabled, serving reads only")

    yield

    logger.info("Search service shutting down...")
    stop_event.set()
    if projector_thread is not None:
        projector_thread.join(timeout=settings.SHUTDOWN_TIMEOUT_SECONDS)
        if projector_thread.is_alive():
            logger.warning(
                f"Projector did not stop within {settings.SHUTDOWN_TIMEOUT_SECONDS}s"
            )


app = FastAPI(
    title="SportHub Search Service",
    version="1.0.0",
    description="""
        **SportHub Search Service**

        Full-text search over the activity catalog, backed by Solr with a
        local and a Redis cache in front. The index is kept in sync by a
        projector consuming the activities event bus.
        """,
    lifespan=lifespan,
)

origins = [
    "http://localhost:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(search_health_router)
app.include_router(search_api_router, prefix="/api/v1")


@app.get("/")
def read_root():
    return {"status": "Search Service is running"}
