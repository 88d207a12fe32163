# app/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.api import api_router, health_router
from app.core.config import settings
from app.core.kafka_producer import close_kafka_singleton, init_kafka_singleton
from app import models  # noqa: F401  (registers every model on Base)
from app.db.base_class import Base
from app.db.session import engine
from app.middleware.error_handler import register_error_handlers

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Activities service starting up...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables checked and created if necessary.")

    # The only broker handshake: publishing degrades to a no-op if it fails
    init_kafka_singleton()
    yield
    logger.info("Activities service shutting down...")
    close_kafka_singleton()


app = FastAPI(
    title="SportHub Activities Service",
    version="1.0.0",
    description="""
        **SportHub Activities Service**

        Owns the activity catalog, session scheduling and enrollments.

        ## Features

        * **Activities**: Create, update and delete activities (admin)
        * **Sessions**: Schedule sessions with a capacity per activity
        * **Enrollments**: Book a seat with concurrent pricing and capacity checks
        * **Search sync**: Every catalog change is published to the event bus

        ## Authentication

        Endpoints that change data require JWT authentication via the
        `Authorization: Bearer <token>` header.
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
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(health_router)
app.include_router(api_router, prefix="/api/v1")


@app.get("/")
def read_root():
    return {"status": "Activities Service is running"}
