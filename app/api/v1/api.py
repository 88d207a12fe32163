# app/api/v1/api.py

from fastapi import APIRouter
from app.api.v1.endpoints import activities, enrollments, health, search, sessions

# Router for the activities service: catalog, sessions and enrollments
api_router = APIRouter()

api_router.include_router(activities.router)
api_router.include_router(sessions.router)
api_router.include_router(enrollments.router)

# Router for the search service
search_api_router = APIRouter()

search_api_router.include_router(search.router)

health_router = health.router
search_health_router = health.search_router
