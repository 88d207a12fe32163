# app/api/deps.py
from functools import lru_cache

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import settings
from app.core.kafka_producer import EventPublisher, get_event_publisher
from app.db.redis import redis_client
from app.db.session import SessionLocal, get_db
from app.middleware.error_handler import ForbiddenError
from app.schemas.token import TokenPayload
from app.services.activity_service import ActivityService
from app.services.enrollment_service import EnrollmentService
from app.services.search import LocalCache, RedisCache, SearchService, SolrRepository
from app.services.session_service import SessionService
from app.services.users_client import UsersClient, get_users_client

# This tells FastAPI where to look for the token.
# The `tokenUrl` doesn't have to be a real endpoint in this service,
# it's just for the OpenAPI documentation.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")


def get_current_user(token: str = Depends(oauth2_scheme)) -> TokenPayload:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=["HS256"])
        token_data = TokenPayload(**payload)
    except (JWTError, ValueError):
        # Catches any error from jose or Pydantic validation
        raise credentials_exception

    return token_data


def require_admin(current_user: TokenPayload = Depends(get_current_user)) -> TokenPayload:
    if not current_user.is_admin:
        raise ForbiddenError("Admin role required")
    return current_user


def get_activity_service(
    db: Session = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher),
    users_client: UsersClient = Depends(get_users_client),
) -> ActivityService:
    return ActivityService(db, publisher, users_client)


def get_session_service(
    db: Session = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher),
) -> SessionService:
    return SessionService(db, publisher)


def get_session_factory() -> sessionmaker:
    """Factory for sessions owned by background threads rather than a request."""
    return SessionLocal


def get_enrollment_service(
    db: Session = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher),
    session_factory: sessionmaker = Depends(get_session_factory),
) -> EnrollmentService:
    return EnrollmentService(db, publisher, session_factory=session_factory)


@lru_cache
def get_search_service() -> SearchService:
    """One instance per process so the projector busts the same local cache the API reads."""
    return SearchService(
        repository=SolrRepository(),
        local_cache=LocalCache(),
        shared_cache=RedisCache(redis_client),
    )
