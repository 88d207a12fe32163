# app/services/users_client.py
"""
Client for the users service.

Only existence checks are needed here: an activity must reference an owner
that the users service knows about.
"""

import logging
from typing import Optional

import httpx

from app.core.config import settings
from app.middleware.error_handler import ExternalServiceError

logger = logging.getLogger(__name__)


class UsersClient:
    def __init__(
        self,
        base_url: str = settings.USERS_API_BASE,
        timeout: float = settings.HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def enabled(self) -> bool:
        """Owner validation is skipped when no users service is configured."""
        return bool(self.base_url)

    def user_exists(self, user_id: str) -> bool:
        url = f"{self.base_url}/users/{user_id}"
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.get(url)
        except httpx.TimeoutException:
            logger.error(f"Timeout checking user {user_id} at users service")
            raise ExternalServiceError("Users service timed out", service="users")
        except httpx.RequestError as e:
            logger.error(f"Users service request failed for {user_id}: {e}")
            raise ExternalServiceError("Users service unavailable", service="users")

        if response.status_code == 200:
            return True
        if response.status_code == 404:
            logger.info(f"User {user_id} not found in users service")
            return False

        logger.error(f"Users service returned HTTP {response.status_code} for {user_id}")
        raise ExternalServiceError(
            f"Users service returned status {response.status_code}", service="users"
        )


def get_users_client() -> UsersClient:
    return UsersClient()
