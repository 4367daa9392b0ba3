"""Keeps the authentication token fresh."""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Callable

from .client import RemoteNoteClient
from .models import AuthenticationResult

LOGGER = logging.getLogger(__name__)

REFRESH_THRESHOLD_SECONDS = 15 * 60


class SessionManager:
    """
    Hands out the current token, refreshing it first when fewer than 15
    minutes of its lifetime remain.

    Expiry is tracked on the local clock: the server reports its own time
    alongside the expiration, so only their difference is trusted.
    """

    def __init__(
        self,
        client: RemoteNoteClient,
        auth_result: AuthenticationResult,
        clock: Callable[[], float] = time.time,
    ):
        self._client = client
        self._clock = clock
        self._adopt(auth_result)

    def _adopt(self, auth_result: AuthenticationResult) -> None:
        self._auth_result = auth_result
        self._expires_at = self._clock() + auth_result.lifetime_ms / 1000.0

    @property
    def expires_at(self) -> float:
        return self._expires_at

    @property
    def auth_result(self) -> AuthenticationResult:
        return self._auth_result

    def get_token(self) -> str:
        if self._expires_at - self._clock() < REFRESH_THRESHOLD_SECONDS:
            LOGGER.debug("refreshing authentication...")
            refreshed = self._client.refresh_authentication(
                self._auth_result.authentication_token
            )
            self._adopt(refreshed)
            expires = datetime.fromtimestamp(self._expires_at)
            LOGGER.info(
                "refreshed authentication; next expiration is at %s",
                expires.isoformat(timespec="seconds"),
            )
        return self._auth_result.authentication_token
