"""Upload allowance bookkeeping."""

from __future__ import annotations

import logging

from .client import RemoteNoteClient
from .exceptions import UploadExhaustedError
from .session import SessionManager

LOGGER = logging.getLogger(__name__)


class QuotaGuard:
    """
    Refuses note updates that would leave less than ``reserve`` bytes of the
    account's upload allowance free.
    """

    def __init__(
        self, client: RemoteNoteClient, session: SessionManager, reserve: int = 0
    ):
        self._client = client
        self._session = session
        self.reserve = reserve
        self.upload_limit = client.get_upload_limit(session.get_token())
        self.uploaded = client.get_sync_state_uploaded(session.get_token())
        LOGGER.debug(
            "upload limit %d, uploaded %d, reserve %d",
            self.upload_limit,
            self.uploaded,
            self.reserve,
        )

    @property
    def available(self) -> int:
        return self.upload_limit - self.uploaded - self.reserve

    def check(self, note_size: int) -> None:
        projected = self.uploaded + note_size
        if self.upload_limit - projected < self.reserve:
            raise UploadExhaustedError(
                self.upload_limit, self.uploaded, note_size, self.reserve
            )

    def refresh(self) -> None:
        self.uploaded = self._client.get_sync_state_uploaded(self._session.get_token())
        LOGGER.debug("uploaded is now %d", self.uploaded)
