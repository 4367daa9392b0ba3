"""
Remote note store interface.

The rectifier only ever talks to Evernote through ``RemoteNoteClient``; the
EDAM SDK binding lives in ``imgrectifier.edam``. Tokens are passed explicitly
so the session manager stays in charge of refreshing them.
"""

from __future__ import annotations

import abc
import logging
from typing import List, Optional, Tuple

from .models import (
    AuthenticationResult,
    Note,
    NoteFilter,
    Notebook,
    NotesMetadataPage,
)

LOGGER = logging.getLogger(__name__)


# ------------------------------- Errors --------------------------------------


class RemoteError(Exception):
    """Base note store transport error."""


class RemoteAuthError(RemoteError):
    """The user store rejected our credentials."""

    def __init__(
        self,
        message: str,
        parameter: Optional[str] = None,
        error_code: Optional[str] = None,
    ):
        super().__init__(message)
        self.parameter = parameter
        self.error_code = error_code


# ------------------------------- Interface -----------------------------------


class RemoteNoteClient(abc.ABC):
    """Methods map 1:1 to the user store and note store calls we need."""

    @property
    @abc.abstractmethod
    def edam_version(self) -> Tuple[int, int]:
        """(major, minor) protocol version this client was generated for."""

    @abc.abstractmethod
    def check_version(self, client_name: str, major: int, minor: int) -> bool: ...

    @abc.abstractmethod
    def authenticate(
        self, username: str, password: str, consumer_key: str, consumer_secret: str
    ) -> AuthenticationResult: ...

    @abc.abstractmethod
    def refresh_authentication(self, token: str) -> AuthenticationResult: ...

    @abc.abstractmethod
    def get_upload_limit(self, token: str) -> int: ...

    @abc.abstractmethod
    def list_notebooks(self, token: str) -> List[Notebook]: ...

    @abc.abstractmethod
    def find_notes_metadata(
        self, token: str, note_filter: NoteFilter, offset: int, max_notes: int
    ) -> NotesMetadataPage: ...

    @abc.abstractmethod
    def get_note(self, token: str, guid: str) -> Note:
        """Fetch a note with its content (resource bodies are not required)."""

    @abc.abstractmethod
    def update_note(self, token: str, note: Note) -> Note: ...

    @abc.abstractmethod
    def get_sync_state_uploaded(self, token: str) -> int:
        """Bytes uploaded this accounting period, per the service."""
