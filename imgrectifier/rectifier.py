"""
Walks an account's notebooks and notes, rectifying each note's images.

Public API:
  - open_rectifier(client, identity, username, password, options) -> Rectifier
  - Rectifier.run() -> RectifyStats
  - Rectifier.rectify_account() / rectify_notebook_named(name)
  - Rectifier.rectify_notebook(notebook) / rectify_filter(note_filter)
  - Rectifier.rectify_note(note) -> bool
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from . import NAME
from .client import RemoteNoteClient
from .config import ApiIdentity, RectifierOptions
from .exceptions import NotebookNotFound, VersionMismatchError
from .fetcher import ImageFetcher
from .models import Note, NoteFilter, NoteMetadata, Notebook
from .quota import QuotaGuard
from .rewriter import NoteRewriter
from .session import SessionManager

LOGGER = logging.getLogger(__name__)


@dataclass
class RectifyStats:
    notebooks: int = 0
    notes_examined: int = 0
    notes_skipped: int = 0
    notes_updated: int = 0
    images_rewritten: int = 0


def _epoch_ms(value: Optional[datetime]) -> Optional[int]:
    if value is None:
        return None
    return int(value.timestamp() * 1000)


class Rectifier:
    def __init__(
        self,
        client: RemoteNoteClient,
        session: SessionManager,
        rewriter: NoteRewriter,
        quota: QuotaGuard,
        options: Optional[RectifierOptions] = None,
    ):
        self._client = client
        self._session = session
        self._rewriter = rewriter
        self._quota = quota
        self._options = options or RectifierOptions()
        self._created_since = _epoch_ms(self._options.created_since)
        self._updated_since = _epoch_ms(self._options.updated_since)
        self.stats = RectifyStats()

    def run(self) -> RectifyStats:
        if self._options.notebook is not None:
            self.rectify_notebook_named(self._options.notebook)
        else:
            self.rectify_account()
        return self.stats

    def rectify_account(self) -> None:
        LOGGER.debug("getting notebooks")
        notebooks = self._client.list_notebooks(self._session.get_token())
        LOGGER.debug("got %d notebook(s)", len(notebooks))
        for notebook in notebooks:
            self.rectify_notebook(notebook)

    def rectify_notebook_named(self, name: str) -> None:
        for notebook in self._client.list_notebooks(self._session.get_token()):
            if notebook.name == name:
                self.rectify_notebook(notebook)
                return
        raise NotebookNotFound(name)

    def rectify_notebook(self, notebook: Notebook) -> None:
        LOGGER.debug("rectifying notebook %s: %s", notebook.guid, notebook.name)
        self.stats.notebooks += 1
        self.rectify_filter(NoteFilter(notebook_guid=notebook.guid))

    def rectify_filter(self, note_filter: NoteFilter) -> None:
        LOGGER.debug("rectifying notes matching %s", note_filter)
        page_size = self._options.page_size
        offset = 0
        while True:
            page = self._client.find_notes_metadata(
                self._session.get_token(), note_filter, offset, page_size
            )
            if not page.notes:
                return

            for meta in page.notes:
                if not self._selected(meta):
                    self.stats.notes_skipped += 1
                    continue
                note = self._client.get_note(self._session.get_token(), meta.guid)
                self.rectify_note(note)

            offset += len(page.notes)
            if offset >= page.total_notes:
                return

    def _selected(self, meta: NoteMetadata) -> bool:
        created_since, updated_since = self._created_since, self._updated_since
        if created_since is None and updated_since is None:
            return True
        if created_since is not None and (meta.created or 0) >= created_since:
            return True
        if updated_since is not None and (meta.updated or 0) >= updated_since:
            return True
        return False

    def rectify_note(self, note: Note) -> bool:
        """Rewrite ``note``'s images and push it back; ``False`` if nothing changed."""
        LOGGER.debug("rectifying note %s: %s", note.guid, note.title)
        if note.content is None:
            raise ValueError("notes passed to rectify_note must have their content")
        self.stats.notes_examined += 1

        result = self._rewriter.rewrite(note.content)
        if result is None:
            return False

        self._quota.check(result.size_estimate)
        result.apply_to(note)
        self._client.update_note(self._session.get_token(), note)
        self._quota.refresh()

        self.stats.notes_updated += 1
        self.stats.images_rewritten += len(result.resources)
        LOGGER.info(
            "updated note %s with %d resource(s)", note.title, len(result.resources)
        )
        return True


def open_rectifier(
    client: RemoteNoteClient,
    identity: ApiIdentity,
    username: str,
    password: str,
    options: Optional[RectifierOptions] = None,
    fetcher: Optional[ImageFetcher] = None,
) -> Rectifier:
    """Check the protocol version, log in and wire up a ``Rectifier``."""
    options = options or RectifierOptions()

    major, minor = client.edam_version
    if not client.check_version(NAME, major, minor):
        raise VersionMismatchError(major, minor)

    auth_result = client.authenticate(
        username, password, identity.consumer_key, identity.consumer_secret
    )
    session = SessionManager(client, auth_result)
    quota = QuotaGuard(client, session, reserve=options.reserve)
    rewriter = NoteRewriter(fetcher or ImageFetcher())
    return Rectifier(client, session, rewriter, quota, options)
