"""
``RemoteNoteClient`` backed by the Evernote EDAM SDK (Thrift over HTTPS).

Converts SDK structs to the dataclasses in ``imgrectifier.models`` and back.
The SDK ``Note``/``Resource`` objects a note was read from ride along in
``raw`` so updates keep every field we never touch.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

import evernote.edam.notestore.NoteStore as NoteStore
import evernote.edam.type.ttypes as Types
import evernote.edam.userstore.constants as UserStoreConstants
import evernote.edam.userstore.UserStore as UserStore
import thrift.protocol.TBinaryProtocol as TBinaryProtocol
import thrift.transport.THttpClient as THttpClient
from evernote.edam.error.ttypes import EDAMErrorCode, EDAMUserException
from evernote.edam.notestore.ttypes import NoteFilter as EdamNoteFilter
from evernote.edam.notestore.ttypes import NotesMetadataResultSpec

from . import USER_AGENT
from .client import RemoteAuthError, RemoteError, RemoteNoteClient
from .config import RectifierOptions
from .models import (
    AuthenticationResult,
    Note,
    NoteFilter,
    NoteMetadata,
    Notebook,
    NotesMetadataPage,
    Resource,
)

LOGGER = logging.getLogger(__name__)


def _protocol(url: str) -> TBinaryProtocol.TBinaryProtocol:
    transport = THttpClient.THttpClient(url)
    transport.setCustomHeaders({"User-Agent": USER_AGENT})
    return TBinaryProtocol.TBinaryProtocol(transport)


def _auth_result(result) -> AuthenticationResult:
    user = getattr(result, "user", None)
    return AuthenticationResult(
        authentication_token=result.authenticationToken,
        current_time=result.currentTime,
        expiration=result.expiration,
        shard_id=getattr(user, "shardId", None),
    )


def _error_name(code: Optional[int]) -> Optional[str]:
    if code is None:
        return None
    return EDAMErrorCode._VALUES_TO_NAMES.get(code, str(code))


class EdamClient(RemoteNoteClient):
    """Talks to ``www.evernote.com`` (or the sandbox) with the EDAM SDK."""

    def __init__(self, options: Optional[RectifierOptions] = None):
        self._options = options or RectifierOptions()
        self._user_store = UserStore.Client(_protocol(self._options.user_store_url))
        self._note_store = None
        LOGGER.debug("user store at %s", self._options.user_store_url)

    @property
    def edam_version(self) -> Tuple[int, int]:
        return (
            UserStoreConstants.EDAM_VERSION_MAJOR,
            UserStoreConstants.EDAM_VERSION_MINOR,
        )

    @property
    def note_store(self):
        if self._note_store is None:
            raise RemoteError("not authenticated; note store is unavailable")
        return self._note_store

    # ----- User store -----

    def check_version(self, client_name: str, major: int, minor: int) -> bool:
        return self._user_store.checkVersion(client_name, major, minor)

    def authenticate(
        self, username: str, password: str, consumer_key: str, consumer_secret: str
    ) -> AuthenticationResult:
        try:
            result = self._user_store.authenticate(
                username, password, consumer_key, consumer_secret
            )
        except EDAMUserException as exc:
            code = _error_name(exc.errorCode)
            raise RemoteAuthError(
                f"Authentication failed (parameter: {exc.parameter} errorCode: {code})",
                parameter=exc.parameter,
                error_code=code,
            ) from exc

        auth = _auth_result(result)
        if not auth.shard_id:
            raise RemoteError("authentication result carried no shard id")
        url = self._options.note_store_url(auth.shard_id)
        self._note_store = NoteStore.Client(_protocol(url))
        LOGGER.debug("note store at %s", url)
        return auth

    def refresh_authentication(self, token: str) -> AuthenticationResult:
        return _auth_result(self._user_store.refreshAuthentication(token))

    def get_upload_limit(self, token: str) -> int:
        return self._user_store.getUser(token).accounting.uploadLimit

    # ----- Note store -----

    def list_notebooks(self, token: str) -> List[Notebook]:
        return [
            Notebook(guid=nb.guid, name=nb.name)
            for nb in self.note_store.listNotebooks(token)
        ]

    def find_notes_metadata(
        self, token: str, note_filter: NoteFilter, offset: int, max_notes: int
    ) -> NotesMetadataPage:
        spec = NotesMetadataResultSpec(
            includeTitle=True, includeCreated=True, includeUpdated=True
        )
        edam_filter = EdamNoteFilter(notebookGuid=note_filter.notebook_guid)
        found = self.note_store.findNotesMetadata(
            token, edam_filter, offset, max_notes, spec
        )
        notes = [
            NoteMetadata(
                guid=m.guid,
                title=m.title,
                created=m.created,
                updated=m.updated,
                update_sequence_num=m.updateSequenceNum,
            )
            for m in (found.notes or [])
        ]
        return NotesMetadataPage(
            notes=notes, start_index=found.startIndex, total_notes=found.totalNotes
        )

    def get_note(self, token: str, guid: str) -> Note:
        raw = self.note_store.getNote(token, guid, True, False, False, False)
        resources = [
            Resource(
                data=b"",
                body_hash=(r.data.bodyHash if r.data else None) or b"",
                mime=r.mime,
                source_url=getattr(r.attributes, "sourceURL", None),
                guid=r.guid,
                raw=r,
            )
            for r in (raw.resources or [])
        ]
        return Note(
            guid=raw.guid,
            title=raw.title,
            content=raw.content,
            resources=resources,
            created=raw.created,
            updated=raw.updated,
            notebook_guid=raw.notebookGuid,
            content_hash=raw.contentHash,
            content_length=raw.contentLength,
            raw=raw,
        )

    def update_note(self, token: str, note: Note) -> Note:
        raw = note.raw if note.raw is not None else Types.Note(guid=note.guid)
        raw.title = note.title
        raw.content = note.content
        raw.contentHash = note.content_hash
        raw.contentLength = note.content_length
        raw.resources = [self._to_edam_resource(r) for r in note.resources]

        LOGGER.debug("updating note %s", note.guid)
        updated = self.note_store.updateNote(token, raw)
        note.raw = updated
        note.updated = updated.updated
        return note

    @staticmethod
    def _to_edam_resource(resource: Resource):
        if resource.raw is not None:
            return resource.raw
        data = Types.Data(
            body=resource.data, bodyHash=resource.body_hash, size=resource.size
        )
        attributes = Types.ResourceAttributes(
            sourceURL=resource.source_url,
            attachment=resource.attachment,
            clientWillIndex=resource.client_will_index,
        )
        return Types.Resource(data=data, mime=resource.mime, attributes=attributes)

    def get_sync_state_uploaded(self, token: str) -> int:
        return self.note_store.getSyncState(token).uploaded
