"""Tests for the EDAM SDK adapter."""

import unittest
from unittest.mock import MagicMock, patch

import evernote.edam.type.ttypes as Types
from evernote.edam.error.ttypes import EDAMErrorCode, EDAMUserException
from evernote.edam.notestore.ttypes import NoteMetadata as EdamNoteMetadata
from evernote.edam.notestore.ttypes import NotesMetadataList, SyncState
from evernote.edam.userstore.ttypes import AuthenticationResult as EdamAuthResult

from imgrectifier import edam
from imgrectifier.client import RemoteAuthError, RemoteError
from imgrectifier.config import RectifierOptions
from imgrectifier.models import Note, NoteFilter, Resource


def _edam_auth(token="token", shard_id="s1"):
    return EdamAuthResult(
        authenticationToken=token,
        currentTime=1000,
        expiration=1000 + 60 * 60 * 1000,
        user=Types.User(shardId=shard_id),
    )


class EdamClientTest(unittest.TestCase):
    """Tests for EdamClient with the Thrift stores mocked out."""

    def setUp(self):
        self.user_store = MagicMock()
        self.note_store = MagicMock()
        patches = [
            patch.object(edam, "_protocol", side_effect=lambda url: url),
            patch.object(edam.UserStore, "Client", return_value=self.user_store),
            patch.object(edam.NoteStore, "Client", return_value=self.note_store),
        ]
        self.mocks = [p.start() for p in patches]
        for p in patches:
            self.addCleanup(p.stop)

        self.client = edam.EdamClient(RectifierOptions(sandbox=True))

    def _login(self):
        self.user_store.authenticate.return_value = _edam_auth()
        return self.client.authenticate("user", "pass", "key", "secret")

    def test_authenticate_maps_result(self):
        auth = self._login()

        self.assertEqual(auth.authentication_token, "token")
        self.assertEqual(auth.current_time, 1000)
        self.assertEqual(auth.expiration, 1000 + 60 * 60 * 1000)
        self.assertEqual(auth.shard_id, "s1")
        self.assertEqual(auth.lifetime_ms, 60 * 60 * 1000)
        self.user_store.authenticate.assert_called_once_with(
            "user", "pass", "key", "secret"
        )

    def test_authenticate_opens_shard_note_store(self):
        self._login()
        self.mocks[0].assert_any_call("https://sandbox.evernote.com/edam/user")
        self.mocks[0].assert_any_call("https://sandbox.evernote.com/edam/note/s1")
        self.assertIs(self.client.note_store, self.note_store)

    def test_note_store_requires_login(self):
        with self.assertRaises(RemoteError):
            self.client.list_notebooks("token")

    def test_authentication_error_keeps_parameter_and_code(self):
        self.user_store.authenticate.side_effect = EDAMUserException(
            errorCode=EDAMErrorCode.INVALID_AUTH, parameter="password"
        )

        with self.assertRaises(RemoteAuthError) as ctx:
            self.client.authenticate("user", "bad", "key", "secret")

        self.assertEqual(ctx.exception.parameter, "password")
        self.assertEqual(ctx.exception.error_code, "INVALID_AUTH")
        self.assertIn("parameter: password", str(ctx.exception))

    def test_authentication_without_shard_is_an_error(self):
        self.user_store.authenticate.return_value = EdamAuthResult(
            authenticationToken="token", currentTime=0, expiration=1
        )
        with self.assertRaises(RemoteError):
            self.client.authenticate("user", "pass", "key", "secret")

    def test_refresh_authentication(self):
        self.user_store.refreshAuthentication.return_value = _edam_auth("fresh")
        auth = self.client.refresh_authentication("token")
        self.assertEqual(auth.authentication_token, "fresh")

    def test_upload_limit(self):
        self.user_store.getUser.return_value = Types.User(
            accounting=Types.Accounting(uploadLimit=60_000_000)
        )
        self.assertEqual(self.client.get_upload_limit("token"), 60_000_000)

    def test_list_notebooks(self):
        self._login()
        self.note_store.listNotebooks.return_value = [
            Types.Notebook(guid="nb1", name="Inbox")
        ]
        notebooks = self.client.list_notebooks("token")
        self.assertEqual([(nb.guid, nb.name) for nb in notebooks], [("nb1", "Inbox")])

    def test_find_notes_metadata(self):
        self._login()
        self.note_store.findNotesMetadata.return_value = NotesMetadataList(
            startIndex=0,
            totalNotes=1,
            notes=[
                EdamNoteMetadata(
                    guid="n1",
                    title="t",
                    created=1,
                    updated=2,
                    updateSequenceNum=7,
                )
            ],
        )

        page = self.client.find_notes_metadata(
            "token", NoteFilter(notebook_guid="nb1"), 0, 100
        )

        self.assertEqual(page.total_notes, 1)
        self.assertEqual(page.notes[0].guid, "n1")
        self.assertEqual(page.notes[0].update_sequence_num, 7)
        args = self.note_store.findNotesMetadata.call_args.args
        self.assertEqual(args[1].notebookGuid, "nb1")
        self.assertEqual(args[2:4], (0, 100))
        self.assertTrue(args[4].includeTitle)

    def test_find_notes_metadata_without_notes(self):
        """A page whose notes list is absent is an empty page."""
        self._login()
        self.note_store.findNotesMetadata.return_value = NotesMetadataList(
            startIndex=0, totalNotes=0, notes=None
        )
        page = self.client.find_notes_metadata("token", NoteFilter(), 0, 100)
        self.assertEqual(page.notes, [])
        self.assertEqual(page.total_notes, 0)

    def test_get_note(self):
        self._login()
        existing = Types.Resource(
            guid="r1",
            mime="image/gif",
            data=Types.Data(bodyHash=b"\x01\x02"),
            attributes=Types.ResourceAttributes(sourceURL="http://x/b.gif"),
        )
        self.note_store.getNote.return_value = Types.Note(
            guid="n1",
            title="t",
            content="<en-note/>",
            resources=[existing],
            notebookGuid="nb1",
        )

        note = self.client.get_note("token", "n1")

        self.note_store.getNote.assert_called_once_with(
            "token", "n1", True, False, False, False
        )
        self.assertEqual(note.content, "<en-note/>")
        self.assertEqual(note.notebook_guid, "nb1")
        self.assertEqual(note.resources[0].hex_hash, "0102")
        self.assertEqual(note.resources[0].source_url, "http://x/b.gif")
        self.assertIs(note.resources[0].raw, existing)

    def test_update_note_converts_new_resources(self):
        """New resources become SDK structs; ones read from the server pass through."""
        self._login()
        existing = Types.Resource(guid="r1", mime="image/gif")
        raw = Types.Note(guid="n1", title="old", resources=[existing])
        note = Note(
            guid="n1",
            title="t",
            content="<en-note/>",
            resources=[
                Resource(data=b"", body_hash=b"", mime="image/gif", raw=existing)
            ],
            raw=raw,
        )
        note.add_resource(
            Resource(
                data=b"png",
                body_hash=b"\xaa",
                mime="image/png",
                source_url="http://x/a.png",
            )
        )
        self.note_store.updateNote.return_value = Types.Note(guid="n1", updated=99)

        self.client.update_note("token", note)

        sent = self.note_store.updateNote.call_args.args[1]
        self.assertIs(sent, raw)
        self.assertEqual(sent.title, "t")
        self.assertEqual(sent.content, "<en-note/>")
        self.assertIs(sent.resources[0], existing)

        added = sent.resources[1]
        self.assertIsInstance(added, Types.Resource)
        self.assertEqual(added.mime, "image/png")
        self.assertEqual(added.data.body, b"png")
        self.assertEqual(added.data.bodyHash, b"\xaa")
        self.assertEqual(added.data.size, 3)
        self.assertEqual(added.attributes.sourceURL, "http://x/a.png")
        self.assertFalse(added.attributes.attachment)
        self.assertFalse(added.attributes.clientWillIndex)

        self.assertEqual(note.updated, 99)
        self.assertEqual(note.raw.updated, 99)

    def test_update_note_without_raw(self):
        self._login()
        self.note_store.updateNote.return_value = Types.Note(guid="n1", updated=5)
        note = Note(guid="n1", title="t", content="<en-note/>")

        self.client.update_note("token", note)

        sent = self.note_store.updateNote.call_args.args[1]
        self.assertIsInstance(sent, Types.Note)
        self.assertEqual(sent.guid, "n1")
        self.assertEqual(sent.resources, [])

    def test_sync_state_uploaded(self):
        self._login()
        self.note_store.getSyncState.return_value = SyncState(uploaded=1234)
        self.assertEqual(self.client.get_sync_state_uploaded("token"), 1234)


if __name__ == "__main__":
    unittest.main()
