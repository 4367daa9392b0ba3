"""Content digests used to link resources into note markup."""

import hashlib


def content_digest(data: bytes) -> bytes:
    """MD5 of ``data``; Evernote identifies resource bodies by this hash."""
    return hashlib.md5(data).digest()
