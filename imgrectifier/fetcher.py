"""Single-shot HTTP image download."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import requests

from . import USER_AGENT

LOGGER = logging.getLogger(__name__)

DEFAULT_MIME = "application/octet-stream"
DEFAULT_TIMEOUT = 60


@dataclass(frozen=True)
class FetchedImage:
    data: bytes
    mime_type: str


class ImageFetcher:
    """
    GET an image once. Returns ``None`` for unsupported schemes, non-2xx
    responses and network errors; callers leave those images alone.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = USER_AGENT
        self._session = session
        self._timeout = timeout

    def fetch(self, url: str) -> Optional[FetchedImage]:
        if url.lower().startswith("file:"):
            LOGGER.warning("file:// scheme is not supported: %s", url)
            return None

        LOGGER.debug("fetching %s", url)
        try:
            resp = self._session.get(url, timeout=self._timeout)
        except requests.RequestException as exc:
            LOGGER.warning("couldn't GET %s: %s", url, exc)
            return None

        code = getattr(resp, "status_code", 0)
        if not 200 <= code < 300:
            LOGGER.warning("couldn't GET %s: %d %s", url, code, resp.reason)
            resp.close()
            return None

        return FetchedImage(data=resp.content, mime_type=self._mime_of(resp))

    @staticmethod
    def _mime_of(resp: requests.Response) -> str:
        header = resp.headers.get("Content-Type")
        if not header:
            return DEFAULT_MIME
        return header.split(";", 1)[0].strip().lower() or DEFAULT_MIME
