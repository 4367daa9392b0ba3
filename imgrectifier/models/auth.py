"""Authentication payloads returned by the user store."""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from ._base import RectifierModel


class AuthenticationResult(RectifierModel):
    """
    Token plus the server's view of time.

    ``current_time`` and ``expiration`` are server epoch milliseconds; only
    their difference is meaningful locally.
    """

    authentication_token: str = Field(min_length=1)
    current_time: int
    expiration: int
    shard_id: Optional[str] = None

    @property
    def lifetime_ms(self) -> int:
        return self.expiration - self.current_time
