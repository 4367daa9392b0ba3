"""
Runtime configuration.

The API identity (consumer key and secret) ships with the package as
``resources/api_identity.json``. Environment variables override the bundled
values:
  IMGRECTIFIER_CONSUMER_KEY
  IMGRECTIFIER_CONSUMER_SECRET
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime
from importlib import resources
from typing import Any, Dict, Optional

from pydantic import Field, ValidationError

from .exceptions import ConfigurationError
from .models._base import RectifierModel

LOGGER = logging.getLogger(__name__)

IDENTITY_RESOURCE = "api_identity.json"
PRODUCTION_HOST = "www.evernote.com"
SANDBOX_HOST = "sandbox.evernote.com"
DEFAULT_PAGE_SIZE = 100

_ENV_OVERRIDES = {
    "consumer_key": "IMGRECTIFIER_CONSUMER_KEY",
    "consumer_secret": "IMGRECTIFIER_CONSUMER_SECRET",
}


class ApiIdentity(RectifierModel):
    consumer_key: str = Field(min_length=1)
    consumer_secret: str = Field(min_length=1)


def _read_identity(path: Optional[str]) -> Dict[str, Any]:
    if path is None:
        source = resources.files("imgrectifier.resources").joinpath(IDENTITY_RESOURCE)
        text = source.read_text(encoding="utf-8")
    else:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    return json.loads(text)


def load_api_identity(path: Optional[str] = None) -> ApiIdentity:
    """Load the consumer key/secret, failing loudly if they can't be read."""
    where = path or IDENTITY_RESOURCE
    try:
        data = _read_identity(path)
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(
            f"couldn't load API identity from {where}: {exc}"
        ) from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"couldn't load API identity from {where}")

    for key, env_name in _ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            LOGGER.debug("Using %s from %s", key, env_name)
            data[key] = value

    try:
        return ApiIdentity.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(
            f"invalid API identity in {where}: {exc.error_count()} error(s)"
        ) from exc


@dataclass(frozen=True)
class RectifierOptions:
    sandbox: bool = False
    notebook: Optional[str] = None
    created_since: Optional[datetime] = None
    updated_since: Optional[datetime] = None
    reserve: int = 0
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def evernote_host(self) -> str:
        return SANDBOX_HOST if self.sandbox else PRODUCTION_HOST

    @property
    def user_store_url(self) -> str:
        return f"https://{self.evernote_host}/edam/user"

    def note_store_url(self, shard_id: str) -> str:
        return f"https://{self.evernote_host}/edam/note/{shard_id}"
