from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class RectifierModel(BaseModel):
    """Project-wide base model; unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid")


__all__ = ["RectifierModel"]
