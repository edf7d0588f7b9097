"""Pydantic models for the hook envelope protocol."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, JsonValue


class StageEnvelope(BaseModel):
    """Request passed (as JSON) to a hook's ``writer``."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: str
    source_path: str
    dest_path: str
    meta: dict[str, Any] | None = None
    content: str = ""
    html: str = ""


class StageResponse(BaseModel):
    """What a hook's ``writer`` returns. Unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore")

    content: str | None = None
    name: str | None = None
    data: dict[str, JsonValue] | None = None
    extras: dict[str, JsonValue] | None = None
