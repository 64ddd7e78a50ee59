from __future__ import annotations

from pydantic import BaseModel, Field, model_validator
from typing import Any, Dict, List, Optional


class ApiError(BaseModel):
    """Standard API error payload."""

    error: str
    detail: Optional[str] = None


class ClipEntryIn(BaseModel):
    """One clip entry: text or uri, never both. Entries with neither are skipped."""

    text: Optional[str] = None
    uri: Optional[str] = None

    @model_validator(mode="after")
    def check_not_both(self) -> "ClipEntryIn":
        if self.text is not None and self.uri is not None:
            raise ValueError("clip entry must not carry both text and uri")
        return self


class ShareEventIn(BaseModel):
    """Wire form of a share event."""

    action: Optional[str] = None
    extras: Optional[Dict[str, Any]] = None
    clip: Optional[List[ClipEntryIn]] = None


class NormalizeOut(BaseModel):
    """Normalization result. document is null when nothing is shareable."""

    document: Optional[Dict[str, Any]] = None


class ResolveIn(BaseModel):
    """Resolve request. type defaults to the index's declared type."""

    uri: str = Field(min_length=1)
    type: Optional[str] = None


class ResolveOut(BaseModel):
    """Resolved attributes for one reference."""

    uri: str
    type: Optional[str] = None
    variant: str
    attributes: Dict[str, str] = Field(default_factory=dict)


class FetchIn(BaseModel):
    """Inline fetch request."""

    uri: str = Field(min_length=1)


class FetchOut(BaseModel):
    """Inline fetch result; data_b64 is null when the read failed."""

    ok: bool
    size_bytes: int = 0
    data_b64: Optional[str] = None
    error: Optional[str] = None


class MediaOut(BaseModel):
    """One indexed media record."""

    uri: str
    mime_type: Optional[str] = None
    id: Optional[str] = None
    name: Optional[str] = None
    path: Optional[str] = None
    size: Optional[int] = None
    duration: Optional[int] = None
