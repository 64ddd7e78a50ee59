from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple

COLUMN_ID: str = "_id"
COLUMN_DISPLAY_NAME: str = "_display_name"
COLUMN_DATA: str = "_data"
COLUMN_SIZE: str = "_size"
COLUMN_DURATION: str = "duration"

IMAGE_PROJECTION: Tuple[str, ...] = (COLUMN_ID, COLUMN_DISPLAY_NAME, COLUMN_DATA, COLUMN_SIZE)
VIDEO_PROJECTION: Tuple[str, ...] = IMAGE_PROJECTION + (COLUMN_DURATION,)


class QueryVariant(str, Enum):
    """Metadata query variants. The variant fixes the requested column set."""

    IMAGE = "image"
    VIDEO = "video"
    NONE = "none"

    @property
    def projection(self) -> Tuple[str, ...]:
        if self is QueryVariant.VIDEO:
            return VIDEO_PROJECTION
        if self is QueryVariant.IMAGE:
            return IMAGE_PROJECTION
        return ()


def classify(declared_type: Optional[str]) -> QueryVariant:
    """Select the query variant for a declared media type.

    - "video/*" -> VIDEO
    - "image/*" -> IMAGE
    - anything else (including None) -> NONE

    """

    mt = declared_type or ""
    if mt.startswith("video/"):
        return QueryVariant.VIDEO
    if mt.startswith("image/"):
        return QueryVariant.IMAGE
    return QueryVariant.NONE
