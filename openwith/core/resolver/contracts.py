from __future__ import annotations

from dataclasses import dataclass
from typing import Any, BinaryIO, Dict, Mapping, Optional, Protocol, Tuple

from .variants import (
    COLUMN_DATA,
    COLUMN_DISPLAY_NAME,
    COLUMN_DURATION,
    COLUMN_ID,
    COLUMN_SIZE,
    QueryVariant,
)


@dataclass(frozen=True, slots=True)
class MediaRecord:
    """One row of a content index.

    Values are kept as the index stores them; the resolver stringifies.
    """

    uri: str
    mime_type: Optional[str]
    media_id: Optional[str] = None
    display_name: Optional[str] = None
    data_path: Optional[str] = None
    size_bytes: Optional[int] = None
    duration_ms: Optional[int] = None

    def row(self) -> Dict[str, Any]:
        """Return the record keyed by index column names."""

        return {
            COLUMN_ID: self.media_id,
            COLUMN_DISPLAY_NAME: self.display_name,
            COLUMN_DATA: self.data_path,
            COLUMN_SIZE: self.size_bytes,
            COLUMN_DURATION: self.duration_ms,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict view (CLI and API listings)."""

        return {
            "uri": self.uri,
            "mime_type": self.mime_type,
            "id": self.media_id,
            "name": self.display_name,
            "path": self.data_path,
            "size": self.size_bytes,
            "duration": self.duration_ms,
        }


# ------------------------------
# Index Interface / Protocol
# ------------------------------


class ResultHandle(Protocol):
    """
    Result of a metadata query. Holds an external resource until closed.
    """

    @property
    def columns(self) -> Tuple[str, ...]:
        """
        Column names present in the result shape.
        """
        ...

    def first(self) -> Optional[Mapping[str, Any]]:
        """
        Return the first matching row, or None when nothing matched.
        """
        ...

    def close(self) -> None:
        """
        Release the underlying resource. Must be safe to call once.
        """
        ...


class ContentIndex(Protocol):
    """
    External content index consulted by the resolver.
    """

    def type_of(self, uri: str) -> Optional[str]:
        """
        Return the declared media type of a reference, or None when unknown.
        """
        ...

    def query(self, variant: QueryVariant, uri: str) -> Optional[ResultHandle]:
        """
        Issue one metadata query requesting the variant's projection.
        """
        ...

    def open_stream(self, uri: str) -> BinaryIO:
        """
        Open a byte stream for a reference. Raises OSError on failure.
        """
        ...


@dataclass(slots=True)
class RowsHandle:
    """ResultHandle over rows already materialized in memory."""

    columns: Tuple[str, ...]
    rows: Tuple[Mapping[str, Any], ...] = ()
    closed: bool = False

    def first(self) -> Optional[Mapping[str, Any]]:
        if self.closed:
            raise ValueError("result handle is closed")
        return self.rows[0] if self.rows else None

    def close(self) -> None:
        self.closed = True
