from __future__ import annotations

import io
from dataclasses import dataclass, field
from typing import BinaryIO, Dict, Iterable, List, Optional

from ..contracts import MediaRecord, RowsHandle
from ..variants import QueryVariant


@dataclass(slots=True)
class MemoryContentIndex:
    """In-memory content index keyed by URI.

    Useful for embedding hosts that already hold metadata, and for tests.
    Content bytes are optional; a record without bytes cannot be streamed.

    """

    records: Dict[str, MediaRecord] = field(default_factory=dict)
    contents: Dict[str, bytes] = field(default_factory=dict)

    @classmethod
    def from_records(cls, records: Iterable[MediaRecord]) -> "MemoryContentIndex":
        return cls(records={r.uri: r for r in records})

    def add(self, record: MediaRecord, content: Optional[bytes] = None) -> None:
        self.records[record.uri] = record
        if content is not None:
            self.contents[record.uri] = bytes(content)

    def list_media(self) -> List[MediaRecord]:
        return sorted(self.records.values(), key=lambda r: r.uri)

    def type_of(self, uri: str) -> Optional[str]:
        record = self.records.get(uri)
        return record.mime_type if record is not None else None

    def query(self, variant: QueryVariant, uri: str) -> Optional[RowsHandle]:
        if variant is QueryVariant.NONE:
            return None
        columns = variant.projection
        record = self.records.get(uri)
        if record is None:
            return RowsHandle(columns=columns)
        row = record.row()
        return RowsHandle(columns=columns, rows=({c: row[c] for c in columns},))

    def open_stream(self, uri: str) -> BinaryIO:
        if uri not in self.contents:
            raise FileNotFoundError(f"no content for {uri}")
        return io.BytesIO(self.contents[uri])
