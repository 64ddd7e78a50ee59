from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, List, Mapping, Optional, Tuple

from openwith.core.errors import ContentIndexError

from ..contracts import MediaRecord
from ..variants import COLUMN_DATA, QueryVariant


class SQLiteResultHandle:
    """ResultHandle over an open sqlite cursor.

    Owns both the cursor and its connection; close() releases both.
    """

    def __init__(self, con: sqlite3.Connection, cur: sqlite3.Cursor):
        self._con = con
        self._cur = cur
        self._closed = False

    @property
    def columns(self) -> Tuple[str, ...]:
        return tuple(d[0] for d in (self._cur.description or ()))

    @property
    def closed(self) -> bool:
        return self._closed

    def first(self) -> Optional[Mapping[str, Any]]:
        row = self._cur.fetchone()
        if row is None:
            return None
        return dict(zip(self.columns, row))

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._cur.close()
        finally:
            self._con.close()


@dataclass(slots=True)
class SQLiteContentIndex:
    """SQLite-backed media index (one row per content URI).

    Columns mirror the platform media store: _id, _display_name, _data,
    _size and duration, plus the declared mime_type.

    Security notes:
    - Treat all values read from the database as untrusted.
    - Queries are parameterized; column lists come from QueryVariant only.

    Complexity
    - type_of / query: O(log n) (primary key lookup)
    - list_media: O(limit)
    """

    db_path: Path

    def __post_init__(self) -> None:
        self.db_path = Path(self.db_path)

    def connect(self) -> sqlite3.Connection:
        """Open a SQLite connection."""

        return sqlite3.connect(str(self.db_path))

    def init_schema(self) -> None:
        """Create the media table if missing."""

        con = self.connect()
        try:
            con.executescript(
                """
                CREATE TABLE IF NOT EXISTS media (
                    uri TEXT PRIMARY KEY,
                    mime_type TEXT,
                    _id TEXT,
                    _display_name TEXT,
                    _data TEXT,
                    _size INTEGER,
                    duration INTEGER
                );
                """
            )
        finally:
            con.close()

    def add_media(self, record: MediaRecord, *, overwrite: bool = False) -> None:
        """Insert a media record. Raises ContentIndexError on duplicate URI unless overwrite."""

        self.init_schema()
        verb = "INSERT OR REPLACE" if overwrite else "INSERT"
        con = self.connect()
        try:
            with con:
                con.execute(
                    f"{verb} INTO media(uri, mime_type, _id, _display_name, _data, _size, duration) VALUES(?,?,?,?,?,?,?)",
                    (
                        record.uri,
                        record.mime_type,
                        record.media_id,
                        record.display_name,
                        record.data_path,
                        record.size_bytes,
                        record.duration_ms,
                    ),
                )
        except sqlite3.IntegrityError as e:
            raise ContentIndexError(f"media already indexed: {record.uri}") from e
        finally:
            con.close()

    def get_media(self, uri: str) -> Optional[MediaRecord]:
        """Return the stored record for a URI, or None."""

        row = self._fetch_one(
            "SELECT uri, mime_type, _id, _display_name, _data, _size, duration FROM media WHERE uri = ?",
            (uri,),
        )
        return _record_from_row(row) if row is not None else None

    def list_media(self, *, limit: int = 50, offset: int = 0) -> List[MediaRecord]:
        """List indexed media ordered by URI."""

        self.init_schema()
        limit_i = max(1, min(500, int(limit)))
        offset_i = max(0, int(offset))
        con = self.connect()
        try:
            rows = con.execute(
                "SELECT uri, mime_type, _id, _display_name, _data, _size, duration FROM media ORDER BY uri LIMIT ? OFFSET ?",
                (limit_i, offset_i),
            ).fetchall()
        finally:
            con.close()
        return [_record_from_row(r) for r in rows]

    # ContentIndex

    def type_of(self, uri: str) -> Optional[str]:
        row = self._fetch_one("SELECT mime_type FROM media WHERE uri = ?", (uri,))
        if row is None or not row[0]:
            return None
        return str(row[0])

    def query(self, variant: QueryVariant, uri: str) -> Optional[SQLiteResultHandle]:
        if variant is QueryVariant.NONE:
            return None
        cols = ", ".join(variant.projection)
        con = self.connect()
        try:
            cur = con.execute(f"SELECT {cols} FROM media WHERE uri = ?", (uri,))
        except sqlite3.Error as e:
            con.close()
            raise ContentIndexError(f"media query failed: {e}") from e
        return SQLiteResultHandle(con, cur)

    def open_stream(self, uri: str) -> BinaryIO:
        row = self._fetch_one(f"SELECT {COLUMN_DATA} FROM media WHERE uri = ?", (uri,))
        if row is None or not row[0]:
            raise FileNotFoundError(f"no data path indexed for {uri}")
        return open(str(row[0]), "rb")

    def _fetch_one(self, sql: str, params: Tuple[Any, ...]) -> Optional[Tuple[Any, ...]]:
        con = self.connect()
        try:
            return con.execute(sql, params).fetchone()
        except sqlite3.Error as e:
            raise ContentIndexError(f"media lookup failed: {e}") from e
        finally:
            con.close()


def _record_from_row(row: Tuple[Any, ...]) -> MediaRecord:
    return MediaRecord(
        uri=row[0],
        mime_type=row[1],
        media_id=row[2],
        display_name=row[3],
        data_path=row[4],
        size_bytes=int(row[5]) if row[5] is not None else None,
        duration_ms=int(row[6]) if row[6] is not None else None,
    )

