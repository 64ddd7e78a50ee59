from __future__ import annotations

import base64
import logging
from contextlib import closing
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from .contracts import ContentIndex
from .variants import (
    COLUMN_DATA,
    COLUMN_DISPLAY_NAME,
    COLUMN_DURATION,
    COLUMN_ID,
    COLUMN_SIZE,
    QueryVariant,
    classify,
)

log = logging.getLogger("openwith.resolver")

DEFAULT_MAX_INLINE_BYTES: int = 25 * 1024 * 1024

_ATTRIBUTE_COLUMNS = (
    ("id", COLUMN_ID),
    ("name", COLUMN_DISPLAY_NAME),
    ("path", COLUMN_DATA),
    ("size", COLUMN_SIZE),
)


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def resolve(declared_type: Optional[str], uri: str, index: ContentIndex) -> Dict[str, str]:
    """Resolve a content reference into {id, name, path, size, duration}.

    Rules:
    - declared type selects the query variant (see classify); NONE issues no query
    - no handle, no matching row, or no "_id" column -> {}
    - an index that raises while querying or reading -> {} (logged)
    - id/name/path/size are omitted when their column is missing or NULL
    - duration is the column value for VIDEO ("" when NULL), "" otherwise

    The query's result handle is closed on every exit path.

    Time:  O(1) queries (at most one)
    Space: O(1)
    """

    variant = classify(declared_type)
    if variant is QueryVariant.NONE:
        return {}

    try:
        handle = index.query(variant, uri)
    except Exception as e:
        log.warning("resolve: metadata query failed", extra={"error": type(e).__name__})
        return {}
    if handle is None:
        log.debug("resolve: no result handle", extra={"variant": variant.value})
        return {}

    with closing(handle):
        try:
            columns = tuple(handle.columns)
            if COLUMN_ID not in columns:
                return {}
            row = handle.first()
        except Exception as e:
            log.warning("resolve: reading query result failed", extra={"error": type(e).__name__})
            return {}
        if row is None:
            return {}
        return _attributes_from_row(variant, columns, row)


def _attributes_from_row(
    variant: QueryVariant,
    columns: tuple,
    row: Mapping[str, Any],
) -> Dict[str, str]:
    result: Dict[str, str] = {}
    for key, column in _ATTRIBUTE_COLUMNS:
        if column not in columns:
            continue
        value = _as_text(row.get(column))
        if value is not None:
            result[key] = value

    if variant is QueryVariant.VIDEO and COLUMN_DURATION in columns:
        result["duration"] = _as_text(row.get(COLUMN_DURATION)) or ""
    else:
        result["duration"] = ""
    return result


@dataclass(frozen=True, slots=True)
class InlineFetchResult:
    """Outcome of reading a reference's bytes.

    ok=True means the read completed (data may legitimately be empty).
    ok=False carries an error kind: "not_found" | "read_failed" | "too_large".

    """

    ok: bool
    data: bytes = b""
    error: Optional[str] = None
    detail: Optional[str] = None

    @property
    def size_bytes(self) -> int:
        return len(self.data)

    def to_base64(self) -> Optional[str]:
        """Base64 text of the data (no line wrapping), or None when the read failed."""

        if not self.ok:
            return None
        return base64.b64encode(self.data).decode("ascii")


def fetch_inline_bytes(
    uri: str,
    index: ContentIndex,
    *,
    max_bytes: int = DEFAULT_MAX_INLINE_BYTES,
) -> InlineFetchResult:
    """Read the full content of a reference.

    Not part of normalization; callers use it for small inline previews.

    Security notes:
    - Reads at most max_bytes + 1 bytes; larger content is reported as too_large.
    - Never logs content bytes.

    """

    try:
        stream = index.open_stream(uri)
    except FileNotFoundError as e:
        return InlineFetchResult(ok=False, error="not_found", detail=str(e))
    except OSError as e:
        log.warning("fetch_inline_bytes: open failed", extra={"error": type(e).__name__})
        return InlineFetchResult(ok=False, error="read_failed", detail=str(e))

    max_bytes = max(0, int(max_bytes))
    try:
        with stream:
            data = stream.read(max_bytes + 1)
    except OSError as e:
        log.warning("fetch_inline_bytes: read failed", extra={"error": type(e).__name__})
        return InlineFetchResult(ok=False, error="read_failed", detail=str(e))

    if len(data) > max_bytes:
        return InlineFetchResult(ok=False, error="too_large", detail=f"content exceeds {max_bytes} bytes")
    return InlineFetchResult(ok=True, data=bytes(data))
