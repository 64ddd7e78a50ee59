"""Resource resolution for shared content references.

The resolver turns an opaque content reference plus its declared media type
into a best-effort attribute set by querying a content index.

Security notes:
- Index answers are untrusted; every gap degrades to an empty mapping.
- Query result handles are always released before returning.
"""

from .contracts import ContentIndex, MediaRecord, ResultHandle, RowsHandle
from .indexes import LocalFileContentIndex, MemoryContentIndex, SQLiteContentIndex
from .resolver import DEFAULT_MAX_INLINE_BYTES, InlineFetchResult, fetch_inline_bytes, resolve
from .variants import IMAGE_PROJECTION, VIDEO_PROJECTION, QueryVariant, classify

__all__ = [
    "ContentIndex",
    "ResultHandle",
    "RowsHandle",
    "MediaRecord",
    "QueryVariant",
    "IMAGE_PROJECTION",
    "VIDEO_PROJECTION",
    "classify",
    "resolve",
    "fetch_inline_bytes",
    "InlineFetchResult",
    "DEFAULT_MAX_INLINE_BYTES",
    "LocalFileContentIndex",
    "MemoryContentIndex",
    "SQLiteContentIndex",
]
