from .local_files import LocalFileContentIndex
from .memory import MemoryContentIndex
from .sqlite_index import SQLiteContentIndex, SQLiteResultHandle

__all__ = [
    "LocalFileContentIndex",
    "MemoryContentIndex",
    "SQLiteContentIndex",
    "SQLiteResultHandle",
]
