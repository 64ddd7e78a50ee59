from __future__ import annotations

import os
from dataclasses import dataclass
from typing import BinaryIO, Optional

from ..contracts import MediaRecord, RowsHandle
from ..sniff import sniff_media_type, uri_to_local_path
from ..variants import QueryVariant


@dataclass(frozen=True, slots=True)
class LocalFileContentIndex:
    """Content index over the local filesystem (file:// URIs and plain paths).

    Records are derived from os.stat:
    - _id: inode number
    - _display_name: basename
    - _data: absolute path
    - _size: size in bytes
    - duration: unknown (NULL)

    Security notes:
    - Type sniffing reads a bounded prefix only.
    - Non-regular files (directories, devices) are treated as unknown.

    """

    prefix_bytes: int = 64

    def _regular_path(self, uri: str) -> Optional[str]:
        path = uri_to_local_path(uri)
        if path is None or not os.path.isfile(path):
            return None
        return path

    def type_of(self, uri: str) -> Optional[str]:
        path = self._regular_path(uri)
        if path is None:
            return None
        return sniff_media_type(path, prefix_bytes=self.prefix_bytes).mime_type

    def query(self, variant: QueryVariant, uri: str) -> Optional[RowsHandle]:
        if variant is QueryVariant.NONE:
            return None
        columns = variant.projection
        path = self._regular_path(uri)
        if path is None:
            return RowsHandle(columns=columns)
        try:
            st = os.stat(path)
        except OSError:
            return RowsHandle(columns=columns)

        record = MediaRecord(
            uri=uri,
            mime_type=None,
            media_id=str(st.st_ino),
            display_name=os.path.basename(path),
            data_path=path,
            size_bytes=int(st.st_size),
        )
        row = record.row()
        return RowsHandle(columns=columns, rows=({c: row[c] for c in columns},))

    def open_stream(self, uri: str) -> BinaryIO:
        path = uri_to_local_path(uri)
        if path is None:
            raise FileNotFoundError(f"not a local file reference: {uri}")
        return open(path, "rb")
