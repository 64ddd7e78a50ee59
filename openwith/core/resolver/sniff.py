from __future__ import annotations

import mimetypes
import os
from dataclasses import dataclass
from typing import Optional
from urllib.parse import unquote, urlparse


@dataclass(frozen=True, slots=True)
class SniffedType:
    """Media type of a local file, with how it was determined.

    Security notes:
    - File contents are untrusted. Sniffing reads only a small prefix (bounded).

    """

    mime_type: Optional[str]
    confidence: str  # "high" | "low" | "none"


def sniff_media_type(path: str, *, prefix_bytes: int = 64) -> SniffedType:
    """Determine the media type of a local file.

    1) magic-number sniffing of a bounded prefix (high confidence)
    2) extension-based guess (low confidence)

    An unreadable file keeps the extension guess.

    """

    guessed, _enc = mimetypes.guess_type(path)

    try:
        with open(path, "rb") as f:
            head = f.read(prefix_bytes)
    except OSError:
        return SniffedType(mime_type=guessed, confidence="low" if guessed else "none")

    magic = _magic_mime(head)
    if magic is not None:
        return SniffedType(mime_type=magic, confidence="high")
    if guessed:
        return SniffedType(mime_type=guessed, confidence="low")
    if head and _looks_like_text(head):
        return SniffedType(mime_type="text/plain", confidence="low")
    return SniffedType(mime_type=None, confidence="none")


def _magic_mime(prefix: bytes) -> Optional[str]:
    """Detect mime from common image/video magic headers."""

    if prefix.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if prefix.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if prefix.startswith(b"GIF87a") or prefix.startswith(b"GIF89a"):
        return "image/gif"
    if prefix[:4] == b"RIFF" and prefix[8:12] == b"WEBP":
        return "image/webp"
    if prefix[:4] == b"RIFF" and prefix[8:12] == b"AVI ":
        return "video/x-msvideo"
    if prefix.startswith(b"\x1a\x45\xdf\xa3"):
        return "video/webm"
    if prefix[4:8] == b"ftyp":
        brand = prefix[8:12]
        if brand.startswith(b"qt"):
            return "video/quicktime"
        if brand in {b"heic", b"heix", b"mif1"}:
            return "image/heic"
        return "video/mp4"
    if prefix.startswith(b"%PDF-"):
        return "application/pdf"
    return None


def _looks_like_text(prefix: bytes) -> bool:
    if b"\x00" in prefix:
        return False
    try:
        prefix.decode("utf-8")
    except UnicodeDecodeError as e:
        # A multi-byte sequence may be cut by the prefix boundary.
        return e.start >= len(prefix) - 3
    return True


def uri_to_local_path(uri: str) -> Optional[str]:
    """Map a file:// URI or a plain path to an absolute local path.

    Other schemes (content://, http://) return None.

    """

    if uri.startswith("file://"):
        parsed = urlparse(uri)
        if parsed.netloc not in ("", "localhost"):
            return None
        return os.path.abspath(unquote(parsed.path))
    if "://" in uri:
        return None
    return os.path.abspath(uri)
