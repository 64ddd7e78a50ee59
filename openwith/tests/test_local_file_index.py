from __future__ import annotations

import os
from pathlib import Path

from openwith.core.resolver import LocalFileContentIndex, QueryVariant, fetch_inline_bytes, resolve
from openwith.core.resolver.sniff import sniff_media_type, uri_to_local_path
from openwith.core.share import EXTRA_STREAM, ContentReference, ReferenceEntry, ShareEvent, normalize


def test_sniff_prefers_magic_over_extension(tmp_path: Path) -> None:
    p = tmp_path / "actually_png.txt"
    p.write_bytes(b"\x89PNG\r\n\x1a\n" + b"\x00" * 16)

    sniffed = sniff_media_type(str(p))

    assert sniffed.mime_type == "image/png"
    assert sniffed.confidence == "high"


def test_sniff_detects_mp4_brand(tmp_path: Path) -> None:
    p = tmp_path / "movie.bin"
    p.write_bytes(b"\x00\x00\x00\x18ftypisom" + b"\x00" * 16)
    assert sniff_media_type(str(p)).mime_type == "video/mp4"


def test_sniff_falls_back_to_extension_then_text(tmp_path: Path) -> None:
    csv = tmp_path / "data.csv"
    csv.write_text("a,b\n1,2\n", encoding="utf-8")
    blob = tmp_path / "blob"
    blob.write_bytes(b"\x00\x01\x02")
    note = tmp_path / "note"
    note.write_text("just words", encoding="utf-8")

    assert sniff_media_type(str(csv)).mime_type == "text/csv"
    assert sniff_media_type(str(blob)).mime_type is None
    assert sniff_media_type(str(note)).mime_type == "text/plain"


def test_uri_to_local_path(tmp_path: Path) -> None:
    p = tmp_path / "my file.jpg"
    assert uri_to_local_path(p.as_uri()) == str(p)
    assert uri_to_local_path(str(p)) == str(p)
    assert uri_to_local_path("content://media/1") is None
    assert uri_to_local_path("file://remote-host/x.jpg") is None


def test_local_index_resolves_image(tmp_path: Path) -> None:
    p = tmp_path / "a.jpg"
    p.write_bytes(b"\xff\xd8\xff\xe0" + b"\x00" * 96)
    index = LocalFileContentIndex()

    assert index.type_of(p.as_uri()) == "image/jpeg"
    attrs = resolve("image/jpeg", p.as_uri(), index)

    assert attrs == {
        "id": str(os.stat(p).st_ino),
        "name": "a.jpg",
        "path": str(p),
        "size": "100",
        "duration": "",
    }


def test_local_index_unknown_paths(tmp_path: Path) -> None:
    index = LocalFileContentIndex()
    missing = tmp_path / "missing.png"

    assert index.type_of(str(missing)) is None
    assert index.type_of(str(tmp_path)) is None
    assert resolve("image/png", str(missing), index) == {}
    assert index.query(QueryVariant.NONE, str(missing)) is None


def test_local_video_has_empty_duration(tmp_path: Path) -> None:
    p = tmp_path / "v.webm"
    p.write_bytes(b"\x1a\x45\xdf\xa3" + b"\x00" * 12)

    event = ShareEvent.create(action="android.intent.action.VIEW", extras={EXTRA_STREAM: p.as_uri()})
    doc = normalize(event, LocalFileContentIndex())

    item = doc["items"][0]
    assert item["type"] == "video/webm"
    assert item["isVideo"] is True
    assert item["duration"] == ""
    assert item["size"] == "16"


def test_local_clip_mixes_files_and_drops_untyped(tmp_path: Path) -> None:
    gif = tmp_path / "g.gif"
    gif.write_bytes(b"GIF89a" + b"\x00" * 10)
    blob = tmp_path / "blob"
    blob.write_bytes(b"\x00\x01")

    event = ShareEvent.create(
        action="android.intent.action.SEND_MULTIPLE",
        clip=(
            ReferenceEntry(ContentReference(str(blob))),
            ReferenceEntry(ContentReference(str(gif))),
        ),
    )
    doc = normalize(event, LocalFileContentIndex())

    assert [i["name"] for i in doc["items"]] == ["g.gif"]


def test_local_fetch(tmp_path: Path) -> None:
    p = tmp_path / "t.txt"
    p.write_text("hi", encoding="utf-8")
    index = LocalFileContentIndex()

    assert fetch_inline_bytes(str(p), index).data == b"hi"
    assert fetch_inline_bytes(str(tmp_path / "nope"), index).error == "not_found"
    assert fetch_inline_bytes("content://x", index).error == "not_found"
