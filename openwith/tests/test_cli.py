from __future__ import annotations

import base64
import json
from pathlib import Path

import pytest

from openwith.cli.main import main


def _write_event(tmp_path: Path, event: dict) -> str:
    p = tmp_path / "event.json"
    p.write_text(json.dumps(event), encoding="utf-8")
    return str(p)


def test_cli_normalize_text_event(tmp_path: Path, capsys) -> None:
    path = _write_event(
        tmp_path,
        {"action": "send", "extras": {"exit_on_sent": True}, "clip": [{"text": "hello"}]},
    )

    assert main(["normalize", path]) == 0

    doc = json.loads(capsys.readouterr().out)
    assert doc == {"action": "SEND", "exit": True, "items": [{"type": "text/plain", "text": "hello"}]}


def test_cli_normalize_prints_null_when_nothing_shareable(tmp_path: Path, capsys) -> None:
    path = _write_event(tmp_path, {"action": "view"})

    assert main(["normalize", path]) == 0
    assert json.loads(capsys.readouterr().out) is None


def test_cli_normalize_invalid_event(tmp_path: Path, capsys) -> None:
    path = _write_event(tmp_path, {"action": "send", "clip": [{"text": "a", "uri": "content://x"}]})

    assert main(["normalize", path]) == 2
    assert "error:" in capsys.readouterr().err


def test_cli_normalize_local_file_stream(tmp_path: Path, capsys) -> None:
    photo = tmp_path / "p.png"
    photo.write_bytes(b"\x89PNG\r\n\x1a\n" + b"\x00" * 8)
    path = _write_event(
        tmp_path,
        {
            "action": "android.intent.action.SEND",
            "extras": {"android.intent.extra.STREAM": photo.as_uri()},
            "clip": [{"text": "ignored"}],
        },
    )

    assert main(["normalize", path, "--no-clip"]) == 0

    item = json.loads(capsys.readouterr().out)["items"][0]
    assert item["type"] == "image/png"
    assert item["name"] == "p.png"
    assert item["size"] == "16"


def test_cli_index_roundtrip_and_resolve(tmp_path: Path, capsys) -> None:
    db = str(tmp_path / "media.db")

    assert main(["index-init", "--db", db]) == 0
    assert (
        main(
            [
                "index-add",
                "content://v/1",
                "--db",
                db,
                "--mime",
                "video/mp4",
                "--id",
                "1",
                "--name",
                "v.mp4",
                "--duration",
                "900",
            ]
        )
        == 0
    )
    assert main(["index-add", "content://v/1", "--db", db, "--mime", "video/mp4"]) == 2
    capsys.readouterr()

    assert main(["index-list", "--db", db]) == 0
    listed = json.loads(capsys.readouterr().out)
    assert [r["uri"] for r in listed] == ["content://v/1"]

    assert main(["resolve", "content://v/1", "--index-db", db]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["variant"] == "video"
    assert out["attributes"] == {"id": "1", "name": "v.mp4", "duration": "900"}


def test_cli_fetch(tmp_path: Path, capsys) -> None:
    src = tmp_path / "note.txt"
    src.write_bytes(b"hello")

    assert main(["fetch", str(src)]) == 0
    out = json.loads(capsys.readouterr().out)
    assert base64.b64decode(out["data_b64"]) == b"hello"

    dst = tmp_path / "copy.bin"
    assert main(["fetch", str(src), "--out", str(dst)]) == 0
    assert dst.read_bytes() == b"hello"

    assert main(["fetch", str(src), "--max-bytes", "2"]) == 2
    assert "too_large" in capsys.readouterr().err


def test_cli_requires_subcommand() -> None:
    with pytest.raises(SystemExit):
        main([])
