from __future__ import annotations

import base64
from pathlib import Path

from fastapi.testclient import TestClient

from openwith.api.server import ServiceConfig, create_app
from openwith.core.resolver import MediaRecord, MemoryContentIndex, SQLiteContentIndex


def _client(**cfg) -> TestClient:
    index = MemoryContentIndex()
    index.add(
        MediaRecord(
            uri="content://media/external/images/7",
            mime_type="image/jpeg",
            media_id="7",
            display_name="a.jpg",
            data_path="/x/a.jpg",
            size_bytes=100,
        ),
        content=b"jpeg-bytes",
    )
    return TestClient(create_app(index=index, config=ServiceConfig(**cfg)))


def test_health_and_request_id():
    client = _client()

    r = client.get("/health", headers={"X-Request-ID": "abc-123"})

    assert r.status_code == 200
    assert r.json() == {"ok": True, "index": "MemoryContentIndex", "clip_supported": True}
    assert r.headers["x-request-id"] == "abc-123"


def test_unsafe_request_id_is_replaced():
    r = _client().get("/health", headers={"X-Request-ID": "bad id <script>"})
    assert r.headers["x-request-id"] != "bad id <script>"
    assert len(r.headers["x-request-id"]) == 32


def test_normalize_text_clip():
    r = _client().post(
        "/normalize",
        json={"action": "send", "extras": {"exit_on_sent": True}, "clip": [{"text": "hello"}]},
    )

    assert r.status_code == 200
    assert r.json() == {
        "document": {"action": "SEND", "exit": True, "items": [{"type": "text/plain", "text": "hello"}]}
    }


def test_normalize_stream_fallback_and_no_document():
    client = _client()
    body = {
        "action": "android.intent.action.VIEW",
        "extras": {"android.intent.extra.STREAM": "content://media/external/images/7"},
        "clip": [{"text": "ignored"}],
    }

    r = client.post("/normalize", params={"clip_supported": "false"}, json=body)
    item = r.json()["document"]["items"][0]
    assert item["id"] == "7"
    assert item["duration"] == ""

    r2 = client.post("/normalize", json={"action": "send"})
    assert r2.status_code == 200
    assert r2.json() == {"document": None}


def test_normalize_respects_configured_clip_support():
    client = _client(clip_supported=False)
    r = client.post("/normalize", json={"action": "send", "clip": [{"text": "hello"}]})
    assert r.json() == {"document": None}


def test_normalize_rejects_ambiguous_clip_entry():
    r = _client().post("/normalize", json={"action": "send", "clip": [{"text": "a", "uri": "content://x"}]})
    assert r.status_code == 422


def test_normalize_skips_empty_clip_entry():
    r = _client().post("/normalize", json={"action": "send", "clip": [{"text": "hello"}, {}]})
    assert r.status_code == 200
    assert r.json()["document"]["items"] == [{"type": "text/plain", "text": "hello"}]


def test_resolve_endpoint():
    client = _client()

    r = client.post("/resolve", json={"uri": "content://media/external/images/7"})
    data = r.json()
    assert data["type"] == "image/jpeg"
    assert data["variant"] == "image"
    assert data["attributes"]["name"] == "a.jpg"

    r2 = client.post("/resolve", json={"uri": "content://unknown"})
    assert r2.json()["variant"] == "none"
    assert r2.json()["attributes"] == {}


def test_fetch_endpoint():
    client = _client()

    ok = client.post("/fetch", json={"uri": "content://media/external/images/7"}).json()
    assert ok["ok"] is True
    assert base64.b64decode(ok["data_b64"]) == b"jpeg-bytes"

    missing = client.post("/fetch", json={"uri": "content://nope"}).json()
    assert missing == {"ok": False, "size_bytes": 0, "data_b64": None, "error": "not_found"}


def test_fetch_size_limit_from_config():
    r = _client(max_inline_bytes=4).post("/fetch", json={"uri": "content://media/external/images/7"})
    assert r.json()["error"] == "too_large"


def test_media_listing_requires_sqlite_index(tmp_path: Path, monkeypatch):
    assert _client().get("/media").status_code == 404

    db = tmp_path / "media.db"
    SQLiteContentIndex(db).add_media(MediaRecord(uri="content://a", mime_type="image/png", media_id="1"))
    monkeypatch.setenv("OPENWITH_INDEX_DB", str(db))
    monkeypatch.setenv("OPENWITH_CLIP_SUPPORTED", "0")

    client = TestClient(create_app())

    assert client.get("/health").json()["clip_supported"] is False
    media = client.get("/media").json()
    assert media == [
        {
            "uri": "content://a",
            "mime_type": "image/png",
            "id": "1",
            "name": None,
            "path": None,
            "size": None,
            "duration": None,
        }
    ]


def test_service_config_from_env(monkeypatch):
    monkeypatch.delenv("OPENWITH_INDEX_DB", raising=False)
    monkeypatch.setenv("OPENWITH_MAX_INLINE_BYTES", "not-a-number")
    monkeypatch.setenv("OPENWITH_LOG_LEVEL", "debug")

    cfg = ServiceConfig.from_env()

    assert cfg.index_db is None
    assert cfg.max_inline_bytes == 25 * 1024 * 1024
    assert cfg.log_level == "DEBUG"
    assert cfg.clip_supported is True
