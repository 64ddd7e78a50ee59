from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from starlette.requests import Request

from openwith.api.middleware import AccessLogMiddleware, RequestIdMiddleware
from openwith.api.models import (
    ApiError,
    FetchIn,
    FetchOut,
    MediaOut,
    NormalizeOut,
    ResolveIn,
    ResolveOut,
    ShareEventIn,
)
from openwith.core.errors import ContentIndexError, InvalidShareEventError
from openwith.core.resolver import (
    DEFAULT_MAX_INLINE_BYTES,
    ContentIndex,
    LocalFileContentIndex,
    SQLiteContentIndex,
    classify,
    fetch_inline_bytes,
    resolve,
)
from openwith.core.share import normalize, share_event_from_mapping

log = logging.getLogger("openwith.api")


@dataclass(frozen=True, slots=True)
class ServiceConfig:
    """Configuration for the API service.

    Notes:
    - index_db is optional. Without it the local filesystem index is used
      and the /media listing endpoint is disabled.

    """

    index_db: Optional[Path] = None
    clip_supported: bool = True
    max_inline_bytes: int = DEFAULT_MAX_INLINE_BYTES
    log_level: str = "INFO"

    @staticmethod
    def from_env() -> "ServiceConfig":
        index_db = (os.environ.get("OPENWITH_INDEX_DB") or "").strip()
        return ServiceConfig(
            index_db=Path(index_db) if index_db else None,
            clip_supported=_env_bool("OPENWITH_CLIP_SUPPORTED", True),
            max_inline_bytes=_env_int("OPENWITH_MAX_INLINE_BYTES", DEFAULT_MAX_INLINE_BYTES),
            log_level=(os.environ.get("OPENWITH_LOG_LEVEL") or "INFO").strip().upper(),
        )


def _env_int(name: str, default: int) -> int:
    """Read an integer environment variable; invalid values fall back to default."""

    raw = os.environ.get(name, "").strip()
    if not raw:
        return int(default)
    try:
        return int(raw)
    except ValueError:
        return int(default)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


def build_index(cfg: ServiceConfig) -> ContentIndex:
    """Content index selected by configuration."""

    if cfg.index_db is not None:
        index = SQLiteContentIndex(cfg.index_db)
        index.init_schema()
        return index
    return LocalFileContentIndex()


def create_app(*, index: Optional[ContentIndex] = None, config: Optional[ServiceConfig] = None) -> FastAPI:
    """Create the FastAPI app.

    index overrides the configured content index (embedding hosts, tests).
    """

    cfg = config or ServiceConfig.from_env()
    content_index: ContentIndex = index if index is not None else build_index(cfg)

    # Logging: no payloads, level configurable by host app.
    log.setLevel(cfg.log_level)

    app = FastAPI(title="openwith API", version="0.1")
    app.state.cfg = cfg
    app.state.index = content_index

    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIdMiddleware)

    @app.exception_handler(InvalidShareEventError)
    def _invalid_event(request: Request, exc: InvalidShareEventError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content=ApiError(error="invalid_share_event", detail=str(exc)).model_dump(),
        )

    @app.exception_handler(ContentIndexError)
    def _index_error(request: Request, exc: ContentIndexError) -> JSONResponse:
        log.error("content index error", extra={"error": str(exc)})
        return JSONResponse(
            status_code=503,
            content=ApiError(error="content_index_unavailable").model_dump(),
        )

    @app.get("/health")
    def health() -> Dict[str, Any]:
        return {
            "ok": True,
            "index": type(content_index).__name__,
            "clip_supported": cfg.clip_supported,
        }

    @app.post("/normalize", response_model=NormalizeOut)
    def normalize_endpoint(
        body: ShareEventIn,
        request: Request,
        clip_supported: Optional[bool] = None,
    ) -> NormalizeOut:
        """Normalize a share event. document is null when nothing is shareable."""

        event = share_event_from_mapping(body.model_dump())
        supported = cfg.clip_supported if clip_supported is None else bool(clip_supported)
        document = normalize(event, content_index, clip_supported=supported)
        request.state.item_count = len(document["items"]) if document else 0
        return NormalizeOut(document=document)

    @app.post("/resolve", response_model=ResolveOut)
    def resolve_endpoint(body: ResolveIn) -> ResolveOut:
        """Resolve one reference into {id, name, path, size, duration}."""

        declared = body.type if body.type is not None else content_index.type_of(body.uri)
        return ResolveOut(
            uri=body.uri,
            type=declared,
            variant=classify(declared).value,
            attributes=resolve(declared, body.uri, content_index),
        )

    @app.post("/fetch", response_model=FetchOut)
    def fetch_endpoint(body: FetchIn) -> FetchOut:
        """Read a reference's bytes (bounded) and return them base64-encoded."""

        res = fetch_inline_bytes(body.uri, content_index, max_bytes=cfg.max_inline_bytes)
        return FetchOut(ok=res.ok, size_bytes=res.size_bytes, data_b64=res.to_base64(), error=res.error)

    @app.get("/media", response_model=List[MediaOut])
    def list_media_endpoint(limit: int = 50, offset: int = 0) -> List[MediaOut]:
        """List indexed media (SQLite index only)."""

        if not isinstance(content_index, SQLiteContentIndex):
            raise HTTPException(status_code=404, detail="media_listing_disabled")
        return [MediaOut(**r.to_dict()) for r in content_index.list_media(limit=limit, offset=offset)]

    return app
