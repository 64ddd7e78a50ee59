from __future__ import annotations

import argparse
import json
import sys
from typing import Any, List, Optional

from openwith.core.errors import ContentIndexError, InvalidShareEventError
from openwith.core.resolver import (
    DEFAULT_MAX_INLINE_BYTES,
    ContentIndex,
    LocalFileContentIndex,
    MediaRecord,
    SQLiteContentIndex,
    classify,
    fetch_inline_bytes,
    resolve,
)
from openwith.core.share import normalize, share_event_from_mapping
from openwith.utils.json_safe import to_jsonable


def _print_json(obj: Any, *, indent: Optional[int] = 2) -> None:
    """Print JSON to stdout."""
    print(json.dumps(to_jsonable(obj), indent=indent, sort_keys=True))


def _open_index(db: Optional[str]) -> ContentIndex:
    """SQLite index when --index-db is given, local filesystem otherwise."""

    if db:
        return SQLiteContentIndex(db)
    return LocalFileContentIndex()


def _read_event_json(source: str) -> Any:
    if source == "-":
        return json.load(sys.stdin)
    with open(source, "r", encoding="utf-8") as f:
        return json.load(f)


def cmd_normalize(args: argparse.Namespace) -> int:
    """Normalize a share event (JSON file or '-' for stdin).

    Prints the share document, or null when nothing is shareable.

    """

    try:
        raw = _read_event_json(args.event)
        event = share_event_from_mapping(raw)
    except (OSError, json.JSONDecodeError, InvalidShareEventError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    index = _open_index(args.index_db)
    document = normalize(event, index, clip_supported=not args.no_clip)
    _print_json(document, indent=args.indent)
    return 0


def cmd_resolve(args: argparse.Namespace) -> int:
    """Resolve one reference into {id, name, path, size, duration}."""

    index = _open_index(args.index_db)
    try:
        declared = args.type if args.type else index.type_of(args.uri)
        attributes = resolve(declared, args.uri, index)
    except ContentIndexError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    _print_json(
        {
            "uri": args.uri,
            "type": declared,
            "variant": classify(declared).value,
            "attributes": attributes,
        }
    )
    return 0


def cmd_fetch(args: argparse.Namespace) -> int:
    """Read a reference's bytes; write them to --out or print base64."""

    index = _open_index(args.index_db)
    try:
        res = fetch_inline_bytes(args.uri, index, max_bytes=args.max_bytes)
    except ContentIndexError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    if not res.ok:
        print(f"error: fetch failed ({res.error}): {res.detail}", file=sys.stderr)
        return 2

    if args.out:
        with open(args.out, "wb") as f:
            f.write(res.data)
        _print_json({"ok": True, "size_bytes": res.size_bytes, "out": args.out})
    else:
        _print_json({"ok": True, "size_bytes": res.size_bytes, "data_b64": res.to_base64()})
    return 0


def cmd_index_init(args: argparse.Namespace) -> int:
    """Create the SQLite media index."""
    SQLiteContentIndex(args.db).init_schema()
    print(f"initialized: {args.db}")
    return 0


def cmd_index_add(args: argparse.Namespace) -> int:
    """Add one media record to the SQLite index."""

    record = MediaRecord(
        uri=args.uri,
        mime_type=args.mime,
        media_id=args.id,
        display_name=args.name,
        data_path=args.path,
        size_bytes=args.size,
        duration_ms=args.duration,
    )
    try:
        SQLiteContentIndex(args.db).add_media(record, overwrite=args.overwrite)
    except ContentIndexError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    _print_json(record.to_dict())
    return 0


def cmd_index_list(args: argparse.Namespace) -> int:
    """List records in the SQLite index."""

    records = SQLiteContentIndex(args.db).list_media(limit=args.limit)
    _print_json([r.to_dict() for r in records])
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the openwith API server.

    Notes:
    - Binds to 127.0.0.1 by default.
    - --index-db overrides OPENWITH_INDEX_DB.

    """

    try:
        import uvicorn
    except ImportError as e:
        print(f"error: uvicorn is required to serve the API: {e}", file=sys.stderr)
        return 2

    from dataclasses import replace
    from pathlib import Path

    from openwith.api.server import ServiceConfig, create_app

    cfg = ServiceConfig.from_env()
    if args.index_db:
        cfg = replace(cfg, index_db=Path(args.index_db))

    app = create_app(config=cfg)
    uvicorn.run(app, host=args.host, port=int(args.port), log_level=args.log_level)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="openwith",
        description="Normalize platform share intents into a canonical JSON document",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    nz = sub.add_parser("normalize", help="Normalize a share event JSON file")
    nz.add_argument("event", help="Path to share event JSON ('-' for stdin)")
    nz.add_argument("--index-db", default=None, help="SQLite media index (default: local filesystem)")
    nz.add_argument(
        "--no-clip",
        action="store_true",
        help="Treat the platform as lacking clip payload support (stream extra only)",
    )
    nz.add_argument("--indent", type=int, default=2, help="JSON indent (default: 2)")
    nz.set_defaults(func=cmd_normalize)

    rs = sub.add_parser("resolve", help="Resolve a content reference into file attributes")
    rs.add_argument("uri", help="Content reference (URI or local path)")
    rs.add_argument("--type", default=None, help="Declared media type (default: ask the index)")
    rs.add_argument("--index-db", default=None, help="SQLite media index (default: local filesystem)")
    rs.set_defaults(func=cmd_resolve)

    ft = sub.add_parser("fetch", help="Read the bytes behind a content reference")
    ft.add_argument("uri", help="Content reference (URI or local path)")
    ft.add_argument("--index-db", default=None, help="SQLite media index (default: local filesystem)")
    ft.add_argument(
        "--max-bytes",
        type=int,
        default=DEFAULT_MAX_INLINE_BYTES,
        help="Fail when content is larger than this",
    )
    ft.add_argument("--out", default=None, help="Write bytes to this file instead of printing base64")
    ft.set_defaults(func=cmd_fetch)

    # --- SQLite media index commands ---
    ii = sub.add_parser("index-init", help="Initialize a SQLite media index")
    ii.add_argument("--db", required=True, help="Path to SQLite DB file")
    ii.set_defaults(func=cmd_index_init)

    ia = sub.add_parser("index-add", help="Add a media record to a SQLite media index")
    ia.add_argument("uri", help="Content reference")
    ia.add_argument("--db", required=True, help="Path to SQLite DB file")
    ia.add_argument("--mime", required=True, help="Declared media type")
    ia.add_argument("--id", default=None, help="Media id")
    ia.add_argument("--name", default=None, help="Display name")
    ia.add_argument("--path", default=None, help="File system path of the content")
    ia.add_argument("--size", type=int, default=None, help="Size in bytes")
    ia.add_argument("--duration", type=int, default=None, help="Duration in milliseconds (video)")
    ia.add_argument("--overwrite", action="store_true", help="Replace an existing record")
    ia.set_defaults(func=cmd_index_add)

    il = sub.add_parser("index-list", help="List records in a SQLite media index")
    il.add_argument("--db", required=True, help="Path to SQLite DB file")
    il.add_argument("--limit", type=int, default=50, help="Max records to show")
    il.set_defaults(func=cmd_index_list)

    # --- API server ---
    sv = sub.add_parser("serve", help="Run the openwith FastAPI server")
    sv.add_argument("--host", default="127.0.0.1", help="Bind host (default: 127.0.0.1)")
    sv.add_argument("--port", type=int, default=8080, help="Bind port (default: 8080)")
    sv.add_argument("--index-db", default=None, help="SQLite media index (default: OPENWITH_INDEX_DB)")
    sv.add_argument("--log-level", default="info", help="Uvicorn log level")
    sv.set_defaults(func=cmd_serve)

    return p


def main(argv: List[str] | None = None) -> int:
    """CLI entry."""
    parser = build_parser()
    args = parser.parse_args(argv)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
