from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence

TEXT_TYPE: str = "text/plain"

ATTRIBUTE_KEYS = ("id", "name", "path", "size", "duration")

_REFERENCE_KEYS = ("type", "isVideo", "uri")


def build_text_item(text: str) -> Dict[str, Any]:
    """Build a text item: {"type": "text/plain", "text": ...}."""

    return {"type": TEXT_TYPE, "text": text}


def build_reference_item(
    *,
    media_type: str,
    uri: str,
    attributes: Mapping[str, str],
) -> Dict[str, Any]:
    """Build a reference item and merge resolved attributes into it.

    Only the known attribute keys are merged, so a misbehaving index cannot
    overwrite "type", "isVideo" or "uri".

    """

    item: Dict[str, Any] = {
        "type": media_type,
        "isVideo": media_type.startswith("video/"),
        "uri": uri,
    }
    for key in ATTRIBUTE_KEYS:
        if key in attributes:
            item[key] = attributes[key]
    return item


def build_share_document(*, action: Any, exit_on_sent: bool, items: Sequence[Mapping[str, Any]]) -> Dict[str, Any]:
    """Assemble the wire document and validate its shape."""

    document: Dict[str, Any] = {
        "action": action,
        "exit": bool(exit_on_sent),
        "items": [dict(i) for i in items],
    }
    validate_share_document(document)
    return document


def validate_share_document(document: Mapping[str, Any]) -> None:
    """Validate the share document contract.

    This is a *shape validator*: it checks field names, types and the item
    tagging rule, not the values.

    Security notes:
    - Fail closed: raise ValueError on unexpected shapes.

    """

    if not isinstance(document, Mapping):
        raise ValueError("document must be a mapping")
    for key in ("action", "exit", "items"):
        if key not in document:
            raise ValueError(f"document missing field: {key}")
    if not isinstance(document["exit"], bool):
        raise ValueError("document.exit must be a bool")

    items = document["items"]
    if not isinstance(items, list) or not items:
        raise ValueError("document.items must be a non-empty list")

    for idx, item in enumerate(items):
        _validate_item(idx, item)


def _validate_item(idx: int, item: Any) -> None:
    if not isinstance(item, Mapping):
        raise ValueError(f"items[{idx}] must be a mapping")
    if not isinstance(item.get("type"), str):
        raise ValueError(f"items[{idx}].type must be a string")

    if "text" in item:
        extra: List[str] = sorted(set(item) - {"type", "text"})
        if item["type"] != TEXT_TYPE or extra:
            raise ValueError(f"items[{idx}] is not a valid text item")
        return

    for key in _REFERENCE_KEYS:
        if key not in item:
            raise ValueError(f"items[{idx}] missing field: {key}")
    if not isinstance(item["isVideo"], bool):
        raise ValueError(f"items[{idx}].isVideo must be a bool")
    unknown = sorted(set(item) - set(_REFERENCE_KEYS) - set(ATTRIBUTE_KEYS))
    if unknown:
        raise ValueError(f"items[{idx}] has unknown fields: {unknown}")
