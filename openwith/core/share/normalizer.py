from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from openwith.core.resolver import ContentIndex, resolve

from .actions import read_exit_on_sent, translate_action
from .events import EXTRA_STREAM, ClipEntry, ReferenceEntry, ShareEvent, TextEntry
from .schema import build_reference_item, build_share_document, build_text_item

log = logging.getLogger("openwith.share")


def item_from_reference(uri: Optional[str], index: ContentIndex) -> Optional[Dict[str, Any]]:
    """Build a reference item for one content reference.

    Returns None (the item is dropped) when:
    - the reference is missing
    - the index cannot type it
    - the index raises while typing it

    A failing metadata query keeps the item with no file attributes
    (see resolve).

    Time:  O(1) index calls (one type lookup + at most one query)
    Space: O(1)
    """

    if not uri:
        return None
    try:
        media_type = index.type_of(uri)
    except Exception as e:
        log.warning("dropping reference: content index failed", extra={"error": type(e).__name__})
        return None
    if not media_type:
        log.info("dropping reference with unknown media type")
        return None

    attributes = resolve(media_type, uri, index)
    return build_reference_item(media_type=media_type, uri=uri, attributes=attributes)


def items_from_clip(clip: Optional[Sequence[ClipEntry]], index: ContentIndex) -> List[Dict[str, Any]]:
    """Extract items from a clip payload, preserving entry order.

    Text entries become text items verbatim. Reference entries are resolved;
    entries that cannot be typed are dropped and extraction continues.
    Entries of any other type are dropped the same way.

    Time:  O(n) for n clip entries
    Space: O(n)
    """

    items: List[Dict[str, Any]] = []
    if not clip:
        return items

    for entry in clip:
        if isinstance(entry, TextEntry):
            items.append(build_text_item(entry.text))
        elif isinstance(entry, ReferenceEntry):
            item = item_from_reference(entry.reference.uri, index)
            if item is not None:
                items.append(item)
        else:
            log.warning("dropping unsupported clip entry", extra={"entry_type": type(entry).__name__})
    return items


def items_from_extras(extras: Optional[Mapping[str, Any]], index: ContentIndex) -> List[Dict[str, Any]]:
    """Extract the single stream item from the extras bundle (0 or 1 items)."""

    if extras is None:
        return []
    stream = extras.get(EXTRA_STREAM)
    if not isinstance(stream, str):
        return []
    item = item_from_reference(stream, index)
    return [item] if item is not None else []


def normalize(
    event: ShareEvent,
    index: ContentIndex,
    *,
    clip_supported: bool = True,
) -> Optional[Dict[str, Any]]:
    """Normalize a share event into the canonical share document.

    Selection rules (deterministic):
    - clip payload first (only when clip_supported)
    - extras stream as fallback when the clip path yields nothing
    - None when neither yields an item ("nothing shareable")

    Returns:
      {"action": str, "exit": bool, "items": [...]} or None

    Security notes:
    - The event and every index answer are untrusted; failures drop items,
      they never abort the document.

    Time:  O(n) for n clip entries
    Space: O(n)
    """

    if not isinstance(event, ShareEvent):
        raise TypeError("event must be a ShareEvent")

    items: List[Dict[str, Any]] = []
    source = "none"
    if clip_supported and event.clip is not None:
        items = items_from_clip(event.clip, index)
        source = "clip"
    if not items:
        items = items_from_extras(event.extras, index)
        source = "stream" if items else "none"

    if not items:
        log.debug("share event has no shareable items")
        return None

    log.debug("share event normalized", extra={"source": source, "item_count": len(items)})
    return build_share_document(
        action=translate_action(event.action),
        exit_on_sent=read_exit_on_sent(event.extras),
        items=items,
    )
