from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple, Union

from openwith.core.errors import InvalidShareEventError

log = logging.getLogger("openwith.share")

ACTION_SEND: str = "android.intent.action.SEND"
ACTION_SEND_MULTIPLE: str = "android.intent.action.SEND_MULTIPLE"
ACTION_VIEW: str = "android.intent.action.VIEW"

EXTRA_STREAM: str = "android.intent.extra.STREAM"
EXTRA_EXIT_ON_SENT: str = "exit_on_sent"


@dataclass(frozen=True, slots=True)
class ContentReference:
    """Opaque handle to a piece of shared content (usually a content:// URI).

    The declared media type is not carried here; it is answered by the
    content index at resolution time.
    """

    uri: str

    def __str__(self) -> str:
        return self.uri


@dataclass(frozen=True, slots=True)
class TextEntry:
    """Clip entry carrying inline text."""

    text: str


@dataclass(frozen=True, slots=True)
class ReferenceEntry:
    """Clip entry carrying a content reference."""

    reference: ContentReference


ClipEntry = Union[TextEntry, ReferenceEntry]


@dataclass(frozen=True, slots=True)
class ShareEvent:
    """An inbound "share / open with" event.

    Fields:
    - action: platform action string (SEND, SEND_MULTIPLE, VIEW or anything else)
    - extras: the extras bundle, or None when the event has none
    - clip: ordered clip payload, or None when the event has none

    Security notes:
    - Every field is untrusted input from another application.

    """

    action: Optional[str]
    extras: Optional[Mapping[str, Any]] = None
    clip: Optional[Tuple[ClipEntry, ...]] = None

    @classmethod
    def create(
        cls,
        *,
        action: Optional[str],
        extras: Optional[Mapping[str, Any]] = None,
        clip: Optional[Tuple[ClipEntry, ...]] = None,
    ) -> "ShareEvent":
        """Build an event with a read-only copy of the extras bundle."""

        frozen_extras = MappingProxyType(dict(extras)) if extras is not None else None
        frozen_clip = tuple(clip) if clip is not None else None
        return cls(action=action, extras=frozen_extras, clip=frozen_clip)


def _parse_clip_entry(index: int, raw: Any) -> Optional[ClipEntry]:
    """Parse one wire clip entry; None when it carries nothing shareable."""

    if not isinstance(raw, Mapping):
        raise InvalidShareEventError(f"clip[{index}] must be an object")

    text = raw.get("text")
    uri = raw.get("uri")
    if text is not None and uri is not None:
        raise InvalidShareEventError(f"clip[{index}] carries both text and uri")
    if text is not None:
        if not isinstance(text, str):
            raise InvalidShareEventError(f"clip[{index}].text must be a string")
        return TextEntry(text=text)
    if uri is not None:
        if not isinstance(uri, str):
            raise InvalidShareEventError(f"clip[{index}].uri must be a string")
        if uri:
            return ReferenceEntry(reference=ContentReference(uri=uri))
    log.info("skipping empty clip entry", extra={"clip_index": index})
    return None


def share_event_from_mapping(raw: Mapping[str, Any]) -> ShareEvent:
    """Parse the wire (JSON) form of a share event.

    Wire form:
      {"action": str, "extras": {...} | null, "clip": [{"text": str} | {"uri": str}] | null}

    Security notes:
    - Fail closed: raise InvalidShareEventError on unexpected shapes.
    - Clip entries with neither text nor a non-empty uri are skipped.
    - Values inside extras are kept as-is; readers type-check them.

    """

    if not isinstance(raw, Mapping):
        raise InvalidShareEventError("share event must be an object")

    action = raw.get("action")
    if action is not None and not isinstance(action, str):
        raise InvalidShareEventError("action must be a string")

    extras = raw.get("extras")
    if extras is not None and not isinstance(extras, Mapping):
        raise InvalidShareEventError("extras must be an object")

    clip_raw = raw.get("clip")
    clip: Optional[Tuple[ClipEntry, ...]] = None
    if clip_raw is not None:
        if not isinstance(clip_raw, (list, tuple)):
            raise InvalidShareEventError("clip must be an array")
        parsed = (_parse_clip_entry(i, entry) for i, entry in enumerate(clip_raw))
        clip = tuple(entry for entry in parsed if entry is not None)

    return ShareEvent.create(action=action, extras=extras, clip=clip)
