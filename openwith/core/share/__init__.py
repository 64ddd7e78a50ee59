"""Share intent normalization.

Normalization maps a platform share event (clip payload, stream extra or
inline text) into one canonical document consumed by the app UI.

Security notes:
- Never assume the event or the content index is well-formed or benign.
- "Nothing shareable" is a normal outcome (None), not an error.
"""

from .actions import read_exit_on_sent, translate_action
from .events import (
    ACTION_SEND,
    ACTION_SEND_MULTIPLE,
    ACTION_VIEW,
    EXTRA_EXIT_ON_SENT,
    EXTRA_STREAM,
    ClipEntry,
    ContentReference,
    ReferenceEntry,
    ShareEvent,
    TextEntry,
    share_event_from_mapping,
)
from .normalizer import item_from_reference, items_from_clip, items_from_extras, normalize
from .schema import (
    TEXT_TYPE,
    build_reference_item,
    build_share_document,
    build_text_item,
    validate_share_document,
)

__all__ = [
    "ACTION_SEND",
    "ACTION_SEND_MULTIPLE",
    "ACTION_VIEW",
    "EXTRA_EXIT_ON_SENT",
    "EXTRA_STREAM",
    "ClipEntry",
    "ContentReference",
    "ReferenceEntry",
    "ShareEvent",
    "TextEntry",
    "share_event_from_mapping",
    "translate_action",
    "read_exit_on_sent",
    "normalize",
    "items_from_clip",
    "items_from_extras",
    "item_from_reference",
    "TEXT_TYPE",
    "build_text_item",
    "build_reference_item",
    "build_share_document",
    "validate_share_document",
]
