from __future__ import annotations

from typing import Any, Mapping, Optional

from .events import ACTION_SEND, ACTION_SEND_MULTIPLE, ACTION_VIEW, EXTRA_EXIT_ON_SENT

_SEND_ACTIONS = frozenset({ACTION_SEND, ACTION_SEND_MULTIPLE, "send", "send-multiple"})
_VIEW_ACTIONS = frozenset({ACTION_VIEW, "view"})


def translate_action(action: Optional[str]) -> Optional[str]:
    """Map a platform action to its canonical token.

    - SEND / SEND_MULTIPLE -> "SEND"
    - VIEW -> "VIEW"
    - anything else is returned unchanged

    """

    if action in _SEND_ACTIONS:
        return "SEND"
    if action in _VIEW_ACTIONS:
        return "VIEW"
    return action


def read_exit_on_sent(extras: Optional[Mapping[str, Any]]) -> bool:
    """Read the "exit_on_sent" flag from an extras bundle. Defaults to False."""

    if extras is None:
        return False
    value = extras.get(EXTRA_EXIT_ON_SENT, False)
    # Typed bundle getter semantics: a non-boolean value reads as the default.
    return value if isinstance(value, bool) else False
