from __future__ import annotations

"""Explain mode: one-line traces of quiz engine milestones.

Off by default; `rellmath run --explain` or `explain: true` in config turns
it on. A line reads
`[EXPLAIN] graded :: {"q":"3 + 4","a":"7","correct":true,"score":1}`.
Event names are fixed; tracing an unknown one is a programming error and
raises even while tracing is off.
"""

import json
import sys
from typing import Any, Optional, TextIO

SESSION_INITIALIZED = "session_initialized"
DIGIT_WIDTH_REPAIRED = "digit_width_repaired"
DIGIT_WIDTH_CHANGED = "digit_width_changed"
OPERATOR_CHANGED = "operator_changed"
OPERATOR_IGNORED = "operator_ignored"
ANSWER_IGNORED = "answer_ignored"
DEGRADED_GRADING = "degraded_grading"
GRADED = "graded"
SESSION_RESET = "session_reset"
SESSION_CLOSED = "session_closed"
PERSISTENCE_READ_FAILED = "persistence_read_failed"
PERSISTENCE_WRITE_FAILED = "persistence_write_failed"

EVENTS = frozenset(
    {
        SESSION_INITIALIZED,
        DIGIT_WIDTH_REPAIRED,
        DIGIT_WIDTH_CHANGED,
        OPERATOR_CHANGED,
        OPERATOR_IGNORED,
        ANSWER_IGNORED,
        DEGRADED_GRADING,
        GRADED,
        SESSION_RESET,
        SESSION_CLOSED,
        PERSISTENCE_READ_FAILED,
        PERSISTENCE_WRITE_FAILED,
    }
)

_enabled = False
# None writes to whatever sys.stdout is at trace time
_stream: Optional[TextIO] = None


def enable(flag: bool = True, stream: Optional[TextIO] = None) -> None:
    global _enabled, _stream
    _enabled = bool(flag)
    _stream = stream


def enabled() -> bool:
    return _enabled


def trace(event: str, **fields: Any) -> None:
    if event not in EVENTS:
        raise ValueError(f"Unknown trace event: {event}")
    if not _enabled:
        return
    body = json.dumps(fields, separators=(",", ":"), default=str)
    print(f"[EXPLAIN] {event} :: {body}", file=_stream or sys.stdout)
