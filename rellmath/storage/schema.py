from __future__ import annotations

"""Persistence keys, defaults, and the Pydantic model for attempt history."""

import json
from typing import Any, List

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

# --- Constants ---

KEY_DIGIT = "digit"
KEY_OPERATION = "operation"
KEY_SCORE = "score"
KEY_HISTORY = "history"

DEFAULT_DIGIT = 1
DEFAULT_OPERATION = "+"
DEFAULT_SCORE = 0

# pandas dtypes for history frames
DTYPES = {
    "q": "string",
    "a": "string",
    "correct": "boolean",
}


# --- Pydantic models ---

class AttemptRecord(BaseModel):
    """One graded submission: display expression, answer as entered, outcome."""

    model_config = ConfigDict(frozen=True)

    q: str
    a: str
    correct: bool

    @field_validator("q", "a", mode="before")
    @classmethod
    def _as_text(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v)


def encode_history(history: List[AttemptRecord]) -> str:
    return json.dumps([r.model_dump() for r in history], separators=(",", ":"))


def decode_history(raw: str | None) -> List[AttemptRecord]:
    """Parse a stored history.

    Absent or unreadable values read as empty. Inside a readable list, only
    the malformed entries are dropped; the rest keep their order.
    """
    if not raw:
        return []
    try:
        items = json.loads(raw)
    except ValueError:
        return []
    if not isinstance(items, list):
        return []
    history: List[AttemptRecord] = []
    for item in items:
        try:
            history.append(AttemptRecord.model_validate(item))
        except ValidationError:
            continue
    return history
