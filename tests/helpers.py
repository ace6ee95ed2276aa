from __future__ import annotations

"""Shared test doubles."""

from typing import Iterable, List


class ScriptedRandom:
    """Stands in for `random.Random`: randint returns queued values, then lows."""

    def __init__(self, values: Iterable[int] = ()) -> None:
        self.values: List[int] = list(values)
        self.calls: List[tuple] = []

    def queue(self, *values: int) -> None:
        self.values.extend(values)

    def randint(self, a: int, b: int) -> int:
        self.calls.append((a, b))
        if self.values:
            return self.values.pop(0)
        return a


class FailingStore:
    """Store whose writes always fail, as a full disk would."""

    def __init__(self, initial=None) -> None:
        self.data = dict(initial or {})
        self.attempts = 0

    def load(self, key):
        return self.data.get(key)

    def save(self, key, value):
        from rellmath.errors import PersistenceUnavailable

        self.attempts += 1
        raise PersistenceUnavailable("disk full")

    def remove(self, key):
        from rellmath.errors import PersistenceUnavailable

        self.attempts += 1
        raise PersistenceUnavailable("disk full")


class ReadFailingStore:
    """Store whose medium cannot be read; writes land in `data`."""

    def __init__(self) -> None:
        self.data = {}

    def load(self, key):
        raise OSError("medium unreadable")

    def save(self, key, value):
        self.data[key] = value

    def remove(self, key):
        self.data.pop(key, None)
