from __future__ import annotations

"""Exception types raised by the quiz engine."""


class RellMathError(Exception):
    """Base class for all RellMath errors."""


class InvalidConfiguration(RellMathError, ValueError):
    """Digit width below 1 (or not an integer at all)."""


class PersistenceUnavailable(RellMathError, RuntimeError):
    """The durable store could not be written."""
