"""RellMath package initialization.

Exposes the quiz engine pieces most callers need so applications can simply
`from rellmath import SessionState, MemoryStore`.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .errors import InvalidConfiguration, PersistenceUnavailable, RellMathError
from .drills.problem import OperatorKind, Problem
from .drills.generator import RandomProblemGenerator
from .drills.evaluator import DegradedGrading, evaluate, grade
from .storage.schema import AttemptRecord
from .storage.store import JsonFileStore, MemoryStore, PersistenceAdapter
from .app.session_state import SessionState, SessionView

__all__ = [
    "__version__",
    "RellMathError",
    "InvalidConfiguration",
    "PersistenceUnavailable",
    "OperatorKind",
    "Problem",
    "RandomProblemGenerator",
    "DegradedGrading",
    "evaluate",
    "grade",
    "AttemptRecord",
    "PersistenceAdapter",
    "MemoryStore",
    "JsonFileStore",
    "SessionState",
    "SessionView",
]
