from __future__ import annotations

"""SessionState: the single owner of quiz configuration, problem, score and history.

Every mutation goes through one of the operations below. Each operation
computes its new values first, assigns them together, writes them through the
persistence adapter and only then publishes `state_changed`, so observers
never see a half-applied transaction.
"""

import sys
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..drills.evaluator import coerce_answer, grade
from ..drills.generator import RandomProblemGenerator, check_digit_width
from ..drills.problem import OperatorKind, Problem
from ..errors import InvalidConfiguration, PersistenceUnavailable
from ..storage.schema import (
    DEFAULT_DIGIT,
    DEFAULT_OPERATION,
    DEFAULT_SCORE,
    KEY_DIGIT,
    KEY_HISTORY,
    KEY_OPERATION,
    KEY_SCORE,
    AttemptRecord,
    decode_history,
    encode_history,
)
from ..storage.store import PersistenceAdapter
from . import explain
from .events import SESSION_CLOSED, STATE_CHANGED, EventBus
from .explain import trace as xtrace


@dataclass(frozen=True)
class SessionConfig:
    digit_width: int = DEFAULT_DIGIT
    operator: OperatorKind = OperatorKind(DEFAULT_OPERATION)


@dataclass(frozen=True)
class SessionView:
    """Read-only projection handed to the presentation layer."""

    operand_a: int
    operand_b: int
    operator: OperatorKind
    digit_width: int
    score: int
    history: Tuple[AttemptRecord, ...]

    @property
    def expression(self) -> str:
        return f"{self.operand_a} {self.operator.value} {self.operand_b}"


def _parse_int(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


class SessionState:
    def __init__(
        self,
        store: PersistenceAdapter,
        generator: Optional[RandomProblemGenerator] = None,
        bus: Optional[EventBus] = None,
    ) -> None:
        self.store = store
        self.generator = generator or RandomProblemGenerator()
        self.bus = bus or EventBus()
        self.config = SessionConfig()
        self.current_problem: Optional[Problem] = None
        self.pending_input = ""
        self.score = DEFAULT_SCORE
        self.history: List[AttemptRecord] = []
        self.closed = False
        self._write_failed = False

    # --- persistence glue ---

    def _load(self, key: str) -> Optional[str]:
        try:
            return self.store.load(key)
        except (PersistenceUnavailable, OSError) as e:
            xtrace(explain.PERSISTENCE_READ_FAILED, key=key, error=str(e))
            return None

    def _write(self, key: str, value: Optional[str]) -> None:
        """Save (or remove, when value is None). Failures are reported once and otherwise ignored."""
        try:
            if value is None:
                self.store.remove(key)
            else:
                self.store.save(key, value)
        except (PersistenceUnavailable, OSError) as e:
            xtrace(explain.PERSISTENCE_WRITE_FAILED, key=key, error=str(e))
            if not self._write_failed:
                self._write_failed = True
                print(f"[WARN] Progress could not be saved: {e}", file=sys.stderr)

    def _publish(self) -> None:
        # Nothing to project until initialize() has drawn a problem.
        if self.current_problem is None:
            return
        self.bus.emit(STATE_CHANGED, self.snapshot())

    # --- operations ---

    def initialize(self, repair: bool = False) -> "SessionState":
        """Load persisted config, score and history (defaults when absent) and draw a problem.

        A stored digit width below 1 raises `InvalidConfiguration` before any
        state is touched. With `repair=True` it is replaced by the default
        instead, and the default is written back like any other normalization.
        """
        raw_digit = self._load(KEY_DIGIT)
        raw_op = self._load(KEY_OPERATION)
        digit = _parse_int(raw_digit)
        if digit is None:
            digit = DEFAULT_DIGIT
        if digit < 1 and repair:
            xtrace(explain.DIGIT_WIDTH_REPAIRED, stored=raw_digit, digit=DEFAULT_DIGIT)
            digit = DEFAULT_DIGIT
        check_digit_width(digit)
        operator = OperatorKind.parse(raw_op) if raw_op is not None else None
        if operator is None:
            operator = OperatorKind(DEFAULT_OPERATION)
        score = _parse_int(self._load(KEY_SCORE))
        history = decode_history(self._load(KEY_HISTORY))
        problem = self.generator.generate_problem(digit)

        self.config = SessionConfig(digit_width=digit, operator=operator)
        self.score = DEFAULT_SCORE if score is None else score
        self.history = history
        self.current_problem = problem
        self.pending_input = ""
        self.closed = False

        if raw_digit != str(digit):
            self._write(KEY_DIGIT, str(digit))
        if raw_op != operator.value:
            self._write(KEY_OPERATION, operator.value)
        xtrace(
            explain.SESSION_INITIALIZED,
            digit=digit,
            op=operator.value,
            score=self.score,
            history=len(history),
        )
        self._publish()
        return self

    def set_digit_width(self, n: int) -> None:
        digit = check_digit_width(n)
        problem = self.generator.generate_problem(digit)
        self.config = SessionConfig(digit_width=digit, operator=self.config.operator)
        self.current_problem = problem
        self._write(KEY_DIGIT, str(digit))
        xtrace(explain.DIGIT_WIDTH_CHANGED, digit=digit)
        self._publish()

    def set_operator(self, op: OperatorKind) -> None:
        """Store the operator. The current operands are kept; only digit-width changes redraw them."""
        operator = OperatorKind(op)
        self.config = SessionConfig(digit_width=self.config.digit_width, operator=operator)
        self._write(KEY_OPERATION, operator.value)
        xtrace(explain.OPERATOR_CHANGED, op=operator.value)
        self._publish()

    def set_pending_input(self, text: str) -> None:
        self.pending_input = "" if text is None else str(text)

    def submit_answer(self, raw: object = None) -> Optional[AttemptRecord]:
        """Grade an answer, update score and history, then draw the next problem.

        With no argument the pending input is submitted. Empty input is ignored
        and returns None.
        """
        assert self.current_problem is not None, "initialize() must run first"
        if raw is None:
            raw = self.pending_input
        text = str(raw).strip() if raw is not None else ""
        if not text:
            xtrace(explain.ANSWER_IGNORED)
            return None

        problem = self.current_problem
        operator = self.config.operator
        result = grade(problem.operand_a, problem.operand_b, operator, coerce_answer(raw))
        if result.degraded is not None:
            xtrace(
                explain.DEGRADED_GRADING,
                q=problem.expression(operator),
                a=text,
                policy=result.degraded.value,
            )

        record = AttemptRecord(q=problem.expression(operator), a=text, correct=result.correct)
        score = self.score + (1 if result.correct else -1)
        history = [*self.history, record]
        next_problem = self.generator.generate_problem(self.config.digit_width)

        self.score = score
        self.history = history
        self.current_problem = next_problem
        self.pending_input = ""

        self._write(KEY_SCORE, str(score))
        self._write(KEY_HISTORY, encode_history(history))
        xtrace(explain.GRADED, q=record.q, a=record.a, correct=record.correct, score=score)
        self._publish()
        return record

    def reset(self) -> None:
        """Zero the score and clear history. Config and the current problem stay as they are."""
        self.score = DEFAULT_SCORE
        self.history = []
        self._write(KEY_SCORE, None)
        self._write(KEY_HISTORY, None)
        xtrace(explain.SESSION_RESET)
        self._publish()

    def teardown(self) -> None:
        if self.closed:
            return
        self.closed = True
        xtrace(explain.SESSION_CLOSED, score=self.score, history=len(self.history))
        if self.current_problem is not None:
            self.bus.emit(SESSION_CLOSED, self.snapshot())

    # --- presentation intents (raw UI values) ---

    def change_digit_width(self, value: object) -> None:
        if isinstance(value, str):
            n = _parse_int(value)
            if n is None:
                raise InvalidConfiguration(f"digit width must be an integer, got {value!r}")
            value = n
        elif isinstance(value, float) and value.is_integer():
            value = int(value)
        self.set_digit_width(value)  # type: ignore[arg-type]

    def change_operator(self, value: object) -> bool:
        """Apply an operator symbol. Unknown symbols are ignored and return False."""
        op = OperatorKind.parse(value)
        if op is None:
            xtrace(explain.OPERATOR_IGNORED, value=str(value))
            return False
        self.set_operator(op)
        return True

    def reset_session(self) -> None:
        self.reset()

    # --- projection ---

    def snapshot(self) -> SessionView:
        assert self.current_problem is not None, "initialize() must run first"
        return SessionView(
            operand_a=self.current_problem.operand_a,
            operand_b=self.current_problem.operand_b,
            operator=self.config.operator,
            digit_width=self.config.digit_width,
            score=self.score,
            history=tuple(self.history),
        )
