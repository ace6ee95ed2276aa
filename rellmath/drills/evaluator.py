from __future__ import annotations

"""Answer evaluation for two-operand arithmetic.

Grading never raises. Two inputs cannot produce a meaningful comparison and
are resolved to "incorrect" by an explicit policy rather than by numeric
accident:

- NON_NUMERIC: the submitted answer could not be read as a number
  (`coerce_answer` returned `NOT_A_NUMBER`);
- ZERO_DIVISOR: `/` or `%` with a zero right operand has no result.
"""

import math
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional, Union

from .problem import OperatorKind

Number = Union[int, Decimal]

MAX_INT_DIGITS = 4300


class _NotANumber:
    """Sentinel for answers that cannot be coerced. Equal to nothing but itself."""

    _instance: Optional["_NotANumber"] = None

    def __new__(cls) -> "_NotANumber":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_A_NUMBER"


NOT_A_NUMBER = _NotANumber()


class DegradedGrading(str, Enum):
    NON_NUMERIC = "non_numeric"
    ZERO_DIVISOR = "zero_divisor"


@dataclass(frozen=True)
class Grading:
    correct: bool
    expected: Optional[int] = None
    degraded: Optional[DegradedGrading] = None


def _is_integral(value: Decimal) -> bool:
    # Reads the digit tuple; rounding to an integer could rescale across a huge exponent.
    _, digits, exp = value.as_tuple()
    if exp >= 0:
        return True
    return -exp <= len(digits) and not any(digits[exp:])


def coerce_answer(raw: object) -> Union[Number, _NotANumber]:
    """Read user input as an exact number.

    Integral values come back as `int`; other finite decimals, and values
    with more than `MAX_INT_DIGITS` integer digits, as `Decimal`.
    Anything else (text, NaN, infinities, booleans) is `NOT_A_NUMBER`.
    """
    if raw is None or isinstance(raw, bool):
        return NOT_A_NUMBER
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        if not math.isfinite(raw):
            return NOT_A_NUMBER
        value = Decimal(raw)
    elif isinstance(raw, Decimal):
        value = raw
    else:
        text = str(raw).strip()
        if not text or "_" in text:
            return NOT_A_NUMBER
        try:
            value = Decimal(text)
        except InvalidOperation:
            return NOT_A_NUMBER
    if not value.is_finite():
        return NOT_A_NUMBER
    # Past this many digits no operand pair can match; keep the Decimal,
    # which still compares exactly, instead of materializing a huge int.
    if value.is_zero():
        return 0
    if value.adjusted() > MAX_INT_DIGITS:
        return value
    if _is_integral(value):
        return int(value)
    return value


def compute(operand_a: int, operand_b: int, operator: OperatorKind) -> Optional[int]:
    """Correct result, or None when the operator has no result for these operands."""
    op = OperatorKind(operator)
    if op is OperatorKind.ADD:
        return operand_a + operand_b
    if op is OperatorKind.SUB:
        return operand_a - operand_b
    if op is OperatorKind.MUL:
        return operand_a * operand_b
    if operand_b == 0:
        return None
    if op is OperatorKind.DIV:
        return operand_a // operand_b
    return operand_a % operand_b


def grade(operand_a: int, operand_b: int, operator: OperatorKind, submitted: object) -> Grading:
    expected = compute(operand_a, operand_b, operator)
    if expected is None:
        return Grading(correct=False, degraded=DegradedGrading.ZERO_DIVISOR)
    if submitted is NOT_A_NUMBER:
        return Grading(correct=False, expected=expected, degraded=DegradedGrading.NON_NUMERIC)
    if isinstance(submitted, bool) or not isinstance(submitted, (int, Decimal, float)):
        return Grading(correct=False, expected=expected, degraded=DegradedGrading.NON_NUMERIC)
    return Grading(correct=(expected == submitted), expected=expected)


def evaluate(operand_a: int, operand_b: int, operator: OperatorKind, submitted: object) -> bool:
    """True iff the submitted answer equals the computed result exactly."""
    return grade(operand_a, operand_b, operator, submitted).correct
