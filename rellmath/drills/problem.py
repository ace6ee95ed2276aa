from __future__ import annotations

"""Operator kinds and the two-operand problem model."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class OperatorKind(str, Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"

    @classmethod
    def parse(cls, value: object) -> Optional["OperatorKind"]:
        """Return the operator for a symbol, or None when it is not one of the five."""
        if isinstance(value, OperatorKind):
            return value
        try:
            return cls(str(value).strip())
        except ValueError:
            return None


OPERATOR_SYMBOLS = [o.value for o in OperatorKind]


@dataclass(frozen=True)
class Problem:
    """A single drill question. Replaced wholesale, never edited."""

    operand_a: int
    operand_b: int

    def expression(self, operator: OperatorKind) -> str:
        return f"{self.operand_a} {OperatorKind(operator).value} {self.operand_b}"
