from __future__ import annotations

"""Random operand generation bounded by digit width."""

import random
from typing import Optional

from ..errors import InvalidConfiguration
from .problem import Problem


def max_operand(digit_width: int) -> int:
    """Largest operand for a digit width: 1 -> 9, 2 -> 99, ..."""
    return 10 ** digit_width - 1


def check_digit_width(digit_width: object) -> int:
    if isinstance(digit_width, bool) or not isinstance(digit_width, int):
        raise InvalidConfiguration(f"digit width must be an integer, got {digit_width!r}")
    if digit_width < 1:
        raise InvalidConfiguration(f"digit width must be at least 1, got {digit_width}")
    return digit_width


class RandomProblemGenerator:
    """Draws operands uniformly from [0, 10^digit_width - 1].

    Uses the process-wide `random` source unless an explicit `random.Random`
    (or anything with `randint`) is injected.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng if rng is not None else random

    def generate(self, digit_width: int) -> int:
        width = check_digit_width(digit_width)
        return self._rng.randint(0, max_operand(width))

    def generate_problem(self, digit_width: int) -> Problem:
        # Operands are drawn independently.
        return Problem(self.generate(digit_width), self.generate(digit_width))
