from .problem import OPERATOR_SYMBOLS, OperatorKind, Problem
from .generator import RandomProblemGenerator, check_digit_width, max_operand
from .evaluator import NOT_A_NUMBER, DegradedGrading, Grading, coerce_answer, compute, evaluate, grade

__all__ = [
    "OPERATOR_SYMBOLS",
    "OperatorKind",
    "Problem",
    "RandomProblemGenerator",
    "check_digit_width",
    "max_operand",
    "NOT_A_NUMBER",
    "DegradedGrading",
    "Grading",
    "coerce_answer",
    "compute",
    "evaluate",
    "grade",
]
