from __future__ import annotations

import math

# Absorbs float/decimal drift between what the generator returned and what the
# database hands back. Do not change.
ANSWER_TOLERANCE = 0.01


def is_correct(user_answer: float, correct_answer: float) -> bool:
    return math.isclose(float(user_answer), float(correct_answer), rel_tol=0, abs_tol=ANSWER_TOLERANCE)


def accuracy(correct: int, total: int) -> float:
    """Percentage of correct submissions, one decimal place; 0 when nothing was submitted."""
    if total <= 0:
        return 0.0
    return round(correct / total * 100, 1)
