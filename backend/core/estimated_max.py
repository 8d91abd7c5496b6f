"""
Estimated one-rep max (e1RM).

Epley formula: 1RM = weight * (1 + reps/30)

e1RM is the common currency for comparing sets across different
weight x rep combinations (e.g. 135x10 vs 185x3).
"""
from typing import Iterable

from domain.models.training import SetRecord


def estimated_1rm(weight: float, reps: int) -> float:
    """
    Calculate estimated 1RM using the Epley formula.

    Reps are floored at 1, and a single rep means the weight IS the 1RM,
    so the function is total and non-decreasing in both arguments.

    Args:
        weight: Weight lifted
        reps: Number of reps completed

    Returns:
        Estimated 1RM
    """
    if reps <= 1:
        return float(weight)

    return weight * (1.0 + reps / 30.0)


def best_estimated_1rm(sets: Iterable[SetRecord]) -> float:
    """Best e1RM over resistance sets with a positive weight and rep count."""
    best = 0.0
    for s in sets:
        if not s.is_resistance or s.weight <= 0 or s.reps <= 0:
            continue
        best = max(best, estimated_1rm(s.weight, s.reps))
    return best
