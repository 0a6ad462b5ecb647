"""
Task scoring.

A task entry scores 100 * quantity / target. A day's total is the SUM of
its entry scores, so doing more tasks in a day raises the total. Monthly
reports average these daily totals across days (see monthly_report).

Daily totals used to be the average of the entry scores. That formula is
kept here only so the score migration can recognise old rows; nothing that
writes an evaluation may use it.
"""
from typing import Iterable

from app.core.errors import DivisionByZeroError


def score(quantity: int, target_quantity: int) -> float:
    if target_quantity is None or target_quantity <= 0:
        raise DivisionByZeroError(f"Task target must be positive, got {target_quantity!r}")
    # no clamping: over-target work scores above 100
    return 100.0 * quantity / target_quantity


def daily_total(scores: Iterable[float]) -> float:
    return float(sum(scores))


def legacy_daily_average(scores: Iterable[float]) -> float:
    """Superseded daily formula. Migration reporting only."""
    scores = list(scores)
    if not scores:
        return 0.0
    return sum(scores) / len(scores)
