"""Urgency scoring for roadmap items.

Urgency is a weighted sum of four factors, clamped to [0, 1] and rounded to
two decimals:

* target date  - the closer to today the more urgent (0.2 / days left)
* duration     - the shorter the more urgent (0.1 / days of span)
* complexity   - normalized over 0..5, weight 0.3
* value        - normalized over 0..5, weight 0.4

A zero-day span (target == today, or target == start) makes its term
``+inf`` so the item saturates at urgency 1.0.
"""

from __future__ import annotations

import math
import sys
from datetime import date
from typing import Dict

# ---------------------------- WEIGHTS --------------------------------

MIN_ESTIMATED_COMPLEXITY = 0.0
MAX_ESTIMATED_COMPLEXITY = 5.0

MIN_ESTIMATED_VALUE = 0.0
MAX_ESTIMATED_VALUE = 5.0

MIN_URGENCY = 0.0
MAX_URGENCY = 1.0

TARGET_DATE_FACTOR = 0.2
DURATION_FACTOR = 0.1
COMPLEXITY_FACTOR = 0.3
VALUE_FACTOR = 0.4

# Tier thresholds used by the allocator
FIRST_THRESHOLD = 0.3
SECOND_THRESHOLD = 0.6

# ---------------------------------------------------------------------


def _per_day(factor: float, days: int) -> float:
    if days == 0:
        return math.inf
    return factor / days


def urgency_terms(
    complexity: int,
    value: int,
    start_date: date,
    target_date: date,
    today: date,
) -> Dict[str, float]:
    """Return every weighted factor plus the unclamped ``total``."""
    days_from_today = _per_day(TARGET_DATE_FACTOR, (target_date - today).days)
    duration = _per_day(DURATION_FACTOR, (target_date - start_date).days)
    complexity_term = (
        (complexity - MIN_ESTIMATED_COMPLEXITY)
        / (MAX_ESTIMATED_COMPLEXITY - MIN_ESTIMATED_COMPLEXITY)
        * COMPLEXITY_FACTOR
    )
    value_term = (
        (value - MIN_ESTIMATED_VALUE)
        / (MAX_ESTIMATED_VALUE - MIN_ESTIMATED_VALUE)
        * VALUE_FACTOR
    )
    return {
        "days_from_today": days_from_today,
        "duration": duration,
        "complexity": complexity_term,
        "value": value_term,
        "total": days_from_today + duration + complexity_term + value_term,
    }


def round_half_up(x: float, digits: int = 2) -> float:
    scale = 10 ** digits
    return math.floor(x * scale + 0.5) / scale


def compute_urgency(
    complexity: int,
    value: int,
    start_date: date,
    target_date: date,
    today: date | None = None,
    *,
    trace: bool = False,
) -> float:
    """Score an item in [0, 1]. ``today`` defaults to the current local day."""
    if today is None:
        today = date.today()
    terms = urgency_terms(complexity, value, start_date, target_date, today)
    if trace:
        for key in ("days_from_today", "duration", "complexity", "value", "total"):
            print(f"[debug] {key}: {terms[key]}", file=sys.stderr)

    normalized = (terms["total"] - MIN_URGENCY) / (MAX_URGENCY - MIN_URGENCY)
    clamped = max(MIN_URGENCY, min(MAX_URGENCY, normalized))
    return round_half_up(clamped, 2)


def urgency_tier(urgency: float) -> str:
    """A: head+tail+random, B: head+tail, C: one random pick."""
    if urgency >= SECOND_THRESHOLD:
        return "A"
    if urgency >= FIRST_THRESHOLD:
        return "B"
    return "C"
