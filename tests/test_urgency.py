from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from urgency import compute_urgency, round_half_up, urgency_terms, urgency_tier


START = date(2030, 1, 1)
TARGET = date(2030, 1, 31)
TODAY = date(2030, 1, 11)


def test_one_day_spans_add_up_to_full_urgency() -> None:
    terms = urgency_terms(5, 5, date(2022, 10, 15), date(2022, 10, 16), date(2022, 10, 15))
    assert terms["days_from_today"] == pytest.approx(0.2)
    assert terms["duration"] == pytest.approx(0.1)
    assert terms["complexity"] == pytest.approx(0.3)
    assert terms["value"] == pytest.approx(0.4)

    assert compute_urgency(5, 5, date(2022, 10, 15), date(2022, 10, 16), date(2022, 10, 15)) == 1.0


def test_long_span_low_scores() -> None:
    # 0.2/364 + 0.1/364 + 0.06 + 0.08
    assert compute_urgency(1, 1, date(2030, 1, 1), date(2030, 12, 31), date(2030, 1, 1)) == 0.14


@pytest.mark.parametrize("complexity", range(1, 6))
@pytest.mark.parametrize("value", range(1, 6))
def test_urgency_is_bounded(complexity: int, value: int) -> None:
    u = compute_urgency(complexity, value, START, TARGET, TODAY)
    assert 0.0 <= u <= 1.0


def test_monotone_in_complexity_and_value() -> None:
    for value in range(1, 6):
        scores = [compute_urgency(c, value, START, TARGET, TODAY) for c in range(1, 6)]
        assert scores == sorted(scores)
    for complexity in range(1, 6):
        scores = [compute_urgency(complexity, v, START, TARGET, TODAY) for v in range(1, 6)]
        assert scores == sorted(scores)


def test_deterministic() -> None:
    first = compute_urgency(3, 4, START, TARGET, TODAY)
    assert all(compute_urgency(3, 4, START, TARGET, TODAY) == first for _ in range(10))


def test_target_today_saturates() -> None:
    # Zero days left makes that term unbounded; the clamp caps it at 1.0
    assert compute_urgency(1, 1, date(2029, 12, 1), TODAY, TODAY) == 1.0


def test_same_day_start_and_target_saturates() -> None:
    terms = urgency_terms(1, 1, TARGET, TARGET, TODAY)
    assert terms["duration"] == float("inf")
    assert compute_urgency(1, 1, TARGET, TARGET, TODAY) == 1.0


def test_trace_prints_terms(capsys) -> None:
    compute_urgency(2, 2, START, TARGET, TODAY, trace=True)
    err = capsys.readouterr().err
    for key in ("days_from_today", "duration", "complexity", "value", "total"):
        assert f"[debug] {key}:" in err


def test_rounds_half_up() -> None:
    assert round_half_up(0.125) == 0.13
    assert round_half_up(0.124) == 0.12


@pytest.mark.parametrize(
    "urgency, tier",
    [(1.0, "A"), (0.6, "A"), (0.59, "B"), (0.3, "B"), (0.29, "C"), (0.0, "C")],
)
def test_tier_boundaries(urgency: float, tier: str) -> None:
    assert urgency_tier(urgency) == tier


def test_library_modules_are_not_scripts() -> None:
    root = Path(__file__).resolve().parents[1]
    for name in ("urgency.py", "roadmap.py", "roadmap_io.py"):
        assert not (root / name).read_text(encoding="utf-8").startswith("#!")
