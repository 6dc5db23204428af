"""Fixtures and helpers for roadmap tests."""
from __future__ import annotations

import csv
from datetime import date, timedelta
from pathlib import Path
from typing import Dict, Iterable, List, Sequence

from roadmap import Contributor, RoadmapItem
from roadmap_io import CONTRIBUTOR_FIELDS, ROADMAP_FIELDS

TODAY = date(2030, 1, 1)
# Long enough that the date terms barely move the score:
# complexity/value 5/5 -> 0.70 (A), 3/3 -> 0.42 (B), 1/1 -> 0.14 (C)
LONG_SPAN = timedelta(days=1000)


def make_item(name: str, complexity: int, value: int, *, today: date = TODAY) -> RoadmapItem:
    return RoadmapItem(name, complexity, value, today, today + LONG_SPAN, scored_on=today)


def tier_a(name: str = "A-item") -> RoadmapItem:
    return make_item(name, 5, 5)


def tier_b(name: str = "B-item") -> RoadmapItem:
    return make_item(name, 3, 3)


def tier_c(name: str = "C-item") -> RoadmapItem:
    return make_item(name, 1, 1)


def pool_of(*pairs: tuple[str, int]) -> List[Contributor]:
    return [Contributor(name, seniority) for name, seniority in pairs]


def first_index(pool: Sequence[Contributor]) -> int:
    return 0


def last_index(pool: Sequence[Contributor]) -> int:
    return len(pool) - 1


def contributor_row(name: str, seniority: int | str) -> Dict[str, str]:
    return {"name": name, "seniority": str(seniority)}


def roadmap_row(
    name: str,
    *,
    complexity: int | str = 3,
    value: int | str = 3,
    start: str = "2030-01-01",
    target: str = "2030-02-01",
) -> Dict[str, str]:
    """Build a Dict row for the roadmap CSV."""

    return {
        "name": name,
        "estimated_complexity": str(complexity),
        "estimated_value": str(value),
        "start_date": start,
        "target_date": target,
    }


def _write_rows(path: Path, fields: Sequence[str], rows: Iterable[Dict[str, str]]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=list(fields))
        writer.writeheader()
        for row in rows:
            writer.writerow(row)
    return path


def write_contributors(path: Path, rows: Iterable[Dict[str, str]]) -> Path:
    return _write_rows(path, CONTRIBUTOR_FIELDS, rows)


def write_roadmap(path: Path, rows: Iterable[Dict[str, str]]) -> Path:
    return _write_rows(path, ROADMAP_FIELDS, rows)


def scripted(answers: Iterable[str]):
    """Return an ``ask`` callable replaying ``answers`` in order."""

    it = iter(answers)

    def ask(prompt: str) -> str:
        return next(it)

    return ask
