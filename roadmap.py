"""Contributor and roadmap item records."""

from __future__ import annotations

import csv
import dataclasses
import io
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Tuple

from urgency import compute_urgency, urgency_tier


@dataclass(frozen=True)
class Contributor:
    name: str
    seniority: int

    def __lt__(self, other: "Contributor") -> bool:
        # Pools are ordered by seniority only; names do not break ties.
        return self.seniority < other.seniority

    def copy(self) -> "Contributor":
        return dataclasses.replace(self)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class RoadmapItem:
    name: str
    estimated_complexity: int
    estimated_value: int
    start_date: date
    target_date: date
    contributors: Tuple[Contributor, ...] = ()
    scored_on: date = field(default_factory=date.today, compare=False, repr=False)
    urgency: float = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "contributors", tuple(self.contributors))
        object.__setattr__(
            self,
            "urgency",
            compute_urgency(
                self.estimated_complexity,
                self.estimated_value,
                self.start_date,
                self.target_date,
                self.scored_on,
            ),
        )

    @property
    def tier(self) -> str:
        return urgency_tier(self.urgency)

    def with_contributors(self, contributors: Iterable[Contributor]) -> "RoadmapItem":
        """Return an enriched copy; urgency is re-derived, never carried over."""
        return dataclasses.replace(self, contributors=tuple(contributors))

    def rescore(self, today: date) -> "RoadmapItem":
        return dataclasses.replace(self, scored_on=today)

    def contributor_names(self) -> List[str]:
        return [c.name for c in self.contributors]

    def as_row(self) -> List[str]:
        """Fields of one output CSV row."""
        return [
            self.name,
            self.start_date.isoformat(),
            self.target_date.isoformat(),
            str(self.urgency),
            ";".join(self.contributor_names()),
        ]

    def __str__(self) -> str:
        buf = io.StringIO()
        csv.writer(buf, lineterminator="").writerow(self.as_row())
        return buf.getvalue()


def sort_by_seniority(contributors: Iterable[Contributor]) -> List[Contributor]:
    return sorted(contributors, key=lambda c: c.seniority)


def rank_by_urgency(items: Iterable[RoadmapItem]) -> List[RoadmapItem]:
    """Most urgent first; ties keep their input order."""
    return sorted(items, key=lambda item: item.urgency, reverse=True)
