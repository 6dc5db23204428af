#!/usr/bin/env python3
"""Summarize a ranked assignment output.

Reads the CSV written by assign_contributors.py (--out) and emits a per-item
CSV report with tiers and staffing, a plaintext summary, and optionally a bar
chart of urgency per item colored by tier.
"""

from __future__ import annotations

import argparse
import csv
import sys
from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterable, List

from roadmap_io import OUTPUT_HEADER
from urgency import urgency_tier

TIER_CAPACITY = {"A": 3, "B": 2, "C": 1}
TIER_COLORS = {"A": "tab:red", "B": "tab:orange", "C": "tab:blue"}


def parse_args() -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Generate a per-item roadmap staffing report", formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    ap.add_argument("--assigned", default="roadmap_assignments.csv", type=Path, help="CSV produced by assign_contributors.py --out")
    ap.add_argument("--out", default=Path("reports") / "roadmap_report.csv", type=Path, help="Where to write the per-item CSV report")
    ap.add_argument("--summary", default=Path("reports") / "roadmap_report.txt", type=Path, help="Optional plaintext summary (set to '-' to skip)")
    ap.add_argument("--plot", type=Path, help="Optional PNG bar chart of urgency per item")
    return ap.parse_args()


def split_names(value: str) -> List[str]:
    if not value:
        return []
    return [p.strip() for p in value.split(";") if p.strip()]


def parse_urgency(value: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def load_assignments(path: Path) -> List[Dict[str, str]]:
    if not path.exists():
        raise SystemExit(f"Missing file: {path}")
    with path.open("r", encoding="utf-8-sig", newline="") as handle:
        rows = list(csv.DictReader(handle))
    if rows and any(col not in rows[0] for col in OUTPUT_HEADER):
        raise SystemExit(f"{path} does not look like an assignment output (expected: {','.join(OUTPUT_HEADER)})")
    return rows


def build_report(rows: Iterable[Dict[str, str]]) -> List[Dict[str, object]]:
    report: List[Dict[str, object]] = []
    for rank, row in enumerate(rows, start=1):
        urgency = parse_urgency(row.get("urgency (0-1)", ""))
        tier = urgency_tier(urgency)
        names = split_names(row.get("contributors", ""))
        report.append(
            {
                "Rank": rank,
                "Item": (row.get("name") or "").strip(),
                "Urgency": f"{urgency:.2f}",
                "Tier": tier,
                "Assigned": len(names),
                "Capacity": TIER_CAPACITY[tier],
                "Shortfall": TIER_CAPACITY[tier] - len(names),
                "Contributors": ";".join(names),
            }
        )
    return report


def contributor_loads(report: Iterable[Dict[str, object]]) -> Dict[str, List[str]]:
    by_person: Dict[str, List[str]] = defaultdict(list)
    for row in report:
        for name in split_names(str(row["Contributors"])):
            by_person[name].append(str(row["Item"]))
    return by_person


def write_report(rows: List[Dict[str, object]], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if not rows:
        path.write_text("Rank,Item,Urgency,Tier,Assigned,Capacity,Shortfall,Contributors\n", encoding="utf-8")
        return
    fieldnames = list(rows[0].keys())
    with path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=fieldnames)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)


def write_summary(rows: List[Dict[str, object]], path: Path) -> None:
    if str(path) == "-":
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = ["Roadmap staffing report"]
    if not rows:
        lines.append("No roadmap items found.")
    else:
        tiers: Dict[str, int] = defaultdict(int)
        for row in rows:
            tiers[str(row["Tier"])] += 1
        lines.append(
            f"Items: {len(rows)} (tier A={tiers['A']}, tier B={tiers['B']}, tier C={tiers['C']})"
        )
        unstaffed = [str(row["Item"]) for row in rows if row["Assigned"] == 0]
        if unstaffed:
            lines.append("Unstaffed items: " + ", ".join(unstaffed))
        short = [row for row in rows if int(row["Shortfall"]) > 0 and row["Assigned"] != 0]
        if short:
            lines.append("Short-staffed items: " + ", ".join(f"{row['Item']} ({row['Shortfall']})" for row in short))
        loads = contributor_loads(rows)
        lines.append(f"Contributors assigned: {len(loads)}")
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def plot_urgency(rows: List[Dict[str, object]], path: Path) -> None:
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    names = [str(row["Item"]) for row in rows]
    values = [float(row["Urgency"]) for row in rows]
    colors = [TIER_COLORS[str(row["Tier"])] for row in rows]

    path.parent.mkdir(parents=True, exist_ok=True)
    plt.figure(figsize=(max(6, len(rows) * 0.6), 5))
    plt.bar(names, values, color=colors)
    plt.axhline(0.6, linestyle="--", color="tab:red", linewidth=1)
    plt.axhline(0.3, linestyle="--", color="tab:orange", linewidth=1)
    plt.ylim(0, 1.05)
    plt.xticks(rotation=60, ha="right")
    plt.ylabel("Urgency (0-1)")
    plt.title("Roadmap urgency by item (ranked)")
    plt.tight_layout()
    plt.savefig(path, dpi=160)
    plt.close("all")


def main() -> None:
    args = parse_args()
    rows = build_report(load_assignments(args.assigned))
    write_report(rows, args.out)
    write_summary(rows, args.summary)
    print(f"Wrote report to {args.out}")
    if str(args.summary) != "-":
        print(f"Summary saved to {args.summary}")
    if args.plot:
        try:
            plot_urgency(rows, args.plot)
            print(f"Wrote plot → {args.plot}", file=sys.stderr)
        except Exception as e:
            print(f"[warn] Could not produce plot: {e}", file=sys.stderr)


if __name__ == "__main__":
    main()
