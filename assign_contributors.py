#!/usr/bin/env python3
"""Rank roadmap items by urgency and hand out contributors greedily.

Inputs:
  - contributors CSV   (name, seniority)                       [--contributors]
  - roadmap CSV        (name, estimated_complexity, estimated_value,
                        start_date, target_date)               [--roadmap]
  Either may be a local path or an http(s) URL. When a flag is omitted the
  script asks for a file, or collects the records interactively.

Output (stdout, and --out when given):
  name,start date,target date,urgency (0-1),contributors

Allocation, most urgent item first, over one shared pool sorted by seniority:
  - urgency >= 0.6 : most junior (head), most senior (tail), one random
  - 0.3 <= u < 0.6 : head, tail
  - urgency < 0.3  : one random
Every pick removes the contributor from the pool; an empty pool just leaves
later items short-staffed.
"""

from __future__ import annotations

import argparse
import copy
import csv
import json
import random
import sys
from datetime import date
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import roadmap_io as rio
from roadmap import Contributor, RoadmapItem, rank_by_urgency, sort_by_seniority
from urgency import compute_urgency

SCRIPT_DIR = Path(__file__).resolve().parent

# ---------------------------- CONFIG ---------------------------------

DEFAULT_CONFIG = {
    # Random source for the "random" slots; null draws a fresh seed
    "SEED": None,
    # Reference day for scoring/validation (YYYY-mm-dd); null means today
    "TODAY": None,
    # Optional CSV with one row per pick attempt
    "DECISION_LOG": None,
    # Where remote CSVs are cached
    "CACHE_DIR": ".roadmap_cache",
    "FORCE_REFRESH": False,
    # Print every urgency term to stderr
    "TRACE_URGENCY": False,
}

# Accepted JSON types per key
CONFIG_TYPES: Dict[str, Tuple[type, ...]] = {
    "SEED": (int, type(None)),
    "TODAY": (str, type(None)),
    "DECISION_LOG": (str, type(None)),
    "CACHE_DIR": (str,),
    "FORCE_REFRESH": (bool,),
    "TRACE_URGENCY": (bool,),
}

DECISION_FIELDS = ["Step", "Item", "Urgency", "Tier", "Slot", "Contributor", "Status", "PoolLeft"]

# Slot sequence per tier
TIER_SLOTS: Dict[str, Tuple[str, ...]] = {
    "A": ("head", "tail", "random"),
    "B": ("head", "tail"),
    "C": ("random",),
}


def deep_update(dst: dict, src: dict) -> dict:
    """Recursively merge ``src`` into ``dst`` (in-place)."""

    for key, value in (src or {}).items():
        if isinstance(value, dict) and isinstance(dst.get(key), dict):
            deep_update(dst[key], value)
        else:
            dst[key] = copy.deepcopy(value)
    return dst


def build_config(overrides: dict | None = None) -> dict:
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    if overrides:
        if not isinstance(overrides, dict):
            raise ValueError("Config overrides must be a JSON object")
        unknown = sorted(set(overrides) - set(DEFAULT_CONFIG))
        if unknown:
            raise ValueError(f"Unknown config key(s): {', '.join(unknown)}")
        deep_update(cfg, overrides)
    for key, allowed in CONFIG_TYPES.items():
        value = cfg[key]
        # bool is an int subclass; a SEED of true/false is rejected
        if not isinstance(value, allowed) or (bool not in allowed and isinstance(value, bool)):
            names = " or ".join("null" if t is type(None) else t.__name__ for t in allowed)
            raise ValueError(f"Config key {key} must be {names}, got {value!r}")
    return cfg


def resolve_data_path(path: Path) -> Path:
    """Locate a config file relative to CWD or the script directory."""

    if path.exists():
        return path
    if not path.is_absolute():
        alt = SCRIPT_DIR / path
        if alt.exists():
            return alt
    return path

# =====================================================================

class DecisionLogger:
    def __init__(self):
        self.rows: List[Dict[str, object]] = []
        self.step = 0

    def log(self, item: RoadmapItem, slot: str, contributor: Optional[Contributor], pool_left: int):
        self.step += 1
        self.rows.append({
            "Step": self.step,
            "Item": item.name,
            "Urgency": item.urgency,
            "Tier": item.tier,
            "Slot": slot,
            "Contributor": contributor.name if contributor else "",
            "Status": "assigned" if contributor else "pool empty",
            "PoolLeft": pool_left,
        })

    def write_csv(self, out: Path):
        out.parent.mkdir(parents=True, exist_ok=True)
        with out.open("w", newline="", encoding="utf-8") as f:
            w = csv.DictWriter(f, fieldnames=DECISION_FIELDS)
            w.writeheader()
            for r in self.rows:
                w.writerow({k: r.get(k, "") for k in DECISION_FIELDS})

# ------------------------ Allocation ---------------------------------

Picker = Callable[[Sequence[Contributor]], int]


def random_picker(seed: int | None = None) -> Picker:
    """Uniform index picker over a non-empty pool."""
    rng = random.Random(seed)

    def pick(pool: Sequence[Contributor]) -> int:
        return rng.randrange(len(pool))

    return pick


def take(pool: List[Contributor], slot: str, pick: Picker) -> Optional[Contributor]:
    """Remove and return a copy of the contributor for ``slot``; None on an empty pool."""
    if not pool:
        return None
    if slot == "head":
        idx = 0
    elif slot == "tail":
        idx = len(pool) - 1
    elif slot == "random":
        idx = pick(pool)
    else:
        raise ValueError(f"Unknown slot '{slot}'")
    return pool.pop(idx).copy()


def assign_item(
    item: RoadmapItem,
    pool: List[Contributor],
    pick: Picker,
    log: DecisionLogger | None = None,
) -> Tuple[RoadmapItem, List[Contributor]]:
    """Staff one item from ``pool``; returns the enriched item and the shrunk pool."""
    picked: List[Contributor] = []
    for slot in TIER_SLOTS[item.tier]:
        contributor = take(pool, slot, pick)
        if log is not None:
            log.log(item, slot, contributor, len(pool))
        if contributor is not None:
            picked.append(contributor)
    return item.with_contributors(picked), pool


def assign_contributors(
    items: Sequence[RoadmapItem],
    pool: List[Contributor],
    pick: Picker | None = None,
    log: DecisionLogger | None = None,
) -> List[RoadmapItem]:
    """Staff ``items`` (already ranked by urgency) in order, draining ``pool`` in place."""
    if pick is None:
        pick = random_picker()
    assigned: List[RoadmapItem] = []
    for item in items:
        enriched, pool = assign_item(item, pool, pick, log)
        assigned.append(enriched)
    return assigned

# -------------------- CLI --------------------

def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Rank roadmap items and assign contributors")
    ap.add_argument("--contributors", help="Contributors CSV (path or http(s) URL)")
    ap.add_argument("--roadmap", help="Roadmap CSV (path or http(s) URL)")
    ap.add_argument("--out", type=Path, help="Also write the ranked assignments to this CSV")
    ap.add_argument("--decision-log", type=Path, help="CSV with one row per pick attempt")
    ap.add_argument("--seed", type=int, help="Seed for the random picks")
    ap.add_argument("--today", help="Reference day (YYYY-mm-dd) instead of the current date")
    ap.add_argument("--trace-urgency", action="store_true", help="Print urgency terms to stderr")
    ap.add_argument("--config", type=Path, help="Optional JSON file with CONFIG overrides")
    return ap.parse_args(argv)


def config_from_args(args: argparse.Namespace) -> dict:
    overrides: dict = {}
    if args.config:
        cfg_path = resolve_data_path(Path(args.config))
        if not cfg_path.exists():
            raise SystemExit(f"Missing file: {cfg_path}")
        overrides = json.loads(cfg_path.read_text(encoding="utf-8"))
    cfg = build_config(overrides)
    if args.seed is not None:
        cfg["SEED"] = args.seed
    if args.today:
        cfg["TODAY"] = args.today
    if args.decision_log:
        cfg["DECISION_LOG"] = str(args.decision_log)
    if args.trace_urgency:
        cfg["TRACE_URGENCY"] = True
    return cfg


def load_inputs(args: argparse.Namespace, cfg: dict, today: date) -> Tuple[List[Contributor], List[RoadmapItem]]:
    cache_dir = Path(cfg["CACHE_DIR"])
    force = bool(cfg["FORCE_REFRESH"])

    contributors_src = args.contributors
    if contributors_src is None:
        contributors_src = rio.ask_file_location("contributors")
    if contributors_src is None:
        contributors = rio.collect_contributors()
    else:
        contributors = rio.load_contributors(rio.resolve_input(contributors_src, cache_dir, force))

    roadmap_src = args.roadmap
    if roadmap_src is None:
        print("Let's add all roadmap items!")
        roadmap_src = rio.ask_file_location("roadmap")
    if roadmap_src is None:
        items = rio.collect_roadmap_items(today)
    else:
        items = rio.load_roadmap_items(rio.resolve_input(roadmap_src, cache_dir, force), today)
    return contributors, items


def trace_items(items: Sequence[RoadmapItem], today: date) -> None:
    for item in items:
        print(f"[debug] {item.name}", file=sys.stderr)
        compute_urgency(
            item.estimated_complexity,
            item.estimated_value,
            item.start_date,
            item.target_date,
            today,
            trace=True,
        )


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    try:
        cfg = config_from_args(args)
        today = rio.parse_date(cfg["TODAY"], "TODAY") if cfg["TODAY"] else date.today()
        contributors, items = load_inputs(args, cfg, today)
    except ValueError as e:
        raise SystemExit(str(e))
    except OSError as e:
        # Unreachable URL, unreadable file
        raise SystemExit(f"Could not read input: {e}")

    if cfg["TRACE_URGENCY"]:
        trace_items(items, today)

    pool = sort_by_seniority(contributors)
    ranked = rank_by_urgency(items)
    log = DecisionLogger()
    assigned = assign_contributors(ranked, pool, random_picker(cfg["SEED"]), log)

    rio.print_assignments(assigned)
    if args.out:
        rio.write_assignments_file(assigned, args.out)
        print(f"Wrote assignments → {args.out}", file=sys.stderr)
    if cfg["DECISION_LOG"]:
        log_path = Path(cfg["DECISION_LOG"])
        log.write_csv(log_path)
        print(f"Wrote decision log → {log_path}", file=sys.stderr)
    if pool:
        print(f"[info] Unassigned contributors: {', '.join(c.name for c in pool)}", file=sys.stderr)


if __name__ == "__main__":
    main()
