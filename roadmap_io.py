"""Input/output plumbing: CSV files (local or remote), prompts and output rows.

Contributors file columns:  name, seniority
Roadmap file columns:       name, estimated_complexity, estimated_value,
                            start_date, target_date   (dates as YYYY-mm-dd)

Every record is validated before it reaches the scorer or the allocator;
an invalid record raises ``ValueError`` naming the row.
"""

from __future__ import annotations

import csv
import hashlib
import io
import ssl
import sys
import urllib.parse
import urllib.request
from datetime import date, datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import certifi

from roadmap import Contributor, RoadmapItem

CONTRIBUTOR_FIELDS = ("name", "seniority")
ROADMAP_FIELDS = ("name", "estimated_complexity", "estimated_value", "start_date", "target_date")
OUTPUT_HEADER = ("name", "start date", "target date", "urgency (0-1)", "contributors")

DATE_FORMAT = "%Y-%m-%d"
MIN_SCALE = 1
MAX_SCALE = 5

DEFAULT_CACHE_DIR = Path(".roadmap_cache")

# ---------------------------- I/O ------------------------------------

def trim(s: str) -> str:
    return (s or "").strip()


def is_url(location: str) -> bool:
    return urllib.parse.urlparse(str(location)).scheme in ("http", "https")


def cache_path_for(url: str, cache_dir: Path) -> Path:
    digest = hashlib.sha1(url.encode("utf-8")).hexdigest()[:16]
    return cache_dir / f"{digest}.csv"


def download_if_needed(url: str, dest: Path, force: bool = False) -> Path:
    if dest.exists() and not force:
        return dest
    dest.parent.mkdir(parents=True, exist_ok=True)
    ctx = ssl.create_default_context(cafile=certifi.where())
    req = urllib.request.Request(url, headers={"User-Agent": "Mozilla/5.0 (RoadmapAssigner/1.0)"})
    with urllib.request.urlopen(req, context=ctx) as resp:
        data = resp.read()
    dest.write_bytes(data)
    return dest


def resolve_input(location: str, cache_dir: Path = DEFAULT_CACHE_DIR, force: bool = False) -> Path:
    """Turn a path or http(s) URL into a readable local file."""
    if is_url(location):
        return download_if_needed(location, cache_path_for(location, cache_dir), force=force)
    path = Path(location)
    if not path.exists():
        raise SystemExit(f"Missing file: {path}")
    return path


def read_csv_rows(path: Path) -> Tuple[List[str], List[Dict[str, str]]]:
    """Return the header and the data rows."""
    raw = path.read_bytes()
    text = raw.decode("utf-8-sig", errors="replace")
    rdr = csv.DictReader(io.StringIO(text))
    rows = [dict(row) for row in rdr]
    return list(rdr.fieldnames or []), rows


def _require_columns(header: Sequence[str], fields: Sequence[str], label: str) -> None:
    missing = [f for f in fields if f not in header]
    if missing:
        raise ValueError(
            f"Malformed {label} file: missing column(s) {', '.join(missing)}. "
            f"Expected columns: {', '.join(fields)}"
        )

# ------------------------ Validation ---------------------------------

def parse_scale(raw: str, label: str) -> int:
    try:
        number = int(trim(raw))
    except (TypeError, ValueError):
        raise ValueError(f"{label} must be a whole number, got {raw!r}")
    if number < MIN_SCALE or number > MAX_SCALE:
        raise ValueError(f"{label} must be between {MIN_SCALE} and {MAX_SCALE}, got {number}")
    return number


def parse_date(raw: str, label: str) -> date:
    try:
        return datetime.strptime(trim(raw), DATE_FORMAT).date()
    except (AttributeError, TypeError, ValueError):
        raise ValueError(f"{label} must be a date (YYYY-mm-dd), got {raw!r}")


def check_dates(start_date: date, target_date: date, today: date) -> None:
    if target_date < start_date:
        raise ValueError("The target date cannot be before the start date.")
    if target_date < today:
        raise ValueError("The target date cannot be before today.")


def contributor_from_row(row: Dict[str, str]) -> Contributor:
    name = trim(row.get("name", ""))
    if not name:
        raise ValueError("Name cannot be empty")
    return Contributor(name, parse_scale(row.get("seniority", ""), "Seniority"))


def roadmap_item_from_row(row: Dict[str, str], today: date) -> RoadmapItem:
    name = trim(row.get("name", ""))
    if not name:
        raise ValueError("Name cannot be empty")
    complexity = parse_scale(row.get("estimated_complexity", ""), "Estimated complexity")
    value = parse_scale(row.get("estimated_value", ""), "Estimated value")
    start_date = parse_date(row.get("start_date", ""), "Start date")
    target_date = parse_date(row.get("target_date", ""), "Target date")
    check_dates(start_date, target_date, today)
    return RoadmapItem(name, complexity, value, start_date, target_date, scored_on=today)


def load_contributors(path: Path) -> List[Contributor]:
    header, rows = read_csv_rows(path)
    _require_columns(header, CONTRIBUTOR_FIELDS, "contributors")
    contributors: List[Contributor] = []
    # Row numbers count the header as row 1
    for row_no, row in enumerate(rows, start=2):
        try:
            contributors.append(contributor_from_row(row))
        except ValueError as e:
            raise ValueError(
                f"Invalid contributor on row {row_no} of {path}: {e}. "
                "Make sure that all contributors have valid values!"
            ) from e
    return contributors


def load_roadmap_items(path: Path, today: date) -> List[RoadmapItem]:
    header, rows = read_csv_rows(path)
    _require_columns(header, ROADMAP_FIELDS, "roadmap")
    items: List[RoadmapItem] = []
    for row_no, row in enumerate(rows, start=2):
        try:
            items.append(roadmap_item_from_row(row, today))
        except ValueError as e:
            raise ValueError(
                f"Invalid roadmap item on row {row_no} of {path}: {e}. "
                "Make sure that all roadmap items have valid values!"
            ) from e
    return items

# ------------------------ Prompts ------------------------------------

Ask = Callable[[str], str]


def ask_yes_no(question: str, ask: Ask = input) -> bool:
    while True:
        answer = trim(ask(f"{question} (y/n): ")).lower()
        if answer == "y":
            return True
        if answer == "n":
            return False


def ask_string(text: str, ask: Ask = input) -> str:
    while True:
        answer = trim(ask(f"{text}: "))
        if answer:
            return answer
        print("The value cannot be empty.")


def ask_number(text: str, ask: Ask = input, lo: int = MIN_SCALE, hi: int = MAX_SCALE) -> int:
    while True:
        raw = trim(ask(f"{text}: "))
        try:
            number = int(raw)
        except ValueError:
            print(f"Could not parse number: {raw!r}")
            continue
        if number < lo or number > hi:
            print(f"The value must be between {lo} and {hi}")
            continue
        return number


def ask_date(text: str, ask: Ask = input) -> date:
    while True:
        raw = trim(ask(f"{text} (YYYY-mm-dd): "))
        try:
            return datetime.strptime(raw, DATE_FORMAT).date()
        except ValueError:
            print(f"Could not parse date: {raw!r}")


def ask_contributor(ask: Ask = input) -> Contributor:
    name = ask_string("Contributor name", ask)
    seniority = ask_number(f"Contributor seniority ({MIN_SCALE}-{MAX_SCALE})", ask)
    return Contributor(name, seniority)


def ask_roadmap_item(today: date, ask: Ask = input) -> RoadmapItem:
    name = ask_string("Roadmap item name", ask)
    complexity = ask_number(f"Estimated complexity ({MIN_SCALE}-{MAX_SCALE})", ask)
    value = ask_number(f"Estimated value ({MIN_SCALE}-{MAX_SCALE})", ask)
    while True:
        start_date = ask_date("Start date", ask)
        target_date = ask_date("Target date", ask)
        try:
            check_dates(start_date, target_date, today)
        except ValueError as e:
            print(e)
            continue
        return RoadmapItem(name, complexity, value, start_date, target_date, scored_on=today)


def collect_contributors(ask: Ask = input) -> List[Contributor]:
    print("Let's add our first contributor!")
    contributors = [ask_contributor(ask)]
    while ask_yes_no("Add another contributor?", ask):
        contributors.append(ask_contributor(ask))
    print("All contributors added!")
    return contributors


def collect_roadmap_items(today: date, ask: Ask = input) -> List[RoadmapItem]:
    print("Let's create our first roadmap item!")
    items = [ask_roadmap_item(today, ask)]
    while ask_yes_no("Add another roadmap item?", ask):
        items.append(ask_roadmap_item(today, ask))
    print("All roadmap items added!")
    return items


def ask_file_location(label: str, ask: Ask = input) -> Optional[str]:
    """Return a path/URL when the user has a file, otherwise ``None``."""
    if ask_yes_no(f"Do you have a {label} file?", ask):
        return ask_string(f"Please provide the path or URL to your {label} file", ask)
    return None

# ------------------------ Output -------------------------------------

def output_row(item: RoadmapItem) -> List[str]:
    return item.as_row()


def write_assignments(items: Sequence[RoadmapItem], handle) -> None:
    writer = csv.writer(handle, lineterminator="\n")
    writer.writerow(OUTPUT_HEADER)
    for item in items:
        writer.writerow(output_row(item))


def write_assignments_file(items: Sequence[RoadmapItem], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as handle:
        write_assignments(items, handle)


def print_assignments(items: Sequence[RoadmapItem]) -> None:
    write_assignments(items, sys.stdout)
