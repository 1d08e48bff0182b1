"""
Merge rows from a spreadsheet export into the show catalog.

Rows are paired with catalog shows by exact compact name first, and by
the fuzzy matcher when no exact name exists. Only fields listed in
database.UPDATABLE_FIELDS are ever written.
"""

import csv
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from .database import CatalogShow
from .logger import get_logger
from .matcher import DEFAULT_CONFIG, HIGH_CONFIDENCE, MatchConfig, MatchResult, find_best_match
from .normalize import compact_name
from .retry import RetryError
from .storage import apply_show_updates, list_all_shows, pending_changes

NAME_COLUMNS = ("name", "title", "show_name")
NUMERIC_MARKERS = ("score", "rating", "count", "year", "episode_length", "seasons")
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class CsvImportError(ValueError):
    """Raised when an import file is missing or unusable."""


def normalize_key(key: str) -> str:
    """Column header to snake_case: "Release Year" and "releaseYear" both give release_year."""
    s = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", key.strip())
    s = re.sub(r"[\s\-]+", "_", s.lower())
    s = re.sub(r"_+", "_", s)
    return s.strip("_")


def normalize_value(key: str, value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if value == "":
            return None

    if any(marker in key for marker in NUMERIC_MARKERS):
        try:
            return int(float(value))
        except (TypeError, ValueError):
            pass
        # Keep the leading integer of values like "2016-present" or "3 seasons".
        m = _LEADING_INT.match(value) if isinstance(value, str) else None
        return int(m.group(1)) if m else None

    if key.startswith("is_") or key.startswith("has_"):
        if isinstance(value, str):
            return value.lower() == "true" or value == "1"
        return bool(value)

    return value


def read_import_rows(path: Path) -> List[Dict[str, Any]]:
    path = Path(path)
    if not path.exists():
        raise CsvImportError(f"Import file not found: {path}")

    with path.open("r", encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        if not reader.fieldnames:
            raise CsvImportError(f"Import file has no header row: {path}")
        keys = [normalize_key(k) for k in reader.fieldnames]
        if not any(k in NAME_COLUMNS for k in keys):
            raise CsvImportError(f"Import file needs one of these columns: {', '.join(NAME_COLUMNS)}")

        rows = []
        for raw in reader:
            row = {}
            for key, value in zip(keys, (raw.get(k) for k in reader.fieldnames)):
                row[key] = normalize_value(key, value)
            rows.append(row)
    return rows


def row_name(row: Dict[str, Any]) -> Optional[str]:
    for column in NAME_COLUMNS:
        if row.get(column):
            return str(row[column])
    return None


@dataclass
class RowMatch:
    name: str
    show: CatalogShow
    method: str  # "exact" or "fuzzy"
    result: MatchResult


def match_row(name: str, shows: Sequence[CatalogShow], config: MatchConfig = DEFAULT_CONFIG) -> Optional[RowMatch]:
    key = compact_name(name)
    if key:
        for show in shows:
            if compact_name(show.name) == key:
                return RowMatch(name, show, "exact", MatchResult(matched_label=show.name, score=100.0, candidate=show.name))

    # Show names are not filenames; keep any dots they contain.
    fuzzy_config = replace(config, strip_extensions=False)
    result = find_best_match(name, [show.name for show in shows], fuzzy_config)
    if not result.matched:
        return None
    for show in shows:
        if show.name == result.candidate:
            return RowMatch(name, show, "fuzzy", result)
    return None


@dataclass
class ImportReport:
    rows: int = 0
    updated: List[str] = field(default_factory=list)
    unchanged: List[str] = field(default_factory=list)
    unmatched: List[str] = field(default_factory=list)
    below_threshold: List[RowMatch] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    changes: Dict[str, Dict[str, Dict[str, Any]]] = field(default_factory=dict)


def import_rows(
    session,
    rows: Sequence[Dict[str, Any]],
    shows: Optional[Sequence[CatalogShow]] = None,
    min_score: float = HIGH_CONFIDENCE,
    dry_run: bool = False,
    config: MatchConfig = DEFAULT_CONFIG,
) -> ImportReport:
    """Match each row to a catalog show and merge its updatable fields.

    ``shows`` defaults to the whole catalog. Fuzzy matches scoring under
    ``min_score`` are reported in ``below_threshold`` and left untouched.
    """
    logger = get_logger()
    if shows is None:
        shows = list_all_shows(session)
    report = ImportReport(rows=len(rows))

    for row in rows:
        name = row_name(row)
        logger.record_attempt("csv")
        if not name:
            report.unmatched.append("<missing name>")
            logger.record_match("csv", "none")
            logger.warning("Skipping row without a name", row=row)
            continue

        match = match_row(name, shows, config)
        if match is None:
            report.unmatched.append(name)
            logger.record_match("csv", "none")
            continue
        if match.method == "fuzzy" and match.result.score < min_score:
            report.below_threshold.append(match)
            logger.record_match("csv", "low")
            logger.debug("Fuzzy match below threshold", row=name, show=match.show.name, score=match.result.score)
            continue
        logger.record_match("csv", "high")

        if dry_run:
            changes = pending_changes(match.show, row)
        else:
            try:
                changes = apply_show_updates(session, match.show, row)
            except (RetryError, SQLAlchemyError) as e:
                logger.record_error(type(e).__name__)
                logger.error(f"Error updating {match.show.name}", row=name, error=str(e))
                report.failed.append(name)
                continue

        if changes:
            report.updated.append(match.show.name)
            report.changes[match.show.name] = changes
            action = "Show would be updated" if dry_run else "Show updated"
            if not dry_run:
                logger.record_update()
            logger.info(action, show=match.show.name, method=match.method, fields=sorted(changes))
        else:
            report.unchanged.append(match.show.name)

    return report
