#!/usr/bin/env python3
"""
Seed the show catalog from a JSON export.

Accepts either a list of show objects or {"shows": [...]}.

Usage:
    python scripts/seed_catalog_from_json.py --json data/shows.json --db data/catalog.db
"""

import argparse
import json
from pathlib import Path
import sys

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from showmatch.csv_import import normalize_key, normalize_value
from showmatch.database import UPDATABLE_FIELDS, CatalogShow, init_database, get_session


def parse_id(value):
    """Integer id from an export value, or None to let the database assign one."""
    try:
        return int(value) if value not in (None, "") else None
    except (TypeError, ValueError):
        return None


def load_shows(json_path: Path) -> list:
    with open(json_path, encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("shows", [])
    return [item for item in data if isinstance(item, dict)]


def seed(json_path: Path, db_path: Path, dry_run: bool = False) -> bool:
    """
    Insert shows from a JSON export into the catalog.

    Args:
        json_path: Path to JSON export
        db_path: Path to SQLite database file
        dry_run: If True, don't write to database
    """
    print(f"Loading shows from {json_path}...")
    shows = load_shows(json_path)
    print(f"Found {len(shows)} shows in export")

    if dry_run:
        print("\n[DRY RUN] Would seed the following shows:")
        for i, show in enumerate(shows[:5], 1):
            print(f"  {i}. {show.get('id', '-')}: {show.get('name') or show.get('title')}")
        if len(shows) > 5:
            print(f"  ... and {len(shows) - 5} more")
        return True

    print(f"\nInitializing database at {db_path}...")
    init_database(db_path)
    session = get_session(db_path)

    seeded = 0
    skipped = 0

    try:
        for raw in shows:
            item = {normalize_key(k): v for k, v in raw.items()}
            name = item.get("name") or item.get("title")
            if not name:
                print(f"⚠️  Skipping entry without a name: {raw}")
                skipped += 1
                continue

            show_id = parse_id(item.get("id"))
            if show_id is not None and session.get(CatalogShow, show_id) is not None:
                print(f"⚠️  Show {show_id} already exists, skipping")
                skipped += 1
                continue

            fields = {k: normalize_value(k, item.get(k)) for k in UPDATABLE_FIELDS if k in item}
            if fields.get("is_featured") is None:
                fields.pop("is_featured", None)
            session.add(CatalogShow(id=show_id, name=str(name).strip(), **fields))
            session.flush()
            seeded += 1

            if seeded % 50 == 0:
                print(f"  Seeded {seeded} shows...")

        session.commit()
        print("\n✅ Seeding complete!")
        print(f"   Seeded:  {seeded}")
        print(f"   Skipped: {skipped}")
    except Exception as e:
        session.rollback()
        print(f"❌ Failed to seed catalog: {e}")
        return False
    finally:
        session.close()

    return True


def main():
    parser = argparse.ArgumentParser(description="Seed the show catalog from a JSON export")
    parser.add_argument("--json", type=Path, default=Path("data/shows.json"),
                       help="Path to JSON export")
    parser.add_argument("--db", type=Path, default=Path("data/catalog.db"),
                       help="Path to SQLite database file")
    parser.add_argument("--dry-run", action="store_true",
                       help="Show what would be seeded without writing")

    args = parser.parse_args()

    if not args.json.exists():
        print(f"❌ JSON file not found: {args.json}")
        sys.exit(1)

    success = seed(args.json, args.db, dry_run=args.dry_run)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
