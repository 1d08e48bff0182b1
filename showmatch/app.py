import argparse
import json
from dataclasses import replace
from pathlib import Path

from . import __version__
from .config import Settings, load_settings
from .csv_import import CsvImportError, import_rows, read_import_rows
from .database import init_database, get_session
from .env import load_env
from .image_matching import run_image_matching
from .logger import get_logger
from .matcher import DEFAULT_CONFIG, classify_match, find_best_match
from .storage import list_all_shows, list_unmatched_shows

RULE = "=" * 50
MAX_UNMATCHED_LISTED = 20


def _open_session(db_path: Path):
    if not db_path.exists():
        raise SystemExit(f"Database not found: {db_path}. Run 'showmatch init-db' first.")
    return get_session(db_path)


def _settings(args: argparse.Namespace) -> Settings:
    settings: Settings = args.settings
    overrides = {}
    for attr in ("db_path", "source_dir", "output_dir"):
        value = getattr(args, attr, None)
        if value is not None:
            overrides[attr] = Path(value)
    for attr in ("high_confidence", "low_confidence"):
        value = getattr(args, attr, None)
        if value is not None:
            overrides[attr] = value
    return replace(settings, **overrides)


def cmd_match(args: argparse.Namespace) -> None:
    candidates = list(args.candidates or [])
    if args.candidates_file:
        path = Path(args.candidates_file)
        if not path.exists():
            raise SystemExit(f"Candidates file not found: {path}")
        with path.open("r", encoding="utf-8") as f:
            candidates.extend(line.strip() for line in f if line.strip() and not line.startswith("#"))
    if not candidates:
        raise SystemExit("No candidates given. Pass them as arguments or with --candidates-file.")

    result = find_best_match(args.target, candidates)
    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return
    if not result.matched:
        print(f"No match for: {args.target}")
        return
    b = result.breakdown
    print(f"Match: {result.candidate} ({result.score:.1f}%, {classify_match(result)} confidence)")
    print(f"  Direct similarity: {b.direct_similarity:.1f}")
    print(f"  Keyword score:     {b.keyword_score:.1f}")
    print(f"  Exact word bonus:  {b.exact_word_bonus:.1f}")
    print(f"  Partial bonus:     {b.partial_bonus:.1f}")


def _image_match_config(low: float):
    """Matcher config whose acceptance floor does not hide results scoring at least ``low``."""
    if low >= DEFAULT_CONFIG.acceptance_floor:
        return DEFAULT_CONFIG
    return replace(DEFAULT_CONFIG, acceptance_floor=low)


def cmd_match_images(args: argparse.Namespace) -> None:
    settings = _settings(args)
    session = _open_session(settings.db_path)
    try:
        report = run_image_matching(
            session,
            source_dir=settings.source_dir,
            output_dir=settings.output_dir,
            prefix=settings.image_url_prefix,
            high=settings.high_confidence,
            low=settings.low_confidence,
            dry_run=args.dry_run,
            config=_image_match_config(settings.low_confidence),
        )
    finally:
        session.close()

    print(f"Shows to match: {report.shows_considered}")
    print(f"Available images: {report.images_available}")
    print(f"Already used images: {report.images_already_used}\n")

    print(f"HIGH CONFIDENCE MATCHES ({len(report.high)}):")
    print(RULE)
    published = {id(m) for m in report.processed}
    for m in report.high:
        if args.dry_run:
            marker = "~"
        else:
            marker = "✓" if id(m) in published else "✗"
        print(f"{marker} {m.show_name} -> {m.image_file} ({m.result.score:.1f}%)")

    print(f"\nLOW CONFIDENCE MATCHES ({len(report.low)}):")
    print(RULE)
    for m in report.low:
        print(f"? {m.show_name} -> {m.image_file} ({m.result.score:.1f}%)")

    print(f"\nNO MATCHES FOUND ({len(report.unmatched)}):")
    print(RULE)
    for name in report.unmatched[:MAX_UNMATCHED_LISTED]:
        print(f"✗ {name}")
    if len(report.unmatched) > MAX_UNMATCHED_LISTED:
        print(f"... and {len(report.unmatched) - MAX_UNMATCHED_LISTED} more")

    print(f"\n{RULE}")
    print("MATCHING RESULTS SUMMARY:")
    print(RULE)
    if args.dry_run:
        print(f"Would process: {len(report.high)} new images (dry run)")
    else:
        print(f"Successfully processed: {len(report.processed)} new images")
        print(f"Failed: {len(report.failed)}")
    print(f"Total optimized shows: {report.total_optimized}")
    print(f"Low confidence matches: {len(report.low)}")
    print(f"No matches found: {len(report.unmatched)}")
    get_logger().log_metrics_summary()


def cmd_import_csv(args: argparse.Namespace) -> None:
    settings = _settings(args)
    try:
        rows = read_import_rows(Path(args.input))
    except CsvImportError as e:
        raise SystemExit(str(e))

    session = _open_session(settings.db_path)
    try:
        report = import_rows(session, rows, min_score=args.min_score, dry_run=args.dry_run)
        for show_name in report.updated:
            fields = ", ".join(sorted(report.changes[show_name]))
            print(f"[{'dry-run' if args.dry_run else 'updated'}] {show_name}: {fields}")
        # Shows are still attached here
        for m in report.below_threshold:
            print(f"[review] {m.name} -> {m.show.name} ({m.result.score:.1f}%)")
    finally:
        session.close()

    for name in report.unmatched:
        print(f"[no-match] {name}")
    print(
        f"Done{' (dry run)' if args.dry_run else ''}. rows={report.rows} updated={len(report.updated)} "
        f"unchanged={len(report.unchanged)} review={len(report.below_threshold)} "
        f"unmatched={len(report.unmatched)} failed={len(report.failed)}"
    )


def cmd_list(args: argparse.Namespace) -> None:
    settings = _settings(args)
    session = _open_session(settings.db_path)
    try:
        if args.unmatched:
            shows = list_unmatched_shows(session, settings.image_url_prefix)
        else:
            shows = list_all_shows(session)
        if not shows:
            print("No shows found.")
            return
        print(f"Found {len(shows)} shows in {settings.db_path}:\n")
        for show in shows:
            print(f"ID: {show.id}")
            print(f"  Name: {show.name}")
            print(f"  Image: {show.image_url or '-'}")
            if show.stimulation_score is not None:
                print(f"  Stimulation score: {show.stimulation_score}")
            print()
    finally:
        session.close()


def cmd_init_db(args: argparse.Namespace) -> None:
    settings = _settings(args)
    init_database(settings.db_path)
    print(f"Database ready: {settings.db_path}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="showmatch", description="Fuzzy show-name matching and catalog tools")
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")

    mt = subparsers.add_parser("match", help="Find the best fuzzy match for a show name among candidates")
    mt.add_argument("--target", required=True, help="Show name to match")
    mt.add_argument("candidates", nargs="*", help="Candidate names or filenames")
    mt.add_argument("--candidates-file", help="Text file with one candidate per line")
    mt.add_argument("--json", action="store_true", help="Print the full result as JSON")
    mt.set_defaults(func=cmd_match)

    mi = subparsers.add_parser("match-images", help="Match unmatched shows to source images and publish them")
    mi.add_argument("--db", dest="db_path", help="Path to SQLite catalog (default: $SHOWMATCH_DB or data/catalog.db)")
    mi.add_argument("--source-dir", help="Directory of source images")
    mi.add_argument("--output-dir", help="Directory for optimized images")
    mi.add_argument("--high", dest="high_confidence", type=float, help="Minimum score to publish (default 60)")
    mi.add_argument("--low", dest="low_confidence", type=float, help="Minimum score to report for review (default 40; lower values also lower the match floor)")
    mi.add_argument("--dry-run", action="store_true", help="Report matches without writing images or the database")
    mi.set_defaults(func=cmd_match_images)

    ic = subparsers.add_parser("import-csv", help="Merge CSV rows into catalog shows by fuzzy name")
    ic.add_argument("--input", required=True, help="CSV file with a name/title column")
    ic.add_argument("--db", dest="db_path", help="Path to SQLite catalog")
    ic.add_argument("--min-score", type=float, default=60.0, help="Minimum fuzzy score to apply a row (default 60)")
    ic.add_argument("--dry-run", action="store_true", help="Show changes without writing")
    ic.set_defaults(func=cmd_import_csv)

    lst = subparsers.add_parser("list", help="List catalog shows")
    lst.add_argument("--db", dest="db_path", help="Path to SQLite catalog")
    lst.add_argument("--unmatched", action="store_true", help="Only shows without an optimized image")
    lst.set_defaults(func=cmd_list)

    idb = subparsers.add_parser("init-db", help="Create the catalog tables")
    idb.add_argument("--db", dest="db_path", help="Path to SQLite catalog")
    idb.set_defaults(func=cmd_init_db)

    return parser


def main(argv=None):
    # Load .env if present (SHOWMATCH_DB, SHOWMATCH_SOURCE_DIR, etc.)
    load_env()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    try:
        settings = load_settings()
    except ValueError as e:
        raise SystemExit(str(e))
    args.settings = settings
    get_logger(level=settings.log_level, log_dir=settings.log_dir)

    if hasattr(args, "func"):
        args.func(args)
        return

    parser.print_help()


if __name__ == "__main__":
    main()
