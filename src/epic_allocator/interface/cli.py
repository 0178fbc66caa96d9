import argparse
import dataclasses
import json
import logging
import sys
import uuid

from pydantic import TypeAdapter, ValidationError

from epic_allocator.application.use_cases import (
    analyze_developer,
    analyze_developers,
    auto_assign_epics,
    classify_epics,
    export_rows,
    reassign_epic,
    summarize_assignments,
)
from epic_allocator.config import Settings, close_classifier
from epic_allocator.domain.errors import AllocatorError
from epic_allocator.domain.models import DeveloperProfile, Epic
from epic_allocator.infrastructure.exporters import rows_to_csv, rows_to_json, write_csv
from epic_allocator.infrastructure.git_cli_reader import GitCliReader

_EPICS = TypeAdapter(list[Epic])
_PROFILES = TypeAdapter(list[DeveloperProfile])


def _parse_move(value: str) -> tuple[str, str]:
    """Parse 'EPIC_ID=DEVELOPER' into a pair."""
    epic_id, sep, developer = value.partition("=")
    if not sep or not epic_id or not developer:
        raise argparse.ArgumentTypeError(
            f"Invalid reassignment '{value}'. Use EPIC_ID=DEVELOPER"
        )
    return epic_id, developer


def _error_exit(msg: str) -> None:
    """Print error message to stderr and exit with code 1."""
    print(f"Error: {msg}", file=sys.stderr)
    sys.exit(1)


def _header_fmt(fmt_spec: str) -> str:
    """Extract header-safe format from a value format spec.

    E.g. ">7.1f" → ">7", "<25" → "<25", ">6d" → ">6".
    """
    stripped = fmt_spec.rstrip("df%")
    dot = stripped.find(".")
    if dot != -1:
        stripped = stripped[:dot]
    return stripped


def _print_table(rows, columns, limit=50, key_attr="epic_id", max_key=40, suffix="rows") -> None:
    """Generic table printer.

    Args:
        rows: list of objects to print.
        columns: list of (header, format_spec, value_fn) tuples.
            - format_spec None marks the key column (auto-sized from key_attr).
        limit: max rows to print.
        key_attr: attribute holding the key column value.
        max_key: max key column width.
        suffix: word used in "... and N more {suffix}" message.
    """
    if not rows:
        return

    key_width = min(max(len(str(getattr(r, key_attr))) for r in rows), max_key)

    parts = []
    for header, fmt_spec, _value_fn in columns:
        if fmt_spec is None:
            key_width = max(key_width, len(header))
            parts.append(f"{header:<{key_width}}")
        else:
            parts.append(f"{header:{_header_fmt(fmt_spec)}}")
    header_line = "  ".join(parts)
    print(header_line)
    print("-" * len(header_line))

    for r in rows[:limit]:
        parts = []
        for _header, fmt_spec, value_fn in columns:
            if fmt_spec is None:
                key = str(getattr(r, key_attr))
                if len(key) > key_width:
                    key = key[:key_width - 3] + "..."
                parts.append(f"{key:<{key_width}}")
            else:
                parts.append(f"{value_fn(r):{fmt_spec}}")
        print("  ".join(parts))

    if len(rows) > limit:
        print(f"  ... and {len(rows) - limit} more {suffix}")


def _load_json(path: str):
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except OSError as e:
        _error_exit(f"cannot read {path}: {e.strerror}")
    except json.JSONDecodeError as e:
        _error_exit(f"{path} is not valid JSON: {e}")


def _load_list(path: str, adapter: TypeAdapter, key: str) -> list:
    """Load a JSON list, either bare or wrapped as {key: [...]}."""
    data = _load_json(path)
    if isinstance(data, dict) and key in data:
        data = data[key]
    try:
        return adapter.validate_python(data)
    except ValidationError as e:
        _error_exit(f"{path}: invalid {key}:\n{e}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="epic-allocator",
        description="Developer profiling and epic assignment",
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="Increase log verbosity (-v info, -vv debug)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="Profile developers from a local git repository")
    analyze.add_argument("repo_path", help="Path to a local git repository")
    analyze.add_argument(
        "--author", action="append", default=None, metavar="NAME",
        help="Author to profile (repeatable; default: every author)",
    )
    analyze.add_argument(
        "--limit", type=int, default=None, metavar="N",
        help="Consider at most N most recent commits per author",
    )
    analyze.add_argument(
        "--detail-limit", type=int, default=None, metavar="N",
        help="Commits used for size/file statistics (default: 200)",
    )
    analyze.add_argument(
        "--json", action="store_true",
        help="Print profiles as JSON (input for 'assign')",
    )

    classify = sub.add_parser("classify", help="Classify epics into categories")
    classify.add_argument("epics", help="JSON file with a list of epics")
    classify.add_argument("--ai-url", default=None, help="AI classification service base URL")

    assign = sub.add_parser("assign", help="Auto-assign epics to developers")
    assign.add_argument("epics", help="JSON file with a list of epics")
    assign.add_argument("developers", help="JSON file with developer profiles")
    assign.add_argument("--ai-url", default=None, help="AI classification service base URL")
    assign.add_argument(
        "--reassign", type=_parse_move, action="append", default=[],
        metavar="EPIC_ID=DEVELOPER",
        help="Manually move an epic after auto-assignment (repeatable)",
    )
    assign.add_argument("--csv", metavar="PATH", help="Write assignments to a CSV file")
    assign.add_argument("--json", action="store_true", help="Print flattened rows as JSON")
    assign.add_argument("--save", action="store_true", help="Store the run in DuckDB")
    assign.add_argument("--db", metavar="PATH", default=None, help="DuckDB file path")

    runs = sub.add_parser("runs", help="List stored assignment runs")
    runs.add_argument("--db", metavar="PATH", default=None, help="DuckDB file path")

    export = sub.add_parser("export", help="Export a stored run as CSV")
    export.add_argument("run_id", help="Run ID (see 'runs')")
    export.add_argument("--output", metavar="PATH", help="CSV file (default: stdout)")
    export.add_argument("--db", metavar="PATH", default=None, help="DuckDB file path")

    serve = sub.add_parser("serve", help="Launch the HTTP API")
    serve.add_argument("--port", type=int, default=8000, metavar="PORT")
    serve.add_argument("--db", metavar="PATH", default=None, help="DuckDB file path")

    return parser


def main(argv: list[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)
    settings = Settings.from_env()

    if args.verbose >= 2:
        level = logging.DEBUG
    elif args.verbose == 1:
        level = logging.INFO
    else:
        level = getattr(logging, settings.log_level, logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    if getattr(args, "db", None):
        settings.db_path = args.db
    if getattr(args, "ai_url", None):
        settings.ai_url = args.ai_url

    handlers = {
        "analyze": _cmd_analyze,
        "classify": _cmd_classify,
        "assign": _cmd_assign,
        "runs": _cmd_runs,
        "export": _cmd_export,
        "serve": _cmd_serve,
    }
    try:
        handlers[args.command](args, settings)
    except (AllocatorError, ValueError, OSError) as e:
        _error_exit(str(e))


def _cmd_analyze(args, settings: Settings) -> None:
    try:
        reader = GitCliReader(args.repo_path)
    except ValueError as e:
        _error_exit(str(e))

    detail_limit = args.detail_limit if args.detail_limit is not None else settings.detail_limit
    authors = args.author or reader.authors()
    if not authors:
        print("No commits found.")
        return

    if len(authors) == 1:
        profiles = [analyze_developer(reader, authors[0], args.limit, detail_limit)]
        failures = {}
    else:
        batch = analyze_developers(reader, authors, args.limit, detail_limit)
        profiles, failures = batch.developers, batch.failures

    if args.json:
        print(_PROFILES.dump_json(profiles, indent=2).decode())
        return

    print(f"Repository:   {args.repo_path}")
    print(f"Developers:   {len(profiles)}")
    for profile in profiles:
        print()
        _print_profile(profile)
    for username, reason in failures.items():
        print(f"\nSkipped {username}: {reason}")


def _print_profile(profile: DeveloperProfile) -> None:
    a = profile.analysis
    print(f"--- {profile.username} ---")
    print(f"Experience:      {a.experience_level.level} ({a.experience_level.score}/100)")
    print(f"Expertise:       {a.expertise.primary}")
    for entry in a.expertise.ranked:
        print(f"  {entry.name:<24} {entry.score:>5}")
    if a.expertise.technologies:
        print(f"Technologies:    {', '.join(a.expertise.technologies)}")
    print(f"Commits:         {a.total_commits} ({a.on_time_count} on-time, {a.late_count} late)")
    print(f"On-time:         {a.on_time_percentage:.1f}%")
    print(f"Message quality: {a.message_quality_score:.1f}")
    print(f"Consistency:     {a.consistency_score:.1f}")
    print(f"Avg commit size: {a.average_commit_size} lines "
          f"(+{a.total_lines_added} / -{a.total_lines_deleted})")
    sizes = ", ".join(f"{b.label}: {b.count}" for b in a.commit_size_distribution)
    print(f"Commit sizes:    {sizes}")


def _cmd_classify(args, settings: Settings) -> None:
    epics = _load_list(args.epics, _EPICS, "epics")
    classifier = settings.ai_classifier()
    try:
        results = classify_epics(epics, ai=classifier)
    finally:
        close_classifier(classifier)
    if not results:
        print("No epics found.")
        return
    _print_table(results, [
        ("Epic", None, None),
        ("Category", "<22", lambda r: r.classification.primary),
        ("Confidence", "<10", lambda r: r.classification.confidence),
        ("Method", "<11", lambda r: r.classification.method),
        ("Alternatives", "<", lambda r: ", ".join(r.classification.alternatives)),
    ], suffix="epics")


def _cmd_assign(args, settings: Settings) -> None:
    epics = _load_list(args.epics, _EPICS, "epics")
    developers = _load_list(args.developers, _PROFILES, "developers")

    classifier = settings.ai_classifier()
    try:
        result = auto_assign_epics(epics, developers, ai=classifier)
    finally:
        close_classifier(classifier)
    for epic_id, developer in args.reassign:
        reassign_epic(
            result.assignments, epic_id, developer,
            result.workload_distribution, developers=developers,
        )
    if args.reassign:
        result = dataclasses.replace(
            result,
            summary=summarize_assignments(
                result.assignments, result.workload_distribution,
                developer_count=len(developers),
            ),
        )

    rows = export_rows(result.assignments)
    if args.json:
        print(rows_to_json(rows))
    else:
        _print_assignments(result)

    if args.csv:
        write_csv(rows, args.csv)
        print(f"\nCSV written: {args.csv}")

    if args.save:
        from epic_allocator.infrastructure.assignment_store import AssignmentStore

        run_id = str(uuid.uuid4())
        store = AssignmentStore(db_path=settings.db_path)
        store.save_run(run_id, result)
        store.close()
        print(f"\nRun stored: {run_id}")


def _print_assignments(result) -> None:
    s = result.summary
    print(f"--- Assignments ({s.total_epics} epics, {s.total_story_points} story points) ---\n")
    _print_table(export_rows(result.assignments), [
        ("Epic", None, None),
        ("Title", "<30", lambda r: r.epic_title[:30]),
        ("Category", "<22", lambda r: r.category),
        ("Pts", ">4d", lambda r: r.story_points),
        ("Developer", "<16", lambda r: r.developer),
        ("Score", ">5d", lambda r: r.score),
        ("Confidence", "<10", lambda r: r.confidence),
    ], suffix="assignments")

    print("\n--- Workload ---\n")
    top = max(result.workload_distribution.values(), default=0)
    for username, points in result.workload_distribution.items():
        bar = "#" * (round(points / top * 30) if top > 0 else 0)
        print(f"{username:<20} {points:>5}  {bar}")

    print(f"\nAvg points/dev:  {s.avg_story_points_per_dev:.1f}")
    print(f"Confidence:      high {s.high_confidence}, medium {s.medium_confidence}, "
          f"low {s.low_confidence}, manual {s.manual}")


def _cmd_runs(args, settings: Settings) -> None:
    from epic_allocator.infrastructure.assignment_store import AssignmentStore

    store = AssignmentStore(db_path=settings.db_path)
    runs = store.list_runs()
    store.close()
    _print_runs(runs)


def _print_runs(runs: list[dict]) -> None:
    """Print past runs in a table."""
    if not runs:
        print("No runs found.")
        return

    header = (
        f"{'Run ID':<36}  "
        f"{'Date':<19}  "
        f"{'Epics':>5}  "
        f"{'Points':>6}  "
        f"{'Devs':>4}  "
        f"{'High':>4}  "
        f"{'Manual':>6}"
    )
    print(header)
    print("-" * len(header))
    for r in runs:
        print(
            f"{r['run_id']:<36}  "
            f"{r['created_at'].strftime('%Y-%m-%d %H:%M:%S'):<19}  "
            f"{r['total_epics']:>5}  "
            f"{r['total_story_points']:>6}  "
            f"{r['developer_count']:>4}  "
            f"{r['high_confidence']:>4}  "
            f"{r['manual']:>6}"
        )


def _cmd_export(args, settings: Settings) -> None:
    from epic_allocator.infrastructure.assignment_store import AssignmentStore

    store = AssignmentStore(db_path=settings.db_path)
    try:
        if store.get_run(args.run_id) is None:
            _error_exit(f"Run {args.run_id} not found")
        rows = store.get_rows(args.run_id)
    finally:
        store.close()

    if args.output:
        write_csv(rows, args.output)
        print(f"CSV written: {args.output}")
    else:
        print(rows_to_csv(rows), end="")


def _cmd_serve(args, settings: Settings) -> None:
    try:
        from epic_allocator.web.server import launch
    except ImportError:
        _error_exit(
            "web dependencies not installed. "
            "Run: pip install epic-allocator[web]"
        )
    launch(db_path=settings.db_path, port=args.port)
