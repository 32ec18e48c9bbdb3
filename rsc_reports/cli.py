"""Command-line interface: ``rsc-reports`` / ``python -m rsc_reports``.

Outputs:
- Aligned table (default)
- --json for the full records
- --csv PATH to also write the records to a CSV file

Exit codes: 0 ok, 1 fetch error, 2 configuration error.
"""

from __future__ import annotations

import argparse
import csv
import datetime as dt
import json
import sys
from typing import Any, Dict, List, Optional

from .catalog import get_spec, list_specs
from .collectors.base import CollectorError
from .config import Config, ConfigError
from .data.models import SummaryGroup
from .reports import RSCReports

EXIT_OK = 0
EXIT_FETCH_ERROR = 1
EXIT_CONFIG_ERROR = 2

SUCCESS_RATE_VIEWS = ["object"] + [g.value for g in SummaryGroup]


# --- Output helpers -----------------------------------------------------------

def format_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, dt.datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, float):
        return f"{value:.2f}".rstrip("0").rstrip(".")
    return str(value)


def _columns(rows: List[Dict[str, Any]]) -> List[str]:
    cols: List[str] = []
    for r in rows:
        for key in r:
            if key not in cols:
                cols.append(key)
    return cols


def print_table(rows: List[Dict[str, Any]], columns: Optional[List[str]] = None) -> None:
    if not rows:
        print("No records found.")
        return

    cols = columns or _columns(rows)
    widths = {c: max(len(c), max(len(format_cell(r.get(c))) for r in rows)) for c in cols}

    header = "  ".join(c.upper().ljust(widths[c]) for c in cols)
    print(header)
    print("-" * len(header))
    for r in rows:
        print("  ".join(format_cell(r.get(c)).ljust(widths[c]) for c in cols).rstrip())


def _json_default(value: Any) -> Any:
    if isinstance(value, (dt.datetime, dt.date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def write_csv(rows: List[Dict[str, Any]], path: str) -> None:
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=_columns(rows))
        w.writeheader()
        for r in rows:
            w.writerow({k: v.isoformat() if isinstance(v, dt.datetime) else v for k, v in r.items()})


def emit(rows: List[Dict[str, Any]], args: argparse.Namespace) -> None:
    if args.csv_path:
        write_csv(rows, args.csv_path)
    if args.json:
        print(json.dumps(rows, indent=2, default=_json_default))
    else:
        print_table(rows)


def parse_var(text: str) -> tuple:
    """Parse ``key=value``; the value is read as JSON when it parses."""
    key, sep, raw = text.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected key=value, got '{text}'")
    try:
        value = json.loads(raw)
    except ValueError:
        value = raw
    return key, value


def parse_month(text: str) -> str:
    try:
        dt.datetime.strptime(text, "%Y-%m")
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM, got '{text}'")
    return text


# --- Commands -----------------------------------------------------------------

def cmd_types(args: argparse.Namespace, reports: Optional[RSCReports]) -> List[Dict[str, Any]]:
    return [
        {
            "type": spec.name,
            "name": spec.display_name,
            "queries": len(spec.queries),
            "requires": ", ".join(spec.required_variables),
            "description": spec.description,
        }
        for spec in list_specs()
    ]


def cmd_get(args: argparse.Namespace, reports: RSCReports) -> List[Dict[str, Any]]:
    variables = dict(args.vars or [])
    if args.page_size:
        reports.config.reports.page_size = args.page_size
    return reports.get(args.type, **variables)


def cmd_snapshots(args: argparse.Namespace, reports: RSCReports) -> List[Dict[str, Any]]:
    if args.days is not None:
        return reports.get_recent_snapshots(args.object_id, args.days)
    return reports.get_object_snapshots(args.object_id)


def cmd_success_rate(args: argparse.Namespace, reports: RSCReports) -> List[Dict[str, Any]]:
    report = reports.get_backup_success_rate(
        days_to_report=args.days,
        backup_window_end_hour=args.end_hour,
        skip_days=args.skip_days,
        month=args.month,
    )
    if args.by == "object":
        return [r.to_record() for r in report.objects]
    return [s.to_record() for s in report.summaries(SummaryGroup(args.by))]


def cmd_summary(args: argparse.Namespace, reports: RSCReports) -> List[Dict[str, Any]]:
    if args.kind == "protection":
        return reports.get_protection_summary()
    if args.kind == "cluster-sla":
        return reports.get_cluster_sla_summary()
    if args.kind == "clusters":
        return reports.get_clusters()
    return reports.get_storage_summary()


# --- CLI ----------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    output = argparse.ArgumentParser(add_help=False)
    output.add_argument("--json", action="store_true", help="Output records as JSON")
    output.add_argument("--csv", dest="csv_path", help="Also write records to CSV at this path")

    parser = argparse.ArgumentParser(
        prog="rsc-reports",
        description="Flat inventory and protection reports from Rubrik Security Cloud.",
    )
    parser.add_argument("--config", help="Path to config.yaml (default: search standard locations)")
    parser.add_argument("--url", help="RSC console URL (overrides config and RSC_URL)")
    parser.add_argument("--ca-bundle", default=None, help="Path to a custom CA bundle PEM")
    parser.add_argument("--insecure", action="store_true", help="Disable TLS certificate verification")
    parser.add_argument("-v", "--verbose", action="store_true", help="Print progress lines")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("types", parents=[output], help="List available report types")
    p.set_defaults(func=cmd_types, needs_connection=False)

    p = sub.add_parser("get", parents=[output], help="Fetch one report type")
    p.add_argument("type", help="Report type (see 'types')")
    p.add_argument("--var", dest="vars", action="append", type=parse_var, metavar="KEY=VALUE",
                   help="GraphQL variable; value parsed as JSON when possible (repeatable)")
    p.add_argument("--page-size", type=int, default=None, help="Override the page size")
    p.set_defaults(func=cmd_get, needs_connection=True)

    p = sub.add_parser("snapshots", parents=[output], help="Snapshot history of one object")
    p.add_argument("object_id", help="Workload id (fid)")
    p.add_argument("--days", type=int, default=None, help="Only the last N days")
    p.set_defaults(func=cmd_snapshots, needs_connection=True)

    p = sub.add_parser("success-rate", parents=[output], help="Daily backup success rate")
    p.add_argument("--days", type=int, default=None, help="Number of daily windows")
    p.add_argument("--end-hour", type=int, default=None, help="UTC hour each window ends at (0-23)")
    p.add_argument("--skip-days", type=int, default=None, help="Move the newest window back N days")
    p.add_argument("--month", type=parse_month, default=None, help="Report a calendar month (YYYY-MM)")
    p.add_argument("--by", choices=SUCCESS_RATE_VIEWS, default="object", help="Per object or a summary")
    p.set_defaults(func=cmd_success_rate, needs_connection=True)

    p = sub.add_parser("summary", parents=[output], help="Inventory roll-ups")
    p.add_argument("kind", choices=["protection", "cluster-sla", "clusters", "storage"])
    p.set_defaults(func=cmd_summary, needs_connection=True)

    return parser


def load_config(args: argparse.Namespace) -> Config:
    config = Config.load(args.config)
    if args.url:
        config.rsc.url = args.url
    if args.insecure:
        config.rsc.verify = False
    elif args.ca_bundle:
        config.rsc.ca_bundle = args.ca_bundle
    if args.verbose:
        config.reports.verbose = True
    config.validate()
    return config


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "get":
        try:
            get_spec(args.type)
        except KeyError as e:
            sys.stderr.write(f"Error: {e.args[0]}\n")
            return EXIT_CONFIG_ERROR

    if not args.needs_connection:
        emit(args.func(args, None), args)
        return EXIT_OK

    try:
        config = load_config(args)
    except ConfigError as e:
        sys.stderr.write(f"Configuration error: {e}\n")
        return EXIT_CONFIG_ERROR

    with RSCReports.from_config(config) as reports:
        try:
            rows = args.func(args, reports)
        except CollectorError as e:
            sys.stderr.write(f"Error: {e}\n")
            return EXIT_FETCH_ERROR
        except ValueError as e:
            sys.stderr.write(f"Error: {e}\n")
            return EXIT_CONFIG_ERROR

    emit(rows, args)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
