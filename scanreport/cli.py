from __future__ import annotations

import argparse
import gzip
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table

from .api import ApiClient
from .config import DEFAULT_TIMEOUT_SECONDS, Settings, resolve_api_key, resolve_host
from .console import RichLogger
from .errors import ReportError
from .gitcontext import GitContext, apply_env_overrides, load_git_context
from .models import Report, ScanSession
from .packaging import report_json
from .report import get_report, load_report_data
from .saas import send_report


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--report-data",
        required=True,
        help="JSON file with the scanner's findings, dataflow and discovered files.",
    )
    parser.add_argument("--target", default=".", help="Scan target the findings refer to (default: .).")
    parser.add_argument(
        "--git-context",
        help="JSON file describing the repository. BEARER_* env vars fill in missing values.",
    )
    parser.add_argument("--rules-version", default="", help="Version of the rules used for the scan.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose debug logs")


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="scanreport",
        description="Assemble scan results into a collector report and upload it.",
    )
    sub = ap.add_subparsers(dest="command", required=True)

    build = sub.add_parser("build", help="Assemble the report and write it locally.")
    _add_common_arguments(build)
    build.add_argument(
        "--output",
        required=True,
        help="Destination file. A .gz suffix writes a gzip compressed report.",
    )
    build.add_argument(
        "--strict",
        action="store_true",
        help="Fail instead of writing a report without repository metadata.",
    )

    send = sub.add_parser("send", help="Assemble, package and upload the report.")
    _add_common_arguments(send)
    send.add_argument("--api-key", help="Collector API key. You can also set BEARER_API_KEY.")
    send.add_argument("--host", help="Collector base URL. You can also set BEARER_HOST.")
    send.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT_SECONDS,
        help="Per request timeout in seconds (default: 30).",
    )

    return ap


def _load_git_context(raw: Optional[str]) -> Optional[GitContext]:
    context = load_git_context(Path(raw).expanduser()) if raw else None
    return apply_env_overrides(context)


def _print_summary(console: Console, report: Report) -> None:
    table = Table(title="Report Summary", header_style="bold")
    table.add_column("Severity", style="cyan")
    table.add_column("Findings", justify="right")
    table.add_column("Ignored", justify="right")
    for severity in sorted(set(report.findings) | set(report.ignored_findings)):
        table.add_row(
            severity,
            str(len(report.findings.get(severity, []))),
            str(len(report.ignored_findings.get(severity, []))),
        )
    console.print(table)


def run_build(args) -> int:
    console = Console()
    logger = RichLogger(verbose=args.verbose)

    try:
        report_data = load_report_data(Path(args.report_data).expanduser())
        git_context = _load_git_context(args.git_context)
    except (OSError, ValueError) as exc:
        logger.error(str(exc))
        return 2

    settings = Settings(target=args.target, rules_version=args.rules_version, verbose=args.verbose)
    try:
        report = get_report(report_data, settings, git_context, ensure_meta=args.strict)
    except ReportError as exc:
        logger.error(str(exc))
        return 1

    output = Path(args.output).expanduser()
    content = report_json(report).encode("utf-8")
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        if output.suffix == ".gz":
            with gzip.open(output, "wb") as handle:
                handle.write(content)
        else:
            output.write_bytes(content)
    except OSError as exc:
        logger.error(f"Failed to write {output}: {exc}")
        return 1

    _print_summary(console, report)
    logger.done(f"Report written to: {output}")
    return 0


def run_send(args) -> int:
    console = Console()
    logger = RichLogger(verbose=args.verbose)

    api_key = resolve_api_key(args.api_key)
    if not api_key:
        logger.error("Missing API key. Use --api-key or set BEARER_API_KEY.")
        return 2

    try:
        report_data = load_report_data(Path(args.report_data).expanduser())
        git_context = _load_git_context(args.git_context)
    except (OSError, ValueError) as exc:
        logger.error(str(exc))
        return 2

    settings = Settings(
        target=args.target,
        rules_version=args.rules_version,
        host=resolve_host(args.host),
        api_key=api_key,
        timeout=args.timeout,
        verbose=args.verbose,
    )
    session = ScanSession(api=ApiClient(api_key, host=settings.host, timeout=settings.timeout))

    if not send_report(settings, report_data, git_context, session, logger):
        logger.error(session.error or "Report upload failed.")
        return 1

    if report_data.saas_report is not None:
        _print_summary(console, report_data.saas_report)
    logger.done(f"Report sent to {settings.host}")
    return 0


def main() -> int:
    args = build_arg_parser().parse_args()
    if args.command == "build":
        return run_build(args)
    if args.command == "send":
        return run_send(args)
    return 2
