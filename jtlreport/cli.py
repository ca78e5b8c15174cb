"""Command-line interface for jtlreport."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from time import perf_counter
from typing import Any, List, Optional

from jtlreport.config import DEFAULT_CONFIG, ReportConfig
from jtlreport.logging import get_logger, set_global_log_level
from jtlreport.model.monitor import UNIT_MS
from jtlreport.model.record import truncate
from jtlreport.report.html import HtmlReportWriter, format_time
from jtlreport.report.tables import failures_by_label, monitor_frame, sort_frame, summarize
from jtlreport.results import results_to_dict, write_results
from jtlreport.runner import RunResult, aggregate_sources
from jtlreport.utils.output_paths import results_path_for_report

logger = get_logger(__name__)


def _format_table(headers: List[str], rows: List[List[str]], label_width: int = 40) -> str:
    """Format statistics rows as an ASCII table.

    The first column holds request labels and is cut to ``label_width``
    characters; the numeric columns are right-aligned.
    """
    if not rows:
        return ""

    body = [[truncate(row[0], label_width)] + list(row[1:]) for row in rows]
    widths = [
        max(len(headers[i]), *(len(row[i]) for row in body)) for i in range(len(headers))
    ]

    def format_row(cells: List[str]) -> str:
        first = f"{cells[0]:<{widths[0]}}"
        rest = [f"{cell:>{widths[i]}}" for i, cell in enumerate(cells) if i]
        return "   " + " | ".join([first] + rest)

    lines = [format_row(headers)]
    lines.append("   " + "-+-".join("-" * width for width in widths))
    lines.extend(format_row(row) for row in body)
    return "\n".join(lines)


def _format_duration(seconds: float) -> str:
    """Return a concise human-readable duration string.

    Examples:
        0.123 -> "123.0 ms"; 1.234 -> "1.23 s"; 75.2 -> "1m 15.2s".
    """
    if seconds < 1.0:
        return f"{seconds * 1000.0:.1f} ms"
    if seconds < 60.0:
        return f"{seconds:.2f} s"
    minutes = int(seconds // 60)
    rem = seconds - minutes * 60
    return f"{minutes}m {rem:.1f}s"


def _plural(n: int, singular: str, plural: Optional[str] = None) -> str:
    """Return grammatically correct unit for count n."""
    if n == 1:
        return singular
    return plural or (singular + "s")


def _load_config(config_path: Optional[Path], **overrides: Any) -> ReportConfig:
    base = ReportConfig.from_yaml(config_path) if config_path is not None else DEFAULT_CONFIG
    return base.merged(**overrides)


def _aggregate(sources: List[Path], config: ReportConfig) -> RunResult:
    """Run the aggregation and exit with an error when it did not succeed."""
    run = aggregate_sources(sources or [Path.cwd()], config)
    for outcome in run.failed_sources:
        print(f"❌ ERROR: Failed to read {outcome.path}: {outcome.error}")
    if not config.continue_on_error and run.failed_sources:
        sys.exit(1)
    if not run.processed_sources:
        print("❌ ERROR: No source could be read")
        sys.exit(1)
    return run


def _print_sources(run: RunResult) -> None:
    for outcome in run.processed_sources:
        print(
            f"   {outcome.path}: {outcome.records:,} {_plural(outcome.records, 'record')}"
            f" ({outcome.failures:,} failed) in {_format_duration(outcome.elapsed)}"
        )


def _generate_report(
    report: Path,
    sources: List[Path],
    results_override: Optional[Path],
    no_results: bool,
    config_path: Optional[Path],
    title: Optional[str],
    continue_on_error: bool,
) -> None:
    """Aggregate sources and write the HTML report (and JSON results)."""
    logger.info(f"Generating report: {report}")
    start = perf_counter()
    try:
        config = _load_config(
            config_path,
            report_title=title,
            continue_on_error=True if continue_on_error else None,
        )
        run = _aggregate(sources, config)
        _print_sources(run)

        HtmlReportWriter(run, config).write(report)
        print(f"✅ Report written to: {report}")

        if not no_results:
            results_path = results_path_for_report(report, results_override)
            write_results(run, results_path)
            logger.info(f"Results saved to: {results_path}")
            print(f"✅ Results written to: {results_path}")

        logger.info(f"Report generated in {_format_duration(perf_counter() - start)}")
    except FileNotFoundError as e:
        print(f"❌ ERROR: {e}")
        sys.exit(1)
    except ValueError as e:
        print(f"❌ ERROR: {e}")
        sys.exit(1)
    except OSError as e:
        print(f"❌ ERROR: Failed to write report: {type(e).__name__}: {e}")
        sys.exit(1)


def _print_summary(
    sources: List[Path],
    config_path: Optional[Path],
    as_json: bool,
    continue_on_error: bool,
) -> None:
    """Aggregate sources and print per-label statistics."""
    try:
        config = _load_config(
            config_path, continue_on_error=True if continue_on_error else None
        )
        run = _aggregate(sources, config)
    except (FileNotFoundError, ValueError) as e:
        print(f"❌ ERROR: {e}")
        sys.exit(1)

    if as_json:
        print(json.dumps(results_to_dict(run), indent=2, default=str))
        return

    registry = run.engine.registry
    summary = summarize(registry)
    if not summary["requests"]:
        print("❌ ERROR: No samples found in the given sources")
        sys.exit(1)

    print("📊 Sources:")
    _print_sources(run)

    failures = failures_by_label(registry)
    frame = sort_frame(
        monitor_frame(registry, UNIT_MS, with_histogram=False),
        config.sort_by,
        config.sort_order,
    )
    rows = [
        [
            str(r["label"]),
            f"{r['requests']:,}",
            f"{r['avg']:,.0f}",
            f"{r['min']:,.0f}",
            f"{r['max']:,.0f}",
            f"{r['stdev']:,.0f}",
            f"{failures.get(r['label'], 0):,}",
            format_time(r["first_seen"]),
            format_time(r["last_seen"]),
        ]
        for r in frame.to_dict(orient="records")
    ]
    print("\n📈 Pages (ms):")
    print(
        _format_table(
            ["Label", "Requests", "Avg", "Min", "Max", "StdDev", "Failures", "First", "Last"],
            rows,
        )
    )
    print(
        f"\n   Total: {summary['requests']:,} {_plural(summary['requests'], 'request')},"
        f" {summary['failures']:,} {_plural(summary['failures'], 'failure')},"
        f" success rate {summary['success_rate']:.2f} %,"
        f" average {summary['average_time']:,.0f} ms"
    )


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the ``jtlreport`` command.

    Args:
        argv: Optional list of command-line arguments. If ``None``, ``sys.argv``
            is used.
    """
    parser = argparse.ArgumentParser(
        prog="jtlreport",
        description="Aggregate JMeter result files into reports.",
    )

    # Global options
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--quiet", action="store_true", help="Only log warnings and errors"
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
        title="Available commands",
        metavar="{report,summary}",
        help="Available commands",
    )

    report_parser = subparsers.add_parser("report", help="Write an HTML report")
    report_parser.add_argument("report", type=Path, help="Path of the HTML report to write")
    report_parser.add_argument(
        "sources",
        type=Path,
        nargs="*",
        help="JTL/CSV files or directories (default: current directory)",
    )
    report_parser.add_argument(
        "--results",
        "-r",
        type=Path,
        default=None,
        help="Export results to JSON file (default: <report_name>.results.json)",
    )
    report_parser.add_argument(
        "--no-results",
        action="store_true",
        help="Disable results file generation",
    )
    report_parser.add_argument("--title", default=None, help="Report title")

    summary_parser = subparsers.add_parser(
        "summary", help="Print per-label statistics to the console"
    )
    summary_parser.add_argument(
        "sources",
        type=Path,
        nargs="*",
        help="JTL/CSV files or directories (default: current directory)",
    )
    summary_parser.add_argument(
        "--json", action="store_true", help="Print the results document as JSON"
    )

    for p in (report_parser, summary_parser):
        p.add_argument(
            "--config", "-c", type=Path, default=None, help="YAML configuration file"
        )
        p.add_argument(
            "--continue-on-error",
            action="store_true",
            help="Skip unreadable sources instead of stopping",
        )

    effective_args = sys.argv[1:] if argv is None else argv

    # If no arguments are provided, show help and exit cleanly
    if not effective_args:
        parser.print_help()
        raise SystemExit(0)

    args = parser.parse_args(effective_args)

    if args.verbose:
        set_global_log_level(logging.DEBUG)
        logger.debug("Debug logging enabled")
    elif args.quiet:
        set_global_log_level(logging.WARNING)
    else:
        set_global_log_level(logging.INFO)

    if args.command == "report":
        _generate_report(
            report=args.report,
            sources=args.sources,
            results_override=args.results,
            no_results=args.no_results,
            config_path=args.config,
            title=args.title,
            continue_on_error=args.continue_on_error,
        )
    elif args.command == "summary":
        _print_summary(
            sources=args.sources,
            config_path=args.config,
            as_json=args.json,
            continue_on_error=args.continue_on_error,
        )


if __name__ == "__main__":
    main()
