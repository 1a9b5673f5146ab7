#!/usr/bin/env python3
"""
Decision Log Viewer - Command Line Entry Point.

============================================================
RESPONSIBILITY
============================================================
Prints one page of a trader's decision log, or the recent
news feed, from the command line.

- Provides argparse-based CLI
- Loads configuration from environment or YAML
- Thin consumer of decision_log and news_ingestion

============================================================
USAGE
============================================================
python app.py decisions --trader-id trader-1
python app.py decisions --trader-id trader-1 --search btc --status failed --page 2
python app.py news --limit 10

Environment-based configuration:
    DECISION_LOG_API_URL=http://localhost:8080 python app.py decisions -t trader-1

============================================================
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional

from decision_log import (
    DecisionLogConfig,
    DecisionLogError,
    DecisionLogPage,
    DecisionLogViewer,
    EmptyReason,
    HttpDecisionSource,
    StatusFilter,
)
from news_ingestion import CryptoNews, IngestionError, JinseLivesCollector


logger = logging.getLogger("decision_log.cli")


# ============================================================
# CLI ARGUMENT PARSER
# ============================================================

def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="decision-log",
        description="Browse automated trading decision cycles",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s decisions --trader-id trader-1
  %(prog)s decisions -t trader-1 --search btc --status failed --page 2
  %(prog)s news --limit 10
        """
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=os.getenv("LOG_LEVEL", "WARNING"),
        help="Logging level (default: LOG_LEVEL or WARNING)",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version="%(prog)s 1.0.0",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # --------------------------------------------------------
    # decisions
    # --------------------------------------------------------
    decisions_parser = subparsers.add_parser(
        "decisions",
        help="Print one page of a trader's decision log",
    )
    decisions_parser.add_argument(
        "--trader-id", "-t",
        type=str,
        required=True,
        help="Trader/strategy identifier",
    )
    decisions_parser.add_argument(
        "--search", "-s",
        type=str,
        default="",
        help="Case-insensitive search over cycle, time, symbol and reasoning",
    )
    decisions_parser.add_argument(
        "--status",
        type=str,
        choices=[s.value for s in StatusFilter],
        default=StatusFilter.ALL.value,
        help="Success/failure filter (default: all)",
    )
    decisions_parser.add_argument(
        "--page", "-p",
        type=int,
        default=1,
        help="1-based page number (clamped to the available pages)",
    )
    decisions_parser.add_argument(
        "--config",
        type=str,
        metavar="PATH",
        help="YAML configuration file (default: environment)",
    )

    # --------------------------------------------------------
    # news
    # --------------------------------------------------------
    news_parser = subparsers.add_parser(
        "news",
        help="Print recent crypto news",
    )
    news_parser.add_argument(
        "--limit", "-l",
        type=int,
        default=20,
        help="Maximum items (default: 20)",
    )

    return parser


def validate_args(args: argparse.Namespace) -> List[str]:
    """
    Validate CLI arguments.

    Returns:
        List of validation errors
    """
    errors = []

    if args.command == "decisions":
        if not args.trader_id.strip():
            errors.append("--trader-id must not be empty")
        if args.page < 1:
            errors.append("--page must be at least 1")

    return errors


# ============================================================
# RENDERING
# ============================================================

def format_page(page: DecisionLogPage) -> str:
    """Render a decision log page as plain text."""
    lines = []

    if page.is_failed and page.error is not None:
        lines.append(f"Failed to load decisions: {page.error.message}")
        if page.total_count == 0:
            return "\n".join(lines)

    if page.is_empty:
        if page.empty_reason == EmptyReason.NO_MATCHES:
            lines.append("No decisions match the current filters. Try different filters.")
        else:
            lines.append("No decisions yet.")
        return "\n".join(lines)

    lines.append(
        f"Trader {page.subject_id}: showing {page.showing_start}-{page.showing_end} "
        f"of {page.filtered_count} (page {page.current_page}/{page.total_pages})"
    )
    for record in page.records:
        status = "OK  " if record.success else "FAIL"
        symbols = ", ".join(record.symbols) or "-"
        lines.append(
            f"  #{record.cycle_number:<6} {record.timestamp}  {status}  "
            f"{record.action_count} action(s)  [{symbols}]"
        )
        if record.error_message:
            lines.append(f"          error: {record.error_message}")

    return "\n".join(lines)


def format_news(items: List[CryptoNews]) -> str:
    """Render news items as plain text."""
    if not items:
        return "No news in the last 30 minutes."
    return "\n".join(
        f"[{item.time}] {item.content_prefix or item.content}" for item in items
    )


# ============================================================
# COMMANDS
# ============================================================

async def run_decisions(args: argparse.Namespace) -> int:
    """Load one page of decisions and print it."""
    if args.config:
        config = DecisionLogConfig.from_yaml(args.config)
    else:
        config = DecisionLogConfig.from_env()

    async with DecisionLogViewer(HttpDecisionSource(config), config=config) as viewer:
        await viewer.set_subject(args.trader_id)
        viewer.set_status_filter(args.status)
        viewer.set_search_term(args.search)
        page = viewer.go_to_page(args.page)

    print(format_page(page))
    return 1 if page.is_failed else 0


async def run_news(args: argparse.Namespace) -> int:
    """Fetch recent news and print it."""
    collector = JinseLivesCollector()
    try:
        items = await collector.get_news(args.limit)
    except IngestionError as e:
        print(f"Failed to load news: {e}", file=sys.stderr)
        return 1

    print(format_news(items))
    return 0


# ============================================================
# MAIN
# ============================================================

def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    errors = validate_args(args)
    if errors:
        for error in errors:
            print(f"Error: {error}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s | %(levelname)s | %(name)s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    try:
        if args.command == "decisions":
            return asyncio.run(run_decisions(args))
        return asyncio.run(run_news(args))
    except DecisionLogError as e:
        logger.error(f"Configuration error: {e}")
        return 2
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
