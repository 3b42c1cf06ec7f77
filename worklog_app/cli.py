"""Command-line entry point: ``worklog-report``.

Credentials come from the environment (a ``.env`` file is loaded first):
``JIRA_SERVER``, ``JIRA_EMAIL``, ``JIRA_API_TOKEN``, ``TEMPO_API_TOKEN``.
Report options fall back to ``WORKLOG_*`` variables, then to defaults.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv

from worklog_app.core.config import TEMPO_DEFAULT_SERVER, ReportSettings, load_settings
from worklog_app.core.errors import RemoteServiceError, UserNotFoundError
from worklog_app.core.jira_client import JiraAPI
from worklog_app.core.report import write_reports
from worklog_app.core.service import ReportService
from worklog_app.core.tempo_client import TempoAPI

logger = logging.getLogger("worklog_app")

EXIT_OK = 0
EXIT_CONFIG = 2

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="worklog-report",
        description="Build per-user utilization reports from Tempo worklogs and Jira issues.",
    )
    parser.add_argument(
        "--email",
        dest="emails",
        action="append",
        required=True,
        help="User email to report on (repeatable).",
    )
    parser.add_argument("--from", dest="date_from", help="Start date YYYY-MM-DD (default: first of month).")
    parser.add_argument("--to", dest="date_to", help="End date YYYY-MM-DD (default: today).")
    parser.add_argument("--issue-types", help="Comma separated issue types to report (e.g. Story,Bug).")
    parser.add_argument("--offset", type=int, help="Initial worklog page offset.")
    parser.add_argument("--limit", type=int, help="Worklog page size.")
    parser.add_argument("--max-pages", type=int, help="Maximum worklog pages per user or issue.")
    parser.add_argument("--child-depth", type=int, help="Levels of child issues folded into an issue.")
    parser.add_argument(
        "--multi-user",
        dest="include_multi_user",
        action="store_true",
        default=None,
        help="Report issues with several authors under MULTIPLE_USERS instead of skipping them.",
    )
    parser.add_argument("--story-points-field", help="Jira field id holding story points.")
    parser.add_argument("--business-value-field", help="Jira field id holding business value.")
    parser.add_argument("--status-field", help="Jira field id holding status.")
    parser.add_argument("--components-field", help="Jira field id holding components.")
    parser.add_argument(
        "--parent-link-field",
        help='JQL name of the secondary parent link (e.g. "Parent Link").',
    )
    parser.add_argument("--output-dir", help="Directory for CSV reports and the run log.")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO).")
    return parser


def configure_logging(log_dir: Path, level: str = "INFO") -> Path:
    """Log to stdout and to a timestamped file under ``log_dir``."""
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / f"worklog_report_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[
            logging.FileHandler(log_path, encoding="utf-8"),
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )
    return log_path


def settings_from_args(args: argparse.Namespace) -> ReportSettings:
    return load_settings(
        date_from=args.date_from,
        date_to=args.date_to,
        issue_types=args.issue_types,
        offset=args.offset,
        limit=args.limit,
        max_pages=args.max_pages,
        child_depth=args.child_depth,
        include_multi_user=args.include_multi_user,
        output_dir=args.output_dir,
        field_overrides={
            "story_points": args.story_points_field,
            "business_value": args.business_value_field,
            "status": args.status_field,
            "components": args.components_field,
            "parent_link_field": args.parent_link_field,
        },
    )


def _credentials() -> dict[str, str] | None:
    names = ("JIRA_SERVER", "JIRA_EMAIL", "JIRA_API_TOKEN", "TEMPO_API_TOKEN")
    creds = {name: os.environ.get(name, "") for name in names}
    missing = [name for name, value in creds.items() if not value]
    if missing:
        logger.error("Missing credentials: %s", ", ".join(missing))
        return None
    return creds


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    try:
        settings = settings_from_args(args)
    except ValueError as exc:
        logging.basicConfig(level=logging.ERROR, format=LOG_FORMAT)
        logger.error("Invalid configuration: %s", exc)
        return EXIT_CONFIG

    log_path = configure_logging(settings.output_dir, args.log_level)
    logger.info("Logging to %s", log_path)

    creds = _credentials()
    if creds is None:
        return EXIT_CONFIG

    jira = JiraAPI(creds["JIRA_SERVER"], creds["JIRA_EMAIL"], creds["JIRA_API_TOKEN"])
    tempo = TempoAPI(creds["TEMPO_API_TOKEN"], os.environ.get("TEMPO_SERVER") or TEMPO_DEFAULT_SERVER)
    service = ReportService(jira, tempo, settings)
    logger.info(
        "Reporting %s to %s for %d user(s); issue types: %s",
        settings.date_from,
        settings.date_to,
        len(args.emails),
        ", ".join(sorted(settings.issue_types)),
    )
    try:
        result = service.run(args.emails)
    except UserNotFoundError as exc:
        logger.error("%s; aborting before any report is produced", exc)
        return EXIT_CONFIG
    except RemoteServiceError as exc:
        logger.error("Jira user lookup failed: %s; aborting before any report is produced", exc)
        return EXIT_CONFIG

    written = write_reports(result, settings.output_dir, settings.date_from, settings.date_to)
    stats = result.stats
    logger.info(
        "Done: %d record(s), %d multi-user issue(s) skipped, %d truncated pagination(s), %d failed page(s)",
        stats.records_emitted,
        stats.multi_user_skipped,
        stats.truncated_paginations,
        stats.failed_pages,
    )
    for category, counts in stats.cache.items():
        logger.info(
            "Cache %s: %d hit(s), %d miss(es), %d entries",
            category,
            counts["hits"],
            counts["misses"],
            counts["size"],
        )
    for path in written:
        print(path)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
