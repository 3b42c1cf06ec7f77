"""Report assembly: per-user and combined DataFrames and CSV output."""

from __future__ import annotations

import logging
import re
from collections import Counter
from collections.abc import Iterable
from dataclasses import asdict
from datetime import date
from pathlib import Path

import pandas as pd

from .config import (
    DATE_COLUMNS,
    EPOCH_PLACEHOLDER_DATE,
    MULTIPLE_USERS,
    NONE_PLACEHOLDER,
    NUMERIC_COLUMNS,
    REPORT_COLUMNS,
    SETTINGS,
)
from .models import AggregatedIssueRecord, ReportResult, UserAccount

logger = logging.getLogger(__name__)


def _format_text(val) -> str:
    if val is None:
        return NONE_PLACEHOLDER
    if isinstance(val, (list, tuple)):
        return ", ".join(str(v) for v in val) if val else NONE_PLACEHOLDER
    try:
        if pd.isna(val):
            return NONE_PLACEHOLDER
    except (TypeError, ValueError):
        pass
    text = str(val)
    return text if text else NONE_PLACEHOLDER


def _format_date(val) -> str:
    if isinstance(val, date):
        return val.isoformat()
    return EPOCH_PLACEHOLDER_DATE


def records_to_dataframe(records: Iterable[AggregatedIssueRecord]) -> pd.DataFrame:
    """Rows in REPORT_COLUMNS order with absent values rendered as placeholders.

    Numeric columns stay numeric; missing story points and velocity are NaN
    (empty cells in CSV).
    """
    rows = [asdict(r) for r in records]
    df = pd.DataFrame(rows, columns=list(REPORT_COLUMNS))
    if df.empty:
        return df
    for col in REPORT_COLUMNS:
        if col in DATE_COLUMNS:
            df[col] = df[col].apply(_format_date)
        elif col in NUMERIC_COLUMNS:
            df[col] = pd.to_numeric(df[col], errors="coerce")
        else:
            df[col] = df[col].apply(_format_text)
    return df


def combine_reports(frames: Iterable[pd.DataFrame]) -> pd.DataFrame:
    """Union of per-user frames; a multi-user row for an issue is kept once."""
    frames = [f for f in frames if not f.empty]
    if not frames:
        return pd.DataFrame(columns=list(REPORT_COLUMNS))
    combined = pd.concat(frames, ignore_index=True)
    multi = combined["user_name"] == MULTIPLE_USERS
    dup_multi = multi & combined.duplicated(subset=["issue_id", "user_name"], keep="first")
    if dup_multi.any():
        logger.debug("Dropping %d repeated multi-user row(s) from combined report", int(dup_multi.sum()))
    return combined.loc[~dup_multi].reset_index(drop=True)


def _safe_filename(name: str) -> str:
    cleaned = re.sub(r"[^A-Za-z0-9._-]+", "_", name.strip()).strip("_")
    return cleaned or "user"


def user_labels(users: Iterable[UserAccount]) -> dict[str, str]:
    """Display label per account id; display names shared by several accounts get the id appended."""
    users = list(users)
    name_counts = Counter(user.display_name for user in users)
    return {
        user.account_id: (
            f"{user.display_name} ({user.account_id})"
            if name_counts[user.display_name] > 1
            else user.display_name
        )
        for user in users
    }


def report_frames(result: ReportResult) -> dict[str, pd.DataFrame]:
    """Per-user frames keyed by display label, in input order."""
    labels = user_labels(result.users)
    return {
        labels[user.account_id]: records_to_dataframe(result.per_user.get(user.account_id, []))
        for user in result.users
    }


def write_reports(
    result: ReportResult,
    output_dir: Path,
    date_from: date,
    date_to: date,
) -> list[Path]:
    """Write one CSV per user plus the combined CSV; returns written paths."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    suffix = f"{date_from.isoformat()}_{date_to.isoformat()}"
    written: list[Path] = []
    frames = []
    labels = user_labels(result.users)
    for user in result.users:
        df = records_to_dataframe(result.per_user.get(user.account_id, []))
        frames.append(df)
        path = output_dir / f"{_safe_filename(labels[user.account_id])}_{suffix}.csv"
        df.to_csv(path, index=False, encoding=SETTINGS.download_encoding)
        logger.info("Wrote %d row(s) for %s to %s", len(df), user.display_name, path)
        written.append(path)
    combined = combine_reports(frames)
    combined_path = output_dir / f"combined_{suffix}.csv"
    combined.to_csv(combined_path, index=False, encoding=SETTINGS.download_encoding)
    logger.info("Wrote %d combined row(s) to %s", len(combined), combined_path)
    written.append(combined_path)
    return written
