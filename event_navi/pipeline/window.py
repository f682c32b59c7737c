"""Drop events that ended more than PAST_DAYS ago from the persisted venue files."""

import logging
from datetime import timedelta
from pathlib import Path

from event_navi import config
from event_navi.pipeline.io import read_json_file, write_json_pretty
from event_navi.utils.dates import get_jst_today, parse_iso_date_strict

logger = logging.getLogger(__name__)

IN_RANGE = "in_range"
EXPIRED = "expired"
MISSING_DATE = "missing_date"
INVALID_DATE = "invalid_date"


def build_past_cutoff_date(past_days=config.PAST_DAYS, today=None):
    """JST today minus past_days."""
    today = today or get_jst_today()
    return today - timedelta(days=past_days)


def evaluate_event_against_past_cutoff(
    event,
    cutoff_date,
    fallback_to_date_from=True,
    keep_on_missing_date=False,
    keep_on_invalid_date=False,
):
    """
    Decide whether an event survives the cutoff, using date_to (or date_from).
    Returns (keep, reason).
    """
    event = event or {}
    if fallback_to_date_from:
        date_text = event.get("date_to") or event.get("date_from")
    else:
        date_text = event.get("date_to")

    if not date_text:
        return keep_on_missing_date, MISSING_DATE

    end_date = parse_iso_date_strict(date_text)
    if end_date is None:
        return keep_on_invalid_date, INVALID_DATE

    if end_date < cutoff_date:
        return False, EXPIRED

    return True, IN_RANGE


def filter_events(data, cutoff_date):
    """Returns (events, before_count, after_count), or None when data has no events list."""
    events = (data or {}).get("events")
    if not isinstance(events, list):
        return None
    kept = [event for event in events if evaluate_event_against_past_cutoff(event, cutoff_date)[0]]
    return kept, len(events), len(kept)


def format_filter_summary_lines(rows):
    """Column-aligned table of (file_name, before, after, removed) rows."""
    if not rows:
        return []

    name_width = max(len(row[0]) for row in rows)
    widths = [
        max(len(header), *(len(str(row[i])) for row in rows))
        for i, header in ((1, "before"), (2, "after"), (3, "removed"))
    ]

    header = " | ".join(["file".ljust(name_width)] + [h.rjust(w) for h, w in zip(("before", "after", "removed"), widths)])
    separator = "-+-".join(["-" * name_width] + ["-" * w for w in widths])
    lines = [header, separator]
    for name, before, after, removed in rows:
        cells = [str(v).rjust(w) for v, w in zip((before, after, removed), widths)]
        lines.append(" | ".join([name.ljust(name_width)] + cells))
    return lines


def filter_old_events(events_dir=None, past_days=config.PAST_DAYS, today=None):
    """
    Rewrite every venue file whose events list shrinks under the cutoff.
    Broken files are logged and skipped. Returns (updated_files, removed_total).
    """
    events_dir = Path(events_dir or config.EVENTS_DIR)
    cutoff = build_past_cutoff_date(past_days=past_days, today=today)
    paths = sorted(
        p for p in events_dir.glob("*.json") if p.name not in config.EXCLUDED_EVENT_FILES
    )
    logger.info("Files to check: %d (cutoff %s)", len(paths), cutoff.isoformat())

    rows = []
    updated_files = 0
    removed_total = 0

    for path in paths:
        try:
            data = read_json_file(path)
            result = filter_events(data, cutoff)
            if result is None:
                logger.warning("No events list, skipped: %s", path.name)
                continue

            kept, before, after = result
            rows.append((path.name, before, after, before - after))
            removed_total += before - after

            if before != after:
                write_json_pretty(path, {**data, "events": kept})
                updated_files += 1
        except Exception as e:
            logger.error("[ERROR] %s: %s", path.name, e)

    for line in format_filter_summary_lines(rows):
        logger.info(line)
    logger.info("Updated files: %d, removed events: %d", updated_files, removed_total)
    return updated_files, removed_total
