import logging
import re
import sys
import time
from datetime import datetime, timedelta

from event_navi import config

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _formatter():
    # UTC timestamps, matching trim_log_by_time
    formatter = logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT)
    formatter.converter = time.gmtime
    return formatter


def configure_logging(level=None):
    """Send log records to stdout in the run-log line format."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_formatter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level or config.LOG_LEVEL)
    return root


class BufferingHandler(logging.Handler):
    """Collect formatted lines so a run can be appended to the log file at the end."""

    def __init__(self):
        super().__init__()
        self.lines = []
        self.setFormatter(_formatter())

    def emit(self, record):
        self.lines.append(self.format(record))


def trim_log_by_time(log_path, retention_days=config.LOG_RETENTION_DAYS):
    """
    Remove log entries older than retention_days.
    Returns list of lines to keep.
    """
    if not log_path.exists():
        return []

    cutoff = datetime.utcnow() - timedelta(days=retention_days)
    cutoff_str = cutoff.strftime(LOG_DATE_FORMAT)

    kept_lines = []
    current_entry_recent = False

    with open(log_path, "r", encoding="utf-8") as f:
        for line in f:
            match = re.match(r"\[(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})\]", line)
            if match:
                current_entry_recent = match.group(1) >= cutoff_str

            if current_entry_recent:
                kept_lines.append(line)

    return kept_lines


def save_run_log(log_path, lines, retention_days=config.LOG_RETENTION_DAYS):
    """Rewrite the log file with retained history plus this run's lines."""
    existing = trim_log_by_time(log_path, retention_days=retention_days)
    content = existing + ["\n--- New Run ---\n"] + [line + "\n" for line in lines]
    log_path.parent.mkdir(parents=True, exist_ok=True)
    with open(log_path, "w", encoding="utf-8") as f:
        f.writelines(content)
