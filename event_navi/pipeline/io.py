import json
import logging
import os
import tempfile
from pathlib import Path

from event_navi import config
from event_navi.errors import ParseError

logger = logging.getLogger(__name__)


def write_json_pretty(path, data):
    """
    Write JSON with 2-space indent and a trailing newline.
    The file is written next to the target and moved into place, so readers
    never see a half-written document.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    content = json.dumps(data, indent=2, ensure_ascii=False) + "\n"

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


def parse_json_or_raise(text, context_label="JSON"):
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Failed to parse {context_label} ({e})", cause=e)


def parse_json_or_fallback(text, fallback=None):
    """For caches and previous outputs where a broken file just means 'start empty'."""
    try:
        return json.loads(text)
    except (TypeError, json.JSONDecodeError):
        return fallback


def read_json_file(path):
    path = Path(path)
    raw = path.read_text(encoding="utf-8")
    if not raw.strip():
        raise ParseError(f"File is empty ({path})")
    return parse_json_or_raise(raw, f"events file ({path})")


def load_existing_document(path):
    """Previously persisted root document, or None when missing or unreadable."""
    path = Path(path)
    if not path.exists():
        return None
    return parse_json_or_fallback(path.read_text(encoding="utf-8"), None)


def save_event_json(path, data):
    """Write a root document (or bare event list) unless it has no events."""
    events = data if isinstance(data, list) else (data or {}).get("events")
    if not events:
        logger.warning("[SKIP] No events to save; left %s untouched", path)
        return False

    write_json_pretty(path, data)
    logger.info("[SUCCESS] Saved %d events to %s", len(events), path)
    return True


def load_existing_status():
    """Load the run-all status file, keeping per-venue last_success info."""
    existing = load_existing_document(config.STATUS_PATH)
    if not isinstance(existing, dict):
        return {"venues": {}}
    existing.setdefault("venues", {})
    return existing


def save_status(status):
    write_json_pretty(config.STATUS_PATH, status)
