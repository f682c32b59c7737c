"""
Canonical event record.

Every venue builds its events through create_event so the persisted files share
one key order, one set of fields and None (never missing) for absent values.
"""

from event_navi import config
from event_navi.utils.dates import get_utc_today_iso
from event_navi.utils.text import normalize_whitespace, strip_tags, decode_html_entities

EVENT_FIELDS = [
    "title",
    "date_from",
    "date_to",
    "open_time",
    "start_time",
    "end_time",
    "description",
    "body",
    "image_url",
    "price",
    "contact",
    "source_url",
    "source_type",
    "venue_name",
    "status",
]

# Older extractors used these names; they are read but never written.
LEGACY_TIME_FIELDS = {
    "start_time": "time_start",
    "end_time": "time_end",
}


def _clean_title(title):
    if not title:
        return None
    cleaned = normalize_whitespace(decode_html_entities(strip_tags(str(title))))
    return cleaned or None


def _value(data, field):
    value = data.get(field)
    if value is None:
        legacy = LEGACY_TIME_FIELDS.get(field)
        if legacy:
            value = data.get(legacy)
    if isinstance(value, str):
        value = value.strip()
    return value if value not in ("", None) else None


def build_tags(tags=None):
    """Fresh tags dict; genres/flags are new lists so events never share them."""
    tags = tags or {}
    return {
        "type": tags.get("type") or config.DEFAULT_EVENT_TYPE,
        "genres": list(tags.get("genres") or []),
        "flags": list(tags.get("flags") or []),
    }


def create_event(data=None):
    """
    Build a canonical event dict from a loosely shaped extractor record.
    Unknown keys are dropped and date_to falls back to date_from.
    """
    data = data or {}
    event = {field: _value(data, field) for field in EVENT_FIELDS}
    event["title"] = _clean_title(event["title"])
    if event["date_to"] is None:
        event["date_to"] = event["date_from"]
    event["tags"] = build_tags(data.get("tags"))
    return event


def create_root_structure(venue_id, events=None, venue_name=None, last_success_at=None):
    root = {"venue_id": venue_id}
    if venue_name:
        root["venue_name"] = venue_name
    root["last_success_at"] = last_success_at or get_utc_today_iso()
    root["events"] = list(events or [])
    return root
