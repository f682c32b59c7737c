import re

from event_navi import config
from event_navi.errors import EmptyResultError, ValidationError

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def validate_event(event):
    """Check that event has a usable title and a strict YYYY-MM-DD date_from."""
    if not event:
        return False
    title = event.get("title")
    if not title or len(str(title).strip()) < config.MIN_TITLE_LENGTH:
        return False
    date_from = event.get("date_from")
    if not date_from or not DATE_PATTERN.match(str(date_from)):
        return False
    return True


def validate_events(events, require_date_from=True):
    """
    Minimum bar before any output file is overwritten: at least one event,
    and (unless disabled) at least one event with a date_from.
    """
    if not events:
        raise EmptyResultError("No events were built; refusing to overwrite the output file.")

    if require_date_from:
        dated = sum(1 for event in events if event and event.get("date_from"))
        if dated == 0:
            raise EmptyResultError("No event has a date_from; refusing to overwrite the output file.")


def validate_final_data(events, min_events=1):
    """
    Strict gate: at least min_events events, every one with a title of
    2+ characters and a date_from matching YYYY-MM-DD.
    """
    events = events or []
    if len(events) < min_events:
        raise EmptyResultError(f"Expected at least {min_events} events, got {len(events)}.")

    for index, event in enumerate(events):
        title = (event or {}).get("title")
        if not title or len(str(title).strip()) < config.MIN_TITLE_LENGTH:
            raise ValidationError(f"[VALIDATION ERROR] events[{index}] has a missing or too short title: {title!r}")
        date_from = event.get("date_from")
        if not date_from or not DATE_PATTERN.match(str(date_from)):
            raise ValidationError(f"[VALIDATION ERROR] events[{index}] has an invalid date_from: {date_from!r}")

    return True
