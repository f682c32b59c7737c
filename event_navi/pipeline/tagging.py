import logging
from collections import Counter

from event_navi import config
from event_navi.pipeline.io import load_existing_document
from event_navi.pipeline.schema import build_tags
from event_navi.utils.categories import detect_tags

logger = logging.getLogger(__name__)


def has_assigned_tags(event):
    """False for missing tags and for the untouched default ({type: other, no genres, no flags})."""
    tags = event.get("tags")
    if not tags:
        return False
    return (
        tags.get("type", config.DEFAULT_EVENT_TYPE) != config.DEFAULT_EVENT_TYPE
        or bool(tags.get("genres"))
        or bool(tags.get("flags"))
    )


def apply_tags_to_events_data(data, overwrite=False):
    """
    Tag every event of a root document in place.
    Events that already carry tags are left alone unless overwrite is set.
    Returns the number of events tagged and the type distribution.
    """
    updated = 0
    type_counts = Counter()

    for event in (data or {}).get("events") or []:
        if has_assigned_tags(event) and not overwrite:
            continue
        event["tags"] = detect_tags(event)
        updated += 1
        type_counts[event["tags"]["type"]] += 1

    return updated, dict(type_counts)


def carry_over_tags(data, previous):
    """Copy tags from the previous run's document onto events with the same source_url."""
    previous_tags = {
        event.get("source_url"): event.get("tags")
        for event in (previous or {}).get("events") or []
        if event.get("source_url") and has_assigned_tags(event)
    }

    carried = 0
    for event in (data or {}).get("events") or []:
        tags = previous_tags.get(event.get("source_url"))
        if tags and not has_assigned_tags(event):
            event["tags"] = build_tags(tags)
            carried += 1
    return carried


def make_tagging_hook(previous_path=None, overwrite=False):
    """
    before_write hook for finalize_and_save_events.
    The output file is overwritten on every run, so tags assigned in earlier
    runs (possibly by hand) are reloaded from previous_path first.
    """

    def before_write(data):
        carried = 0
        if previous_path is not None:
            carried = carry_over_tags(data, load_existing_document(previous_path))
        updated, type_counts = apply_tags_to_events_data(data, overwrite=overwrite)
        logger.info(
            "[tags] venue_id=%s carried=%d tagged=%d types=%s",
            data.get("venue_id"),
            carried,
            updated,
            type_counts,
        )

    return before_write
