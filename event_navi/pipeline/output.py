import logging

from event_navi.pipeline.io import write_json_pretty
from event_navi.pipeline.schema import create_root_structure
from event_navi.pipeline.validate import validate_events

logger = logging.getLogger(__name__)


def build_event_output_data(venue_id, events, venue_name=None, last_success_at=None, extra_data=None):
    """Root document: venue_id, venue_name (if given), last_success_at, events, then extra_data."""
    data = create_root_structure(venue_id, events, venue_name=venue_name, last_success_at=last_success_at)
    data.update(extra_data or {})
    return data


def log_save_result(venue_id, output_path, events):
    logger.info("[RESULT] venue_id=%s total_events=%d output=%s", venue_id, len(events), output_path)


def finalize_and_save_events(
    venue_id,
    output_path,
    events,
    venue_name=None,
    last_success_at=None,
    extra_data=None,
    require_date_from=True,
    before_write=None,
):
    """
    Validate, assemble and persist a venue's events, replacing the previous file.

    Validation errors are raised before anything is written, so a failed or empty
    run leaves the last good file in place. before_write(data) runs on the final
    document just before the write; it may edit it in place or return a replacement.
    """
    validate_events(events, require_date_from=require_date_from)

    data = build_event_output_data(
        venue_id,
        events,
        venue_name=venue_name,
        last_success_at=last_success_at,
        extra_data=extra_data,
    )

    if before_write is not None:
        replaced = before_write(data)
        if replaced is not None:
            data = replaced

    write_json_pretty(output_path, data)
    log_save_result(venue_id, output_path, data.get("events") or [])
    return data
