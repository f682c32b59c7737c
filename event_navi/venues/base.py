"""
Shared run loop for venue scrapers.

A venue only supplies `scrape()`, which fetches its pages and returns loosely
shaped candidate dicts. Everything after that is the same for every venue:
normalize -> filter invalid -> dedupe -> strict validation -> tag -> persist.
"""

import logging
import sys
import time
from dataclasses import dataclass
from typing import Callable

from event_navi import config
from event_navi.errors import handle_cli_fatal_error
from event_navi.logs import configure_logging
from event_navi.pipeline.dedupe import dedupe_events_by_source_url
from event_navi.pipeline.output import finalize_and_save_events
from event_navi.pipeline.schema import create_event
from event_navi.pipeline.tagging import make_tagging_hook
from event_navi.pipeline.validate import validate_event, validate_final_data

logger = logging.getLogger(__name__)


@dataclass
class Venue:
    venue_id: str
    venue_name: str
    scrape: Callable[[], list]
    # Listing pages that link every event to the same URL must not dedupe
    dedupe_by_source_url: bool = True
    min_events: int = 1
    max_invalid_ratio: float = config.MAX_INVALID_RATIO
    apply_tags: bool = True
    source_type: str = "web"


def build_events(venue, candidates):
    """
    Normalize candidates and drop the ones that cannot be persisted.
    When more than max_invalid_ratio of them are invalid the extractor is
    assumed broken and the strict check raises on the first bad record.
    """
    events = [
        create_event({"venue_name": venue.venue_name, "source_type": venue.source_type, **candidate})
        for candidate in candidates
    ]

    valid_events = [event for event in events if validate_event(event)]
    invalid_count = len(events) - len(valid_events)
    if events and invalid_count / len(events) > venue.max_invalid_ratio:
        logger.error("[%s] %d of %d events are invalid", venue.venue_id, invalid_count, len(events))
        validate_final_data(events, min_events=venue.min_events)
    if invalid_count:
        logger.warning("[%s] Filtered out %d invalid events", venue.venue_id, invalid_count)

    if venue.dedupe_by_source_url:
        deduped = dedupe_events_by_source_url(valid_events)
        if len(deduped) != len(valid_events):
            logger.info("[%s] Dropped %d duplicate events", venue.venue_id, len(valid_events) - len(deduped))
        valid_events = deduped

    return valid_events


def run_venue(venue, output_path=None):
    """Scrape one venue and persist its root document. Returns the written document."""
    output_path = output_path or config.output_path_for(venue.venue_id)
    logger.info("[START] %s", venue.venue_id)
    started = time.time()

    candidates = venue.scrape()
    logger.info("[%s] candidates: %d", venue.venue_id, len(candidates))

    events = build_events(venue, candidates)
    validate_final_data(events, min_events=venue.min_events)

    data = finalize_and_save_events(
        venue.venue_id,
        output_path,
        events,
        venue_name=venue.venue_name,
        before_write=make_tagging_hook(output_path) if venue.apply_tags else None,
    )
    logger.info("[SUCCESS] %s: %d events in %.1fs", venue.venue_id, len(events), time.time() - started)
    return data


def cli_main(venue):
    """Entry point for `python -m event_navi.venues.<venue>`; returns the exit code."""
    configure_logging()
    try:
        run_venue(venue)
    except Exception as e:
        return handle_cli_fatal_error(e, prefix=f"[{venue.venue_id} Fatal]")
    return 0


def main(venue):
    sys.exit(cli_main(venue))
