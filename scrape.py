#!/usr/bin/env python3
"""
Run venue scrapers and write one JSON file per venue to docs/events/.

    python scrape.py                  # every registered venue
    python scrape.py kochi-skbh ...   # only the given venue ids

Venues run one after another. A venue that fails with a retryable error kind
(NETWORK) is retried; any other failure leaves its previous file untouched.
The process exits 1 when at least one venue failed.
"""

import logging
import sys
import time
import traceback
from datetime import datetime

from event_navi import config
from event_navi.errors import (
    emit_cli_error,
    error_kind_to_exit_code,
    format_error_kind_label,
    is_retryable_error_kind,
    to_typed_error,
)
from event_navi.logs import BufferingHandler, configure_logging, save_run_log
from event_navi.pipeline.io import load_existing_status, save_status
from event_navi.pipeline.metrics import VenueMetrics, format_summary_lines
from event_navi.registry import get_venues
from event_navi.venues.base import run_venue

logger = logging.getLogger("scrape")


def run_one(venue, run_timestamp, existing_venue_status=None):
    """Scrape a single venue with retries. Returns (metrics, status dict)."""
    metrics = VenueMetrics(venue_id=venue.venue_id)
    status = {
        "last_run": run_timestamp,
        "success": False,
        "event_count": 0,
        "error": None,
    }

    # Preserve last successful scrape info from existing status
    existing_venue_status = existing_venue_status or {}
    if existing_venue_status.get("last_success"):
        status["last_success"] = existing_venue_status["last_success"]
        status["last_success_count"] = existing_venue_status.get("last_success_count", 0)

    start_time = time.time()
    max_attempts = config.VENUE_RETRIES + 1

    for attempt in range(1, max_attempts + 1):
        metrics.attempts = attempt
        try:
            data = run_venue(venue)
        except Exception as e:
            typed = to_typed_error(e)
            metrics.exit_code = error_kind_to_exit_code(typed.kind)
            metrics.error_kind = typed.kind
            metrics.error_messages.append(typed.message)

            retryable = is_retryable_error_kind(typed.kind)
            if retryable and attempt < max_attempts:
                logger.warning(
                    "%s: retry %d/%d wait %ss type=%s",
                    venue.venue_id,
                    attempt,
                    config.VENUE_RETRIES,
                    config.VENUE_RETRY_DELAY_SECONDS,
                    format_error_kind_label(typed.kind),
                )
                time.sleep(config.VENUE_RETRY_DELAY_SECONDS)
                continue

            emit_cli_error(typed, prefix=f"[{venue.venue_id} Fatal]")
            logger.error(
                "%s: fail exit=%d type=%s retryable=%s: %s",
                venue.venue_id,
                metrics.exit_code,
                format_error_kind_label(typed.kind),
                retryable,
                typed.message,
            )
            logger.debug("Traceback:\n%s", traceback.format_exc())
            status["error"] = typed.message
            status["error_type"] = typed.kind
            break
        else:
            count = len(data["events"])
            metrics.exit_code = 0
            metrics.error_kind = None
            metrics.event_count = count
            status.update({
                "success": True,
                "event_count": count,
                "last_success": run_timestamp,
                "last_success_count": count,
            })
            break

    metrics.duration_ms = (time.time() - start_time) * 1000
    return metrics, status


def main(argv=None):
    import argparse

    parser = argparse.ArgumentParser(description="Run venue scrapers and write docs/events/<venue_id>.json")
    parser.add_argument("venue_ids", nargs="*", help="Venue ids to run (default: every registered venue)")
    args = parser.parse_args(argv)

    configure_logging()

    venues = get_venues()
    unknown = [venue_id for venue_id in args.venue_ids if venue_id not in venues]
    if unknown:
        logger.error("Unknown venue ids: %s", ", ".join(unknown))
        return 2
    selected = [venues[venue_id] for venue_id in args.venue_ids] if args.venue_ids else list(venues.values())

    buffer = BufferingHandler()
    logging.getLogger().addHandler(buffer)

    run_timestamp = datetime.utcnow().isoformat() + "Z"
    logger.info("Starting scrape run at %s", run_timestamp)

    existing_status = load_existing_status()
    venue_statuses = {}
    all_metrics = []

    for index, venue in enumerate(selected):
        logger.info("[run-all] start %s", venue.venue_id)
        metrics, status = run_one(venue, run_timestamp, existing_status["venues"].get(venue.venue_id))
        all_metrics.append(metrics)
        venue_statuses[venue.venue_id] = status

        if index < len(selected) - 1 and config.SLEEP_SECONDS_BETWEEN_VENUES > 0:
            time.sleep(config.SLEEP_SECONDS_BETWEEN_VENUES)

    for line in format_summary_lines(all_metrics):
        logger.info(line)

    failed = [m.venue_id for m in all_metrics if not m.success]
    if failed:
        logger.error("Failed venues: %s", ", ".join(failed))

    # Venues not run this time keep their previous status entry
    merged_statuses = {**existing_status["venues"], **venue_statuses}
    save_status({
        "last_run": run_timestamp,
        "all_success": not failed,
        "any_success": len(failed) < len(all_metrics),
        "venues": merged_statuses,
    })
    logger.info("Status saved to %s", config.STATUS_PATH)

    logging.getLogger().removeHandler(buffer)
    save_run_log(config.LOG_PATH, buffer.lines)
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
