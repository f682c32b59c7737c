#!/usr/bin/env python3
"""
Tag events in docs/events/*.json that have no tags yet.

    python apply_tags.py              # keep existing tags
    python apply_tags.py --overwrite  # re-tag everything
"""

import logging
import sys
from collections import Counter

from event_navi import config
from event_navi.logs import configure_logging
from event_navi.pipeline.io import read_json_file, write_json_pretty
from event_navi.pipeline.tagging import apply_tags_to_events_data

logger = logging.getLogger("apply_tags")


def apply_tags_to_dir(events_dir, overwrite=False):
    """
    Returns (updated event count, type distribution).
    Unreadable files and files without an events list are logged and skipped.
    """
    total_updated = 0
    type_counts = Counter()

    for path in sorted(events_dir.glob("*.json")):
        if path.name in config.EXCLUDED_EVENT_FILES:
            continue
        try:
            data = read_json_file(path)
            if not isinstance(data, dict) or not isinstance(data.get("events"), list):
                logger.warning("No events list, skipped: %s", path.name)
                continue

            updated, counts = apply_tags_to_events_data(data, overwrite=overwrite)
            if updated:
                write_json_pretty(path, data)
                total_updated += updated
                type_counts.update(counts)
        except Exception as e:
            logger.error("[ERROR] %s: %s", path.name, e)

    return total_updated, dict(type_counts)


def main(argv=None):
    import argparse

    parser = argparse.ArgumentParser(description="Tag events in docs/events/*.json")
    parser.add_argument("--overwrite", action="store_true", help="Re-tag events that already have tags")
    args = parser.parse_args(argv)

    configure_logging()

    updated, type_counts = apply_tags_to_dir(config.EVENTS_DIR, overwrite=args.overwrite)
    logger.info("Tagged events: %d", updated)
    for event_type, count in sorted(type_counts.items()):
        logger.info("- %s: %d", event_type, count)
    return 0


if __name__ == "__main__":
    sys.exit(main())
