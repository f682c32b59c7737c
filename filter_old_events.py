#!/usr/bin/env python3
"""
Remove events that ended more than PAST_DAYS (365) days ago from docs/events/*.json.

    python filter_old_events.py
"""

import logging
import sys

from event_navi.logs import configure_logging
from event_navi.pipeline.window import filter_old_events


def main():
    configure_logging()
    try:
        filter_old_events()
    except Exception as e:
        logging.getLogger("filter_old_events").error("Unexpected error: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
