import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

REPO_ROOT = Path(__file__).resolve().parents[1]
EVENTS_DIR = Path(os.environ.get("EVENT_NAVI_EVENTS_DIR", REPO_ROOT / "docs" / "events"))
STATUS_PATH = EVENTS_DIR / "scrape-status.json"
LOG_PATH = EVENTS_DIR / "scrape-log.txt"
LOG_RETENTION_DAYS = 14
LOG_LEVEL = os.environ.get("EVENT_NAVI_LOG_LEVEL", "INFO").upper()

# Files in EVENTS_DIR that are not venue outputs
EXCLUDED_EVENT_FILES = {"template.json", "scrape-status.json"}

USER_AGENT = "Mozilla/5.0 (compatible; event-navi-bot/1.0)"
DEFAULT_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "text/html,application/xhtml+xml",
}
DEFAULT_TIMEOUT_MS = int(os.environ.get("EVENT_NAVI_TIMEOUT_MS", "30000"))
DEFAULT_RETRY_COUNT = int(os.environ.get("EVENT_NAVI_RETRY_COUNT", "2"))
DEFAULT_RETRY_BASE_DELAY_MS = 600
ERROR_INDICATORS = ["Access Denied", "Forbidden", "Service Unavailable"]

DETAIL_CONCURRENCY = 3
SLEEP_SECONDS_BETWEEN_VENUES = float(os.environ.get("EVENT_NAVI_SLEEP_BETWEEN", "1"))
VENUE_RETRIES = 1
VENUE_RETRY_DELAY_SECONDS = 5

PAST_DAYS = 365
JST_OFFSET_HOURS = 9

DEFAULT_EVENT_TYPE = "other"
MIN_TITLE_LENGTH = 2
# Share of invalid candidates above which a venue run fails instead of filtering
MAX_INVALID_RATIO = 0.5
BODY_MAX_LENGTH = 5000


def output_path_for(venue_id):
    """Path of the persisted root document for a venue."""
    return EVENTS_DIR / f"{venue_id}.json"
