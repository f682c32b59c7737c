"""
Asty Tokushima publishes one calendar table per month and a detail page per event.
Month tables are read in order; detail pages are fetched DETAIL_CONCURRENCY at a time.
"""

import logging
import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from event_navi import config
from event_navi.concurrency import run_with_concurrency
from event_navi.http import fetch_html, fetch_text_async
from event_navi.utils.dates import get_jst_today, normalize_time
from event_navi.utils.events import normalize_price
from event_navi.utils.text import normalize_whitespace
from event_navi.venues.base import Venue, main

logger = logging.getLogger(__name__)

VENUE_ID = "asty-tokushima"
VENUE_NAME = "アスティとくしま"
BASE_URL = "https://www.asty-tokushima.jp"
MONTHS_BEFORE = 3
MONTHS_AFTER = 6
CLOSED_DAY_MARKER = "休館日"


def target_months(today=None, before=MONTHS_BEFORE, after=MONTHS_AFTER):
    """YYYYMM strings from `before` months ago to `after` months ahead."""
    today = today or get_jst_today()
    months = []
    for offset in range(-before, after + 1):
        index = today.year * 12 + (today.month - 1) + offset
        months.append(f"{index // 12}{index % 12 + 1:02d}")
    return months


def month_url(yyyymm):
    return f"{BASE_URL}/event/{yyyymm}/table.html"


def extract_listing_items(html):
    soup = BeautifulSoup(html, "html.parser")
    items = []

    for el in soup.select(".event"):
        title = normalize_whitespace(el.get_text(" "))
        if not title or CLOSED_DAY_MARKER in title:
            continue

        link = el.find("a", href=True)
        cell = el.find_parent("td")
        daily = cell.select_one(".daily a[href]") if cell else None
        day_match = re.search(r"(\d{4})(\d{2})(\d{2})", daily["href"]) if daily else None
        if not link or not day_match:
            continue

        items.append({
            "title": title,
            "date_from": "-".join(day_match.groups()),
            "source_url": urljoin(BASE_URL, link["href"]),
        })

    return items


def dedupe_listing_items(items):
    """The same event shows up in adjacent month tables; keep one per (date, title)."""
    by_key = {}
    for item in items:
        by_key[(item["date_from"], item["title"])] = item
    return list(by_key.values())


def extract_detail(html):
    """Fields from the th/td table of a detail page."""
    soup = BeautifulSoup(html, "html.parser")
    detail = {"start_time": None, "price": None, "description": None}
    location = ""
    content = ""

    for row in soup.select("table tr"):
        label = normalize_whitespace(row.find("th").get_text()) if row.find("th") else ""
        value = normalize_whitespace(row.find("td").get_text(" ")) if row.find("td") else ""
        if label == "日時":
            match = re.search(r"開演\s*(\d{1,2}:\d{2})", value) or re.search(r"(\d{1,2}:\d{2})", value)
            detail["start_time"] = normalize_time(match.group(1)) if match else None
        elif label == "開催場所":
            location = value
        elif label == "入場料等":
            detail["price"] = normalize_price(value)
        elif label == "イベント内容":
            content = value

    lines = [f"会場: {location}" if location else "", content]
    detail["description"] = "\n".join(line for line in lines if line) or None
    return detail


async def fetch_detail(item, index):
    """One failing detail page only costs that page's extra fields."""
    try:
        detail_html = await fetch_text_async(item["source_url"])
        detail = extract_detail(detail_html)
    except Exception as e:
        logger.warning("[%s] detail fetch failed: %s (%s)", VENUE_ID, item["source_url"], e)
        detail = {}
    return {**item, "date_to": item["date_from"], **detail}


def scrape(today=None):
    items = []
    for yyyymm in target_months(today):
        items.extend(extract_listing_items(fetch_html(month_url(yyyymm))))

    items = dedupe_listing_items(items)
    logger.info("[%s] listing items: %d, fetching details...", VENUE_ID, len(items))

    return run_with_concurrency(items, config.DETAIL_CONCURRENCY, fetch_detail)


VENUE = Venue(
    venue_id=VENUE_ID,
    venue_name=VENUE_NAME,
    scrape=scrape,
    # Recurring events share one detail page across dates
    dedupe_by_source_url=False,
)


if __name__ == "__main__":
    main(VENUE)
