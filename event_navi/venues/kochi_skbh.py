import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from event_navi.http import fetch_html
from event_navi.utils.dates import build_date, infer_year_for_month, normalize_time, to_iso_date
from event_navi.utils.events import normalize_price
from event_navi.utils.text import normalize_full_width_basic, normalize_whitespace
from event_navi.venues.base import Venue, main

VENUE_ID = "kochi-skbh"
VENUE_NAME = "高知県立県民文化ホール"
ENTRY_URL = "https://www.kkb-hall.jp/event/event-pickup.html?view=autonomy"


def parse_listing_date(text, today=None):
    """Accepts 'YYYY年M月D日', 'YYYY/M/D' or a year-less 'M/D' / 'M月D日'."""
    text = normalize_full_width_basic(text)
    match = re.search(r"(\d{4})[年/](\d{1,2})[月/](\d{1,2})", text)
    if match:
        year, month, day = (int(g) for g in match.groups())
    else:
        match = re.search(r"(\d{1,2})[月/](\d{1,2})", text)
        if not match:
            return None
        month, day = int(match.group(1)), int(match.group(2))
        year = infer_year_for_month(month, today)
    if build_date(year, month, day) is None:
        return None
    return to_iso_date(year, month, day)


def parse_times(text):
    """(open_time, start_time, end_time) from e.g. '18:00開場 18:30～20:30'."""
    text = normalize_full_width_basic(text)
    open_match = re.search(r"(\d{1,2}:\d{2})\s*開場", text)
    range_match = re.search(r"(\d{1,2}:\d{2})\s*[～~]\s*(\d{1,2}:\d{2})", text)
    return (
        normalize_time(open_match.group(1)) if open_match else None,
        normalize_time(range_match.group(1)) if range_match else None,
        normalize_time(range_match.group(2)) if range_match else None,
    )


def text_of(el):
    return normalize_whitespace(el.get_text(" ")) if el else ""


def extract_events(html, today=None):
    soup = BeautifulSoup(html, "html.parser")
    events = []

    for item in soup.select("div.event-wrap"):
        link = item.find("a", href=True)
        if not link:
            continue

        title = text_of(item.select_one("p.event-name"))
        date_text = text_of(item.select_one(".event-date")) or item.get_text(" ")
        date_from = parse_listing_date(date_text, today)
        if not title or not date_from:
            continue

        open_time, start_time, end_time = parse_times(text_of(item.select_one("p.event-time")))
        place = text_of(item.select_one("span.event-place1"))

        events.append({
            "title": title,
            "date_from": date_from,
            "date_to": date_from,
            "open_time": open_time,
            "start_time": start_time,
            "end_time": end_time,
            "price": normalize_price(text_of(item.select_one("div.event-info1"))),
            "venue_name": f"{VENUE_NAME} {place}" if place else VENUE_NAME,
            "source_url": urljoin(ENTRY_URL, link["href"]),
        })

    return events


def scrape():
    return extract_events(fetch_html(ENTRY_URL))


VENUE = Venue(venue_id=VENUE_ID, venue_name=VENUE_NAME, scrape=scrape)


if __name__ == "__main__":
    main(VENUE)
