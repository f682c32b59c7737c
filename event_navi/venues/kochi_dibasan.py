import re

from bs4 import BeautifulSoup

from event_navi.http import fetch_html
from event_navi.utils.dates import build_date, infer_year_for_month, normalize_time, to_iso_date
from event_navi.utils.text import normalize_full_width_basic, normalize_whitespace
from event_navi.venues.base import Venue, main

VENUE_ID = "kochi-dibasan"
VENUE_NAME = "高知ぢばさんセンター"
ENTRY_URL = "https://diba3.com/event/"


def parse_month_day(text, today=None):
    """'3月15日' -> ISO date, inferring the year around the turn of the year."""
    match = re.search(r"(\d{1,2})月(\d{1,2})日", normalize_full_width_basic(text or ""))
    if not match:
        return None
    month, day = int(match.group(1)), int(match.group(2))
    year = infer_year_for_month(month, today)
    if build_date(year, month, day) is None:
        return None
    return to_iso_date(year, month, day)


def roll_to_next_year(iso_date):
    """Same month and day one year later, or None (Feb 29)."""
    year, month, day = (int(part) for part in iso_date.split("-"))
    if build_date(year + 1, month, day) is None:
        return None
    return to_iso_date(year + 1, month, day)


def read_definitions(box):
    """<dt>label</dt><dd>value</dd> pairs of one event box."""
    values = {}
    for dt in box.find_all("dt"):
        label = normalize_whitespace(dt.get_text()).rstrip(":：").strip()
        dd = dt.find_next_sibling("dd")
        if label and dd is not None:
            values[label] = normalize_whitespace(dd.get_text(" "))
    return values


def extract_events(html, today=None):
    soup = BeautifulSoup(html, "html.parser")
    events = []

    for box in soup.select("div.box"):
        title_el = box.select_one("div.mid")
        if not title_el:
            continue

        fields = read_definitions(box)
        date_text = fields.get("開催日")
        if not date_text:
            continue

        parts = re.split(r"[～~－−-]", date_text)
        date_from = parse_month_day(parts[0], today)
        if not date_from:
            continue
        date_to = (parse_month_day(parts[1], today) if len(parts) > 1 else None) or date_from
        # "12月28日～1月3日" seen mid-year: both sides got this year
        if date_to < date_from:
            date_to = roll_to_next_year(date_to) or date_from

        start_time = None
        time_match = re.search(r"\d{1,2}:\d{2}", normalize_full_width_basic(fields.get("営業時間", "")))
        if time_match:
            start_time = normalize_time(time_match.group(0))

        events.append({
            "title": title_el.get_text(" "),
            "date_from": date_from,
            "date_to": date_to,
            "start_time": start_time,
            "source_url": ENTRY_URL,
            "body": f"対象: {fields.get('対象') or '制限なし'}\n会場: {fields.get('会場場所') or '不明'}",
        })

    return events


def scrape():
    return extract_events(fetch_html(ENTRY_URL))


VENUE = Venue(
    venue_id=VENUE_ID,
    venue_name=VENUE_NAME,
    scrape=scrape,
    dedupe_by_source_url=False,
)


if __name__ == "__main__":
    main(VENUE)
