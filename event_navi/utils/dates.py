import re
from datetime import date, datetime, timedelta, timezone

from event_navi import config

ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
JST = timezone(timedelta(hours=config.JST_OFFSET_HOURS))

FULL_WIDTH_DIGITS = str.maketrans("０１２３４５６７８９：", "0123456789:")


def to_iso_date(year, month, day):
    return f"{int(year):04d}-{int(month):02d}-{int(day):02d}"


def get_jst_today(now=None):
    """Today's date in Japan. `now` is an aware or UTC-naive datetime."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(JST).date()


def get_utc_today_iso():
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")


def build_date(year, month, day):
    """date(year, month, day) or None for impossible dates such as Feb 30."""
    try:
        return date(int(year), int(month), int(day))
    except (TypeError, ValueError):
        return None


def parse_iso_date_strict(text):
    """Parse YYYY-MM-DD. Malformed strings and non-existent days give None."""
    if not text:
        return None
    match = ISO_DATE_RE.match(str(text))
    if not match:
        return None
    return build_date(*match.groups())


def infer_year_for_month(month, today=None):
    """
    Year for a month printed without one.
    Listings viewed in Oct-Dec that mention Jan-Mar refer to next year, and
    listings viewed in Jan-Mar that mention Oct-Dec refer to last year.
    """
    today = today or get_jst_today()
    if today.month >= 10 and month <= 3:
        return today.year + 1
    if today.month <= 3 and month >= 10:
        return today.year - 1
    return today.year


def extract_date_range(text, reference_date=None):
    """
    Pull a date range out of free text such as "2/10", "2026年2月10日〜15日"
    or "2/10(火)〜2/15(日)". Returns {"date_from", "date_to"} or None.
    """
    if not text:
        return None

    reference_date = reference_date or get_jst_today()

    normalized = str(text).translate(FULL_WIDTH_DIGITS)
    normalized = re.sub(r"[(（][月火水木金土日][)）]", "", normalized)
    normalized = re.sub(r"年|月", "/", normalized).replace("日", "")

    matches = list(re.finditer(r"(\d{4}/)?(\d{1,2})/(\d{1,2})", normalized))
    if not matches:
        return None

    def parse_match(match, inherited_year=None):
        month = int(match.group(2))
        day = int(match.group(3))
        if match.group(1) is not None:
            return int(match.group(1)[:4]), month, day
        if inherited_year is not None:
            return inherited_year, month, day
        year = reference_date.year
        # Year rollover: a Jan/Feb date seen in Nov/Dec belongs to next year
        if reference_date.month >= 11 and month <= 2:
            year += 1
        return year, month, day

    start = parse_match(matches[0])
    # A year-less end takes the year written on the start, if any
    start_year = start[0] if matches[0].group(1) is not None else None
    end = parse_match(matches[-1], start_year) if len(matches) > 1 else start

    # "2/10〜15": the end repeats only the day
    if len(matches) == 1:
        day_only = re.match(r"\s*[〜～~\-]\s*(\d{1,2})(?![\d/])", normalized[matches[0].end():])
        if day_only:
            end = (start[0], start[1], int(day_only.group(1)))

    # "12/31〜1/2" without a year: the end is in the following year
    if end < start and matches[-1].group(1) is None:
        end = (start[0] + 1, end[1], end[2])

    return {"date_from": to_iso_date(*start), "date_to": to_iso_date(*end)}


def is_date_in_range(iso_date, date_range):
    if not iso_date or not date_range:
        return False
    target = parse_iso_date_strict(iso_date)
    start = parse_iso_date_strict(date_range.get("date_from"))
    end = parse_iso_date_strict(date_range.get("date_to") or date_range.get("date_from"))
    if not (target and start and end):
        return False
    return start <= target <= end


def is_event_in_window(event, window_start, window_end):
    """True when [date_from, date_to] of the event overlaps the window (inclusive)."""
    start = parse_iso_date_strict(event.get("date_from"))
    if not start:
        return False
    end = parse_iso_date_strict(event.get("date_to")) or start
    return start <= window_end and end >= window_start


def normalize_japanese_date_text(
    text,
    remove_parenthesized_text=False,
    replace_range_words=False,
    normalize_comma=False,
):
    """Fold the spelling variants of Japanese date text into one shape."""
    if not text:
        return ""

    normalized = str(text).translate(FULL_WIDTH_DIGITS)

    if remove_parenthesized_text:
        normalized = re.sub(r"[（(][^）)]*[）)]", " ", normalized)

    normalized = normalized.replace("／", "/").replace("．", ".")
    normalized = re.sub(r"[〜～]", "~", normalized)
    normalized = re.sub(r"[－–—]", "-", normalized)

    if replace_range_words:
        normalized = normalized.replace("から", "~").replace("まで", "~")

    if normalize_comma:
        normalized = re.sub(r"[、，]", ",", normalized)

    return re.sub(r"\s+", " ", normalized).strip()


def extract_date_parts_from_japanese_text(text, allow_yearless_month_day=True):
    """
    List of (year, month, day) tuples found in text; year is None for "M月D日".
    Dated matches are masked before the year-less pass so nothing is counted twice.
    """
    text = str(text or "")
    results = []
    masked = text

    for match in re.finditer(r"(\d{4})\s*[年/.]\s*(\d{1,2})\s*[月/.]\s*(\d{1,2})\s*日?", text):
        results.append((int(match.group(1)), int(match.group(2)), int(match.group(3))))
        masked = masked[: match.start()] + " " * len(match.group(0)) + masked[match.end():]

    if not allow_yearless_month_day:
        return results

    for match in re.finditer(r"(\d{1,2})\s*月\s*(\d{1,2})\s*日", masked):
        results.append((None, int(match.group(1)), int(match.group(2))))

    return results


def normalize_time(time_str):
    """
    Normalize time strings to consistent HH:MM 24-hour format.
    Handles: "8:00", "8:30pm", "20:00:00", "19:00", "１９：００", "19時30分", "19時"
    """
    if not time_str:
        return None

    time_str = str(time_str).translate(FULL_WIDTH_DIGITS).strip().lower()

    jp_match = re.fullmatch(r"(午後|午前)?\s*(\d{1,2})時(?:\s*(\d{1,2})分|半)?", time_str)
    if jp_match:
        hours = int(jp_match.group(2))
        minutes = int(jp_match.group(3) or (30 if time_str.endswith("半") else 0))
        if jp_match.group(1) == "午後" and hours < 12:
            hours += 12
        return _format_hhmm(hours, minutes)

    if time_str.count(":") == 2:
        time_str = ":".join(time_str.split(":")[:2])

    is_pm = "pm" in time_str
    is_am = "am" in time_str
    time_str = time_str.replace("pm", "").replace("am", "").strip()

    parts = time_str.split(":")
    if len(parts) != 2:
        return None

    try:
        hours = int(parts[0])
        minutes = int(parts[1])
    except ValueError:
        return None

    if is_pm and hours < 12:
        hours += 12
    elif is_am and hours == 12:
        hours = 0

    return _format_hhmm(hours, minutes)


def _format_hhmm(hours, minutes):
    if not (0 <= hours <= 24 and 0 <= minutes <= 59):
        return None
    return f"{hours:02d}:{minutes:02d}"
