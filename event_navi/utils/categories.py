import re

from event_navi import config

# Checked in order; the first rule that matches decides the type.
TYPE_RULES = [
    ("sports", [
        "試合", "大会", "リーグ", "カップ", "選手権",
        "駅伝", "マラソン", "ランニング",
        "サッカー", "野球", "バスケ", "バレー", "テニス",
        "柔道", "剣道", "相撲",
    ]),
    ("exhibition", ["展覧会", "企画展", "特別展", "常設展", "回顧展", "展示"]),
    ("performance", ["公演", "ライブ", "コンサート", "演奏会", "舞台", "上演"]),
    ("workshop", ["ワークショップ", "体験", "教室", "講座"]),
    ("lecture", ["講演", "トーク", "シンポジウム", "セミナー"]),
    ("festival", ["祭", "フェス", "マルシェ", "市", "フェスタ"]),
]

_KEYWORDS = dict(TYPE_RULES)

GENRE_RULES = [
    ("sports", _KEYWORDS["sports"]),
    ("art", _KEYWORDS["exhibition"]),
    ("music", _KEYWORDS["performance"]),
    ("education", _KEYWORDS["workshop"] + _KEYWORDS["lecture"]),
    ("festival", _KEYWORDS["festival"]),
]

GENRE_BY_TYPE = {
    "sports": "sports",
    "exhibition": "art",
    "performance": "music",
    "workshop": "education",
    "lecture": "education",
    "festival": "festival",
}

RESERVATION_KEYWORDS = ["要予約", "予約制", "事前申込"]
NIGHT_KEYWORDS = ["夜間", "ナイト"]
NIGHT_START_HOUR = 18
# "0円" on its own, not the tail of "1,000円"
FREE_PRICE_RE = re.compile(r"(?<![\d,])0円")
MAX_GENRES = 2
MAX_FLAGS = 2


def contains_keyword(text, keywords):
    if not text:
        return False
    return any(keyword in text for keyword in keywords)


def detect_type(title):
    """Exactly one type per event; 'other' when nothing matches."""
    for event_type, keywords in TYPE_RULES:
        if contains_keyword(title, keywords):
            return event_type
    return config.DEFAULT_EVENT_TYPE


def detect_genres(title, event_type):
    genres = []
    for genre, keywords in GENRE_RULES:
        if contains_keyword(title, keywords):
            genres.append(genre)
        if len(genres) >= MAX_GENRES:
            break

    # Fall back to the genre implied by the type
    if not genres and event_type in GENRE_BY_TYPE:
        genres.append(GENRE_BY_TYPE[event_type])

    return genres[:MAX_GENRES]


def is_night_start(start_time):
    if not start_time:
        return False
    try:
        hour, minute = (int(part) for part in start_time.split(":")[:2])
    except ValueError:
        return False
    return hour >= NIGHT_START_HOUR and 0 <= minute <= 59


def detect_flags(title, price=None, start_time=None):
    flags = []
    price_text = price or ""

    if "無料" in price_text or FREE_PRICE_RE.search(price_text):
        flags.append("free")
    elif any(ch.isdigit() for ch in price_text) or "円" in price_text:
        flags.append("paid")

    if contains_keyword(title, RESERVATION_KEYWORDS):
        flags.append("reservation_required")

    if contains_keyword(title, NIGHT_KEYWORDS) or is_night_start(start_time):
        flags.append("night")

    return flags[:MAX_FLAGS]


def detect_tags(event):
    title = event.get("title") or ""
    event_type = detect_type(title)
    return {
        "type": event_type,
        "genres": detect_genres(title, event_type),
        "flags": detect_flags(title, event.get("price"), event.get("start_time")),
    }
