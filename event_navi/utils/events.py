import re
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from event_navi import config
from event_navi.utils.text import normalize_whitespace

PRICE_LABEL_WORDS = [
    "お申し込み方法",
    "申込方法",
    "リンク",
    "詳細はこちら",
    "詳しくはこちら",
    "お申し込みはこちら",
    "申込はこちら",
    "こちら",
]

CONTACT_LABEL_WORDS = [
    "リンク",
    "こちら",
    "詳細はこちら",
    "詳しくはこちら",
    "お問い合わせはこちら",
]

GENERIC_TITLE_KEYWORDS = [
    "イベント情報",
    "イベント一覧",
    "イベント情報一覧",
    "Event",
    "イベント",
]


def is_label_like_text(text, label_words):
    """Link captions such as "詳細はこちら" are not real values."""
    if not text:
        return True
    return any(label in text for label in label_words)


def normalize_price(text):
    if not text:
        return None
    normalized = normalize_whitespace(text)
    if not normalized or is_label_like_text(normalized, PRICE_LABEL_WORDS):
        return None
    return normalized


def normalize_contact(text):
    if not text:
        return None
    normalized = normalize_whitespace(text)
    if not normalized or is_label_like_text(normalized, CONTACT_LABEL_WORDS):
        return None
    return normalized


def is_generic_title(title):
    if not title:
        return True
    return any(keyword in title for keyword in GENERIC_TITLE_KEYWORDS)


def extract_event_title_from_detail_html(detail_html):
    """
    Pick the event title out of a detail page.
    Tries h1.entry-title / h1.post-title, then the first h1 in <article>, then the first h2.
    """
    if not detail_html:
        return ""

    soup = BeautifulSoup(detail_html, "html.parser")
    article = soup.find("article")
    candidates = [
        soup.select_one("h1.entry-title, h1.post-title"),
        article.find("h1") if article else None,
        soup.find("h2"),
    ]

    for heading in candidates:
        if heading is None:
            continue
        title = normalize_whitespace(heading.get_text(" "))
        if title and not is_generic_title(title):
            return title

    return ""


def is_event_detail_url(url):
    """
    Detail pages look like .../event/<slug>/<number>/.
    Category, index and pagination URLs are rejected.
    """
    if not url:
        return False

    try:
        path = urlparse(url).path
    except ValueError:
        return False

    if "/event/" not in path:
        return False
    if "/event_cat/" in path or "/event/page/" in path:
        return False
    if path.endswith("/event/"):
        return False
    return re.search(r"/\d+/$", path) is not None


def format_body(text, max_length=config.BODY_MAX_LENGTH):
    """Trim every line, drop blanks, and cap the result at max_length characters."""
    if not text:
        return ""
    lines = [line.strip() for line in re.split(r"\r?\n", text)]
    result = "\n".join(line for line in lines if line).strip()
    if len(result) > max_length:
        result = result[: max_length - 1] + "…"
    return result


def should_include_body(open_time=None, start_time=None, end_time=None, price=None, contact=None):
    """The body blob is only kept when no structured field could be extracted."""
    return not any([open_time, start_time, end_time, price, contact])
