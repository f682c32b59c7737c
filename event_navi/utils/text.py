import re
from html import unescape

from bs4 import BeautifulSoup

FULL_WIDTH_DIGITS = str.maketrans("０１２３４５６７８９", "0123456789")
DASH_VARIANTS = re.compile(r"[‐‑‒–—―－−]")


def decode_html_entities(text):
    """Decode named and numeric entities; &nbsp; becomes a plain space."""
    if not text:
        return ""
    return unescape(text).replace("\xa0", " ")


def strip_tags(html):
    """Replace every tag with a space."""
    if not html:
        return ""
    return re.sub(r"<[^>]*>", " ", html)


def strip_tags_compact(html):
    """Remove tags without leaving whitespace where they were."""
    if not html:
        return ""
    return re.sub(r"<[^>]*>", "", html)


def strip_tags_with_line_breaks(html):
    """Strip tags, turning <br> and block closers into newlines first."""
    if not html:
        return ""
    html = re.sub(r"<\s*br\s*/?\s*>", "\n", html, flags=re.IGNORECASE)
    html = re.sub(r"</\s*(p|li|div|dt|dd)\s*>", "\n", html, flags=re.IGNORECASE)
    return strip_tags(html)


def normalize_whitespace(text):
    if not text:
        return ""
    return re.sub(r"\s+", " ", text).strip()


def normalize_decoded_text(text):
    return normalize_whitespace(decode_html_entities(str(text or "")))


def normalize_full_width_basic(text):
    """Full-width digits and colons to ASCII, dash variants to '-'."""
    if not text:
        return ""
    text = str(text).translate(FULL_WIDTH_DIGITS).replace("：", ":")
    return DASH_VARIANTS.sub("-", text)


def extract_text_lines_from_html(html):
    decoded = decode_html_entities(strip_tags_with_line_breaks(str(html or "")))
    lines = (normalize_whitespace(line) for line in re.split(r"\r?\n", decoded))
    return [line for line in lines if line]


def normalize_heading_like_title(text):
    """Drop leading decoration marks and collapse whitespace."""
    text = re.sub(r"^[\s\-–—―~〜～:：・|｜]+", "", str(text or ""))
    return normalize_whitespace(text)


def extract_labeled_value(lines, labels):
    """
    Find the value for a label in a list of text lines.
    Handles "開催日：2024年2月3日" on one line and a label line followed by its value.
    """
    if isinstance(labels, str):
        labels = [labels]

    for i, line in enumerate(lines or []):
        for raw_label in labels:
            label = str(raw_label or "").strip()
            if not label or label not in line:
                continue

            match = re.search(re.escape(label) + r"\s*[:：]?\s*(.+)", line)
            if match and match.group(1).strip():
                return match.group(1).strip()

            if line.strip() == label and i + 1 < len(lines):
                return lines[i + 1].strip()

    return ""


def html_to_text(html, separator=" "):
    """Plain text of an HTML fragment via BeautifulSoup, whitespace normalized."""
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    return normalize_whitespace(soup.get_text(separator))
