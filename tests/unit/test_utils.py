from datetime import date, datetime, timezone

from event_navi.utils.categories import detect_flags, detect_genres, detect_tags, detect_type
from event_navi.utils.dates import (
    extract_date_parts_from_japanese_text,
    extract_date_range,
    get_jst_today,
    infer_year_for_month,
    is_date_in_range,
    is_event_in_window,
    normalize_japanese_date_text,
    normalize_time,
    parse_iso_date_strict,
)
from event_navi.utils.events import (
    extract_event_title_from_detail_html,
    format_body,
    is_event_detail_url,
    normalize_contact,
    normalize_price,
    should_include_body,
)
from event_navi.utils.text import (
    decode_html_entities,
    extract_labeled_value,
    extract_text_lines_from_html,
    html_to_text,
    normalize_decoded_text,
    normalize_full_width_basic,
    normalize_heading_like_title,
    strip_tags,
    strip_tags_compact,
)


def test_normalize_time():
    assert normalize_time("8:00pm") == "20:00"
    assert normalize_time("8:00") == "08:00"
    assert normalize_time("20:00:00") == "20:00"
    assert normalize_time("12:00am") == "00:00"
    assert normalize_time("12:00pm") == "12:00"
    assert normalize_time("１８：３０") == "18:30"
    assert normalize_time("19時30分") == "19:30"
    assert normalize_time("午後2時") == "14:00"
    assert normalize_time("bad") is None
    assert normalize_time("25:00") is None


def test_decode_entities_and_strip_tags():
    assert decode_html_entities("Tom &amp; Jerry&nbsp;&quot;live&quot;") == 'Tom & Jerry "live"'
    assert decode_html_entities(None) == ""
    assert decode_html_entities("&#8211;&#x3042;&yen;") == "\u2013\u3042\u00a5"
    assert strip_tags("<b>A</b>B") == " A B"
    assert strip_tags_compact("<b>A</b>B") == "AB"
    assert normalize_decoded_text("  a&amp;b \n c ") == "a&b c"
    assert html_to_text("<p>Hello <b>world</b></p>") == "Hello world"


def test_extract_text_lines_and_labeled_value():
    html = "<dl><dt>開催日</dt><dd>2026年2月3日</dd><dt>料金：1,000円</dt></dl>"
    lines = extract_text_lines_from_html(html)
    assert lines == ["開催日", "2026年2月3日", "料金：1,000円"]
    assert extract_labeled_value(lines, "開催日") == "2026年2月3日"
    assert extract_labeled_value(lines, ["料金"]) == "1,000円"
    assert extract_labeled_value(lines, "会場") == ""


def test_full_width_and_heading_normalization():
    assert normalize_full_width_basic("１０：００－１２：００") == "10:00-12:00"
    assert normalize_heading_like_title("・ 春の  コンサート") == "春の コンサート"


def test_extract_date_range_single_and_range():
    ref = date(2026, 5, 1)
    assert extract_date_range("2/10", ref) == {"date_from": "2026-02-10", "date_to": "2026-02-10"}
    assert extract_date_range("２０２６年２月１０日", ref) == {"date_from": "2026-02-10", "date_to": "2026-02-10"}
    assert extract_date_range("2/10(火)〜2/15(日)", ref) == {"date_from": "2026-02-10", "date_to": "2026-02-15"}
    assert extract_date_range("2026年2月10日〜15日", ref) == {"date_from": "2026-02-10", "date_to": "2026-02-15"}
    assert extract_date_range("no date here", ref) is None


def test_extract_date_range_year_rollover():
    assert extract_date_range("1/5", date(2026, 12, 1))["date_from"] == "2027-01-05"
    assert extract_date_range("12/31〜1/2", date(2026, 6, 1)) == {
        "date_from": "2026-12-31",
        "date_to": "2027-01-02",
    }
    # The end inherits a year written on the start
    assert extract_date_range("2026/2/10〜2/15", date(2026, 11, 1)) == {
        "date_from": "2026-02-10",
        "date_to": "2026-02-15",
    }
    assert extract_date_range("2026年12月28日〜1月3日", date(2026, 6, 1)) == {
        "date_from": "2026-12-28",
        "date_to": "2027-01-03",
    }


def test_parse_iso_date_strict():
    assert parse_iso_date_strict("2024-02-29") == date(2024, 2, 29)
    assert parse_iso_date_strict("2024-02-30") is None
    assert parse_iso_date_strict("2024-2-3") is None
    assert parse_iso_date_strict(None) is None


def test_jst_today_and_year_inference():
    assert get_jst_today(datetime(2026, 3, 31, 16, 0, tzinfo=timezone.utc)) == date(2026, 4, 1)
    assert infer_year_for_month(1, today=date(2026, 11, 20)) == 2027
    assert infer_year_for_month(11, today=date(2026, 2, 1)) == 2025
    assert infer_year_for_month(6, today=date(2026, 6, 1)) == 2026


def test_date_windows():
    assert is_date_in_range("2026-02-12", {"date_from": "2026-02-10", "date_to": "2026-02-15"})
    assert not is_date_in_range("2026-02-16", {"date_from": "2026-02-10", "date_to": "2026-02-15"})
    event = {"date_from": "2026-02-10", "date_to": "2026-02-15"}
    assert is_event_in_window(event, date(2026, 2, 15), date(2026, 2, 20))
    assert not is_event_in_window(event, date(2026, 2, 16), date(2026, 2, 20))
    assert is_event_in_window({"date_from": "2026-02-10"}, date(2026, 2, 10), date(2026, 2, 10))


def test_japanese_date_text_helpers():
    text = normalize_japanese_date_text("２月３日（土）から５日まで", remove_parenthesized_text=True, replace_range_words=True)
    assert text == "2月3日 ~5日~"
    parts = extract_date_parts_from_japanese_text("2026年2月3日〜3月4日")
    assert parts == [(2026, 2, 3), (None, 3, 4)]
    assert extract_date_parts_from_japanese_text("3月4日", allow_yearless_month_day=False) == []


def test_price_and_contact_normalization():
    assert normalize_price(" 一般 1,000円 ") == "一般 1,000円"
    assert normalize_price("詳細はこちら") is None
    assert normalize_contact("お問い合わせはこちら") is None
    assert normalize_contact("088-000-0000") == "088-000-0000"


def test_extract_event_title_from_detail_html():
    html = '<h1 class="entry-title">イベント情報</h1><article><h1>春の音楽祭</h1></article>'
    assert extract_event_title_from_detail_html(html) == "春の音楽祭"
    assert extract_event_title_from_detail_html("<h2>秋の展覧会</h2>") == "秋の展覧会"
    assert extract_event_title_from_detail_html("<p>none</p>") == ""


def test_is_event_detail_url():
    assert is_event_detail_url("https://example.jp/event/concert/123/")
    assert not is_event_detail_url("https://example.jp/event/")
    assert not is_event_detail_url("https://example.jp/event/page/2/")
    assert not is_event_detail_url("https://example.jp/event_cat/music/")
    assert not is_event_detail_url("https://example.jp/news/123/")


def test_format_body_and_should_include_body():
    assert format_body("  a \n\n b  ") == "a\nb"
    assert format_body("x" * 10, max_length=5) == "xxxx…"
    assert should_include_body() is True
    assert should_include_body(start_time="10:00") is False


def test_detect_tags():
    assert detect_type("高知県サッカー選手権大会") == "sports"
    assert detect_type("春の特別展") == "exhibition"
    assert detect_type("無題") == "other"
    assert detect_genres("特別展とコンサート", "exhibition") == ["art", "music"]
    assert detect_genres("演目", "other") == []
    assert detect_genres("セミナー", "lecture") == ["education"]
    assert detect_flags("ナイトミュージアム", price="無料") == ["free", "night"]
    assert detect_flags("要予約 講座", price="1,000円", start_time="19:00") == ["paid", "reservation_required"]
    assert detect_flags("入場", price="0円") == ["free"]
    assert detect_tags({"title": "ジャズライブ", "start_time": "18:00"}) == {
        "type": "performance",
        "genres": ["music"],
        "flags": ["night"],
    }
