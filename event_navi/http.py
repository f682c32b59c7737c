"""
Shared HTTP fetch layer for venue scrapers.

Venue sites mix charsets, compression and WAF pages that answer 200, so every
scraper goes through fetch_text and only ever sees clean decoded text.
"""

import asyncio
import gzip
import logging
import random
import re
import time
import zlib
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field

import requests

from event_navi import config
from event_navi.errors import EmptyResultError, NetworkError, ParseError

logger = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"
ZLIB_HEADER_BYTE = 0x78
SHIFT_JIS_NAMES = {"shift_jis", "shift-jis"}


@dataclass
class FetchResult:
    text: str
    status_code: int
    headers: dict = field(default_factory=dict)


def is_retryable_status_code(status_code):
    return status_code == 429 or 500 <= status_code <= 599


def build_retry_delay_ms(attempt, base_delay_ms):
    """Exponential backoff with up to 150ms of jitter."""
    safe_attempt = max(1, attempt)
    return base_delay_ms * (2 ** (safe_attempt - 1)) + random.randint(0, 149)


def build_headers(headers=None, accept_encoding="identity"):
    merged = dict(config.DEFAULT_HEADERS)
    merged["Accept-Encoding"] = accept_encoding
    merged.update(headers or {})
    return merged


def decompress_body(body, content_encoding):
    """
    Inflate gzip/deflate bodies.
    Only bodies that still carry the compression header are touched, so a body
    already decoded by the transport is never decompressed twice.
    """
    encoding = (content_encoding or "").lower()

    if "gzip" in encoding:
        if body[:2] == GZIP_MAGIC:
            try:
                return gzip.decompress(body)
            except (OSError, EOFError, zlib.error) as e:
                raise ParseError("gzip decompression failed", cause=e)
    elif "deflate" in encoding:
        if body and body[0] == ZLIB_HEADER_BYTE:
            try:
                return zlib.decompress(body)
            except zlib.error as e:
                raise ParseError("deflate decompression failed", cause=e)

    return body


def decode_body(body, encoding="utf-8"):
    name = str(encoding or "utf-8").lower()
    if name in SHIFT_JIS_NAMES:
        # cp932 is the superset Japanese sites actually serve as "Shift_JIS"
        try:
            return body.decode("cp932")
        except UnicodeDecodeError as e:
            raise ParseError("Shift_JIS decode failed", cause=e)
    return body.decode("utf-8", errors="replace")


def find_error_indicator(text, content_type):
    """Return the soft-block marker found in an HTML body, or None."""
    if "text/html" not in (content_type or "").lower():
        return None
    return next((marker for marker in config.ERROR_INDICATORS if marker in text), None)


def _download(http, url, headers, timeout_ms):
    """
    GET url and read the whole body within timeout_ms.

    requests' own timeout only bounds the connect and each socket read, so a
    server trickling bytes could hold the call open indefinitely. The transfer
    runs on a worker thread and the response is closed once the deadline passes.
    """
    timeout_s = timeout_ms / 1000
    opened = []

    def transfer():
        resp = http.get(url, headers=headers, timeout=timeout_s, stream=True)
        opened.append(resp)
        return resp, resp.content

    executor = ThreadPoolExecutor(max_workers=1)
    future = executor.submit(transfer)
    try:
        return future.result(timeout=timeout_s)
    except FutureTimeoutError:
        for resp in opened:
            resp.close()
        raise NetworkError(f"HTTP request timed out after {timeout_ms}ms ({url})")
    except requests.exceptions.Timeout as e:
        raise NetworkError(f"HTTP request timed out after {timeout_ms}ms ({url})", cause=e)
    except requests.exceptions.RequestException as e:
        raise NetworkError(f"HTTP request failed ({e})", cause=e)
    finally:
        executor.shutdown(wait=False)


def fetch_text_with_meta(
    url,
    headers=None,
    accept_encoding="identity",
    encoding="utf-8",
    timeout_ms=None,
    debug_label=None,
    check_error_indicators=True,
    session=None,
):
    """
    Fetch a URL once and return a FetchResult with the decoded body.

    Raises NetworkError (unreachable, timeout, non-200, soft-block page),
    EmptyResultError (no bytes) or ParseError (decompression / charset).
    """
    timeout_ms = config.DEFAULT_TIMEOUT_MS if timeout_ms is None else timeout_ms
    resp, body = _download(session or requests, url, build_headers(headers, accept_encoding), timeout_ms)

    if resp.status_code != 200:
        retryable = is_retryable_status_code(resp.status_code)
        suffix = " retryable=true" if retryable else ""
        raise NetworkError(
            f"HTTP {resp.status_code} for {url}{suffix}",
            status_code=resp.status_code,
            retryable=retryable,
        )

    content_type = resp.headers.get("content-type", "").lower()
    content_encoding = resp.headers.get("content-encoding", "")

    if debug_label:
        logger.info(
            "[fetch_text:%s] content-encoding: %s, content-type: %s",
            debug_label,
            content_encoding or "none",
            content_type or "unknown",
        )

    if not body:
        raise EmptyResultError(f"Empty response body ({url})")

    text = decode_body(decompress_body(body, content_encoding), encoding)
    if not text:
        raise EmptyResultError(f"Empty response body ({url})")

    if check_error_indicators:
        marker = find_error_indicator(text, content_type)
        if marker:
            raise NetworkError(f"Response looks like an error page ({marker!r} in {url})")

    if debug_label:
        logger.info("[fetch_text:%s] body_head: %s", debug_label, re.sub(r"\s+", " ", text)[:200])

    return FetchResult(text=text, status_code=resp.status_code, headers=dict(resp.headers))


def fetch_text(url, retry_count=None, retry_base_delay_ms=None, **options):
    """
    Fetch a URL and return only the decoded text.
    Network failures without a status, and 429/5xx responses, are retried with backoff.
    """
    retry_count = config.DEFAULT_RETRY_COUNT if retry_count is None else retry_count
    base_delay_ms = config.DEFAULT_RETRY_BASE_DELAY_MS if retry_base_delay_ms is None else retry_base_delay_ms

    for attempt in range(1, retry_count + 2):
        try:
            return fetch_text_with_meta(url, **options).text
        except NetworkError as e:
            status_code = getattr(e, "status_code", 0) or 0
            retryable = status_code == 0 or is_retryable_status_code(status_code)
            if not retryable or attempt > retry_count:
                raise

            wait_ms = build_retry_delay_ms(attempt, base_delay_ms)
            logger.warning(
                "[fetch_text] retry %d/%d wait=%dms url=%s status=%s",
                attempt,
                retry_count,
                wait_ms,
                url,
                status_code or "network",
            )
            time.sleep(wait_ms / 1000)


def fetch_html(url, **options):
    return fetch_text(url, **options)


async def fetch_text_async(url, **options):
    """fetch_text on a worker thread, for use inside map_with_concurrency."""
    return await asyncio.to_thread(fetch_text, url, **options)


async def fetch_text_with_meta_async(url, **options):
    return await asyncio.to_thread(fetch_text_with_meta, url, **options)
