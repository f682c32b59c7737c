"""
Typed errors shared by the fetch layer, the pipeline and the venue scrapers.

Every scraper funnels uncaught failures through handle_cli_fatal_error so the
run-all driver (or any external scheduler) can decide retries from the exit code
and the ERROR_TYPE=... line on stderr.
"""

import json
import sys

import requests

NETWORK = "NETWORK"
PARSE = "PARSE"
VALIDATION = "VALIDATION"
EMPTY_RESULT = "EMPTY_RESULT"
UNKNOWN = "UNKNOWN"

ERROR_KINDS = (NETWORK, PARSE, VALIDATION, EMPTY_RESULT, UNKNOWN)

EXIT_CODE_BY_KIND = {
    NETWORK: 10,
    PARSE: 11,
    VALIDATION: 12,
    EMPTY_RESULT: 13,
    UNKNOWN: 19,
}

KIND_BY_EXIT_CODE = {code: kind for kind, code in EXIT_CODE_BY_KIND.items()}

ERROR_KIND_LABELS = {
    NETWORK: "network fetch error",
    PARSE: "parse error",
    VALIDATION: "validation error",
    EMPTY_RESULT: "empty result",
    UNKNOWN: "unknown error",
}


class TypedError(Exception):
    """Base error carrying a kind plus optional details such as status_code."""

    kind = UNKNOWN

    def __init__(self, message, cause=None, **details):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.details = details
        for key, value in details.items():
            setattr(self, key, value)
        if cause is not None:
            self.__cause__ = cause


class NetworkError(TypedError):
    kind = NETWORK


class ParseError(TypedError):
    kind = PARSE


class ValidationError(TypedError):
    kind = VALIDATION


class EmptyResultError(TypedError):
    kind = EMPTY_RESULT


ERROR_CLASS_BY_KIND = {
    NETWORK: NetworkError,
    PARSE: ParseError,
    VALIDATION: ValidationError,
    EMPTY_RESULT: EmptyResultError,
    UNKNOWN: TypedError,
}


def normalize_error_kind(kind):
    key = str(kind or "").upper()
    return key if key in EXIT_CODE_BY_KIND else UNKNOWN


def detect_error_kind(exc):
    """Guess the kind of a foreign exception. Returns None when nothing matches."""
    if exc is None:
        return None
    if isinstance(exc, TypedError):
        return exc.kind
    if isinstance(exc, (requests.exceptions.Timeout, requests.exceptions.ConnectionError)):
        return NETWORK
    if isinstance(exc, requests.exceptions.HTTPError):
        return NETWORK
    if isinstance(exc, (json.JSONDecodeError, UnicodeDecodeError)):
        return PARSE
    return None


def to_typed_error(exc, fallback_kind=UNKNOWN):
    if isinstance(exc, TypedError):
        return exc
    kind = detect_error_kind(exc) or normalize_error_kind(fallback_kind)
    message = str(exc) or type(exc).__name__
    return ERROR_CLASS_BY_KIND[kind](message, cause=exc)


def error_kind_to_exit_code(kind):
    return EXIT_CODE_BY_KIND[normalize_error_kind(kind)]


def exit_code_to_error_kind(exit_code):
    return KIND_BY_EXIT_CODE.get(exit_code, UNKNOWN)


def is_retryable_error_kind(kind):
    # Only network failures are worth another attempt.
    return normalize_error_kind(kind) == NETWORK


def format_error_kind_label(kind):
    kind = normalize_error_kind(kind)
    return f"{kind} ({ERROR_KIND_LABELS[kind]})"


def emit_cli_error(exc, prefix="[ERROR]", stream=None):
    """Write the error to stderr in a machine-readable shape and return it typed."""
    stream = stream or sys.stderr
    typed = to_typed_error(exc)
    message = typed.message or str(exc)

    print(f"{prefix} {format_error_kind_label(typed.kind)}: {message}", file=stream)
    print(f"ERROR_TYPE={typed.kind}", file=stream)
    print(f"ERROR_MESSAGE={message}", file=stream)
    return typed


def handle_cli_fatal_error(exc, prefix="[ERROR]", stream=None):
    """Report a fatal error and return the exit code the process should end with."""
    typed = emit_cli_error(exc, prefix=prefix, stream=stream)
    return error_kind_to_exit_code(typed.kind)
