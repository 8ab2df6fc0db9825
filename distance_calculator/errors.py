"""Error type shared by every layer.

Callers branch on ``DeliveryRangeError.kind`` rather than on exception
classes; the HTTP layer maps each kind to a status code.
"""
from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    format = "format"
    data = "data"
    row = "row"
    store = "store"
    not_found = "not_found"
    feed = "feed"
    invalid_query = "invalid_query"


class DeliveryRangeError(Exception):
    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __repr__(self) -> str:
        return f"DeliveryRangeError(kind={self.kind.value!r}, message={self.message!r})"


def format_error(message: str) -> DeliveryRangeError:
    return DeliveryRangeError(ErrorKind.format, message)


def data_error(message: str) -> DeliveryRangeError:
    return DeliveryRangeError(ErrorKind.data, message)


def row_error(message: str) -> DeliveryRangeError:
    return DeliveryRangeError(ErrorKind.row, message)


def store_error(message: str) -> DeliveryRangeError:
    return DeliveryRangeError(ErrorKind.store, message)


def not_found_error(message: str) -> DeliveryRangeError:
    return DeliveryRangeError(ErrorKind.not_found, message)


def feed_error(message: str) -> DeliveryRangeError:
    return DeliveryRangeError(ErrorKind.feed, message)


def invalid_query_error(message: str) -> DeliveryRangeError:
    return DeliveryRangeError(ErrorKind.invalid_query, message)
