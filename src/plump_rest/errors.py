# src/plump_rest/errors.py
"""
Failure taxonomy shared by every store implementation.

  - NotFound           -> record (or relationship owner) does not exist
  - TransportFailure   -> non-2xx reply or network-level failure
  - InvariantViolation -> local misuse, detected before any network attempt
  - MalformedPushEvent -> push payload that cannot be interpreted
"""

from __future__ import annotations

from typing import Any, Optional


def code_for_status(status: Optional[int]) -> str:
    if status is None:
        return "network_error"
    return {
        400: "bad_request",
        401: "unauthorized",
        403: "forbidden",
        404: "not_found",
        409: "conflict",
        422: "unprocessable_entity",
        429: "rate_limited",
        500: "internal_error",
        503: "unavailable",
    }.get(status, "error")


class StoreError(Exception):
    """Base class for store failures."""


class NotFound(StoreError, KeyError):
    def __init__(self, type_: str, id_: Any = None):
        self.type = type_
        self.id = id_
        what = type_ if id_ is None else f"{type_}/{id_}"
        super().__init__(f"{what} not found")

    def __str__(self) -> str:
        return self.args[0]


class TransportFailure(StoreError):
    def __init__(self, message: str, status: Optional[int] = None, url: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.url = url
        self.code = code_for_status(status)


class InvariantViolation(StoreError):
    """Raised for programming errors such as creating content in a non-terminal store."""


class MalformedPushEvent(StoreError, ValueError):
    """Push payload could not be turned into an invalidation signal."""
