# SPDX-FileCopyrightText: 2025-present Raki Rahman <mdrakiburrahman@gmail.com>
#
# SPDX-License-Identifier: MIT

from typing import Any


class FabricApiError(RuntimeError):
    """Base class for every error raised by the provider core."""


class AuthError(FabricApiError):
    """Token acquisition or refresh failed."""


class NetworkError(FabricApiError):
    """Transport-level failure (DNS, connection, timeout)."""


class RequestError(FabricApiError):
    """
    Non-success HTTP status.

    Args:
        status_code: The HTTP status code returned by the service
        body: The raw response text, verbatim
        url: The URL that was called
        method: The HTTP method used
    """

    def __init__(self, status_code: int, body: str = "", url: str = "", method: str = ""):
        self.status_code = status_code
        self.body = body
        self.url = url
        self.method = method
        message = f"{method} {url} failed with status code {status_code}".strip()
        if body:
            message = f"{message}: {body}"
        super().__init__(message)


class BadRequestError(RequestError):
    """HTTP 400."""

    def __init__(self, body: str = "", url: str = "", method: str = ""):
        super().__init__(400, body, url, method)


class NotFoundError(RequestError):
    """HTTP 404."""

    def __init__(self, body: str = "", url: str = "", method: str = ""):
        super().__init__(404, body, url, method)


class DecodeError(FabricApiError):
    """A body that should be JSON could not be decoded."""


class OperationNotFoundError(FabricApiError):
    """An asynchronous response did not carry an operation id header."""


class OperationTimeoutError(FabricApiError, TimeoutError):
    """A deadline or polling ceiling was reached before the work finished."""


class OperationCancelledError(FabricApiError):
    """The caller cancelled the operation."""


class DuplicateIdentityError(FabricApiError):
    """The desired membership list contains the same identity key twice."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Duplicate identity found: {key}")


class ReconciliationError(FabricApiError):
    """
    A reconciliation batch stopped on its first failing call.

    Calls already issued are not undone; ``applied`` lists them in order.
    """

    def __init__(self, message: str, applied: list[tuple[str, Any]], failed_item: Any):
        self.applied = applied
        self.failed_item = failed_item
        super().__init__(message)
