# SPDX-FileCopyrightText: 2025-present Raki Rahman <mdrakiburrahman@gmail.com>
#
# SPDX-License-Identifier: MIT

import logging
from typing import Any

import requests

from fabric_provider.client.fabric_operation_poller import FabricOperationPoller
from fabric_provider.operations.errors import (
    BadRequestError,
    DecodeError,
    NetworkError,
    NotFoundError,
    OperationNotFoundError,
    OperationTimeoutError,
    RequestError,
)
from fabric_provider.operations.operation_interfaces import (
    OPERATION_ID_HEADER,
    ApiClient,
    CommonParams,
    NoRetryPolicy,
    OperationContext,
    OperationHandle,
    OperationPoller,
    RetryPolicy,
    TokenStore,
)

POST_SUCCESS_CODES = frozenset([200, 201, 202])
PUT_SUCCESS_CODES = frozenset([200, 201])
PATCH_SUCCESS_CODES = frozenset([200])
DELETE_SUCCESS_CODES = frozenset([200])


class FabricApiClient(ApiClient):
    """
    Concrete implementation of ApiClient for the Fabric and Power BI REST APIs.

    Each verb fetches a valid token, sends exactly one request under the
    configured retry policy, and classifies the response by status code.
    """

    def __init__(
        self,
        common_params: CommonParams,
        token_store: TokenStore,
        retry_policy: RetryPolicy | None = None,
        poller: OperationPoller | None = None,
    ):
        """
        Initialize the Fabric API client.

        Args:
            common_params: Common configuration parameters
            token_store: Source of bearer tokens
            retry_policy: Retry policy, defaults to no retries
            poller: Long-running operation poller, defaults to one bound to this client
        """
        super().__init__(common_params)
        self.token_store = token_store
        self.retry_policy = retry_policy or NoRetryPolicy()
        self.poller = poller or FabricOperationPoller(common_params, self)
        self.logger = logging.getLogger(__name__)

    def get(self, url: str, context: OperationContext | None = None) -> dict[str, Any]:
        response = self._send("GET", url, context)

        if response.status_code == 404:
            self._raise(NotFoundError(response.text, url, "GET"))

        return self._decode(response, "GET", url)

    def post(self, url: str, body: dict[str, Any] | None = None, context: OperationContext | None = None) -> dict[str, Any]:
        response = self._send("POST", url, context, json_body=body)
        self._check_post_status(response, url)
        if not response.content:
            return {}
        return self._decode(response, "POST", url)

    def post_bytes(self, url: str, body: bytes, context: OperationContext | None = None) -> dict[str, Any] | None:
        response = self._send("POST", url, context, data=body)
        self._check_post_status(response, url)
        if not response.content:
            return None
        return self._decode(response, "POST", url)

    def put(self, url: str, body: dict[str, Any] | None = None, context: OperationContext | None = None) -> dict[str, Any]:
        response = self._send("PUT", url, context, json_body=body)
        return self._classify_write(response, "PUT", url, PUT_SUCCESS_CODES)

    def patch(self, url: str, body: dict[str, Any] | None = None, context: OperationContext | None = None) -> dict[str, Any]:
        response = self._send("PATCH", url, context, json_body=body)
        return self._classify_write(response, "PATCH", url, PATCH_SUCCESS_CODES)

    def patch_bytes(self, url: str, body: bytes, context: OperationContext | None = None) -> dict[str, Any]:
        response = self._send("PATCH", url, context, data=body)
        return self._classify_write(response, "PATCH", url, PATCH_SUCCESS_CODES)

    def delete(self, url: str, context: OperationContext | None = None) -> None:
        response = self._send("DELETE", url, context)
        if response.status_code not in DELETE_SUCCESS_CODES:
            self._raise(RequestError(response.status_code, response.text, url, "DELETE"))

    def post_with_operation_check(self, url: str, body: dict[str, Any] | None = None, context: OperationContext | None = None) -> dict[str, Any]:
        response = self._send("POST", url, context, json_body=body)
        self._check_post_status(response, url)

        operation_id = response.headers.get(OPERATION_ID_HEADER, "").strip()
        if not operation_id:
            self._raise(OperationNotFoundError(f"No {OPERATION_ID_HEADER} header found in response to POST {url} (status {response.status_code})"))

        self.logger.info(f"POST {url} started operation {operation_id}")
        return self.poller.wait(OperationHandle(operation_id), context)

    # ---------------------------------------------------------------------------- #

    def _send(
        self,
        method: str,
        url: str,
        context: OperationContext | None,
        json_body: dict[str, Any] | None = None,
        data: bytes | None = None,
    ) -> requests.Response:
        """
        Send one authenticated request.

        Raises:
            AuthError: If no valid token can be obtained; nothing is sent
            NetworkError: On transport failure
            OperationTimeoutError: If the caller's deadline passes
            OperationCancelledError: If the caller cancelled
        """
        context = context or OperationContext()
        context.check(f"{method} {url}")

        access_token = self.token_store.ensure_valid_token()
        headers = {"Authorization": f"Bearer {access_token.token}"}
        if method != "GET":
            headers["Content-Type"] = "application/json"

        kwargs: dict[str, Any] = {
            "headers": headers,
            "timeout": context.clip_timeout(self.common_params.http.timeout_seconds),
        }
        if json_body is not None:
            kwargs["json"] = json_body
        if data is not None:
            kwargs["data"] = data

        self.logger.debug(f"{method} {url}")
        try:
            response = self.retry_policy.execute(requests.request, method, url, context=context, **kwargs)
        except requests.exceptions.Timeout as e:
            remaining = context.remaining()
            if remaining is not None and remaining <= 0:
                self._raise(OperationTimeoutError(f"{method} {url} exceeded the caller deadline"), e)
            self._raise(NetworkError(f"{method} {url} timed out: {e}"), e)
        except requests.exceptions.RequestException as e:
            self._raise(NetworkError(f"{method} {url} failed: {e}"), e)

        self.logger.debug(f"{method} {url} returned HTTP {response.status_code}")
        return response

    def _check_post_status(self, response: requests.Response, url: str) -> None:
        if response.status_code not in POST_SUCCESS_CODES:
            self._raise(RequestError(response.status_code, response.text, url, "POST"))

    def _classify_write(self, response: requests.Response, method: str, url: str, success_codes: frozenset[int]) -> dict[str, Any]:
        if response.status_code in success_codes:
            if not response.content:
                return {}
            return self._decode(response, method, url)
        if response.status_code == 400:
            self._raise(BadRequestError(response.text, url, method))
        if response.status_code == 404:
            self._raise(NotFoundError(response.text, url, method))
        self._raise(RequestError(response.status_code, response.text, url, method))

    def _decode(self, response: requests.Response, method: str, url: str) -> dict[str, Any]:
        try:
            response_data = response.json()
        except ValueError as e:
            preview = response.text[:500].replace("\n", " ").strip() or "<empty body>"
            self._raise(DecodeError(f"Failed to parse response body of {method} {url} (status {response.status_code}): {preview}"), e)

        if not isinstance(response_data, dict):
            self._raise(DecodeError(f"Expected a JSON object from {method} {url}, got {type(response_data).__name__}"))

        self.logger.debug(f"{method} {url} response body: {response_data}")
        return response_data

    def _raise(self, error: Exception, cause: BaseException | None = None) -> None:
        # Callers treat a missing resource as an expected outcome.
        if isinstance(error, NotFoundError):
            self.logger.debug(str(error))
        else:
            self.logger.error(str(error))
        raise error from cause
