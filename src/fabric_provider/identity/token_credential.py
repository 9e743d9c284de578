# SPDX-FileCopyrightText: 2025-present Raki Rahman <mdrakiburrahman@gmail.com>
#
# SPDX-License-Identifier: MIT

import json
import logging
import os
import tempfile
import threading
import time
from typing import Any

import requests
from azure.core.credentials import AccessToken, TokenCredential

from fabric_provider.operations.errors import AuthError, DecodeError
from fabric_provider.operations.operation_interfaces import (
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    FABRIC_SCOPE,
    LOGIN_ENDPOINT,
    Credential,
    PersistedTokenRecord,
    TokenStore,
)
from fabric_provider.static.transformers import ResponseDecoder


class ClientSecretTokenStore(TokenStore, TokenCredential):
    """
    Client credential token store with optional on-disk persistence.

    The cached token is replaced wholesale on every acquisition and guarded by
    a lock, so concurrent callers on an expired token acquire it once.
    """

    def __init__(
        self,
        credential: Credential,
        token_file_path: str | None = None,
        login_endpoint: str = LOGIN_ENDPOINT,
        timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
        logger: logging.Logger | None = None,
    ):
        """
        Initialize the token store, loading a persisted token if one exists.

        Args:
            credential: Client credentials
            token_file_path: Optional path of the persisted token file
            login_endpoint: Identity provider base URL
            timeout_seconds: Timeout of the token request

        Raises:
            DecodeError: If the persisted token file is malformed
        """
        self.credential = credential
        self.token_file_path = token_file_path
        self.login_endpoint = login_endpoint.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.logger = logger or logging.getLogger(__name__)
        self._token: AccessToken | None = None
        self._lock = threading.Lock()

        if self.token_file_path:
            self.load_from_file()

    @property
    def token_url(self) -> str:
        return f"{self.login_endpoint}/{self.credential.tenant_id}/oauth2/v2.0/token"

    def ensure_valid_token(self) -> AccessToken:
        with self._lock:
            if self._token is not None and time.time() < self._token.expires_on:
                return self._token

            self.logger.info(f"Acquiring access token for client {self.credential.client_id}")
            response_data = self._request_token()
            token = AccessToken(response_data["access_token"], int(time.time() + response_data["expires_in"]))
            self._token = token
            self.logger.info(f"Successfully acquired access token expiring at {token.expires_on}")

            if self.token_file_path:
                self._save_to_file(response_data)

            return token

    def invalidate(self) -> None:
        with self._lock:
            self._token = None
        self.logger.debug("Cached access token invalidated")

    def get_token(self, *scopes: str, **kwargs: Any) -> AccessToken:
        if any(scope != FABRIC_SCOPE for scope in scopes):
            raise AuthError(f"Token store only issues tokens for {FABRIC_SCOPE}, requested: {scopes}")
        return self.ensure_valid_token()

    def load_from_file(self) -> None:
        """
        Populate the cached token from the persisted token file.

        The expiry is computed from the load time, not the issue time.

        Raises:
            DecodeError: If the file content is not a valid token record
        """
        if not self.token_file_path or not os.path.exists(self.token_file_path):
            self.logger.debug(f"No persisted token found at {self.token_file_path}")
            return

        with open(self.token_file_path, encoding="utf-8") as file:
            try:
                raw = json.load(file)
            except json.JSONDecodeError as e:
                error_msg = f"Persisted token file '{self.token_file_path}' is not valid JSON: {e}"
                self.logger.error(error_msg)
                raise DecodeError(error_msg) from e

        record = ResponseDecoder.decode(PersistedTokenRecord, raw, source=self.token_file_path, cast=[int])
        with self._lock:
            self._token = AccessToken(record.access_token, int(time.time() + record.expires_in))
        self.logger.info(f"Loaded persisted access token from {self.token_file_path}")

    # ---------------------------------------------------------------------------- #

    def _request_token(self) -> dict[str, Any]:
        payload = {
            "client_id": self.credential.client_id,
            "client_secret": self.credential.client_secret,
            "scope": FABRIC_SCOPE,
        }
        if self.credential.username:
            payload["grant_type"] = "password"
            payload["username"] = self.credential.username
            payload["password"] = self.credential.password or ""
        else:
            payload["grant_type"] = "client_credentials"

        try:
            response = requests.post(self.token_url, data=payload, timeout=self.timeout_seconds)
        except requests.exceptions.RequestException as e:
            error_msg = f"Failed to reach token endpoint {self.token_url}: {e}"
            self.logger.error(error_msg)
            raise AuthError(error_msg) from e

        if not 200 <= response.status_code < 300:
            error_msg = f"Token request failed with status code {response.status_code}: {response.text}"
            self.logger.error(error_msg)
            raise AuthError(error_msg)

        try:
            response_data = response.json()
        except ValueError as e:
            error_msg = f"Token endpoint returned a non-JSON body: {response.text[:500]}"
            self.logger.error(error_msg)
            raise AuthError(error_msg) from e

        if not isinstance(response_data, dict) or not isinstance(response_data.get("access_token"), str) or not response_data["access_token"]:
            error_msg = "Failed to get access token: access_token missing from token response"
            self.logger.error(error_msg)
            raise AuthError(error_msg)

        try:
            response_data["expires_in"] = int(response_data["expires_in"])
        except (KeyError, TypeError, ValueError) as e:
            error_msg = f"Failed to get access token: invalid expires_in in token response: {response_data.get('expires_in')}"
            self.logger.error(error_msg)
            raise AuthError(error_msg) from e

        return response_data

    def _save_to_file(self, response_data: dict[str, Any]) -> None:
        """
        Overwrite the token file with the full token response.

        Written to a sibling temporary file first and moved into place, so a
        reader never sees a partial file. A failed write is logged and the
        freshly acquired token is still returned to the caller.
        """
        directory = os.path.dirname(os.path.abspath(self.token_file_path))
        try:
            fd, temp_path = tempfile.mkstemp(prefix=".token-", suffix=".json", dir=directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as file:
                    json.dump(response_data, file)
                os.replace(temp_path, self.token_file_path)
            finally:
                if os.path.exists(temp_path):
                    os.unlink(temp_path)
        except OSError as e:
            self.logger.warning(f"Failed to persist access token to '{self.token_file_path}': {e}")
            return

        self.logger.debug(f"Persisted access token to {self.token_file_path}")


class StaticTokenStore(TokenStore, TokenCredential):
    """A pre-issued token that cannot be refreshed."""

    def __init__(self, token: str, expiry: int):
        if not token:
            raise ValueError("Token cannot be None or empty")

        self._token: AccessToken | None = AccessToken(token, expiry)
        self.logger = logging.getLogger(__name__)

    def ensure_valid_token(self) -> AccessToken:
        if self._token is None or time.time() >= self._token.expires_on:
            raise AuthError("Static access token has expired or was invalidated and cannot be refreshed")
        return self._token

    def invalidate(self) -> None:
        self._token = None

    def get_token(self, *scopes: str, **kwargs: Any) -> AccessToken:
        self.logger.debug(f"Static token store - getting token for scopes: {scopes}")
        return self.ensure_valid_token()

    def get_expire(self) -> int | None:
        return self._token.expires_on if self._token else None

