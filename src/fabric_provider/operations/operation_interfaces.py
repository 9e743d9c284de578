# SPDX-FileCopyrightText: 2025-present Raki Rahman <mdrakiburrahman@gmail.com>
#
# SPDX-License-Identifier: MIT

import asyncio
import json
import logging
import os
import random
import re
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

import requests
import yaml
from azure.core.credentials import AccessToken

from fabric_provider.operations.errors import OperationCancelledError, OperationTimeoutError

# ---------------------------------------------------------------------------- #
# ----------------------------- API CONSTANTS -------------------------------- #
# ---------------------------------------------------------------------------- #

FABRIC_API_ENDPOINT = "https://api.fabric.microsoft.com"
POWER_BI_API_ENDPOINT = "https://api.powerbi.com"
LOGIN_ENDPOINT = "https://login.microsoftonline.com"
FABRIC_SCOPE = "https://analysis.windows.net/powerbi/api/.default"

OPERATION_ID_HEADER = "x-ms-operation-id"

DEFAULT_HTTP_TIMEOUT_SECONDS = 60
DEFAULT_POLL_INTERVAL_SECONDS = 2
DEFAULT_POLL_MAX_ATTEMPTS = 300
DEFAULT_POLL_TIMEOUT_SECONDS = 600
DEFAULT_LAKEHOUSE_SETTLE_DELAY_SECONDS = 15

# ---------------------------------------------------------------------------- #
# --------------------------- HTTP RETRY CONSTANTS --------------------------- #
# ---------------------------------------------------------------------------- #

HTTP_RETRYABLE_STATUS_CODES = frozenset(
    [
        408,  # Request Timeout
        429,  # Too Many Requests
        500,  # Internal Server Error
        502,  # Bad Gateway
        503,  # Service Unavailable
        504,  # Gateway Timeout
    ]
)

MAX_RETRY_ATTEMPTS = 10
MAX_RETRY_DELAY_SECONDS = 60
INITIAL_RETRY_DELAY_SECONDS = 1


class RetryPolicy(ABC):
    """
    Decides whether a single HTTP call is attempted again.

    Policies never classify a response; they hand back whatever the last
    attempt produced and let the client apply its status rules.
    """

    @abstractmethod
    def execute(self, func: Callable, *args, context: "OperationContext | None" = None, **kwargs) -> requests.Response:
        """
        Execute an HTTP request under this policy.

        Args:
            func: The requests function to call (e.g., requests.request)
            *args: Positional arguments to pass to the function
            context: Caller deadline and cancel signal, checked before every attempt and every backoff wait
            **kwargs: Keyword arguments to pass to the function

        Returns:
            requests.Response: The response of the last attempt

        Raises:
            requests.exceptions.RequestException: Transport failure of the last attempt
            OperationTimeoutError: If the deadline passes between attempts
            OperationCancelledError: If the caller cancels between attempts
        """
        pass


class NoRetryPolicy(RetryPolicy):
    """Every call is attempted exactly once."""

    def execute(self, func: Callable, *args, context: "OperationContext | None" = None, **kwargs) -> requests.Response:
        return func(*args, **kwargs)


class ExponentialBackoffRetryPolicy(RetryPolicy):
    """
    Retry policy with exponential backoff and jitter for transient failures.
    """

    def __init__(
        self,
        max_attempts: int = MAX_RETRY_ATTEMPTS,
        max_delay_seconds: float = MAX_RETRY_DELAY_SECONDS,
        initial_delay_seconds: float = INITIAL_RETRY_DELAY_SECONDS,
        retryable_status_codes: frozenset[int] = HTTP_RETRYABLE_STATUS_CODES,
        logger: logging.Logger | None = None,
    ):
        """
        Initialize the retry policy.

        Args:
            max_attempts: Maximum number of attempts, including the first one
            max_delay_seconds: Maximum retry delay in seconds
            initial_delay_seconds: Initial retry delay in seconds
            retryable_status_codes: Set of HTTP status codes that should trigger retries
            logger: Optional logger for logging retry attempts
        """
        self.max_attempts = max_attempts
        self.max_delay_seconds = max_delay_seconds
        self.initial_delay_seconds = initial_delay_seconds
        self.retryable_status_codes = retryable_status_codes
        self.logger = logger or logging.getLogger(__name__)

    def execute(self, func: Callable, *args, context: "OperationContext | None" = None, **kwargs) -> requests.Response:
        target = " ".join(str(a) for a in args[:2]) if args else "unknown URL"

        for attempt in range(1, self.max_attempts + 1):
            if context is not None:
                context.check(f"attempt {attempt} of {target}")
                if "timeout" in kwargs:
                    kwargs["timeout"] = context.clip_timeout(kwargs["timeout"])
            try:
                response = func(*args, **kwargs)
            except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as e:
                if attempt >= self.max_attempts:
                    self.logger.error(f"Max retry attempts ({self.max_attempts}) exhausted for {target}. Last error: {e}")
                    raise

                delay = self._calculate_delay(attempt)
                self.logger.warning(f"Network error ({type(e).__name__}) on attempt {attempt}/{self.max_attempts} " f"for {target}. Retrying in {delay:.2f}s...")
                self._wait(delay, context)
                continue

            if response.status_code not in self.retryable_status_codes or attempt >= self.max_attempts:
                return response

            delay = self._calculate_delay(attempt)
            self.logger.warning(f"HTTP {response.status_code} on attempt {attempt}/{self.max_attempts} " f"for {target}. Retrying in {delay:.2f}s...")
            self._wait(delay, context)

        raise RuntimeError("Unexpected retry loop exit")

    def _wait(self, delay: float, context: "OperationContext | None") -> None:
        if context is None:
            time.sleep(delay)
            return
        delay = context.clip_timeout(delay)
        if context.cancel_event is not None:
            context.cancel_event.wait(delay)
        else:
            time.sleep(delay)

    def _calculate_delay(self, attempt: int) -> float:
        """
        Calculate the delay for the next retry attempt with exponential backoff and jitter.

        Args:
            attempt: The current attempt number (1-indexed)

        Returns:
            float: The delay in seconds
        """
        delay = min(self.initial_delay_seconds * (2 ** (attempt - 1)), self.max_delay_seconds)
        jitter = random.uniform(0, delay * 0.25)
        return delay + jitter


# ---------------------------------------------------------------------------- #
# ------------------------------ DATA CLASSES -------------------------------- #
# ---------------------------------------------------------------------------- #


class PrincipalType(Enum):
    """Enumeration of principal types for membership assignments."""

    GROUP = "Group"
    USER = "User"
    APP = "App"


class ReconcileState(Enum):
    """Lifecycle of a single assignment reconciliation."""

    PLANNED = "Planned"
    RECONCILING = "Reconciling"
    CONVERGED = "Converged"
    PARTIALLY_FAILED = "PartiallyFailed"


class ItemKind(Enum):
    """Fabric item collections handled by the item manager."""

    EVENTSTREAM = "eventstreams"
    ML_EXPERIMENT = "mlExperiments"
    LAKEHOUSE = "lakehouses"


@dataclass(frozen=True)
class Credential:
    """Client credentials, supplied once at configuration time."""

    client_id: str
    client_secret: str
    tenant_id: str
    username: str | None = None
    password: str | None = None

    def __repr__(self) -> str:
        return f"Credential(client_id={self.client_id!r}, tenant_id={self.tenant_id!r})"


@dataclass
class PersistedTokenRecord:
    """On-disk shape of a token endpoint response."""

    expires_in: int
    access_token: str
    token_type: str = "Bearer"
    scope: str = FABRIC_SCOPE
    ext_expires_in: int | None = None


@dataclass(frozen=True)
class OperationHandle:
    """Handle of a deferred backend operation."""

    operation_id: str


@dataclass
class OperationResultResponse:
    """The fields of an operation result the poller looks at."""

    id: str | None = None


@dataclass
class OperationContext:
    """
    Caller-supplied deadline and cancellation signal.

    Every HTTP call and every poll attempt checks it before doing any work.
    """

    deadline: float | None = None
    cancel_event: threading.Event | None = None

    @classmethod
    def with_timeout(cls, timeout_seconds: float, cancel_event: threading.Event | None = None) -> "OperationContext":
        return cls(deadline=time.monotonic() + timeout_seconds, cancel_event=cancel_event)

    def remaining(self) -> float | None:
        if self.deadline is None:
            return None
        return self.deadline - time.monotonic()

    def check(self, activity: str) -> None:
        """
        Raise if the caller cancelled or the deadline has passed.

        Args:
            activity: Description of the work about to start, used in the error message

        Raises:
            OperationCancelledError: If the cancel event is set
            OperationTimeoutError: If the deadline has passed
        """
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise OperationCancelledError(f"Cancelled before {activity}")
        remaining = self.remaining()
        if remaining is not None and remaining <= 0:
            raise OperationTimeoutError(f"Deadline exceeded before {activity}")

    def clip_timeout(self, timeout: float) -> float:
        remaining = self.remaining()
        if remaining is None:
            return timeout
        return max(0.001, min(timeout, remaining))


@dataclass
class WorkspaceUser:
    """A user assigned to a workspace."""

    email: str
    role: str
    principal_type: str = PrincipalType.USER.value


@dataclass
class SemanticModelUser:
    """A principal assigned to a semantic model."""

    email: str
    role: str
    principal_type: str = PrincipalType.USER.value


T = TypeVar("T")


@dataclass
class ReconcilePlan(Generic[T]):
    """Work batches converging a current membership list to a desired one."""

    to_add: list[T] = field(default_factory=list)
    to_update: list[T] = field(default_factory=list)
    to_remove: list[T] = field(default_factory=list)
    unchanged: list[T] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.to_add or self.to_update or self.to_remove)


@dataclass
class AssignmentChange(Generic[T]):
    """
    One assignment resource to converge.

    ``current`` is None on create and ``desired`` is None on delete.
    """

    parent_id: str
    desired: list[T] | None
    current: list[T] | None = None


@dataclass
class FabricWorkspaceInfo:
    """Fabric workspace information."""

    id: str
    display_name: str
    description: str | None = ""
    type: str = "Workspace"
    capacity_id: str | None = None


@dataclass
class FabricItemInfo:
    """A Fabric workspace item (lakehouse, eventstream, ML experiment)."""

    id: str
    display_name: str
    workspace_id: str
    type: str = ""
    description: str | None = ""


@dataclass
class EndpointParams:
    """Endpoint configuration parameters."""

    fabric: str = FABRIC_API_ENDPOINT
    power_bi: str = POWER_BI_API_ENDPOINT
    login: str = LOGIN_ENDPOINT


@dataclass
class RetryParams:
    """Backoff settings; only present when retries are switched on."""

    max_attempts: int = MAX_RETRY_ATTEMPTS
    initial_delay_seconds: float = INITIAL_RETRY_DELAY_SECONDS
    max_delay_seconds: float = MAX_RETRY_DELAY_SECONDS


@dataclass
class HttpParams:
    """HTTP client parameters."""

    timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS
    retry: RetryParams | None = None


@dataclass
class PollingParams:
    """Long-running operation polling parameters."""

    interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    max_attempts: int = DEFAULT_POLL_MAX_ATTEMPTS
    timeout_seconds: float = DEFAULT_POLL_TIMEOUT_SECONDS


@dataclass
class LakehouseParams:
    """Lakehouse creation parameters."""

    settle_delay_seconds: float = DEFAULT_LAKEHOUSE_SETTLE_DELAY_SECONDS


@dataclass
class CommonParams:
    """Common parameters shared across clients and managers."""

    credential: Credential
    endpoint: EndpointParams
    http: HttpParams
    polling: PollingParams
    lakehouse: LakehouseParams
    token_file_path: str | None = None


# ---------------------------------------------------------------------------- #
# ----------------------------- INTERFACES ----------------------------------- #
# ---------------------------------------------------------------------------- #


class TokenStore(ABC):
    """
    Interface for bearer token stores.
    """

    @abstractmethod
    def ensure_valid_token(self) -> AccessToken:
        """
        Return a token that is valid right now, acquiring one if needed.

        Returns:
            AccessToken: The bearer token and its absolute expiry

        Raises:
            AuthError: If a token cannot be acquired
        """
        pass

    @abstractmethod
    def invalidate(self) -> None:
        """
        Drop the cached token so the next call acquires a fresh one.
        """
        pass


class ApiClient(ABC):
    """
    Interface for the authenticated Fabric HTTP client.
    """

    def __init__(self, common_params: "CommonParams"):
        """
        Initialize the client with common parameters.
        """
        self.common_params = common_params

    @abstractmethod
    def get(self, url: str, context: OperationContext | None = None) -> dict[str, Any]:
        """
        Issue a GET and decode the body.

        Raises:
            NotFoundError: On 404
            DecodeError: If the body is not JSON
        """
        pass

    @abstractmethod
    def post(self, url: str, body: dict[str, Any] | None = None, context: OperationContext | None = None) -> dict[str, Any]:
        """
        Issue a POST with a JSON body; 200, 201 and 202 are successes.

        Raises:
            RequestError: On any other status, carrying the raw body
        """
        pass

    @abstractmethod
    def post_bytes(self, url: str, body: bytes, context: OperationContext | None = None) -> dict[str, Any] | None:
        """
        Issue a POST with a pre-serialized body.

        Returns:
            dict[str, Any] | None: The decoded body, or None when the body is empty
        """
        pass

    @abstractmethod
    def put(self, url: str, body: dict[str, Any] | None = None, context: OperationContext | None = None) -> dict[str, Any]:
        """
        Issue a PUT; 200 and 201 are successes.

        Raises:
            BadRequestError: On 400
            NotFoundError: On 404
            RequestError: On any other status
        """
        pass

    @abstractmethod
    def patch(self, url: str, body: dict[str, Any] | None = None, context: OperationContext | None = None) -> dict[str, Any]:
        """
        Issue a PATCH; only 200 is a success.
        """
        pass

    @abstractmethod
    def patch_bytes(self, url: str, body: bytes, context: OperationContext | None = None) -> dict[str, Any]:
        """
        Issue a PATCH with a pre-serialized body.
        """
        pass

    @abstractmethod
    def delete(self, url: str, context: OperationContext | None = None) -> None:
        """
        Issue a DELETE; only 200 is a success.
        """
        pass

    @abstractmethod
    def post_with_operation_check(self, url: str, body: dict[str, Any] | None = None, context: OperationContext | None = None) -> dict[str, Any]:
        """
        Issue a POST and wait for the long-running operation it starts.

        Returns:
            dict[str, Any]: The operation result body

        Raises:
            OperationNotFoundError: If the response carries no operation id
            OperationTimeoutError: If polling runs out of attempts or time
        """
        pass


class OperationPoller(ABC):
    """
    Interface for long-running operation pollers.
    """

    @abstractmethod
    def attempts(self, context: OperationContext | None = None) -> Iterator[int]:
        """
        Yield poll attempt numbers, sleeping between them.

        The sequence is finite; exhausting it means the operation timed out.
        """
        pass

    @abstractmethod
    def wait(self, handle: OperationHandle, context: OperationContext | None = None) -> dict[str, Any]:
        """
        Poll the operation result endpoint until the operation completes.

        Args:
            handle: The handle returned by the originating request
            context: Optional deadline and cancellation signal

        Returns:
            dict[str, Any]: The completed operation result

        Raises:
            OperationTimeoutError: If attempts or time run out
        """
        pass


class Manager(ABC):
    """Base interface for all managers."""

    def __init__(self, common_params: "CommonParams"):
        """Initialize the manager with common parameters."""
        self.common_params = common_params

    async def run_blocking(self, func: Callable, *args) -> Any:
        """
        Run a blocking client call in the default thread pool.
        """
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, func, *args)


class AssignmentManager(Manager, Generic[T]):
    """
    Interface for many-to-many assignment resources.
    """

    @abstractmethod
    def identity_key(self, member: T) -> str:
        """
        Return the unique identity of a member.
        """
        pass

    @abstractmethod
    async def execute(self, changes: list["AssignmentChange[T]"]) -> None:
        """
        Converge every assignment resource in ``changes``, resources in parallel.
        """
        pass

    @abstractmethod
    async def create(self, parent_id: str, desired: list[T]) -> ReconcileState:
        """
        Assign every desired member.

        Raises:
            DuplicateIdentityError: If the desired list repeats an identity
            ReconciliationError: If a call fails part way through
        """
        pass

    @abstractmethod
    async def update(self, parent_id: str, desired: list[T], current: list[T]) -> ReconcileState:
        """
        Converge the current members to the desired members.

        Raises:
            DuplicateIdentityError: If the desired list repeats an identity
            ReconciliationError: If a call fails part way through
        """
        pass

    @abstractmethod
    async def delete(self, parent_id: str, current: list[T]) -> ReconcileState:
        """
        Remove every current member.
        """
        pass


class WorkspaceManager(Manager):
    """
    Interface for managing Fabric workspaces.
    """

    @abstractmethod
    async def create(self, display_name: str, description: str = "", capacity_id: str | None = None) -> FabricWorkspaceInfo:
        """
        Create a workspace.

        Args:
            display_name: The workspace display name
            description: The workspace description
            capacity_id: Optional capacity to assign after creation

        Returns:
            FabricWorkspaceInfo: The created workspace
        """
        pass

    @abstractmethod
    async def get(self, workspace_id: str) -> FabricWorkspaceInfo | None:
        """
        Get workspace details.

        Returns:
            FabricWorkspaceInfo | None: The workspace, or None if it no longer exists
        """
        pass

    @abstractmethod
    async def update(self, workspace_id: str, display_name: str, description: str) -> None:
        """
        Update the workspace properties.
        """
        pass

    @abstractmethod
    async def delete(self, workspace_id: str) -> None:
        """
        Delete the workspace.
        """
        pass

    @abstractmethod
    async def assign_capacity(self, workspace_id: str, capacity_id: str, previous_capacity_id: str | None = None) -> None:
        """
        Assign a capacity, unassigning the previous one first when it changes.
        """
        pass


class ItemManager(Manager):
    """
    Interface for managing Fabric workspace items.
    """

    @abstractmethod
    async def create(self, workspace_id: str, kind: ItemKind, display_name: str, description: str = "") -> FabricItemInfo:
        """
        Create an item, waiting for long-running creation where the API defers it.
        """
        pass

    @abstractmethod
    async def get(self, workspace_id: str, kind: ItemKind, item_id: str) -> FabricItemInfo | None:
        """
        Get an item, or None if it no longer exists.
        """
        pass

    @abstractmethod
    async def update(self, workspace_id: str, kind: ItemKind, item_id: str, display_name: str, description: str) -> None:
        """
        Update the item properties.
        """
        pass

    @abstractmethod
    async def delete(self, workspace_id: str, kind: ItemKind, item_id: str) -> None:
        """
        Delete the item.
        """
        pass


# ---------------------------------------------------------------------------- #
# ---------------------------------------------------------------------------- #
# ---------------------------------------------------------------------------- #


class ProviderParams:
    """
    Provider configuration container with parsing and validation capabilities.
    """

    PLACEHOLDER_PATTERN = re.compile(r"\{env:([A-Za-z_][A-Za-z0-9_]*)\}")

    def __init__(self, config_file_absolute_path: str, logger: logging.Logger | None = None):
        """
        Initialize ProviderParams by parsing the configuration file.

        Args:
            config_file_absolute_path: Absolute path to a JSON or YAML configuration file

        Raises:
            FileNotFoundError: If the config file doesn't exist
            json.JSONDecodeError: If the JSON is malformed
            yaml.YAMLError: If the YAML is malformed
            ValueError: If required fields are missing or placeholders cannot be resolved
        """
        self.logger = logger or logging.getLogger(__name__)

        try:
            self.config_data = self._load_and_process_config(config_file_absolute_path)
            self.common = self._parse_common_params(self.config_data["common"])

        except FileNotFoundError:
            self.logger.error(f"Configuration file not found: {config_file_absolute_path}")
            raise

        except (json.JSONDecodeError, yaml.YAMLError) as e:
            self.logger.error(f"Invalid configuration file: {e}")
            raise

        except (KeyError, TypeError, AttributeError) as e:
            self.logger.error(f"Missing required field in configuration: {e}")
            msg = f"Missing required field in configuration: {e}"
            raise ValueError(msg) from e

    def validate(self) -> bool:
        """
        Validate the provider parameters.

        Returns:
            bool: True if all parameters are valid, False otherwise
        """
        return self._validate_credential_params() and self._validate_endpoint_params() and self._validate_http_params() and self._validate_polling_params() and self._validate_lakehouse_params()

    def to_pretty_json(self) -> str:
        """
        Return the substituted configuration with secrets masked.
        """
        return json.dumps(self._mask_secrets(self.config_data), indent=2, ensure_ascii=False)

    # ---------------------------------------------------------------------------- #

    def _mask_secrets(self, value: Any) -> Any:
        if isinstance(value, dict):
            return {key: "***" if key in ("clientSecret", "password") else self._mask_secrets(val) for key, val in value.items()}
        if isinstance(value, list):
            return [self._mask_secrets(item) for item in value]
        return value

    def _replace_placeholders_in_value(self, value: Any) -> Any:
        """
        Replace ``{env:NAME}`` placeholders in a value (string, dict, list, or primitive).

        Raises:
            ValueError: If a referenced environment variable is not set
        """
        if isinstance(value, str):

            def resolve(match: re.Match) -> str:
                name = match.group(1)
                resolved = os.getenv(name)
                if resolved is None:
                    raise ValueError(f"Environment variable '{name}' referenced in configuration is not set")  # noqa: EM102
                self.logger.debug(f"Replaced placeholder for environment variable {name}")
                return resolved

            return self.PLACEHOLDER_PATTERN.sub(resolve, value)

        elif isinstance(value, dict):
            return {key: self._replace_placeholders_in_value(val) for key, val in value.items()}

        elif isinstance(value, list):
            return [self._replace_placeholders_in_value(item) for item in value]

        else:
            return value

    def _load_and_process_config(self, config_file_absolute_path: str) -> dict[str, Any]:
        """
        Load configuration from file and replace environment placeholders.
        """
        with open(config_file_absolute_path, encoding="utf-8") as file:
            if config_file_absolute_path.endswith((".yaml", ".yml")):
                config_data = yaml.safe_load(file)
            else:
                config_data = json.load(file)
        return self._replace_placeholders_in_value(config_data)

    def _validate_credential_params(self) -> bool:
        """Validate credential parameters."""
        credential = self.common.credential
        if not credential.client_id or not credential.client_secret or not credential.tenant_id:
            self.logger.error(f"clientId: {credential.client_id}, tenantId: {credential.tenant_id}, or clientSecret cannot be empty")
            return False
        if bool(credential.username) != bool(credential.password):
            self.logger.error("username and password must be provided together")
            return False
        return True

    def _validate_endpoint_params(self) -> bool:
        """Validate endpoint parameters."""
        for name, value in (("fabric", self.common.endpoint.fabric), ("powerBi", self.common.endpoint.power_bi), ("login", self.common.endpoint.login)):
            if not value:
                self.logger.error(f"{name} endpoint cannot be empty: {value}")
                return False
            if not value.startswith("https://"):
                self.logger.error(f"{name} endpoint must be a valid HTTPS URL: {value}")
                return False
        return True

    def _validate_http_params(self) -> bool:
        """Validate HTTP parameters."""
        if self.common.http.timeout_seconds <= 0:
            self.logger.error(f"http.timeoutSeconds must be greater than 0: {self.common.http.timeout_seconds}")
            return False
        retry = self.common.http.retry
        if retry is not None:
            if retry.max_attempts <= 0:
                self.logger.error(f"http.retry.maxAttempts must be greater than 0: {retry.max_attempts}")
                return False
            if retry.initial_delay_seconds < 0 or retry.max_delay_seconds < retry.initial_delay_seconds:
                self.logger.error(f"http.retry delays are invalid: initial={retry.initial_delay_seconds}, max={retry.max_delay_seconds}")
                return False
        return True

    def _validate_polling_params(self) -> bool:
        """Validate polling parameters."""
        polling = self.common.polling
        if polling.interval_seconds < 0:
            self.logger.error(f"polling.intervalSeconds cannot be negative: {polling.interval_seconds}")
            return False
        if polling.max_attempts <= 0:
            self.logger.error(f"polling.maxAttempts must be greater than 0: {polling.max_attempts}")
            return False
        if polling.timeout_seconds <= 0:
            self.logger.error(f"polling.timeoutSeconds must be greater than 0: {polling.timeout_seconds}")
            return False
        return True

    def _validate_lakehouse_params(self) -> bool:
        """Validate lakehouse parameters."""
        if self.common.lakehouse.settle_delay_seconds < 0:
            self.logger.error(f"lakehouse.settleDelaySeconds cannot be negative: {self.common.lakehouse.settle_delay_seconds}")
            return False
        return True

    def _parse_common_params(self, data: dict[str, Any]) -> CommonParams:
        """Parse common parameters."""
        return CommonParams(
            credential=self._parse_credential_params(data["credential"]),
            endpoint=self._parse_endpoint_params(data.get("endpoint") or {}),
            http=self._parse_http_params(data.get("http") or {}),
            polling=self._parse_polling_params(data.get("polling") or {}),
            lakehouse=self._parse_lakehouse_params(data.get("lakehouse") or {}),
            token_file_path=data.get("tokenFilePath") or None,
        )

    def _parse_credential_params(self, data: dict[str, Any]) -> Credential:
        """Parse credential parameters."""
        return Credential(
            client_id=data["clientId"],
            client_secret=data["clientSecret"],
            tenant_id=data["tenantId"],
            username=data.get("username"),
            password=data.get("password"),
        )

    def _parse_endpoint_params(self, data: dict[str, Any]) -> EndpointParams:
        """Parse endpoint parameters."""
        return EndpointParams(
            fabric=data.get("fabric", FABRIC_API_ENDPOINT).rstrip("/"),
            power_bi=data.get("powerBi", POWER_BI_API_ENDPOINT).rstrip("/"),
            login=data.get("login", LOGIN_ENDPOINT).rstrip("/"),
        )

    def _parse_http_params(self, data: dict[str, Any]) -> HttpParams:
        """Parse HTTP parameters."""
        retry = None
        if data.get("retry") is not None:
            retry_data = data["retry"]
            retry = RetryParams(
                max_attempts=int(retry_data.get("maxAttempts", MAX_RETRY_ATTEMPTS)),
                initial_delay_seconds=float(retry_data.get("initialDelaySeconds", INITIAL_RETRY_DELAY_SECONDS)),
                max_delay_seconds=float(retry_data.get("maxDelaySeconds", MAX_RETRY_DELAY_SECONDS)),
            )
        return HttpParams(timeout_seconds=float(data.get("timeoutSeconds", DEFAULT_HTTP_TIMEOUT_SECONDS)), retry=retry)

    def _parse_polling_params(self, data: dict[str, Any]) -> PollingParams:
        """Parse polling parameters."""
        return PollingParams(
            interval_seconds=float(data.get("intervalSeconds", DEFAULT_POLL_INTERVAL_SECONDS)),
            max_attempts=int(data.get("maxAttempts", DEFAULT_POLL_MAX_ATTEMPTS)),
            timeout_seconds=float(data.get("timeoutSeconds", DEFAULT_POLL_TIMEOUT_SECONDS)),
        )

    def _parse_lakehouse_params(self, data: dict[str, Any]) -> LakehouseParams:
        """Parse lakehouse parameters."""
        return LakehouseParams(settle_delay_seconds=float(data.get("settleDelaySeconds", DEFAULT_LAKEHOUSE_SETTLE_DELAY_SECONDS)))
