from __future__ import annotations

import threading
import time
from collections import deque
from typing import Any

import pytest
from requests import Response

from fabric_provider.client.fabric_api_client import FabricApiClient
from fabric_provider.client.fabric_operation_poller import FabricOperationPoller
from fabric_provider.identity.token_credential import StaticTokenStore
from fabric_provider.operations.errors import DecodeError, OperationCancelledError, OperationTimeoutError
from fabric_provider.operations.operation_interfaces import CommonParams, OperationContext, OperationHandle

CREATE_URL = "https://api.fabric.microsoft.com/v1/workspaces/ws-1/eventstreams"
RESULT_URL = "https://api.fabric.microsoft.com/v1/operations/op123/result"


class FakeTransport:
    def __init__(self, responses: list[Response]):
        self.responses = deque(responses)
        self.calls: list[tuple[str, str]] = []

    def __call__(self, method: str, url: str, **kwargs: Any) -> Response:
        self.calls.append((method, url))
        return self.responses.popleft()


class ScriptedClient:
    """Minimal client answering result GETs from a script."""

    def __init__(self, bodies: list[dict[str, Any]], on_get=None):
        self.bodies = deque(bodies)
        self.urls: list[str] = []
        self.on_get = on_get

    def get(self, url: str, context: OperationContext | None = None) -> dict[str, Any]:
        self.urls.append(url)
        if self.on_get is not None:
            self.on_get(len(self.urls))
        return self.bodies.popleft() if self.bodies else {}


@pytest.fixture
def sleeps(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    recorded: list[float] = []
    monkeypatch.setattr("fabric_provider.client.fabric_operation_poller.time.sleep", recorded.append)
    return recorded


def test_post_with_operation_check_polls_until_result_id(monkeypatch: pytest.MonkeyPatch, common_params: CommonParams, make_response, sleeps: list[float]) -> None:
    transport = FakeTransport(
        [
            make_response(202, headers={"x-ms-operation-id": "op123"}, method="POST"),
            make_response(200, {}),
            make_response(200, {}),
            make_response(200, {"id": "final-1"}),
        ]
    )
    monkeypatch.setattr("fabric_provider.client.fabric_api_client.requests.request", transport)
    client = FabricApiClient(common_params, StaticTokenStore("token", int(time.time()) + 3600))

    result = client.post_with_operation_check(CREATE_URL, {"displayName": "stream"})

    assert result == {"id": "final-1"}
    assert transport.calls == [("POST", CREATE_URL), ("GET", RESULT_URL), ("GET", RESULT_URL), ("GET", RESULT_URL)]
    assert sleeps == [2, 2]


def test_empty_id_is_not_completion(common_params: CommonParams, sleeps: list[float]) -> None:
    client = ScriptedClient([{"id": ""}, {"status": "Running"}, {"id": "done", "displayName": "stream"}])
    poller = FabricOperationPoller(common_params, client)

    assert poller.wait(OperationHandle("op123")) == {"id": "done", "displayName": "stream"}
    assert client.urls == [RESULT_URL] * 3


def test_polling_stops_after_max_attempts(common_params: CommonParams, sleeps: list[float]) -> None:
    common_params.polling.max_attempts = 4
    client = ScriptedClient([])
    poller = FabricOperationPoller(common_params, client)

    with pytest.raises(OperationTimeoutError, match="op123"):
        poller.wait(OperationHandle("op123"))
    assert len(client.urls) == 4
    assert len(sleeps) == 3


def test_polling_stops_at_elapsed_ceiling(monkeypatch: pytest.MonkeyPatch, common_params: CommonParams) -> None:
    common_params.polling.timeout_seconds = 5
    clock = {"now": 100.0}

    def fake_sleep(seconds: float) -> None:
        clock["now"] += seconds

    monkeypatch.setattr("fabric_provider.client.fabric_operation_poller.time.monotonic", lambda: clock["now"])
    monkeypatch.setattr("fabric_provider.client.fabric_operation_poller.time.sleep", fake_sleep)
    client = ScriptedClient([])
    poller = FabricOperationPoller(common_params, client)

    with pytest.raises(OperationTimeoutError):
        poller.wait(OperationHandle("op123"))
    # Polls at t=0, 2 and 4; the last sleep is clipped to the 5 second ceiling.
    assert len(client.urls) == 3
    assert clock["now"] == 105.0


def test_caller_cancellation_stops_polling(common_params: CommonParams) -> None:
    common_params.polling.interval_seconds = 0
    cancel_event = threading.Event()

    def cancel_on_second_poll(count: int) -> None:
        if count == 2:
            cancel_event.set()

    client = ScriptedClient([], on_get=cancel_on_second_poll)
    poller = FabricOperationPoller(common_params, client)

    with pytest.raises(OperationCancelledError):
        poller.wait(OperationHandle("op123"), OperationContext(cancel_event=cancel_event))
    assert len(client.urls) == 2


def test_non_string_result_id_raises_decode_error(common_params: CommonParams, sleeps: list[float]) -> None:
    poller = FabricOperationPoller(common_params, ScriptedClient([{"id": 42}]))

    with pytest.raises(DecodeError):
        poller.wait(OperationHandle("op123"))


def test_attempts_is_finite(common_params: CommonParams, sleeps: list[float]) -> None:
    common_params.polling.max_attempts = 3
    poller = FabricOperationPoller(common_params, ScriptedClient([]))

    assert list(poller.attempts()) == [1, 2, 3]
    assert sleeps == [2, 2]
