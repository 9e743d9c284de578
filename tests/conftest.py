from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import pytest
from requests import Request, Response

from fabric_provider.operations.operation_interfaces import (
    CommonParams,
    Credential,
    EndpointParams,
    HttpParams,
    LakehouseParams,
    PollingParams,
)


def _response(
    status_code: int,
    body: Any = None,
    headers: dict[str, str] | None = None,
    raw: bytes | None = None,
    method: str = "GET",
    url: str = "https://api.fabric.microsoft.com/v1/test",
) -> Response:
    response = Response()
    response.status_code = status_code
    if raw is not None:
        response._content = raw
    elif body is not None:
        response._content = json.dumps(body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    else:
        response._content = b""
    response.headers.update(headers or {})
    response.encoding = "utf-8"
    response.request = Request(method, url).prepare()
    return response


@pytest.fixture
def make_response() -> Callable[..., Response]:
    return _response


@pytest.fixture
def common_params() -> CommonParams:
    return CommonParams(
        credential=Credential(client_id="client", client_secret="secret", tenant_id="tenant"),
        endpoint=EndpointParams(),
        http=HttpParams(),
        polling=PollingParams(),
        lakehouse=LakehouseParams(),
    )
