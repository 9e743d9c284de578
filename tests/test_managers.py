from __future__ import annotations

import asyncio
import json
from typing import Any

import pytest

from fabric_provider.manager.fabric.domain import FabricDomainWorkspaceAssignmentManager
from fabric_provider.manager.fabric.items import FabricItemManager
from fabric_provider.manager.fabric.model import FabricSemanticModelUserAssignmentManager
from fabric_provider.manager.fabric.workspace import SHARED_CAPACITY_ID, FabricWorkspaceManager
from fabric_provider.manager.fabric.workspace_users import FabricWorkspaceUserAssignmentManager
from fabric_provider.operations.errors import DuplicateIdentityError, NotFoundError, RequestError
from fabric_provider.operations.operation_interfaces import (
    ApiClient,
    AssignmentChange,
    CommonParams,
    ItemKind,
    OperationContext,
    ReconcileState,
    SemanticModelUser,
    WorkspaceUser,
)

POWER_BI = "https://api.powerbi.com"
FABRIC = "https://api.fabric.microsoft.com"


class RecordingApiClient(ApiClient):
    """Records every verb call and answers from a per-URL script."""

    def __init__(self, common_params: CommonParams, responses: dict[tuple[str, str], Any] | None = None):
        super().__init__(common_params)
        self.calls: list[tuple[str, str, Any]] = []
        self.responses = responses or {}

    def _answer(self, method: str, url: str, body: Any = None) -> Any:
        self.calls.append((method, url, body))
        answer = self.responses.get((method, url))
        if isinstance(answer, Exception):
            raise answer
        return answer if answer is not None else {}

    def get(self, url: str, context: OperationContext | None = None) -> dict[str, Any]:
        return self._answer("GET", url)

    def post(self, url: str, body: dict[str, Any] | None = None, context: OperationContext | None = None) -> dict[str, Any]:
        return self._answer("POST", url, body)

    def post_bytes(self, url: str, body: bytes, context: OperationContext | None = None) -> dict[str, Any] | None:
        self._answer("POST_BYTES", url, json.loads(body))
        return None

    def put(self, url: str, body: dict[str, Any] | None = None, context: OperationContext | None = None) -> dict[str, Any]:
        return self._answer("PUT", url, body)

    def patch(self, url: str, body: dict[str, Any] | None = None, context: OperationContext | None = None) -> dict[str, Any]:
        return self._answer("PATCH", url, body)

    def patch_bytes(self, url: str, body: bytes, context: OperationContext | None = None) -> dict[str, Any]:
        return self._answer("PATCH_BYTES", url, body)

    def delete(self, url: str, context: OperationContext | None = None) -> None:
        self._answer("DELETE", url)

    def post_with_operation_check(self, url: str, body: dict[str, Any] | None = None, context: OperationContext | None = None) -> dict[str, Any]:
        return self._answer("POST_LRO", url, body)


def test_workspace_user_role_change_issues_one_update(common_params: CommonParams) -> None:
    client = RecordingApiClient(common_params)
    manager = FabricWorkspaceUserAssignmentManager(common_params, client)

    state = asyncio.run(
        manager.update(
            "ws-1",
            desired=[WorkspaceUser(email="a@x.com", role="Admin")],
            current=[WorkspaceUser(email="a@x.com", role="Member")],
        )
    )

    assert state is ReconcileState.CONVERGED
    assert client.calls == [
        (
            "PUT",
            f"{POWER_BI}/v1.0/myorg/groups/ws-1/users",
            {"identifier": "a@x.com", "groupUserAccessRight": "Admin", "principalType": "User"},
        )
    ]


def test_workspace_user_update_orders_calls_and_skips_unchanged(common_params: CommonParams) -> None:
    client = RecordingApiClient(common_params)
    manager = FabricWorkspaceUserAssignmentManager(common_params, client)

    asyncio.run(
        manager.update(
            "ws-1",
            desired=[WorkspaceUser("keep@x.com", "Viewer"), WorkspaceUser("new@x.com", "Contributor")],
            current=[WorkspaceUser("old@x.com", "Admin"), WorkspaceUser("keep@x.com", "Viewer")],
        )
    )

    assert [(method, url) for method, url, _ in client.calls] == [
        ("POST", f"{POWER_BI}/v1.0/myorg/groups/ws-1/users"),
        ("DELETE", f"{POWER_BI}/v1.0/myorg/groups/ws-1/users/old@x.com"),
    ]


def test_workspace_user_create_rejects_duplicates_before_any_call(common_params: CommonParams) -> None:
    client = RecordingApiClient(common_params)
    manager = FabricWorkspaceUserAssignmentManager(common_params, client)

    with pytest.raises(DuplicateIdentityError):
        asyncio.run(manager.create("ws-1", [WorkspaceUser("a@x.com", "Admin"), WorkspaceUser("a@x.com", "Viewer")]))
    assert client.calls == []


def test_execute_reconciles_resources_and_aggregates_failures(common_params: CommonParams) -> None:
    failing_url = f"{POWER_BI}/v1.0/myorg/groups/ws-bad/users"
    client = RecordingApiClient(common_params, {("POST", failing_url): RequestError(403, "forbidden", failing_url, "POST")})
    manager = FabricWorkspaceUserAssignmentManager(common_params, client)

    changes = [
        AssignmentChange("ws-1", desired=[WorkspaceUser("a@x.com", "Admin")]),
        AssignmentChange("ws-2", desired=None, current=[WorkspaceUser("b@x.com", "Viewer")]),
        AssignmentChange("ws-bad", desired=[WorkspaceUser("c@x.com", "Admin")]),
    ]
    with pytest.raises(RuntimeError, match="ws-bad") as excinfo:
        asyncio.run(manager.execute(changes))

    assert "ws-1" not in str(excinfo.value)
    called = {(method, url) for method, url, _ in client.calls}
    assert ("POST", f"{POWER_BI}/v1.0/myorg/groups/ws-1/users") in called
    assert ("DELETE", f"{POWER_BI}/v1.0/myorg/groups/ws-2/users/b@x.com") in called


def test_semantic_model_removal_sets_access_to_none(common_params: CommonParams) -> None:
    client = RecordingApiClient(common_params)
    manager = FabricSemanticModelUserAssignmentManager(common_params, client)
    parent_id = manager.parent_id("ws-1", "model-1")

    asyncio.run(
        manager.update(
            parent_id,
            desired=[SemanticModelUser("a@x.com", "Read", "Group")],
            current=[SemanticModelUser("a@x.com", "Read", "User"), SemanticModelUser("gone@x.com", "ReadWrite")],
        )
    )

    url = f"{POWER_BI}/v1.0/myorg/workspaces/ws-1/semanticModels/model-1/users"
    assert client.calls == [
        ("PUT", url, {"identifier": "a@x.com", "semanticModelUserAccessRight": "Read", "principalType": "Group"}),
        ("PUT", url, {"identifier": "gone@x.com", "semanticModelUserAccessRight": "None", "principalType": "User"}),
    ]


def test_semantic_model_parent_id_must_name_both_ids(common_params: CommonParams) -> None:
    manager = FabricSemanticModelUserAssignmentManager(common_params, RecordingApiClient(common_params))

    with pytest.raises(ValueError):
        manager.users_url("ws-only")


def test_domain_assignment_sends_bulk_batches(common_params: CommonParams) -> None:
    client = RecordingApiClient(common_params)
    manager = FabricDomainWorkspaceAssignmentManager(common_params, client)

    state = asyncio.run(manager.update("domain-1", desired=["w1", "w2", "w3"], current=["w3", "w4"]))

    assert state is ReconcileState.CONVERGED
    assert client.calls == [
        ("POST_BYTES", f"{FABRIC}/v1/admin/domains/domain-1/assignWorkspaces", {"workspacesIds": ["w1", "w2"]}),
        ("POST_BYTES", f"{FABRIC}/v1/admin/domains/domain-1/unassignWorkspaces", {"workspacesIds": ["w4"]}),
    ]


def test_domain_delete_unassigns_everything(common_params: CommonParams) -> None:
    client = RecordingApiClient(common_params)
    manager = FabricDomainWorkspaceAssignmentManager(common_params, client)

    asyncio.run(manager.delete("domain-1", ["w1", "w2"]))

    assert client.calls == [("POST_BYTES", f"{FABRIC}/v1/admin/domains/domain-1/unassignWorkspaces", {"workspacesIds": ["w1", "w2"]})]


def test_domain_member_update_reassigns_workspace(common_params: CommonParams) -> None:
    client = RecordingApiClient(common_params)
    manager = FabricDomainWorkspaceAssignmentManager(common_params, client)

    manager.update_member("domain-1", "w1")

    assert client.calls == [("POST_BYTES", f"{FABRIC}/v1/admin/domains/domain-1/assignWorkspaces", {"workspacesIds": ["w1"]})]


def test_workspace_create_assigns_capacity(common_params: CommonParams) -> None:
    client = RecordingApiClient(
        common_params,
        {("POST", f"{FABRIC}/v1/workspaces"): {"id": "ws-1", "displayName": "Sales", "description": "", "type": "Workspace"}},
    )
    manager = FabricWorkspaceManager(common_params, client)

    workspace = asyncio.run(manager.create("Sales", capacity_id="cap-1"))

    assert workspace.id == "ws-1"
    assert workspace.capacity_id == "cap-1"
    assert client.calls[1] == ("POST", f"{POWER_BI}/v1.0/myorg/groups/ws-1/AssignToCapacity", {"capacityId": "cap-1"})


def test_workspace_capacity_change_unassigns_first(common_params: CommonParams) -> None:
    client = RecordingApiClient(common_params)
    manager = FabricWorkspaceManager(common_params, client)

    asyncio.run(manager.assign_capacity("ws-1", "cap-2", previous_capacity_id="cap-1"))
    asyncio.run(manager.assign_capacity("ws-1", "cap-2", previous_capacity_id="cap-2"))

    assert [body for _, _, body in client.calls] == [{"capacityId": SHARED_CAPACITY_ID}, {"capacityId": "cap-2"}]


def test_workspace_get_returns_none_when_gone(common_params: CommonParams) -> None:
    url = f"{FABRIC}/v1/workspaces/ws-1"
    client = RecordingApiClient(common_params, {("GET", url): NotFoundError("", url, "GET")})

    assert asyncio.run(FabricWorkspaceManager(common_params, client).get("ws-1")) is None


def test_eventstream_creation_waits_for_operation(common_params: CommonParams) -> None:
    url = f"{FABRIC}/v1/workspaces/ws-1/eventstreams"
    client = RecordingApiClient(common_params, {("POST_LRO", url): {"id": "es-1", "displayName": "stream", "type": "Eventstream"}})

    item = asyncio.run(FabricItemManager(common_params, client).create("ws-1", ItemKind.EVENTSTREAM, "stream", "events"))

    assert item.id == "es-1"
    assert item.workspace_id == "ws-1"
    assert client.calls == [("POST_LRO", url, {"displayName": "stream", "description": "events"})]


def test_lakehouse_creation_waits_before_read_back(monkeypatch: pytest.MonkeyPatch, common_params: CommonParams) -> None:
    url = f"{FABRIC}/v1/workspaces/ws-1/lakehouses"
    client = RecordingApiClient(
        common_params,
        {
            ("POST", url): {"id": "lh-1", "displayName": "bronze"},
            ("GET", f"{url}/lh-1"): {"id": "lh-1", "displayName": "bronze", "type": "Lakehouse", "workspaceId": "ws-1"},
        },
    )
    delays: list[float] = []

    async def fake_sleep(seconds: float) -> None:
        delays.append(seconds)

    monkeypatch.setattr("fabric_provider.manager.fabric.items.asyncio.sleep", fake_sleep)

    item = asyncio.run(FabricItemManager(common_params, client).create("ws-1", ItemKind.LAKEHOUSE, "bronze"))

    assert item.type == "Lakehouse"
    assert delays == [15]
    assert [method for method, _, _ in client.calls] == ["POST", "GET"]


def test_item_update_and_delete(common_params: CommonParams) -> None:
    client = RecordingApiClient(common_params)
    manager = FabricItemManager(common_params, client)
    url = f"{FABRIC}/v1/workspaces/ws-1/mlExperiments/exp-1"

    asyncio.run(manager.update("ws-1", ItemKind.ML_EXPERIMENT, "exp-1", "renamed", "desc"))
    asyncio.run(manager.delete("ws-1", ItemKind.ML_EXPERIMENT, "exp-1"))

    assert client.calls == [("PATCH", url, {"displayName": "renamed", "description": "desc"}), ("DELETE", url, None)]
