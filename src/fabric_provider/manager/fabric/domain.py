# SPDX-FileCopyrightText: 2025-present Raki Rahman <mdrakiburrahman@gmail.com>
#
# SPDX-License-Identifier: MIT

import json
from typing import Any

from fabric_provider.manager.fabric.assignment import FabricAssignmentManager
from fabric_provider.operations.operation_interfaces import ReconcilePlan, ReconcileState
from fabric_provider.reconcile.set_reconciler import ReconcileExecutor


class FabricDomainWorkspaceAssignmentManager(FabricAssignmentManager[str]):
    """
    Assigns workspaces to a domain through the Fabric admin API.

    Members are workspace ids. Each batch goes out as a single bulk call.
    """

    resource_kind = "domain workspaces"

    def identity_key(self, member: str) -> str:
        return member

    def domain_url(self, domain_id: str) -> str:
        return f"{self.common_params.endpoint.fabric}/v1/admin/domains/{domain_id}"

    def apply(self, executor: ReconcileExecutor[str], parent_id: str, plan: ReconcilePlan[str]) -> ReconcileState:
        return executor.apply_bulk(
            plan,
            lambda workspace_ids: self.assign_workspaces(parent_id, workspace_ids),
            lambda workspace_ids: self.unassign_workspaces(parent_id, workspace_ids),
        )

    def assign_workspaces(self, domain_id: str, workspace_ids: list[str]) -> Any:
        return self.api_client.post_bytes(f"{self.domain_url(domain_id)}/assignWorkspaces", self._body(workspace_ids), self.context)

    def unassign_workspaces(self, domain_id: str, workspace_ids: list[str]) -> Any:
        return self.api_client.post_bytes(f"{self.domain_url(domain_id)}/unassignWorkspaces", self._body(workspace_ids), self.context)

    def add_member(self, parent_id: str, member: str) -> Any:
        return self.assign_workspaces(parent_id, [member])

    def update_member(self, parent_id: str, member: str) -> Any:
        # Assignment carries no fields; re-assigning is idempotent.
        return self.add_member(parent_id, member)

    def remove_member(self, parent_id: str, member: str) -> Any:
        return self.unassign_workspaces(parent_id, [member])

    @staticmethod
    def _body(workspace_ids: list[str]) -> bytes:
        return json.dumps({"workspacesIds": workspace_ids}).encode("utf-8")
