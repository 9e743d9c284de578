# SPDX-FileCopyrightText: 2025-present Raki Rahman <mdrakiburrahman@gmail.com>
#
# SPDX-License-Identifier: MIT

from typing import Any
from urllib.parse import quote

from fabric_provider.manager.fabric.assignment import FabricAssignmentManager
from fabric_provider.operations.operation_interfaces import WorkspaceUser


class FabricWorkspaceUserAssignmentManager(FabricAssignmentManager[WorkspaceUser]):
    """Assigns users to workspaces through the Power BI groups API."""

    resource_kind = "workspace users"

    def identity_key(self, member: WorkspaceUser) -> str:
        return member.email

    def equals(self, desired: WorkspaceUser, current: WorkspaceUser) -> bool:
        return desired.role == current.role and desired.principal_type == current.principal_type

    def users_url(self, workspace_id: str) -> str:
        return f"{self.common_params.endpoint.power_bi}/v1.0/myorg/groups/{workspace_id}/users"

    def add_member(self, parent_id: str, member: WorkspaceUser) -> Any:
        return self.api_client.post(self.users_url(parent_id), self._body(member), self.context)

    def update_member(self, parent_id: str, member: WorkspaceUser) -> Any:
        return self.api_client.put(self.users_url(parent_id), self._body(member), self.context)

    def remove_member(self, parent_id: str, member: WorkspaceUser) -> Any:
        return self.api_client.delete(f"{self.users_url(parent_id)}/{quote(member.email, safe='@')}", self.context)

    @staticmethod
    def _body(member: WorkspaceUser) -> dict[str, str]:
        return {
            "identifier": member.email,
            "groupUserAccessRight": member.role,
            "principalType": member.principal_type,
        }
