# SPDX-FileCopyrightText: 2025-present Raki Rahman <mdrakiburrahman@gmail.com>
#
# SPDX-License-Identifier: MIT

from typing import Any

from fabric_provider.manager.fabric.assignment import FabricAssignmentManager
from fabric_provider.operations.operation_interfaces import SemanticModelUser

NO_ACCESS = "None"


class FabricSemanticModelUserAssignmentManager(FabricAssignmentManager[SemanticModelUser]):
    """
    Assigns principals to a semantic model.

    The parent id is ``{workspace_id}/{semantic_model_id}``. There is no
    DELETE on this API: a member is removed by setting its access right to
    ``None``.
    """

    resource_kind = "semantic model users"

    def identity_key(self, member: SemanticModelUser) -> str:
        return member.email

    def equals(self, desired: SemanticModelUser, current: SemanticModelUser) -> bool:
        return desired.role == current.role and desired.principal_type == current.principal_type

    @staticmethod
    def parent_id(workspace_id: str, semantic_model_id: str) -> str:
        return f"{workspace_id}/{semantic_model_id}"

    def users_url(self, parent_id: str) -> str:
        workspace_id, _, semantic_model_id = parent_id.partition("/")
        if not workspace_id or not semantic_model_id:
            raise ValueError(f"Semantic model parent id must be 'workspace_id/semantic_model_id', got '{parent_id}'")
        return f"{self.common_params.endpoint.power_bi}/v1.0/myorg/workspaces/{workspace_id}/semanticModels/{semantic_model_id}/users"

    def add_member(self, parent_id: str, member: SemanticModelUser) -> Any:
        return self.api_client.post(self.users_url(parent_id), self._body(member.email, member.role, member.principal_type), self.context)

    def update_member(self, parent_id: str, member: SemanticModelUser) -> Any:
        return self.api_client.put(self.users_url(parent_id), self._body(member.email, member.role, member.principal_type), self.context)

    def remove_member(self, parent_id: str, member: SemanticModelUser) -> Any:
        return self.api_client.put(self.users_url(parent_id), self._body(member.email, NO_ACCESS, member.principal_type), self.context)

    @staticmethod
    def _body(identifier: str, access_right: str, principal_type: str) -> dict[str, str]:
        return {
            "identifier": identifier,
            "semanticModelUserAccessRight": access_right,
            "principalType": principal_type,
        }
