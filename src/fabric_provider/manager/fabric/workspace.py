# SPDX-FileCopyrightText: 2025-present Raki Rahman <mdrakiburrahman@gmail.com>
#
# SPDX-License-Identifier: MIT

import logging

from fabric_provider.operations.errors import NotFoundError
from fabric_provider.operations.operation_interfaces import (
    ApiClient,
    CommonParams,
    FabricWorkspaceInfo,
    OperationContext,
    WorkspaceManager,
)
from fabric_provider.static.transformers import ResponseDecoder

# Assigning a workspace to this id moves it back to shared capacity.
SHARED_CAPACITY_ID = "00000000-0000-0000-0000-000000000000"


class FabricWorkspaceManager(WorkspaceManager):
    """Concrete implementation of WorkspaceManager for Microsoft Fabric."""

    def __init__(self, common_params: CommonParams, api_client: ApiClient, context: OperationContext | None = None):
        """
        Initialize the Fabric workspace manager.
        """
        super().__init__(common_params)
        self.api_client = api_client
        self.context = context
        self.logger = logging.getLogger(__name__)

    def workspace_url(self, workspace_id: str | None = None) -> str:
        url = f"{self.common_params.endpoint.fabric}/v1/workspaces"
        return f"{url}/{workspace_id}" if workspace_id else url

    async def create(self, display_name: str, description: str = "", capacity_id: str | None = None) -> FabricWorkspaceInfo:
        self.logger.info(f"Creating workspace '{display_name}'")
        body = {"displayName": display_name, "description": description}
        response_data = await self.run_blocking(self.api_client.post, self.workspace_url(), body, self.context)
        workspace_info = ResponseDecoder.decode(FabricWorkspaceInfo, response_data, source=f"POST {self.workspace_url()}")
        self.logger.info(f"Successfully created workspace '{display_name}' with id {workspace_info.id}")

        if capacity_id:
            await self.assign_capacity(workspace_info.id, capacity_id)
            workspace_info.capacity_id = capacity_id

        return workspace_info

    async def get(self, workspace_id: str) -> FabricWorkspaceInfo | None:
        self.logger.info(f"Getting workspace {workspace_id}")
        try:
            response_data = await self.run_blocking(self.api_client.get, self.workspace_url(workspace_id), self.context)
        except NotFoundError:
            self.logger.warning(f"Workspace {workspace_id} no longer exists")
            return None

        return ResponseDecoder.decode(FabricWorkspaceInfo, response_data, source=self.workspace_url(workspace_id))

    async def update(self, workspace_id: str, display_name: str, description: str) -> None:
        self.logger.info(f"Updating workspace {workspace_id} properties")
        body = {"displayName": display_name, "description": description}
        await self.run_blocking(self.api_client.patch, self.workspace_url(workspace_id), body, self.context)
        self.logger.info(f"Successfully updated workspace {workspace_id}")

    async def delete(self, workspace_id: str) -> None:
        self.logger.warning(f"DELETING workspace {workspace_id}")
        await self.run_blocking(self.api_client.delete, self.workspace_url(workspace_id), self.context)

    async def assign_capacity(self, workspace_id: str, capacity_id: str, previous_capacity_id: str | None = None) -> None:
        """
        Move the workspace onto ``capacity_id``.

        A change of capacity is two calls with no rollback: if the second one
        fails the workspace is left on shared capacity.
        """
        if previous_capacity_id == capacity_id:
            self.logger.info(f"Workspace {workspace_id} is already assigned to capacity {capacity_id}")
            return

        if previous_capacity_id:
            await self.unassign_capacity(workspace_id)

        self.logger.info(f"Assigning workspace {workspace_id} to capacity {capacity_id}")
        await self.run_blocking(self.api_client.post, self._assign_url(workspace_id), {"capacityId": capacity_id}, self.context)
        self.logger.info(f"Successfully assigned workspace {workspace_id} to capacity {capacity_id}")

    async def unassign_capacity(self, workspace_id: str) -> None:
        self.logger.warning(f"REMOVING capacity assignment of workspace {workspace_id}")
        await self.run_blocking(self.api_client.post, self._assign_url(workspace_id), {"capacityId": SHARED_CAPACITY_ID}, self.context)

    def _assign_url(self, workspace_id: str) -> str:
        return f"{self.common_params.endpoint.power_bi}/v1.0/myorg/groups/{workspace_id}/AssignToCapacity"
