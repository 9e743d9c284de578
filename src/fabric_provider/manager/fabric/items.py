# SPDX-FileCopyrightText: 2025-present Raki Rahman <mdrakiburrahman@gmail.com>
#
# SPDX-License-Identifier: MIT

import asyncio
import logging
from typing import Any

from fabric_provider.operations.errors import NotFoundError
from fabric_provider.operations.operation_interfaces import (
    ApiClient,
    CommonParams,
    FabricItemInfo,
    ItemKind,
    ItemManager,
    OperationContext,
)
from fabric_provider.static.transformers import ResponseDecoder

LONG_RUNNING_KINDS = frozenset([ItemKind.EVENTSTREAM, ItemKind.ML_EXPERIMENT])


class FabricItemManager(ItemManager):
    """
    Creates and maintains workspace items.

    Eventstreams and ML experiments are created asynchronously by the service
    and are waited on through the operation poller. Lakehouses are created
    synchronously but are not readable straight away, so creation sleeps for
    the configured settle delay before reading the item back.
    """

    def __init__(self, common_params: CommonParams, api_client: ApiClient, context: OperationContext | None = None):
        super().__init__(common_params)
        self.api_client = api_client
        self.context = context
        self.logger = logging.getLogger(__name__)

    def item_url(self, workspace_id: str, kind: ItemKind, item_id: str | None = None) -> str:
        url = f"{self.common_params.endpoint.fabric}/v1/workspaces/{workspace_id}/{kind.value}"
        return f"{url}/{item_id}" if item_id else url

    async def create(self, workspace_id: str, kind: ItemKind, display_name: str, description: str = "") -> FabricItemInfo:
        url = self.item_url(workspace_id, kind)
        body = {"displayName": display_name, "description": description}
        self.logger.info(f"Creating {kind.value} '{display_name}' in workspace {workspace_id}")

        if kind in LONG_RUNNING_KINDS:
            result = await self.run_blocking(self.api_client.post_with_operation_check, url, body, self.context)
            item_info = self._decode(workspace_id, result, f"POST {url}")
            self.logger.info(f"Successfully created {kind.value} '{display_name}' with id {item_info.id}")
            return item_info

        response_data = await self.run_blocking(self.api_client.post, url, body, self.context)
        created = self._decode(workspace_id, response_data, f"POST {url}")

        settle_delay = self.common_params.lakehouse.settle_delay_seconds
        self.logger.info(f"Created {kind.value} {created.id}, waiting {settle_delay}s before reading it back")
        await asyncio.sleep(settle_delay)

        read_back = await self.run_blocking(self.api_client.get, self.item_url(workspace_id, kind, created.id), self.context)
        item_info = self._decode(workspace_id, read_back, self.item_url(workspace_id, kind, created.id))
        self.logger.info(f"Successfully created {kind.value} '{display_name}' with id {item_info.id}")
        return item_info

    async def get(self, workspace_id: str, kind: ItemKind, item_id: str) -> FabricItemInfo | None:
        url = self.item_url(workspace_id, kind, item_id)
        try:
            response_data = await self.run_blocking(self.api_client.get, url, self.context)
        except NotFoundError:
            self.logger.warning(f"{kind.value} {item_id} no longer exists in workspace {workspace_id}")
            return None
        return self._decode(workspace_id, response_data, url)

    async def update(self, workspace_id: str, kind: ItemKind, item_id: str, display_name: str, description: str) -> None:
        self.logger.info(f"Updating {kind.value} {item_id} in workspace {workspace_id}")
        body = {"displayName": display_name, "description": description}
        await self.run_blocking(self.api_client.patch, self.item_url(workspace_id, kind, item_id), body, self.context)

    async def delete(self, workspace_id: str, kind: ItemKind, item_id: str) -> None:
        self.logger.warning(f"DELETING {kind.value} {item_id} from workspace {workspace_id}")
        await self.run_blocking(self.api_client.delete, self.item_url(workspace_id, kind, item_id), self.context)

    @staticmethod
    def _decode(workspace_id: str, data: Any, source: str) -> FabricItemInfo:
        if isinstance(data, dict):
            data = {"workspaceId": workspace_id, **data}
        return ResponseDecoder.decode(FabricItemInfo, data, source=source)
