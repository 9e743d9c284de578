# SPDX-FileCopyrightText: 2025-present Raki Rahman <mdrakiburrahman@gmail.com>
#
# SPDX-License-Identifier: MIT

import logging
import os
import time
from abc import ABC, abstractmethod

from fabric_provider.client.fabric_api_client import FabricApiClient
from fabric_provider.identity.token_credential import ClientSecretTokenStore, StaticTokenStore
from fabric_provider.manager.fabric.domain import FabricDomainWorkspaceAssignmentManager
from fabric_provider.manager.fabric.items import FabricItemManager
from fabric_provider.manager.fabric.model import FabricSemanticModelUserAssignmentManager
from fabric_provider.manager.fabric.workspace import FabricWorkspaceManager
from fabric_provider.manager.fabric.workspace_users import FabricWorkspaceUserAssignmentManager
from fabric_provider.operations.operation_interfaces import (
    ExponentialBackoffRetryPolicy,
    NoRetryPolicy,
    OperationContext,
    ProviderParams,
    RetryPolicy,
    TokenStore,
)

STATIC_TOKEN_ENV_VAR = "FABRIC_TOKEN"
STATIC_TOKEN_LIFETIME_SECONDS = 60 * 60


class ManagementFactory(ABC):
    """
    Factory for creating the API client and the resource managers.
    """

    @abstractmethod
    def create_token_store(self) -> TokenStore:
        """
        Create a Token Store instance.
        """
        pass

    @abstractmethod
    def create_retry_policy(self) -> RetryPolicy:
        """
        Create a Retry Policy instance.
        """
        pass

    @abstractmethod
    def create_api_client(self) -> FabricApiClient:
        """
        Create a Fabric API Client instance.
        """
        pass

    @abstractmethod
    def create_fabric_workspace_manager(self) -> FabricWorkspaceManager:
        """
        Create a Fabric Workspace Manager instance.
        """
        pass

    @abstractmethod
    def create_fabric_item_manager(self) -> FabricItemManager:
        """
        Create a Fabric Item Manager instance.
        """
        pass

    @abstractmethod
    def create_workspace_user_assignment_manager(self) -> FabricWorkspaceUserAssignmentManager:
        """
        Create a Workspace User Assignment Manager instance.
        """
        pass

    @abstractmethod
    def create_semantic_model_user_assignment_manager(self) -> FabricSemanticModelUserAssignmentManager:
        """
        Create a Semantic Model User Assignment Manager instance.
        """
        pass

    @abstractmethod
    def create_domain_workspace_assignment_manager(self) -> FabricDomainWorkspaceAssignmentManager:
        """
        Create a Domain Workspace Assignment Manager instance.
        """
        pass


class ProviderManagementFactory(ManagementFactory):
    """
    Builds every component from one ProviderParams.

    The token store and the API client are created once and shared, so all
    managers refresh the same cached token.
    """

    def __init__(self, provider_params: ProviderParams, context: OperationContext | None = None):
        """
        Initialize the factory with provider parameters.

        Args:
            provider_params: The parsed provider configuration
            context: Optional deadline and cancellation signal handed to every manager
        """
        self.provider_params = provider_params
        self.context = context
        self.logger = logging.getLogger(__name__)
        self._token_store: TokenStore | None = None
        self._api_client: FabricApiClient | None = None

    def create_token_store(self) -> TokenStore:
        if self._token_store is None:
            static_token = os.getenv(STATIC_TOKEN_ENV_VAR, "").strip()
            if static_token:
                self.logger.info(f"Using static access token from {STATIC_TOKEN_ENV_VAR}")
                self._token_store = StaticTokenStore(static_token, int(time.time()) + STATIC_TOKEN_LIFETIME_SECONDS)
            else:
                common = self.provider_params.common
                self._token_store = ClientSecretTokenStore(
                    common.credential,
                    token_file_path=common.token_file_path,
                    login_endpoint=common.endpoint.login,
                    timeout_seconds=common.http.timeout_seconds,
                )
        return self._token_store

    def create_retry_policy(self) -> RetryPolicy:
        retry = self.provider_params.common.http.retry
        if retry is None:
            return NoRetryPolicy()
        return ExponentialBackoffRetryPolicy(
            max_attempts=retry.max_attempts,
            max_delay_seconds=retry.max_delay_seconds,
            initial_delay_seconds=retry.initial_delay_seconds,
            logger=self.logger,
        )

    def create_api_client(self) -> FabricApiClient:
        if self._api_client is None:
            common = self.provider_params.common
            self._api_client = FabricApiClient(common, self.create_token_store(), self.create_retry_policy())
        return self._api_client

    def create_fabric_workspace_manager(self) -> FabricWorkspaceManager:
        return FabricWorkspaceManager(self.provider_params.common, self.create_api_client(), self.context)

    def create_fabric_item_manager(self) -> FabricItemManager:
        return FabricItemManager(self.provider_params.common, self.create_api_client(), self.context)

    def create_workspace_user_assignment_manager(self) -> FabricWorkspaceUserAssignmentManager:
        return FabricWorkspaceUserAssignmentManager(self.provider_params.common, self.create_api_client(), self.context)

    def create_semantic_model_user_assignment_manager(self) -> FabricSemanticModelUserAssignmentManager:
        return FabricSemanticModelUserAssignmentManager(self.provider_params.common, self.create_api_client(), self.context)

    def create_domain_workspace_assignment_manager(self) -> FabricDomainWorkspaceAssignmentManager:
        return FabricDomainWorkspaceAssignmentManager(self.provider_params.common, self.create_api_client(), self.context)
