# SPDX-FileCopyrightText: 2025-present Raki Rahman <mdrakiburrahman@gmail.com>
#
# SPDX-License-Identifier: MIT

import asyncio
import logging
from abc import abstractmethod
from typing import Any

from fabric_provider.operations.operation_interfaces import (
    ApiClient,
    AssignmentChange,
    AssignmentManager,
    CommonParams,
    OperationContext,
    ReconcilePlan,
    ReconcileState,
    T,
)
from fabric_provider.reconcile.set_reconciler import ReconcileExecutor, plan_reconciliation


class FabricAssignmentManager(AssignmentManager[T]):
    """
    Shared reconciliation flow for membership-style Fabric resources.

    Subclasses supply the identity key and one API call per action; the
    blocking client calls run in the default executor so several resources
    can converge at once.
    """

    resource_kind = "assignment"

    def __init__(self, common_params: CommonParams, api_client: ApiClient, context: OperationContext | None = None):
        super().__init__(common_params)
        self.api_client = api_client
        self.context = context
        self.logger = logging.getLogger(__name__)

    async def execute(self, changes: list[AssignmentChange[T]]) -> None:
        self.logger.info(f"Executing {type(self).__name__}")
        tasks = []
        for change in changes:
            if change.desired is None:
                coroutine = self.delete(change.parent_id, change.current or [])
            elif change.current is None:
                coroutine = self.create(change.parent_id, change.desired)
            else:
                coroutine = self.update(change.parent_id, change.desired, change.current)
            tasks.append(asyncio.create_task(coroutine, name=f"reconcile-{self.resource_kind}-{change.parent_id}"))

        if tasks:
            self.logger.info(f"Executing {self.resource_kind} reconciliation for {len(tasks)} resources in parallel")
            results = await asyncio.gather(*tasks, return_exceptions=True)
            errors = []
            for change, result in zip(changes, results):
                if isinstance(result, Exception):
                    error_msg = f"Failed to reconcile {self.resource_kind} for '{change.parent_id}': {result}"
                    self.logger.error(error_msg)
                    errors.append(error_msg)

            if errors:
                error = f"Failed to reconcile {self.resource_kind} for some resources: {'; '.join(errors)}"
                raise RuntimeError(error)
        else:
            self.logger.info(f"No {self.resource_kind} changes to reconcile")

        self.logger.info(f"Finished executing {type(self).__name__}")

    async def create(self, parent_id: str, desired: list[T]) -> ReconcileState:
        return await self.reconcile(parent_id, plan_reconciliation(desired, [], self.identity_key, self.equals))

    async def update(self, parent_id: str, desired: list[T], current: list[T]) -> ReconcileState:
        return await self.reconcile(parent_id, plan_reconciliation(desired, current, self.identity_key, self.equals))

    async def delete(self, parent_id: str, current: list[T]) -> ReconcileState:
        return await self.reconcile(parent_id, plan_reconciliation([], current, self.identity_key, self.equals))

    async def reconcile(self, parent_id: str, plan: ReconcilePlan[T]) -> ReconcileState:
        executor: ReconcileExecutor[T] = ReconcileExecutor(f"{self.resource_kind} '{parent_id}'", self.identity_key, self.logger)
        return await self.run_blocking(self.apply, executor, parent_id, plan)

    def apply(self, executor: ReconcileExecutor[T], parent_id: str, plan: ReconcilePlan[T]) -> ReconcileState:
        return executor.apply(
            plan,
            lambda member: self.add_member(parent_id, member),
            lambda member: self.update_member(parent_id, member),
            lambda member: self.remove_member(parent_id, member),
        )

    def equals(self, desired: T, current: T) -> bool:
        return desired == current

    @abstractmethod
    def add_member(self, parent_id: str, member: T) -> Any:
        pass

    @abstractmethod
    def update_member(self, parent_id: str, member: T) -> Any:
        pass

    @abstractmethod
    def remove_member(self, parent_id: str, member: T) -> Any:
        pass
