# SPDX-FileCopyrightText: 2025-present Raki Rahman <mdrakiburrahman@gmail.com>
#
# SPDX-License-Identifier: MIT

import logging
import operator
from collections.abc import Callable
from typing import Any, Generic

from fabric_provider.operations.errors import DuplicateIdentityError, ReconciliationError
from fabric_provider.operations.operation_interfaces import ReconcilePlan, ReconcileState, T

KeyFunc = Callable[[Any], str]

ACTION_LABELS = {"add": "ADDING", "update": "UPDATING", "remove": "REMOVING"}


def check_duplicates(desired: list[T], key: KeyFunc) -> None:
    """
    Raise if two desired members share an identity key.

    Raises:
        DuplicateIdentityError: On the first repeated key
    """
    seen: set[str] = set()
    for member in desired:
        identity = key(member)
        if identity in seen:
            raise DuplicateIdentityError(identity)
        seen.add(identity)


def difference(a: list[T], b: list[T], key: KeyFunc) -> list[T]:
    """Members of ``a`` whose key does not appear in ``b``, in ``a``'s order."""
    keys = {key(member) for member in b}
    return [member for member in a if key(member) not in keys]


def intersection(a: list[T], b: list[T], key: KeyFunc) -> list[T]:
    """Members of ``a`` whose key also appears in ``b``, in ``a``'s order."""
    keys = {key(member) for member in b}
    return [member for member in a if key(member) in keys]


def plan_reconciliation(
    desired: list[T],
    current: list[T],
    key: KeyFunc,
    equals: Callable[[T, T], bool] = operator.eq,
) -> ReconcilePlan[T]:
    """
    Compute the add, update and remove batches converging ``current`` to ``desired``.

    Desired members already present with an equal record land in ``unchanged``
    and produce no call.

    Raises:
        DuplicateIdentityError: If ``desired`` repeats an identity key
    """
    check_duplicates(desired, key)
    current_by_key = {key(member): member for member in current}

    plan: ReconcilePlan[T] = ReconcilePlan()
    for member in desired:
        existing = current_by_key.get(key(member))
        if existing is None:
            plan.to_add.append(member)
        elif equals(member, existing):
            plan.unchanged.append(member)
        else:
            plan.to_update.append(member)

    plan.to_remove = difference(current, desired, key)
    return plan


class ReconcileExecutor(Generic[T]):
    """
    Applies a plan one call at a time: additions, then updates, then removals.

    The first failing call stops the run; calls already issued stay applied.
    """

    def __init__(self, resource: str, key: KeyFunc, logger: logging.Logger | None = None):
        self.resource = resource
        self.key = key
        self.logger = logger or logging.getLogger(__name__)
        self.state = ReconcileState.PLANNED
        self.applied: list[tuple[str, T]] = []

    def apply(
        self,
        plan: ReconcilePlan[T],
        add: Callable[[T], Any],
        update: Callable[[T], Any] | None,
        remove: Callable[[T], Any],
    ) -> ReconcileState:
        """
        Issue one call per planned member.

        Args:
            plan: The batches to apply
            add: Called once for each member to add
            update: Called once for each member to update
            remove: Called once for each member to remove

        Returns:
            ReconcileState: CONVERGED once every call succeeded

        Raises:
            ReconciliationError: On the first failing call, with the applied members attached
        """
        if plan.to_update and update is None:
            raise ValueError(f"{self.resource} has members to update but no update call")

        batches = [("add", plan.to_add, add), ("update", plan.to_update, update), ("remove", plan.to_remove, remove)]
        return self._run(plan, [(action, [member], call) for action, members, call in batches for member in members])

    def apply_bulk(
        self,
        plan: ReconcilePlan[T],
        add_all: Callable[[list[T]], Any],
        remove_all: Callable[[list[T]], Any],
    ) -> ReconcileState:
        """
        Issue one call for the whole add batch and one for the whole remove batch.

        Members without a separate record (plain identifiers) never need updates.
        """
        steps = []
        if plan.to_add:
            steps.append(("add", plan.to_add, add_all))
        if plan.to_remove:
            steps.append(("remove", plan.to_remove, remove_all))
        return self._run(plan, steps, bulk=True)

    # ---------------------------------------------------------------------------- #

    def _run(self, plan: ReconcilePlan[T], steps: list[tuple[str, list[T], Callable]], bulk: bool = False) -> ReconcileState:
        if plan.is_empty():
            self.logger.info(f"No changes needed for {self.resource}")
            self.state = ReconcileState.CONVERGED
            return self.state

        self.logger.info(f"Reconciling {self.resource}: {len(plan.to_add)} to add, {len(plan.to_update)} to update, {len(plan.to_remove)} to remove, {len(plan.unchanged)} unchanged")
        self.state = ReconcileState.RECONCILING

        for action, members, call in steps:
            identities = ", ".join(self.key(member) for member in members)
            if action == "remove":
                self.logger.warning(f"REMOVING {identities} from {self.resource}")
            else:
                self.logger.info(f"{ACTION_LABELS[action]} {identities} on {self.resource}")

            try:
                call(members if bulk else members[0])
            except Exception as e:
                self.state = ReconcileState.PARTIALLY_FAILED
                error_msg = f"Failed to {action} {identities} on {self.resource} after {len(self.applied)} successful change(s): {e}"
                self.logger.error(error_msg)
                raise ReconciliationError(error_msg, applied=list(self.applied), failed_item=members if bulk else members[0]) from e

            self.applied.extend((action, member) for member in members)

        self.state = ReconcileState.CONVERGED
        self.logger.info(f"Finished reconciling {self.resource}")
        return self.state
