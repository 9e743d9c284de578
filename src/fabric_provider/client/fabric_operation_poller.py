# SPDX-FileCopyrightText: 2025-present Raki Rahman <mdrakiburrahman@gmail.com>
#
# SPDX-License-Identifier: MIT

import logging
import time
from collections.abc import Iterator
from typing import Any

from fabric_provider.operations.errors import OperationTimeoutError
from fabric_provider.operations.operation_interfaces import (
    ApiClient,
    CommonParams,
    OperationContext,
    OperationHandle,
    OperationPoller,
    OperationResultResponse,
)
from fabric_provider.static.transformers import ResponseDecoder


class FabricOperationPoller(OperationPoller):
    """
    Polls the Fabric operation result endpoint at a fixed interval.

    Completion is signalled only by a non-empty ``id`` in the result body;
    there is no failed terminal state, so the attempt count and the elapsed
    time ceiling are what stop a stuck operation.
    """

    def __init__(self, common_params: CommonParams, api_client: ApiClient):
        """
        Initialize the poller.

        Args:
            common_params: Common configuration parameters
            api_client: Authenticated client used for the status GETs
        """
        self.common_params = common_params
        self.api_client = api_client
        self.logger = logging.getLogger(__name__)

    def result_url(self, handle: OperationHandle) -> str:
        return f"{self.common_params.endpoint.fabric}/v1/operations/{handle.operation_id}/result"

    def attempts(self, context: OperationContext | None = None) -> Iterator[int]:
        polling = self.common_params.polling
        bounded = self._bounded(context or OperationContext())

        for attempt in range(1, polling.max_attempts + 1):
            if attempt > 1:
                delay = bounded.clip_timeout(polling.interval_seconds)
                if bounded.cancel_event is not None:
                    bounded.cancel_event.wait(delay)
                else:
                    time.sleep(delay)
            bounded.check(f"poll attempt {attempt}")
            yield attempt

    def wait(self, handle: OperationHandle, context: OperationContext | None = None) -> dict[str, Any]:
        url = self.result_url(handle)
        bounded = self._bounded(context or OperationContext())
        self.logger.info(f"Waiting for operation {handle.operation_id}")

        for attempt in self.attempts(bounded):
            result = self.api_client.get(url, bounded)
            status = ResponseDecoder.decode(OperationResultResponse, result, source=url)
            if status.id:
                self.logger.info(f"Operation {handle.operation_id} completed after {attempt} poll(s) with result id {status.id}")
                return result

            self.logger.debug(f"Operation {handle.operation_id} not complete on attempt {attempt}: {result}")

        error_msg = f"Operation {handle.operation_id} did not complete after {self.common_params.polling.max_attempts} poll attempts"
        self.logger.error(error_msg)
        raise OperationTimeoutError(error_msg)

    # ---------------------------------------------------------------------------- #

    def _bounded(self, context: OperationContext) -> OperationContext:
        """
        Narrow the caller's deadline to the configured polling ceiling.
        """
        ceiling = time.monotonic() + self.common_params.polling.timeout_seconds
        deadline = ceiling if context.deadline is None else min(context.deadline, ceiling)
        return OperationContext(deadline=deadline, cancel_event=context.cancel_event)
