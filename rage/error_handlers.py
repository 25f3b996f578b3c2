"""Error handlers - ordered, opt-in recovery for failed results.

RageRequest.execute() passes a failure through every handler that is
enabled and whose can_handle_error() matches the classified error. Each
handler receives the result produced by the previous one.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Callable, Iterable

from tenacity import RetryCallState, Retrying, retry_if_result, stop_after_attempt, wait_none
from tenacity.wait import wait_base

from rage.errors import RageError, RageErrorType
from rage.result import Result

if TYPE_CHECKING:
    from rage.request import RageRequest
    from rage.response import RageResponse

logger = logging.getLogger(__name__)


class ErrorHandler:
    """Base error handler.

    enabled is a static gate checked before can_handle_error().
    """

    enabled: bool = True

    def can_handle_error(self, error: RageError) -> bool:
        raise NotImplementedError

    def handle_error_for_request(
        self,
        request: RageRequest,
        result: Result[RageResponse],
    ) -> Result[RageResponse]:
        raise NotImplementedError


class RetryErrorHandler(ErrorHandler):
    """Re-sends a request while it keeps failing with a retryable error type.

    Retries go through RageRequest.execute_raw(), so the handler chain is not
    re-entered. The original attempt is not counted: up to max_attempts
    further sends are made, separated by wait (no wait by default).

    Usage:
        handler = RetryErrorHandler(max_attempts=4, wait=wait_exponential(multiplier=0.2))
    """

    def __init__(
        self,
        max_attempts: int = 3,
        error_types: Iterable[RageErrorType] = (RageErrorType.NETWORK_ERROR,),
        wait: wait_base | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.max_attempts = max_attempts
        self.error_types = frozenset(error_types)
        self.wait = wait or wait_none()
        self.sleep = sleep

    def can_handle_error(self, error: RageError) -> bool:
        return error.type in self.error_types

    def _should_retry(self, result: Result[RageResponse]) -> bool:
        return result.is_failure and result.error.type in self.error_types

    def handle_error_for_request(
        self,
        request: RageRequest,
        result: Result[RageResponse],
    ) -> Result[RageResponse]:
        if not self._should_retry(result):
            return result

        def log_attempt(retry_state: RetryCallState) -> None:
            logger.warning(
                "Retrying %s %s (attempt %d/%d)",
                request.http_method.value,
                request.method_path or request.base_url,
                retry_state.attempt_number,
                self.max_attempts,
            )

        retrying = Retrying(
            retry=retry_if_result(self._should_retry),
            stop=stop_after_attempt(self.max_attempts),
            wait=self.wait,
            sleep=self.sleep,
            before=log_attempt,
            # Out of attempts: hand back the last failure instead of RetryError
            retry_error_callback=lambda retry_state: retry_state.outcome.result(),
        )
        return retrying(request.execute_raw)
