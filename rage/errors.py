"""Failure types.

RageError is the value carried by a failed Result. ContractViolationError is
raised (never returned) when a caller misuses the API, e.g. by adding a body
to a GET request.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rage.response import RageResponse


class RageErrorType(str, Enum):
    """Classification of a failed request."""

    RAW = "raw"  # Transport reported an error and a response object exists
    EMPTY_NETWORK_RESPONSE = "empty_network_response"  # No error, empty body
    CONFIGURATION = "configuration"  # Local misuse (bad URL, unparseable JSON)
    HTTP = "http"  # No error, body present, caller inspects the status code
    NETWORK_ERROR = "network_error"  # Transport failed before any response


class RageError(Exception):
    """A classified request failure.

    Carries the response (when one exists) so callers can inspect the
    status code and payload.
    """

    def __init__(
        self,
        type: RageErrorType,
        rage_response: RageResponse | None = None,
        message: str | None = None,
    ) -> None:
        self.type = type
        self.rage_response = rage_response
        self.message = message
        super().__init__(self._describe())

    def _describe(self) -> str:
        parts = [self.type.value]
        status = self.status_code()
        if status is not None:
            parts.append(f"status={status}")
        if self.message:
            parts.append(self.message)
        return ": ".join(parts)

    def status_code(self) -> int | None:
        if self.rage_response is None:
            return None
        return self.rage_response.status_code()

    @classmethod
    def configuration(cls, message: str) -> RageError:
        return cls(RageErrorType.CONFIGURATION, message=message)

    @classmethod
    def from_response(cls, response: RageResponse) -> RageError:
        """Classify a response that did not succeed.

        Transport error with a response -> RAW, transport error without one ->
        NETWORK_ERROR, no error and no payload -> EMPTY_NETWORK_RESPONSE,
        otherwise HTTP.
        """
        if response.error is not None:
            if response.response is not None:
                return cls(RageErrorType.RAW, rage_response=response, message=str(response.error))
            return cls(
                RageErrorType.NETWORK_ERROR,
                rage_response=response,
                message=str(response.error) or type(response.error).__name__,
            )
        if not response.data:
            return cls(RageErrorType.EMPTY_NETWORK_RESPONSE, rage_response=response)
        return cls(RageErrorType.HTTP, rage_response=response)


class ContractViolationError(RuntimeError):
    """Raised when the API is used in a way that can never succeed."""


def precondition(condition: bool, message: str) -> None:
    """Raise ContractViolationError unless condition holds."""
    if not condition:
        raise ContractViolationError(message)
