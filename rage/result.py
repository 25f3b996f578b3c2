"""Success/failure union returned by request execution."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, NoReturn, TypeVar, Union

from rage.errors import RageError

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T

    is_success = True
    is_failure = False

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failure:
    error: RageError

    is_success = False
    is_failure = True

    def unwrap(self) -> NoReturn:
        raise self.error


Result = Union[Success[T], Failure]
