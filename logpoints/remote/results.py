"""Outcome of a remote debugging call.

Every remote operation resolves to a ``CommandResult``: either ``Success``
carrying the operation's payload or ``Failure`` carrying an error message.
Callers branch on ``is_successful`` before touching ``payload``/``error``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic
from typing import Literal
from typing import TypeVar
from typing import Union

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    payload: T

    @property
    def is_successful(self) -> Literal[True]:
        return True


@dataclass(frozen=True)
class Failure:
    error: str

    @property
    def is_successful(self) -> Literal[False]:
        return False


CommandResult = Union[Success[T], Failure]
