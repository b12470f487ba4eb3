"""Outcome types returned by repository operations.

Repositories never raise for expected outcomes. Every operation returns one
of the variants below and callers branch on the type.
"""

from dataclasses import dataclass, field
from typing import Generic, List, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class NotFound:
    message: str = "Item not found"


@dataclass(frozen=True)
class InvalidInput:
    message: str
    fields: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class StorageFailure:
    detail: str


Result = Union[Ok[T], NotFound, InvalidInput, StorageFailure]
