from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")

NOT_FOUND = "not_found"
INVALID = "invalid"
CONFLICT = "conflict"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    message: str
    kind: str = INVALID

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]


def not_found(kind: str, entity_id: object) -> Err:
    return Err(f"{kind.capitalize()} {entity_id} not found", NOT_FOUND)
