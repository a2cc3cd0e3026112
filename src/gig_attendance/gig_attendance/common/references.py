"""Explicit references to records owned by external collaborators.

A reference is either an unresolved identifier or the resolved record; callers
resolve explicitly instead of sniffing the value's shape.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Unresolved(Generic[T]):
    id: int


@dataclass(frozen=True)
class Resolved(Generic[T]):
    id: int
    value: T


Reference = Union[Unresolved[T], Resolved[T]]


def resolve(ref: Optional[Reference[T]], lookup: Callable[[int], Optional[T]]) -> Optional[Resolved[T]]:
    """Resolve a reference with `lookup`; None when missing or not found."""

    if ref is None:
        return None
    if isinstance(ref, Resolved):
        return ref
    value = lookup(ref.id)
    if value is None:
        return None
    return Resolved(id=ref.id, value=value)


def resolved_value(ref: Optional[Reference[T]]) -> Optional[T]:
    return ref.value if isinstance(ref, Resolved) else None
