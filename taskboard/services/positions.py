"""Dense positions for ordered board members.

Order is the list order. The stored ``position`` of each member is a derived
projection of it, always rewritten as ``0..n-1`` after a structural change
instead of being patched in place.
"""
import dataclasses
from typing import Any, List, Sequence, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


def with_position(item: T, position: int) -> T:
    """Return a copy of ``item`` whose ``position`` equals ``position``.

    Supports pydantic models, dataclasses and mappings. Plain values (ids)
    carry no position and are returned unchanged.
    """
    if isinstance(item, BaseModel):
        if getattr(item, "position", None) == position:
            return item
        return item.model_copy(update={"position": position})
    if dataclasses.is_dataclass(item) and not isinstance(item, type):
        if getattr(item, "position", None) == position:
            return item
        return dataclasses.replace(item, position=position)
    if isinstance(item, dict):
        return {**item, "position": position}
    return item


def reindex(items: Sequence[T]) -> List[T]:
    """Copy of ``items`` where each member's position equals its index"""
    return [with_position(item, index) for index, item in enumerate(items)]


def position_of(item: Any) -> Any:
    if isinstance(item, dict):
        return item.get("position")
    return getattr(item, "position", None)


def positions_are_dense(items: Sequence[Any]) -> bool:
    """True when stored positions are exactly 0..n-1 in list order"""
    return [position_of(item) for item in items] == list(range(len(items)))
