"""Pure reorder operations shared by the optimistic client and the server writer.

None of these functions mutate their arguments.
"""
from dataclasses import dataclass
from typing import Hashable, List, Optional, Sequence, Tuple, TypeVar

from taskboard.services.positions import reindex

T = TypeVar("T")


@dataclass(frozen=True)
class MoveDescriptor:
    """One requested reorder/move, the unit of work between the engine and the writers.

    For column moves the containers are boards, for task moves they are columns.
    """

    entity_id: Hashable
    source_container_id: Hashable
    destination_container_id: Hashable
    source_index: int
    destination_index: int

    @property
    def same_container(self) -> bool:
        return self.source_container_id == self.destination_container_id

    @property
    def is_noop(self) -> bool:
        return self.same_container and self.source_index == self.destination_index


def _in_bounds(index: int, length: int) -> bool:
    return 0 <= index < length


def clamp_index(index: int, length: int) -> int:
    """Clamp an insertion index to ``[0, length]``"""
    return max(0, min(index, length))


def reorder_within_list(items: Sequence[T], source_index: int, destination_index: int) -> Sequence[T]:
    """Move the member at ``source_index`` to ``destination_index`` and reindex.

    Returns ``items`` itself, untouched, when the indices are equal or either
    one is outside ``[0, len - 1]``.
    """
    length = len(items)
    if source_index == destination_index:
        return items
    if not _in_bounds(source_index, length) or not _in_bounds(destination_index, length):
        return items

    result = list(items)
    moved = result.pop(source_index)
    result.insert(destination_index, moved)
    return reindex(result)


def move_between_lists(
    source: Sequence[T],
    destination: Sequence[T],
    source_index: int,
    destination_index: int,
    same_list: Optional[bool] = None,
) -> Tuple[Sequence[T], Sequence[T]]:
    """Move a member from ``source`` into ``destination``.

    ``destination_index`` is clamped to ``[0, len(destination)]`` so an index
    past the end appends. Both lists come back reindexed.

    When both arguments are the same list (``source is destination``, or
    ``same_list=True`` for two copies of one container) the result is exactly
    ``reorder_within_list`` and is returned in both slots.
    """
    if same_list is None:
        same_list = source is destination
    if same_list:
        reordered = reorder_within_list(source, source_index, destination_index)
        return reordered, reordered

    if not _in_bounds(source_index, len(source)):
        return source, destination

    new_source = list(source)
    moved = new_source.pop(source_index)
    new_destination: List[T] = list(destination)
    new_destination.insert(clamp_index(destination_index, len(new_destination)), moved)
    return reindex(new_source), reindex(new_destination)


def apply_descriptor(
    source: Sequence[T],
    destination: Sequence[T],
    descriptor: MoveDescriptor,
) -> Tuple[Sequence[T], Sequence[T]]:
    """Apply a move descriptor to the member lists of its two containers"""
    return move_between_lists(
        source,
        destination,
        descriptor.source_index,
        descriptor.destination_index,
        same_list=descriptor.same_container,
    )
