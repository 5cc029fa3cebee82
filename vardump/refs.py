"""
Reference tracking for cycle detection.

Maps object identity to sequential reference ids within one dump call. The first
visit of an object registers it; any later visit in the same call gets the already
assigned id so the renderer prints a back-reference instead of descending again.
"""

# Standard library -----------------------------------------------------------------------------------------------------
from typing import Any, Iterator


# Classes --------------------------------------------------------------------------------------------------------------

class ReferenceTracker:
    """
    Identity -> reference id table for one top-level dump call.

    Ids start at 1 and are assigned in first-visit order. Tracked objects are kept
    alive by the tracker until reset(), so the identity of an object seen during the
    call can never be recycled by a temporary created later in the same call.

    There is deliberately no removal operation: the table is discarded as a whole.

    Examples:
        >>> refs = ReferenceTracker()
        >>> node = {}
        >>> refs.visit(node)
        (1, True)
        >>> refs.visit(node)
        (1, False)
    """

    __slots__ = ("_ids", "_objects", "_next_id")

    def __init__(self) -> None:
        self._ids: dict[int, int] = {}
        self._objects: list[Any] = []
        self._next_id = 1

    def visit(self, obj: Any) -> tuple[int, bool]:
        """
        Look up and, when new, register an object in one step.

        Returns:
            (ref_id, first_visit): the object's reference id, and True when this call
            registered it, False when it was already known.
        """
        key = id(obj)
        ref_id = self._ids.get(key)
        if ref_id is not None:
            return ref_id, False

        ref_id = self._next_id
        self._ids[key] = ref_id
        self._objects.append(obj)
        self._next_id += 1
        return ref_id, True

    def get(self, obj: Any) -> int | None:
        """Reference id of an already visited object, or None."""
        return self._ids.get(id(obj))

    def reset(self) -> None:
        """Forget every reference and restart numbering at 1."""
        self._ids.clear()
        self._objects.clear()
        self._next_id = 1

    @property
    def next_id(self) -> int:
        return self._next_id

    def __contains__(self, obj: Any) -> bool:
        return id(obj) in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._objects)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(tracked={len(self)}, next_id={self._next_id})"
