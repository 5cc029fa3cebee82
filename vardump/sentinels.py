"""
Sentinel objects for values the inspector cannot read.

A dump must never fail on a value it cannot see, so unreadable slots are
represented by a singleton sentinel instead of an exception or None (None is a
legitimate, renderable value).

Sentinels:
    INVALID: Marks a node with no value at all, such as an unset __slots__ member
             or a field whose read step failed. Rendered as "<invalid>".

Example:
    >>> value = read_field(obj, field)
    >>> if value is INVALID:
    ...     print("<invalid>")
"""

from typing import Any, Final

__all__ = [
    'INVALID',
    'InvalidType',
]


# Base Sentinel --------------------------------------------------------------------------------------------------------

class _SentinelBase:
    """
    Base class for all sentinel objects.

    Sentinels are singleton objects optimized for identity checks.
    They provide clean representations and consistent behavior.
    """
    __slots__ = ('_name',)

    def __init__(self, name: str) -> None:
        self._name = name

    def __repr__(self) -> str:
        """Returns a clean string representation for debugging."""
        return f'<{self._name}>'

    def __eq__(self, other: Any) -> bool:
        """Ensures identity-based comparison."""
        return self is other

    def __hash__(self) -> int:
        """Returns a hash based on object identity."""
        return id(self)

    def __bool__(self) -> bool:
        """Returns False by default (sentinels are typically falsy)."""
        return False

    def __reduce__(self) -> tuple:
        """Ensures proper behavior during pickling."""
        return (self.__class__, (self._name,))


# Sentinel Types -------------------------------------------------------------------------------------------------------

class InvalidType(_SentinelBase):
    """
    Sentinel type for INVALID.

    Stands for a node that carries no value: an unset slot, an attribute
    whose read raised, or an explicit "nothing here" passed to the dumper.
    """
    _instance: 'InvalidType | None' = None

    def __new__(cls) -> 'InvalidType':
        """Ensures singleton behavior."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if not hasattr(self, '_name'):
            super().__init__("invalid")

    def __reduce__(self) -> tuple:
        """Ensure pickling returns the singleton instance."""
        return (self.__class__, ())


# Sentinel Objects -----------------------------------------------------------------------------------------------------

INVALID: Final[InvalidType] = InvalidType()
"""
Sentinel representing a node without any value.

Use with identity check: `if value is INVALID:`
"""
