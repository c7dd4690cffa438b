"""
Sentinel objects for distinguishing between unset values, None, and unreadable members.

All sentinels use identity checks (using 'is') rather than equality checks.

Sentinels:
    UNSET: Represents an unprovided optional argument (distinguishes from None)
    NA: Marks a member whose value could not be read during extraction

Example:
    >>> style.merge(identity=UNSET)  # argument ignored
"""

from typing import Any, Final

__all__ = [
    'UNSET',
    'NA',
    'UnsetType',
    'NotAvailableType',
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

class NotAvailableType(_SentinelBase):
    """
    Sentinel type for NA.

    Stands in for the value of a field or accessor whose read raised an exception.
    """
    _instance: 'NotAvailableType | None' = None

    def __new__(cls) -> 'NotAvailableType':
        """Ensures singleton behavior."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if not hasattr(self, '_name'):
            super().__init__("N/A")

    def __reduce__(self) -> tuple:
        """Ensure pickling returns the singleton instance."""
        return (self.__class__, ())


class UnsetType(_SentinelBase):
    """
    Sentinel type for UNSET.

    Used to distinguish between 'not provided' and 'explicitly set to None'.
    """
    _instance: 'UnsetType | None' = None

    def __new__(cls) -> 'UnsetType':
        """Ensures singleton behavior."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if not hasattr(self, '_name'):
            super().__init__("UNSET")

    def __reduce__(self) -> tuple:
        """Ensure pickling returns the singleton instance."""
        return (self.__class__, ())


# Sentinel Objects -----------------------------------------------------------------------------------------------------

NA: Final[NotAvailableType] = NotAvailableType()
"""
Sentinel representing an unreadable member value.

Use with identity check: `if member.value is NA:`
"""

UNSET: Final[UnsetType] = UnsetType()
"""
Sentinel representing an unprovided optional argument.

Use with identity check: `if arg is UNSET:`

This is particularly useful when None is a valid input value.
"""


