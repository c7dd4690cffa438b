"""
recrepr Extraction Strategies

A strategy turns one object into an ordered list of Member entries:
    - FieldStrategy walks data members declared by each class of the MRO
    - AccessorStrategy walks readable properties and ``get_x()``/``is_x()`` getters

Both walk class levels from the most-derived class up to an inclusive ``up_to`` ancestor,
most-derived first, and skip names already produced by a more-derived level.
Array-like objects are enumerated positionally as unnamed members.

A read raising an exception never aborts extraction: the member is produced with the NA
value and the exception attached, and the walk continues.
"""

# Standard library -----------------------------------------------------------------------------------------------------
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable

# Local ----------------------------------------------------------------------------------------------------------------
from .abc import (AccessorInfo, FieldInfo, declared_accessors, declared_fields, find_field, read_accessor,
                  read_field, type_levels)
from .formatters import fmt_type
from .markers import EXCLUDE, REPR_FALSE, TRANSIENT, has_marker
from .sentinels import NA
from .utils import is_array_like


# Classes --------------------------------------------------------------------------------------------------------------

@dataclass(frozen=True)
class Member:
    """
    One extracted (name, value) pair.

    Attributes:
        name: Member name, None for array elements.
        value: The value read, NA when the read failed.
        fault: The exception raised by the read, if any.
    """
    name: str | None
    value: Any
    fault: Exception | None = None

    @property
    def is_fault(self) -> bool:
        """Whether the read failed."""
        return self.fault is not None

    @property
    def is_absent(self) -> bool:
        """Whether the value read is None."""
        return self.fault is None and self.value is None


class Strategy(ABC):
    """
    Base of extraction strategies.

    Subclasses implement ``declared``, ``accept`` and ``read`` for non-array objects.
    Instances must be immutable.
    """

    up_to: type | None

    def extract(self, obj: Any, exclude: Iterable[str] = (), *, bounded: bool = True) -> list[Member]:
        """
        Extract the members of obj in rendering order.

        Args:
            obj: Object to extract from.
            exclude: Member names to skip. Ignored for array-like objects.
            bounded: Stop at up_to. Nested objects are walked up to ``object`` with bounded=False.

        Returns:
            Ordered list of members, stable across repeated calls on the same object.

        Raises:
            TypeError: If bounded and up_to is not an ancestor of type(obj).
            IntrospectionError: If members cannot be enumerated at all.
        """
        if is_array_like(obj):
            return extract_items(obj)

        exclude = frozenset(exclude)
        members: list[Member] = []
        seen: set[str] = set()
        up_to = self.up_to if bounded else None
        for level in type_levels(type(obj), up_to):
            for info in self.declared(obj, level):
                # A name overridden at a more-derived level is decided there
                if info.name in seen:
                    continue
                seen.add(info.name)
                if self.accept(info, exclude):
                    members.append(_read(info.name, self.read, obj, info))
        return members

    @abstractmethod
    def declared(self, obj: Any, level: type) -> list[Any]:
        """Member descriptions of obj declared at one class level."""
        raise NotImplementedError

    @abstractmethod
    def accept(self, info: Any, exclude: frozenset[str] = frozenset()) -> bool:
        """Return whether the member is extracted."""
        raise NotImplementedError

    @abstractmethod
    def read(self, obj: Any, info: Any) -> Any:
        """Read the member value, exceptions propagate."""
        raise NotImplementedError


@dataclass(frozen=True)
class FieldStrategy(Strategy):
    """
    Extract declared data members.

    Attributes:
        up_to: Last ancestor walked, inclusive. None walks up to ``object``.
        include_transient: Include fields marked TRANSIENT.
        include_static: Include class-level data attributes and ClassVar fields.

    A field is extracted when its name is not excluded, it is not marked EXCLUDE nor declared
    with dataclasses ``repr=False``, and the static/transient switches allow it.
    """
    up_to: type | None = None
    include_transient: bool = False
    include_static: bool = False

    def __post_init__(self) -> None:
        if self.up_to is not None and not isinstance(self.up_to, type):
            raise TypeError(f"up_to must be a class or None, but found {fmt_type(self.up_to)}")

    def accept(self, info: FieldInfo, exclude: frozenset[str] = frozenset()) -> bool:
        """Return whether the field is extracted."""
        if info.name in exclude:
            return False
        if has_marker(info, EXCLUDE) or has_marker(info, REPR_FALSE):
            return False
        if info.is_static and not self.include_static:
            return False
        if has_marker(info, TRANSIENT) and not self.include_transient:
            return False
        return True

    def declared(self, obj: Any, level: type) -> list[FieldInfo]:
        return declared_fields(level, obj)

    def read(self, obj: Any, info: FieldInfo) -> Any:
        return read_field(obj, info)


@dataclass(frozen=True)
class AccessorStrategy(Strategy):
    """
    Extract readable accessors: properties, cached properties and ``get_x()``/``is_x()`` getters.

    Attributes:
        up_to: Last ancestor walked, inclusive. None walks up to ``object``.

    An accessor is extracted when its name is not excluded, the accessor is not marked EXCLUDE,
    and its backing field (``x`` or ``_x``) is neither marked EXCLUDE nor declared with
    dataclasses ``repr=False``. Write-only properties are never extracted.
    """
    up_to: type | None = None

    def __post_init__(self) -> None:
        if self.up_to is not None and not isinstance(self.up_to, type):
            raise TypeError(f"up_to must be a class or None, but found {fmt_type(self.up_to)}")

    def accept(self, info: AccessorInfo, exclude: frozenset[str] = frozenset()) -> bool:
        """Return whether the accessor is extracted."""
        if info.name in exclude:
            return False
        if has_marker(info, EXCLUDE):
            return False
        backing = find_field(info.owner, info.name)
        if backing is not None and (has_marker(backing, EXCLUDE) or has_marker(backing, REPR_FALSE)):
            return False
        return True

    def declared(self, obj: Any, level: type) -> list[AccessorInfo]:
        return declared_accessors(level)

    def read(self, obj: Any, info: AccessorInfo) -> Any:
        return read_accessor(obj, info)


# Methods --------------------------------------------------------------------------------------------------------------

def extract_items(obj: Any) -> list[Member]:
    """
    Enumerate an array-like object positionally as unnamed members.

    Elements are read by index so that a failing element does not hide the following ones.
    """
    try:
        size = len(obj)
    except Exception as e:
        return [Member(None, NA, fault=e)]
    return [_read(None, _read_item, obj, index) for index in range(size)]


# Private Methods ------------------------------------------------------------------------------------------------------

def _read(name: str | None, reader, obj: Any, key: Any) -> Member:
    try:
        return Member(name, reader(obj, key))
    except Exception as e:
        return Member(name, NA, fault=e)


def _read_item(obj: Any, index: int) -> Any:
    return obj[index]
