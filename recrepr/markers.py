"""
recrepr Markers

Zero-behavior tags queried by the extraction strategies and the recursion policy.

Member markers:
    EXCLUDE: Drop a field or accessor from rendering.
        Fields:     ``secret: Annotated[str, EXCLUDE]``
        Accessors:  ``@exclude`` on a property, cached_property or ``get_x()`` method
        Dataclass:  ``field(metadata={"repr_exclude": True})``
    TRANSIENT: A derived field, rendered by the field strategy only when transient members are requested.
        Fields:     ``cache: Annotated[dict, TRANSIENT]``
        Dataclass:  ``field(metadata={"transient": True})``
    REPR_FALSE: The dataclasses ``field(repr=False)`` flag. Never attached by hand, it is detected on
        dataclass fields and honoured by both strategies.

Class tags:
    ``@tag(Audited, "dto")`` declares tags on a class; a RecursionPolicy built with
    ``accept_tags(Audited)`` expands instances of that class.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import dataclasses
import functools
import typing
from typing import Any, Callable, Final, Iterable, TypeVar

T = TypeVar("T")

# Classes --------------------------------------------------------------------------------------------------------------


class Marker:
    """
    Named presence marker. Instances compare by identity.
    """
    __slots__ = ("_name",)

    def __init__(self, name: str) -> None:
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def __repr__(self) -> str:
        return f"<Marker: {self._name}>"

    def __reduce__(self) -> str:
        return self._name


EXCLUDE: Final[Marker] = Marker("EXCLUDE")
TRANSIENT: Final[Marker] = Marker("TRANSIENT")
REPR_FALSE: Final[Marker] = Marker("REPR_FALSE")

_MARKERS_ATTR = "__recrepr_markers__"
_TAGS_ATTR = "__recrepr_tags__"

# dataclasses field(metadata=...) keys
_METADATA_KEYS = {
    "repr_exclude": EXCLUDE,
    "transient": TRANSIENT,
}


# Methods --------------------------------------------------------------------------------------------------------------

def exclude(member: T) -> T:
    """
    Mark an accessor as excluded from rendering.

    Works on plain functions (``get_x()`` style getters), on properties and on cached properties,
    in either decorator order.

    Examples:
        >>> class Account:
        ...     @property
        ...     @exclude
        ...     def password(self): ...
        ...
        ...     @exclude
        ...     @property
        ...     def token(self): ...
    """
    if isinstance(member, property):
        if member.fget is None:
            raise TypeError("exclude() requires a property with a getter")
        _add_marker(member.fget, EXCLUDE)
        return member
    if isinstance(member, functools.cached_property):
        _add_marker(member.func, EXCLUDE)
        return member
    if callable(member):
        _add_marker(member, EXCLUDE)
        return member
    raise TypeError(f"exclude() expects a function, property or cached_property, got {type(member).__name__}")


def tag(*tags: Any) -> Callable[[type], type]:
    """
    Class decorator declaring tags on a class.

    Tags are not inherited: a subclass carries only the tags declared on itself.

    Examples:
        >>> @tag("dto")
        ... class Pair: ...
        >>> class_tags(Pair)
        frozenset({'dto'})
    """
    if not tags:
        raise ValueError("tag() requires at least one tag")

    def decorator(cls: type) -> type:
        if not isinstance(cls, type):
            raise TypeError(f"tag() decorates classes only, got {type(cls).__name__}")
        own = cls.__dict__.get(_TAGS_ATTR, frozenset())
        setattr(cls, _TAGS_ATTR, frozenset(own) | frozenset(tags))
        return cls

    return decorator


def class_tags(cls: type) -> frozenset:
    """Return the tags declared on cls itself, ignoring base classes."""
    return cls.__dict__.get(_TAGS_ATTR, frozenset())


def has_marker(member: Any, marker: Marker) -> bool:
    """
    Presence test of a marker on an introspected member.

    Args:
        member: A FieldInfo, AccessorInfo, or anything exposing a ``markers`` collection.
        marker: One of EXCLUDE, TRANSIENT, REPR_FALSE.
    """
    return marker in getattr(member, "markers", ())


def annotation_markers(annotation: Any) -> frozenset[Marker]:
    """
    Collect markers from ``typing.Annotated`` metadata of an annotation.

    Nested Annotated forms collapse into one in typing, so a single level is inspected.
    String annotations carry no markers.
    """
    if typing.get_origin(annotation) is not typing.Annotated:
        return frozenset()
    return frozenset(m for m in annotation.__metadata__ if isinstance(m, Marker))


def dataclass_field_markers(f: dataclasses.Field) -> frozenset[Marker]:
    """
    Collect markers of a dataclass field from its repr flag and metadata.

    Annotated markers of the field are not included, read them from the resolved class annotation.
    """
    found = set()
    if not f.repr:
        found.add(REPR_FALSE)
    for key, marker in _METADATA_KEYS.items():
        if f.metadata.get(key):
            found.add(marker)
    return frozenset(found)


def callable_markers(fn: Any) -> frozenset[Marker]:
    """Collect markers attached to a function by the marker decorators."""
    return frozenset(getattr(fn, _MARKERS_ATTR, ()))


# Private Methods ------------------------------------------------------------------------------------------------------

def _add_marker(fn: Any, marker: Marker) -> None:
    markers: Iterable[Marker] = getattr(fn, _MARKERS_ATTR, ())
    setattr(fn, _MARKERS_ATTR, frozenset(markers) | {marker})
