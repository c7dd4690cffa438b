"""
recrepr type introspection.

Describes the data members and accessors a class declares at its own level of the type hierarchy,
and reads their values from instances while bypassing ``__getattribute__``/``__getattr__`` overrides.

Field enumeration per class level:
    - own annotations (``ClassVar`` ones are static), then own ``__slots__`` entries
    - own class-level data attributes, which are static
    - instance ``__dict__`` keys declared by no class are attributed to the most base class whose
      ``__init__``/``__post_init__`` mentions the name, or to the most-derived class otherwise

Accessor enumeration per class level, in class body order:
    - property with a getter, functools.cached_property
    - zero-argument ``get_x()``/``is_x()`` methods, exposed as property ``x``
"""

# Standard library -----------------------------------------------------------------------------------------------------
import dataclasses
import enum
import functools
import inspect
import re
import types
import typing
from dataclasses import dataclass, field
from typing import Any, Callable, Literal

# Local ----------------------------------------------------------------------------------------------------------------
from .formatters import fmt_type
from .markers import Marker, annotation_markers, callable_markers, dataclass_field_markers
from .utils import class_name

# Classes --------------------------------------------------------------------------------------------------------------


class IntrospectionError(RuntimeError):
    """
    Raised when members of a class or instance cannot be enumerated or accessed at all.

    Unlike a failing read of a single member, this is a configuration fault and propagates to the caller.
    """


@dataclass(frozen=True)
class FieldInfo:
    """
    A data member declared at one class level.

    Attributes:
        name: Attribute name as stored on the instance or class.
        owner: The declaring class.
        is_static: Class-level value rather than per-instance state.
        markers: Markers found on the member annotation or dataclass field.
    """
    name: str
    owner: type
    is_static: bool = False
    markers: frozenset[Marker] = field(default_factory=frozenset)


@dataclass(frozen=True)
class AccessorInfo:
    """
    A readable accessor declared at one class level.

    Attributes:
        name: Property name (``x`` for a ``get_x()`` method).
        owner: The declaring class.
        kind: "property", "cached_property" or "getter".
        reader: Callable taking the instance and returning the value.
        markers: Markers attached to the accessor function.
    """
    name: str
    owner: type
    kind: Literal["property", "cached_property", "getter"]
    reader: Callable[[Any], Any] = field(repr=False, compare=False)
    markers: frozenset[Marker] = field(default_factory=frozenset)


_GETTER_RE = re.compile(r"^(?:get|is)_([A-Za-z_][A-Za-z0-9_]*)$")

# Class attributes that are never data members
_DESCRIPTOR_TYPES = (
    property,
    functools.cached_property,
    staticmethod,
    classmethod,
    types.MemberDescriptorType,
    types.GetSetDescriptorType,
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodDescriptorType,
    types.WrapperDescriptorType,
)


# Methods --------------------------------------------------------------------------------------------------------------

def type_levels(cls: type, up_to: type | None = None) -> list[type]:
    """
    Ordered class levels from cls (most-derived) up to and including up_to.

    Args:
        cls: The most-derived class.
        up_to: Ancestor to stop at, inclusive. None stands for ``object``.

    Returns:
        List of classes following the MRO.

    Raises:
        TypeError: If up_to is not a class or not in the MRO of cls.
    """
    if not isinstance(cls, type):
        raise TypeError(f"cls must be a class, but found {fmt_type(cls)}")
    up_to = object if up_to is None else up_to
    if not isinstance(up_to, type):
        raise TypeError(f"up_to must be a class or None, but found {fmt_type(up_to)}")

    mro = cls.__mro__
    if up_to not in mro:
        raise TypeError(f"{class_name(up_to)} is not an ancestor of {class_name(cls)}")
    return list(mro[: mro.index(up_to) + 1])


def is_enum_type(cls: type) -> bool:
    """True for Enum subclasses (closed-set types)."""
    return isinstance(cls, type) and issubclass(cls, enum.Enum)


def declared_fields(cls: type, obj: Any = None) -> list[FieldInfo]:
    """
    Enumerate data members declared at the cls level, in declaration order.

    Dunder names are never included. When obj is given, undeclared instance attributes
    attributed to cls are appended in instance ``__dict__`` order.

    Raises:
        IntrospectionError: If obj's ``__dict__`` exists but cannot be read.
    """
    own = cls.__dict__
    annotations = own_annotations(cls)
    dc_fields = _own_dataclass_fields(cls)
    instance_names = set(_instance_dict(obj)) if obj is not None else set()

    result: list[FieldInfo] = []
    seen: set[str] = set()

    def add(info: FieldInfo) -> None:
        if info.name not in seen and not _is_dunder(info.name):
            seen.add(info.name)
            result.append(info)

    for name, annotation in annotations.items():
        # Resolved annotation, Field.type may be an unevaluated string
        markers = annotation_markers(annotation)
        if name in dc_fields:
            markers |= dataclass_field_markers(dc_fields[name])
        add(FieldInfo(name, cls, is_static=_is_classvar(annotation), markers=markers))

    for name in _own_slots(cls):
        add(FieldInfo(name, cls))

    for name, value in own.items():
        if name in seen or _is_dunder(name) or name.startswith("_abc_"):
            continue
        if isinstance(value, _DESCRIPTOR_TYPES) or callable(value):
            continue
        # A class attribute shadowed on the instance is the default of an instance field
        add(FieldInfo(name, cls, is_static=name not in instance_names))

    if obj is not None:
        for name in _undeclared_instance_attrs(obj, owner=cls):
            add(FieldInfo(name, cls))

    return result


def declared_accessors(cls: type) -> list[AccessorInfo]:
    """
    Enumerate readable accessors declared at the cls level, in class body order.

    Write-only properties and getters requiring arguments are skipped.

    Raises:
        IntrospectionError: If the class namespace cannot be enumerated.
    """
    try:
        items = list(cls.__dict__.items())
    except Exception as e:
        raise IntrospectionError(f"cannot enumerate accessors of {class_name(cls)}") from e

    result: list[AccessorInfo] = []
    names: set[str] = set()
    for attr_name, value in items:
        info = _accessor_info(cls, attr_name, value)
        if info is None or info.name in names:
            continue
        names.add(info.name)
        result.append(info)
    return result


def find_field(cls: type, name: str) -> FieldInfo | None:
    """
    Locate the backing field of a property on cls or its ancestors.

    Both ``name`` and ``_name`` are looked up, in that order, at each class level.
    """
    for level in cls.__mro__:
        if level is object:
            break
        by_name = {f.name: f for f in declared_fields(level) if not f.is_static}
        for candidate in (name, f"_{name}"):
            if candidate in by_name:
                return by_name[candidate]
    return None


def read_field(obj: Any, info: FieldInfo) -> Any:
    """
    Read a field value, bypassing ``__getattribute__`` and ``__getattr__`` overrides.

    Static fields are read from the declaring class. Exceptions propagate to the caller.
    """
    if info.is_static:
        return info.owner.__dict__[info.name]
    return object.__getattribute__(obj, info.name)


def read_accessor(obj: Any, info: AccessorInfo) -> Any:
    """Invoke an accessor on obj. Exceptions propagate to the caller."""
    return info.reader(obj)


def own_annotations(cls: type) -> dict[str, Any]:
    """
    Annotations declared on cls itself, with string annotations evaluated where possible.
    """
    try:
        return dict(inspect.get_annotations(cls, eval_str=True))
    except Exception:
        # Unresolvable forward references, keep raw strings
        pass
    try:
        return dict(inspect.get_annotations(cls))
    except Exception as e:
        raise IntrospectionError(f"cannot read annotations of {class_name(cls)}") from e


# Private Methods ------------------------------------------------------------------------------------------------------

def _is_dunder(name: str) -> bool:
    return name.startswith("__") and name.endswith("__")


def _is_classvar(annotation: Any) -> bool:
    if annotation is typing.ClassVar or typing.get_origin(annotation) is typing.ClassVar:
        return True
    if typing.get_origin(annotation) is typing.Annotated:
        return _is_classvar(annotation.__origin__)
    if isinstance(annotation, str):
        return annotation.startswith(("ClassVar", "typing.ClassVar"))
    return False


def _own_dataclass_fields(cls: type) -> dict[str, dataclasses.Field]:
    if "__dataclass_fields__" not in cls.__dict__:
        return {}
    return dict(cls.__dict__["__dataclass_fields__"])


def _own_slots(cls: type) -> list[str]:
    slots = cls.__dict__.get("__slots__", ())
    if isinstance(slots, str):
        slots = (slots,)
    # Private slot names are stored mangled on the class
    return [_mangle(cls, s) for s in slots if s not in ("__dict__", "__weakref__")]


def _mangle(cls: type, name: str) -> str:
    if name.startswith("__") and not name.endswith("__"):
        return f"_{cls.__name__.lstrip('_')}{name}"
    return name


def _instance_dict(obj: Any) -> dict[str, Any]:
    try:
        dict_ = object.__getattribute__(obj, "__dict__")
    except AttributeError:
        return {}
    except Exception as e:
        raise IntrospectionError(f"cannot access attributes of {class_name(obj)}") from e
    if not isinstance(dict_, (dict, types.MappingProxyType)):
        raise IntrospectionError(f"__dict__ of {class_name(obj)} is not a mapping: {fmt_type(dict_)}")
    return dict(dict_)


def _init_names(cls: type) -> frozenset[str]:
    """Names referenced in the code of cls's own __init__ and __post_init__."""
    names: set[str] = set()
    for method in ("__init__", "__post_init__"):
        fn = cls.__dict__.get(method)
        code = getattr(fn, "__code__", None)
        if code is not None:
            names.update(code.co_names)
    return frozenset(names)


def _undeclared_instance_attrs(obj: Any, owner: type) -> list[str]:
    """Instance attributes not declared by any class, attributed to owner."""
    cls = type(obj)
    declared: set[str] = set()
    for level in cls.__mro__:
        declared.update(own_annotations(level))
        declared.update(_own_slots(level))

    names = []
    for name in _instance_dict(obj):
        if name in declared or _is_dunder(name):
            continue
        if _attributed_owner(cls, name) is owner:
            names.append(name)
    return names


def _attributed_owner(cls: type, name: str) -> type:
    for level in reversed(cls.__mro__):
        if level is not object and name in _init_names(level):
            return level
    return cls


def _accessor_info(cls: type, attr_name: str, value: Any) -> AccessorInfo | None:
    if isinstance(value, property):
        if value.fget is None:
            return None  # write-only
        return AccessorInfo(attr_name, cls, "property", reader=value.fget, markers=callable_markers(value.fget))

    if isinstance(value, functools.cached_property):
        return AccessorInfo(attr_name, cls, "cached_property",
                            reader=functools.partial(_read_cached, value, cls),
                            markers=callable_markers(value.func))

    if isinstance(value, types.FunctionType):
        match = _GETTER_RE.match(attr_name)
        if match is None or not _takes_no_arguments(value):
            return None
        return AccessorInfo(match.group(1), cls, "getter", reader=value, markers=callable_markers(value))

    return None


def _read_cached(descriptor: functools.cached_property, cls: type, obj: Any) -> Any:
    return descriptor.__get__(obj, cls)


def _takes_no_arguments(fn: types.FunctionType) -> bool:
    try:
        params = list(inspect.signature(fn).parameters.values())
    except (TypeError, ValueError):
        return False
    if not params or params[0].kind not in (inspect.Parameter.POSITIONAL_ONLY,
                                            inspect.Parameter.POSITIONAL_OR_KEYWORD):
        return False
    optional_kinds = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    return all(p.default is not p.empty or p.kind in optional_kinds for p in params[1:])
