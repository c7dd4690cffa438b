"""
Baseline formatting for structural rendering.

ReprStyle holds every literal the renderer emits: brackets, separators, the null text and the
unreadable-member text. The fmt_* functions turn scalars and non-expanded objects into leaf text,
and handle broken __str__/__repr__ gracefully.

Default style output:
    Pair@7f3a5c2e10[a=1,b=x]            object with fields
    list@7f3a5c2f40[{1,2,3}]            array target
    dict@7f3a5c2f80{k1=1,k2=<null>}     mapping value
    {1,2}                               array value
    set@7f3a5c2fc0{1,2}                 other collection value
"""

# Standard library -----------------------------------------------------------------------------------------------------
from dataclasses import dataclass, replace
from typing import Any

# Local ----------------------------------------------------------------------------------------------------------------
from .sentinels import UNSET
from .utils import class_name, identity_hex

PRIMITIVE_TYPES = (
    type(None),
    bool,  # Comes before int (is subclass of int)
    int,
    float,
    complex,
    str,
    bytes,
    type(Ellipsis),  # EllipsisType (...)
    type(NotImplemented),  # NotImplementedType
)

# Classes --------------------------------------------------------------------------------------------------------------

@dataclass(frozen=True)
class ReprStyle:
    """
    Literals and switches of the rendered text.

    Attributes:
        content_start: Opens the member list of an object.
        content_end: Closes the member list of an object.
        field_separator: Between members.
        name_value_separator: Between member name and value.
        field_names: Emit member names; values only when False.
        null_text: Text of None values.
        na_text: Text of members whose read failed.
        array_start: Opens array-like and collection elements.
        array_end: Closes array-like and collection elements.
        array_separator: Between elements.
        map_start: Opens mapping entries.
        map_end: Closes mapping entries.
        entry_separator: Between mapping entries.
        key_value_separator: Between a mapping key and its value.
        identity: Append ``@<hex id>`` to class names in headers.
        fully_qualified: Use ``module.QualName`` instead of the bare class name in headers.
    """
    content_start: str = "["
    content_end: str = "]"
    field_separator: str = ","
    name_value_separator: str = "="
    field_names: bool = True
    null_text: str = "<null>"
    na_text: str = "<N/A>"
    array_start: str = "{"
    array_end: str = "}"
    array_separator: str = ","
    map_start: str = "{"
    map_end: str = "}"
    entry_separator: str = ","
    key_value_separator: str = "="
    identity: bool = True
    fully_qualified: bool = False

    @classmethod
    def short(cls) -> "ReprStyle":
        """Deterministic output without identity tokens, ``Pair[a=1,b=x]``."""
        return cls(identity=False)

    @classmethod
    def qualified(cls) -> "ReprStyle":
        """Fully qualified class names, ``pkg.mod.Pair@7f3a5c2e10[a=1,b=x]``."""
        return cls(fully_qualified=True)

    @classmethod
    def spaced(cls) -> "ReprStyle":
        """Comma-space separators, ``Pair@7f3a5c2e10[a=1, b=x]``."""
        return cls(field_separator=", ", array_separator=", ", entry_separator=", ")

    def merge(self, **kwargs: Any) -> "ReprStyle":
        """
        Return a copy with the given attributes replaced.

        Arguments equal to UNSET are ignored, unknown names raise TypeError.
        """
        updates = {k: v for k, v in kwargs.items() if v is not UNSET}
        return replace(self, **updates)


DEFAULT_STYLE = ReprStyle()


# Methods --------------------------------------------------------------------------------------------------------------

def fmt_class(obj: Any, style: ReprStyle = DEFAULT_STYLE) -> str:
    """Class name of obj as shown in headers."""
    return class_name(obj, fully_qualified=style.fully_qualified, fully_qualified_builtins=style.fully_qualified)


def fmt_identity(obj: Any, style: ReprStyle = DEFAULT_STYLE) -> str:
    """
    Identity text ``ClassName@hexid``, always including the identity token.

    Used for back-references to objects already being rendered.
    """
    return f"{fmt_class(obj, style)}@{identity_hex(obj)}"


def fmt_header(obj: Any, style: ReprStyle = DEFAULT_STYLE) -> str:
    """Header of an expanded object or collection, with identity token when the style asks for it."""
    if style.identity:
        return fmt_identity(obj, style)
    return fmt_class(obj, style)


def fmt_leaf(value: Any, style: ReprStyle = DEFAULT_STYLE) -> str:
    """
    Leaf text of a value that is not expanded.

    None gives the style null text, everything else its str(), falling back to a type-labelled
    marker when __str__ raises.

    Examples:
        >>> fmt_leaf(1), fmt_leaf("x"), fmt_leaf(None)
        ('1', 'x', '<null>')
    """
    if value is None:
        return style.null_text
    return _safe_str(value)


def fmt_type(obj: Any, *, fully_qualified: bool = False) -> str:
    """Format type information for exception messages, ``<int>``."""
    return _fmt_type_value(class_name(obj, fully_qualified=fully_qualified))


def fmt_value(obj: Any, *, max_repr: int = 120) -> str:
    """
    Format a single value as a type-value pair for exception and log messages.

    Examples:
        >>> fmt_value(42)
        '<int: 42>'
        >>> fmt_value("hello world", max_repr=8)
        "<str: 'hell...>"
    """
    repr_ = _fmt_truncate(_safe_repr(obj), max_repr)
    return _fmt_type_value(type(obj).__name__, repr_)


def fmt_exception(exc: BaseException) -> str:
    """
    Format an exception as ``<ValueError: message>``, or ``<ValueError>`` for an empty message.
    """
    exc_type = type(exc).__name__
    try:
        exc_msg = str(exc)
    except Exception:
        exc_msg = "<str failed>"
    return f"<{exc_type}: {exc_msg}>" if exc_msg else f"<{exc_type}>"


def is_primitive(obj: Any) -> bool:
    """Check if the object is a scalar or text value that is always rendered as a leaf."""
    # We should use type(), not isinstance() here
    return type(obj) in PRIMITIVE_TYPES


# Private Methods ------------------------------------------------------------------------------------------------------

def _fmt_truncate(repr_: str, max_len: int, ellipsis: str = "...") -> str:
    """Truncate to max_len characters before appending the ellipsis, keeping at least one character."""
    if max_len <= 0 or len(repr_) <= max_len:
        return repr_
    keep = max(1, max_len - len(ellipsis))
    return repr_[:keep] + ellipsis


def _fmt_type_value(type_name: str, value_repr: str | None = None) -> str:
    """Combine a type name and a repr into a single ``<type: repr>`` display token."""
    return f"<{type_name}>" if value_repr is None else f"<{type_name}: {value_repr}>"


def _safe_repr(obj: Any) -> str:
    """
    Defensive repr() call - handle broken __repr__ methods gracefully
    """
    try:
        return repr(obj)
    except Exception as e:
        return f"<{type(obj).__name__} object (repr failed: {type(e).__name__})>"


def _safe_str(obj: Any) -> str:
    """
    Defensive str() call - handle broken __str__ methods gracefully
    """
    try:
        return str(obj)
    except Exception as e:
        return f"<{type(obj).__name__} object (str failed: {type(e).__name__})>"
