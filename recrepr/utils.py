"""
recrepr utilities shared across the package.

Contains functions used by multiple modules to avoid circular imports.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import array
import collections
import collections.abc as abc
from typing import Any

# Methods --------------------------------------------------------------------------------------------------------------


def class_name(
    obj: Any,
    fully_qualified: bool = False,
    fully_qualified_builtins: bool = False,
) -> str:
    """
    Get the class name of an object or a class.

    Returns class name whether given an instance or the class itself.
    For example, both `class_name(10)` and `class_name(int)` return 'int'.

    Parameters:
        obj (Any): An object or a class.
        fully_qualified (bool): If true, returns the fully qualified name for user objects or classes.
        fully_qualified_builtins (bool): If true, returns the fully qualified name for builtin objects or classes.

    Returns:
        str: The class name.

    Examples:
        >>> class_name(10)
        'int'

        >>> class_name(10, fully_qualified_builtins=True)
        'builtins.int'

        >>> class Pair: ...
        >>> class_name(Pair())
        'Pair'
    """
    # type() never consults obj.__class__, which user classes may override
    cls = obj if issubclass(type(obj), type) else type(obj)

    if cls.__module__ == "builtins":
        qualify = fully_qualified_builtins
    else:
        qualify = fully_qualified

    if qualify:
        return cls.__module__ + "." + cls.__qualname__
    return cls.__name__


def identity_hex(obj: Any) -> str:
    """
    Return the identity token of an object as lowercase hex.

    Two calls on the same live object return the same token, distinct live objects never share one.

    Examples:
        >>> identity_hex(obj) == format(id(obj), "x")
        True
    """
    return format(id(obj), "x")


def is_textual(x: Any) -> bool:
    """True for str, bytes and bytearray instances, which are never treated as collections."""
    return isinstance(x, (str, bytes, bytearray))


def is_array_like(x: Any) -> bool:
    """
    Check if an object renders as a flat positional element sequence.

    Non-textual sequences (list, tuple, array.array, deque, range, user Sequence types) qualify,
    mappings and sets do not.
    """
    if is_textual(x) or isinstance(x, abc.Mapping):
        return False
    if isinstance(x, abc.Sequence):
        return True
    return isinstance(x, (collections.deque, array.array))
