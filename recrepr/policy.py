"""
recrepr Recursion Policy

Decides per class whether a nested object is expanded structurally or rendered as a leaf value.
"""

# Standard library -----------------------------------------------------------------------------------------------------
from dataclasses import dataclass, field
from typing import Any

# Local ----------------------------------------------------------------------------------------------------------------
from .abc import is_enum_type
from .formatters import fmt_type, fmt_value
from .markers import class_tags


# Classes --------------------------------------------------------------------------------------------------------------

@dataclass(frozen=True)
class RecursionPolicy:
    """
    Admission criteria for recursive rendering.

    A class is accepted when ANY of the criteria matches:
        - it declares one of ``tags`` with the ``@tag`` decorator
        - it is one of ``types`` (exact class, subclasses do not match)
        - its module name starts with one of ``modules``

    Enum classes are never accepted. Every criterion is empty by default, so the default policy
    accepts nothing and all nested objects render as leaves.

    Instances are immutable and safe to share between threads and render calls.

    Examples:
        >>> policy = (
        ...     RecursionPolicy.builder()
        ...     .accept_types(Pair)
        ...     .accept_modules("myapp.models")
        ...     .build()
        ... )
        >>> policy.accept(Pair)
        True
    """
    tags: frozenset = field(default_factory=frozenset)
    types: frozenset[type] = field(default_factory=frozenset)
    modules: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "tags", frozenset(self.tags))
        object.__setattr__(self, "types", frozenset(self.types))
        object.__setattr__(self, "modules", tuple(self.modules))
        for typ in self.types:
            if not isinstance(typ, type):
                raise TypeError(f"types must contain classes only, but found {fmt_type(typ)}")
        for prefix in self.modules:
            if not isinstance(prefix, str):
                raise TypeError(f"modules must contain str prefixes only, but found {fmt_value(prefix)}")

    @staticmethod
    def builder() -> "PolicyBuilder":
        """Fluent builder of a RecursionPolicy."""
        return PolicyBuilder()

    @classmethod
    def none(cls) -> "RecursionPolicy":
        """Policy accepting nothing."""
        return cls()

    @classmethod
    def for_modules(cls, *prefixes: str) -> "RecursionPolicy":
        """Policy accepting every class defined under the given module prefixes."""
        return cls(modules=prefixes)

    def accept(self, cls: type) -> bool:
        """
        Return whether instances of cls are rendered recursively.

        Raises:
            TypeError: If cls is not a class.
        """
        if not isinstance(cls, type):
            raise TypeError(f"cls must be a class, but found {fmt_type(cls)}")

        if is_enum_type(cls):
            return False

        return any([
            bool(self.tags & class_tags(cls)),
            cls in self.types,
            bool(self.modules) and _module_name(cls).startswith(self.modules),
        ])


class PolicyBuilder:
    """
    Builder for RecursionPolicy.

    Each ``accept_*`` call replaces the previous value of that criterion.
    """

    def __init__(self) -> None:
        self._tags: tuple[Any, ...] = ()
        self._types: tuple[type, ...] = ()
        self._modules: tuple[str, ...] = ()

    def accept_tags(self, *tags: Any) -> "PolicyBuilder":
        """
        Accept classes declaring any of the tags.

        Args:
            tags: Tags as passed to the ``@tag`` class decorator.

        Returns:
            Self, to allow chaining.
        """
        self._tags = _flatten(tags)
        return self

    def accept_types(self, *types: type) -> "PolicyBuilder":
        """
        Accept exactly the given classes.

        Returns:
            Self, to allow chaining.

        Raises:
            TypeError: If an item is not a class.
        """
        types = _flatten(types)
        for typ in types:
            if not isinstance(typ, type):
                raise TypeError(f"accept_types() expects classes, but found {fmt_type(typ)}")
        self._types = types
        return self

    def accept_modules(self, *prefixes: str) -> "PolicyBuilder":
        """
        Accept classes defined in modules whose name starts with any of the prefixes.

        A prefix of "myapp.models" matches "myapp.models" and "myapp.models.user",
        but also "myapp.models_legacy" since matching is a plain string prefix test.

        Returns:
            Self, to allow chaining.

        Raises:
            TypeError: If a prefix is not a str.
        """
        prefixes = _flatten(prefixes)
        for prefix in prefixes:
            if not isinstance(prefix, str):
                raise TypeError(f"accept_modules() expects str prefixes, but found {fmt_value(prefix)}")
        self._modules = prefixes
        return self

    def build(self) -> RecursionPolicy:
        """Build the immutable RecursionPolicy."""
        return RecursionPolicy(tags=frozenset(self._tags), types=frozenset(self._types), modules=self._modules)


# Private Methods ------------------------------------------------------------------------------------------------------

def _flatten(items: tuple) -> tuple:
    """Accept both varargs and a single iterable argument, dropping None entries."""
    if len(items) == 1 and isinstance(items[0], (list, tuple, set, frozenset)):
        items = tuple(items[0])
    return tuple(item for item in items if item is not None)


def _module_name(cls: type) -> str:
    module = getattr(cls, "__module__", None)
    return module if isinstance(module, str) else ""
