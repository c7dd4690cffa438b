"""
recrepr Rendering Engine

Structural rendering of object graphs for debugging and logging.

    >>> render(Pair(1, "x"))
    'Pair@7f3a5c2e10[a=1,b=x]'

Nested objects are expanded only when the RecursionPolicy accepts their class; all other values
are rendered as leaves. Members are extracted either from declared fields (``render``) or from
accessors (``render_accessors``). Reads that raise are logged and rendered as ``<N/A>``,
the rest of the object is rendered as usual.

Objects already being rendered higher up the current path are rendered as a back-reference
``ClassName@hexid`` which breaks reference cycles.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import collections.abc as abc
import logging
import traceback
from dataclasses import dataclass, field
from typing import Any, Iterable

# Local ----------------------------------------------------------------------------------------------------------------
from .extract import AccessorStrategy, FieldStrategy, Member, Strategy, extract_items
from .formatters import (DEFAULT_STYLE, ReprStyle, fmt_exception, fmt_header, fmt_identity, fmt_leaf, fmt_type,
                         fmt_value, is_primitive)
from .policy import RecursionPolicy
from .sentinels import NA
from .utils import class_name, is_array_like

logger = logging.getLogger(__name__)

TRACE = 5
logging.addLevelName(TRACE, "TRACE")


# Classes --------------------------------------------------------------------------------------------------------------

class _RenderContext:
    """
    State of one render call: output parts and the identities of objects on the current path.

    Never shared between calls.
    """
    __slots__ = ("parts", "path", "depth")

    def __init__(self) -> None:
        self.parts: list[str] = []
        self.path: set[int] = set()
        self.depth = 0

    def enter(self, obj: Any) -> None:
        self.path.add(id(obj))

    def leave(self, obj: Any) -> None:
        self.path.discard(id(obj))

    def is_active(self, obj: Any) -> bool:
        return id(obj) in self.path

    def append(self, text: str) -> None:
        self.parts.append(text)

    def text(self) -> str:
        return "".join(self.parts)


@dataclass(frozen=True)
class Renderer:
    """
    Immutable rendering service combining a recursion policy, an extraction strategy and a style.

    Attributes:
        policy: Decides which nested classes are expanded.
        strategy: FieldStrategy or AccessorStrategy, reused for nested objects.
        style: Literals of the output.
        max_depth: Nesting limit for expanded objects, deeper ones render as leaves. None is unlimited.

    Examples:
        >>> renderer = (
        ...     Renderer.builder()
        ...     .policy(RecursionPolicy.for_modules("myapp"))
        ...     .by_accessors()
        ...     .style(ReprStyle.short())
        ...     .build()
        ... )
        >>> renderer.render(account)
        'Account[owner=User[name=ann],balance=10]'
    """
    policy: RecursionPolicy = field(default_factory=RecursionPolicy)
    strategy: Strategy = field(default_factory=FieldStrategy)
    style: ReprStyle = DEFAULT_STYLE
    max_depth: int | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.policy, RecursionPolicy):
            raise TypeError(f"policy must be a RecursionPolicy, but found {fmt_type(self.policy)}")
        if not isinstance(self.strategy, Strategy):
            raise TypeError(f"strategy must be a Strategy, but found {fmt_type(self.strategy)}")
        if not isinstance(self.style, ReprStyle):
            raise TypeError(f"style must be a ReprStyle, but found {fmt_type(self.style)}")
        if self.max_depth is not None:
            if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int):
                raise TypeError(f"max_depth must be int or None, but found {fmt_type(self.max_depth)}")
            if self.max_depth < 0:
                raise ValueError(f"max_depth must be >= 0, but found {fmt_value(self.max_depth)}")

    @staticmethod
    def builder() -> "RendererBuilder":
        """Fluent builder of a Renderer."""
        return RendererBuilder()

    def render(self, obj: Any, exclude: Iterable[str] | None = None) -> str:
        """
        Render obj structurally.

        Args:
            obj: Object to render, must not be None.
            exclude: Member names of obj to skip. Nested objects are not affected.

        Returns:
            The rendered text, complete even when some members could not be read.

        Raises:
            ValueError: If obj is None.
            IntrospectionError: If members of an object cannot be enumerated at all.
        """
        if obj is None:
            raise ValueError("obj must not be None")

        ctx = _RenderContext()
        self._render_object(obj, ctx, exclude=_names(exclude))
        return ctx.text()

    # Private Methods -----------------------------

    def _render_object(self,
                       obj: Any,
                       ctx: _RenderContext,
                       exclude: frozenset[str] = frozenset(),
                       nested: bool = False,
                       ) -> None:
        """Header followed by the member list of obj. The strategy up_to bounds the render target only."""
        style = self.style
        ctx.append(fmt_header(obj, style))
        ctx.append(style.content_start)
        if isinstance(obj, abc.Mapping):
            self._render_mapping_entries(obj, ctx)
        elif is_array_like(obj):
            self._render_elements(extract_items(obj), obj, ctx)
        elif isinstance(obj, (abc.Set, abc.MappingView)):
            self._render_elements(_iterate(obj), obj, ctx)
        else:
            ctx.enter(obj)
            try:
                members = self.strategy.extract(obj, exclude, bounded=not nested)
                self._render_members(members, obj, ctx)
            finally:
                ctx.leave(obj)
        ctx.append(style.content_end)

    def _render_members(self, members: list[Member], owner: Any, ctx: _RenderContext) -> None:
        style = self.style
        for i, member in enumerate(members):
            if i > 0:
                ctx.append(style.field_separator)
            if style.field_names and member.name is not None:
                ctx.append(member.name)
                ctx.append(style.name_value_separator)
            self._render_member_value(member, owner, ctx)

    def _render_member_value(self, member: Member, owner: Any, ctx: _RenderContext) -> None:
        if member.is_fault:
            _log_fault(member, owner)
            ctx.append(self.style.na_text)
        else:
            self._render_value(member.value, ctx)

    def _render_value(self, value: Any, ctx: _RenderContext) -> None:
        """Render a value by the leaf-or-recurse rules."""
        style = self.style

        if value is None:
            ctx.append(style.null_text)
            return

        # Primitive wrappers and text are always leaves
        if is_primitive(value):
            ctx.append(fmt_leaf(value, style))
            return

        if ctx.is_active(value):
            ctx.append(fmt_identity(value, style))
            return

        if isinstance(value, abc.Mapping):
            ctx.append(fmt_header(value, style))
            self._render_mapping_entries(value, ctx)
        elif is_array_like(value):
            self._render_elements(extract_items(value), value, ctx)
        elif isinstance(value, (abc.Set, abc.MappingView)):
            ctx.append(fmt_header(value, style))
            self._render_elements(_iterate(value), value, ctx)
        elif self._accept(value, ctx):
            ctx.depth += 1
            try:
                self._render_object(value, ctx, nested=True)
            finally:
                ctx.depth -= 1
        else:
            ctx.append(fmt_leaf(value, style))

    def _render_elements(self, members: list[Member], owner: Any, ctx: _RenderContext) -> None:
        """Flat element sequence ``{a,b}``, each element by the value rules."""
        style = self.style
        ctx.enter(owner)
        try:
            ctx.append(style.array_start)
            for i, member in enumerate(members):
                if i > 0:
                    ctx.append(style.array_separator)
                self._render_member_value(member, owner, ctx)
            ctx.append(style.array_end)
        finally:
            ctx.leave(owner)

    def _render_mapping_entries(self, mapping: abc.Mapping, ctx: _RenderContext) -> None:
        """Entries ``{k=v,...}`` in source iteration order."""
        style = self.style
        ctx.enter(mapping)
        try:
            ctx.append(style.map_start)
            try:
                entries = list(mapping.items())
            except Exception as e:
                _log_fault(Member(None, NA, fault=e), mapping)
                ctx.append(style.na_text)
                entries = []
            for i, (key, value) in enumerate(entries):
                if i > 0:
                    ctx.append(style.entry_separator)
                self._render_value(key, ctx)
                ctx.append(style.key_value_separator)
                self._render_value(value, ctx)
            ctx.append(style.map_end)
        finally:
            ctx.leave(mapping)

    def _accept(self, value: Any, ctx: _RenderContext) -> bool:
        if self.max_depth is not None and ctx.depth >= self.max_depth:
            return False
        return self.policy.accept(type(value))


class RendererBuilder:
    """
    Builder for Renderer.

    Selects the extraction strategy with ``by_fields()`` (default) or ``by_accessors()``;
    the last call wins.
    """

    def __init__(self) -> None:
        self._policy = RecursionPolicy()
        self._strategy: Strategy = FieldStrategy()
        self._style = DEFAULT_STYLE
        self._max_depth: int | None = None

    def policy(self, policy: RecursionPolicy) -> "RendererBuilder":
        """Set the recursion policy. Returns self, to allow chaining."""
        self._policy = policy
        return self

    def by_fields(self,
                  up_to: type | None = None,
                  include_transient: bool = False,
                  include_static: bool = False,
                  ) -> "RendererBuilder":
        """
        Extract declared fields.

        Args:
            up_to: Last ancestor walked, inclusive. None walks up to ``object``.
            include_transient: Include fields marked TRANSIENT.
            include_static: Include class-level data attributes.

        Returns:
            Self, to allow chaining.
        """
        self._strategy = FieldStrategy(up_to=up_to, include_transient=include_transient,
                                       include_static=include_static)
        return self

    def by_accessors(self, up_to: type | None = None) -> "RendererBuilder":
        """
        Extract properties and getters.

        Args:
            up_to: Last ancestor walked, inclusive. None walks up to ``object``.

        Returns:
            Self, to allow chaining.
        """
        self._strategy = AccessorStrategy(up_to=up_to)
        return self

    def style(self, style: ReprStyle) -> "RendererBuilder":
        """Set the output style. Returns self, to allow chaining."""
        self._style = style
        return self

    def max_depth(self, max_depth: int | None) -> "RendererBuilder":
        """Limit nesting of expanded objects. Returns self, to allow chaining."""
        self._max_depth = max_depth
        return self

    def build(self) -> Renderer:
        """Build the immutable Renderer."""
        return Renderer(policy=self._policy, strategy=self._strategy, style=self._style, max_depth=self._max_depth)


# Methods --------------------------------------------------------------------------------------------------------------

def render(obj: Any,
           policy: RecursionPolicy | None = None,
           *,
           include_transient: bool = False,
           include_static: bool = False,
           up_to: type | None = None,
           style: ReprStyle | None = None,
           ) -> str:
    """
    Render obj from its declared fields.

    Transient and static fields are skipped unless requested. Fields of all ancestors
    up to ``up_to`` (inclusive, default ``object``) follow the fields of type(obj).

    Args:
        obj: Object to render, must not be None.
        policy: Recursion policy for nested objects. None expands nothing.
        include_transient: Include fields marked TRANSIENT.
        include_static: Include class-level data attributes.
        up_to: Last ancestor walked, inclusive.
        style: Output style, ReprStyle() if None.

    Returns:
        The rendered text.

    Raises:
        ValueError: If obj is None.
        TypeError: If up_to is not an ancestor of type(obj).
        IntrospectionError: If members cannot be enumerated at all.

    Examples:
        >>> render(Pair(1, "x"))
        'Pair@7f3a5c2e10[a=1,b=x]'

        >>> render(Wrapper(Pair(1, 2)), RecursionPolicy(types={Pair}))
        'Wrapper@7f3a5c2f40[inner=Pair@7f3a5c2e10[a=1,b=2]]'
    """
    renderer = Renderer(
        policy=policy or RecursionPolicy(),
        strategy=FieldStrategy(up_to=up_to, include_transient=include_transient, include_static=include_static),
        style=style or DEFAULT_STYLE,
    )
    return renderer.render(obj)


def render_excluding(obj: Any, *names: str | Iterable[str] | None) -> str:
    """
    Render obj from its declared fields, skipping the named fields.

    Names can be given as varargs or as a single iterable; None entries are ignored.

    Examples:
        >>> render_excluding(Pair(1, "x"), "b")
        'Pair@7f3a5c2e10[a=1]'
    """
    return Renderer().render(obj, exclude=_names(names))


def render_accessors(obj: Any,
                     policy: RecursionPolicy | None = None,
                     *,
                     up_to: type | None = None,
                     style: ReprStyle | None = None,
                     ) -> str:
    """
    Render obj from its properties and ``get_x()``/``is_x()`` getters.

    Args:
        obj: Object to render, must not be None.
        policy: Recursion policy for nested objects. None expands nothing.
        up_to: Last ancestor walked, inclusive.
        style: Output style, ReprStyle() if None.

    Raises:
        ValueError: If obj is None.
    """
    renderer = Renderer(
        policy=policy or RecursionPolicy(),
        strategy=AccessorStrategy(up_to=up_to),
        style=style or DEFAULT_STYLE,
    )
    return renderer.render(obj)


def render_accessors_excluding(obj: Any, *names: str | Iterable[str] | None) -> str:
    """Render obj from its accessors, skipping the named properties."""
    return Renderer(strategy=AccessorStrategy()).render(obj, exclude=_names(names))


# Private Methods ------------------------------------------------------------------------------------------------------

def _names(names: Iterable[Any] | None) -> frozenset[str]:
    """Normalize exclusion names given as varargs, one iterable, or None."""
    if names is None:
        return frozenset()
    if isinstance(names, str):
        return frozenset([names])
    flat: list[Any] = []
    for item in names:
        if item is None:
            continue
        if isinstance(item, str):
            flat.append(item)
        elif isinstance(item, abc.Iterable):
            flat.extend(n for n in item if n is not None)
        else:
            raise TypeError(f"member names must be str, but found {fmt_type(item)}")
    for name in flat:
        if not isinstance(name, str):
            raise TypeError(f"member names must be str, but found {fmt_type(name)}")
    return frozenset(flat)


def _iterate(obj: Iterable[Any]) -> list[Member]:
    """Unnamed members of a non-indexable collection."""
    try:
        return [Member(None, item) for item in obj]
    except Exception as e:
        return [Member(None, NA, fault=e)]


def _log_fault(member: Member, owner: Any) -> None:
    """Log an unreadable member at DEBUG, its traceback at TRACE."""
    name = member.name if member.name is not None else "<item>"
    logger.debug("cannot read %s.%s: %s", class_name(owner), name, fmt_exception(member.fault))
    if logger.isEnabledFor(TRACE):
        logger.log(TRACE, "".join(traceback.format_exception(member.fault)))
