#
# recrepr - Markers Tests
#

# Standard library -----------------------------------------------------------------------------------------------------
import pickle
from dataclasses import dataclass, field, fields
from functools import cached_property
from typing import Annotated

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from recrepr.markers import (EXCLUDE, REPR_FALSE, TRANSIENT, annotation_markers, callable_markers, class_tags,
                             dataclass_field_markers, exclude, has_marker, tag)


# Local Classes & Methods ----------------------------------------------------------------------------------------------

class Account:
    @property
    @exclude
    def password(self):
        return "secret"

    @exclude
    @property
    def token(self):
        return "t"

    @exclude
    @cached_property
    def session(self):
        return "s"

    @exclude
    def get_pin(self):
        return 1234

    @property
    def owner(self):
        return "ann"


@dataclass
class Record:
    plain: int = 0
    hidden: int = field(default=0, repr=False)
    secret: int = field(default=0, metadata={"repr_exclude": True})
    derived: int = field(default=0, metadata={"transient": True})
    typed: Annotated[int, TRANSIENT] = 0


def _markers_of(cls, name):
    return dataclass_field_markers({f.name: f for f in fields(cls)}[name])


# Tests ----------------------------------------------------------------------------------------------------------------

class TestMarker:

    def test_repr_and_name(self):
        assert repr(EXCLUDE) == "<Marker: EXCLUDE>"
        assert TRANSIENT.name == "TRANSIENT"

    @pytest.mark.parametrize("marker", [EXCLUDE, TRANSIENT, REPR_FALSE], ids=["exclude", "transient", "repr_false"])
    def test_pickle_keeps_identity(self, marker):
        assert pickle.loads(pickle.dumps(marker)) is marker


class TestExclude:

    @pytest.mark.parametrize(
        ("fn", "expected"),
        [
            pytest.param(Account.__dict__["password"].fget, True, id="property-inner"),
            pytest.param(Account.__dict__["token"].fget, True, id="property-outer"),
            pytest.param(Account.__dict__["session"].func, True, id="cached-property"),
            pytest.param(Account.__dict__["get_pin"], True, id="getter"),
            pytest.param(Account.__dict__["owner"].fget, False, id="unmarked"),
        ],
    )
    def test_marks_function(self, fn, expected):
        assert (EXCLUDE in callable_markers(fn)) is expected

    def test_returns_member_unchanged(self):
        """The decorated member keeps working."""
        assert Account().password == "secret"
        assert Account().session == "s"
        assert Account().get_pin() == 1234

    def test_write_only_property_raises(self):
        with pytest.raises(TypeError, match=r"(?i)getter"):
            exclude(property(fset=lambda self, value: None))

    @pytest.mark.parametrize("member", [42, "name", None], ids=["int", "str", "none"])
    def test_non_callable_raises(self, member):
        with pytest.raises(TypeError, match=r"(?i)expects a function"):
            exclude(member)


class TestTag:

    def test_declares_tags(self):
        @tag("dto", "audited")
        class Tagged:
            pass

        assert class_tags(Tagged) == frozenset({"dto", "audited"})

    def test_stacked_decorators_accumulate(self):
        @tag("a")
        @tag("b")
        class Tagged:
            pass

        assert class_tags(Tagged) == frozenset({"a", "b"})

    def test_not_inherited(self):
        @tag("dto")
        class Base:
            pass

        class Child(Base):
            pass

        assert class_tags(Base) == frozenset({"dto"})
        assert class_tags(Child) == frozenset()

    def test_subclass_tags_do_not_leak_into_base(self):
        @tag("base")
        class Base:
            pass

        @tag("child")
        class Child(Base):
            pass

        assert class_tags(Base) == frozenset({"base"})
        assert class_tags(Child) == frozenset({"child"})

    def test_class_objects_as_tags(self):
        class Audited:
            pass

        @tag(Audited)
        class Tagged:
            pass

        assert Audited in class_tags(Tagged)

    def test_requires_tags(self):
        with pytest.raises(ValueError, match=r"(?i)at least one tag"):
            tag()

    def test_rejects_non_class(self):
        with pytest.raises(TypeError, match=r"(?i)classes only"):
            tag("dto")(lambda: None)


class TestAnnotationMarkers:

    @pytest.mark.parametrize(
        ("annotation", "expected"),
        [
            pytest.param(int, frozenset(), id="plain"),
            pytest.param(Annotated[int, EXCLUDE], frozenset({EXCLUDE}), id="exclude"),
            pytest.param(Annotated[int, EXCLUDE, TRANSIENT], frozenset({EXCLUDE, TRANSIENT}), id="both"),
            pytest.param(Annotated[int, "doc", 3], frozenset(), id="foreign-metadata"),
            pytest.param("Annotated[int, EXCLUDE]", frozenset(), id="string"),
        ],
    )
    def test_collect(self, annotation, expected):
        assert annotation_markers(annotation) == expected


class TestDataclassFieldMarkers:

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            pytest.param("plain", frozenset(), id="plain"),
            pytest.param("hidden", frozenset({REPR_FALSE}), id="repr-false"),
            pytest.param("secret", frozenset({EXCLUDE}), id="metadata-exclude"),
            pytest.param("derived", frozenset({TRANSIENT}), id="metadata-transient"),
            pytest.param("typed", frozenset(), id="annotated-type-not-read"),
        ],
    )
    def test_collect(self, name, expected):
        assert _markers_of(Record, name) == expected


class TestHasMarker:

    def test_with_markers_attribute(self):
        class Info:
            markers = frozenset({EXCLUDE})

        assert has_marker(Info(), EXCLUDE)
        assert not has_marker(Info(), TRANSIENT)

    def test_without_markers_attribute(self):
        assert not has_marker(object(), EXCLUDE)
