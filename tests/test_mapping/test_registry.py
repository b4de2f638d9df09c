# tests/test_mapping/test_registry.py

"""
Validation suite for the TypeRegistry: name lookup (registered names first,
importable dotted paths second) and constructor discovery.
"""

import collections
from decimal import Decimal

import pytest

from dspace_core.mapping import TypeRegistry, register_type
from dspace_core.mapping.registry import qualified_name

from sample_types import Guarded, GaussOperator, Nullary, Padded, Point, PointTuple, Sized, Untyped


# =========================================================================
# === Group 1: Name Lookup
# =========================================================================

def test_registered_class_is_found_by_alias_and_qualified_name(registry):
    registry.register(Point, "Point")
    assert registry.find("Point") is Point
    assert registry.find(qualified_name(Point)) is Point
    assert "Point" in registry
    assert "Point" in registry.names


def test_register_type_decorator_uses_given_registry(registry):
    @register_type("Local", registry=registry)
    class Local:
        pass

    assert registry.find("Local") is Local


def test_only_classes_can_be_registered(registry):
    with pytest.raises(TypeError):
        registry.register(lambda: None)


def test_dotted_paths_are_imported(registry):
    assert registry.find("decimal.Decimal") is Decimal
    assert registry.find("collections.OrderedDict") is collections.OrderedDict
    assert registry.find("sample_types.Point") is Point


def test_bare_builtin_names(registry):
    assert registry.find("str") is str
    assert registry.find("builtins.int") is int
    assert registry.find("len") is None


@pytest.mark.parametrize("name", [
    "no.such.module.Thing", "decimal.Nope", "Unregistered", "", "decimal.getcontext",
    ".Foo", "a..B", "..x.Y",
])
def test_unknown_names_are_not_found(registry, name):
    assert registry.find(name) is None


def test_module_failing_at_import_is_not_found(registry, tmp_path, monkeypatch):
    (tmp_path / "broken_mapping_module.py").write_text("raise RuntimeError('boom')\n")
    monkeypatch.syspath_prepend(str(tmp_path))
    assert registry.find("broken_mapping_module.Thing") is None


def test_lookup_raises_for_unknown_name(registry):
    with pytest.raises(LookupError, match="no.such.Thing"):
        registry.lookup("no.such.Thing")


# =========================================================================
# === Group 2: Constructor Discovery
# =========================================================================

def test_init_and_alternate_constructors_are_discovered(registry):
    signatures = registry.constructors_of(Sized)
    assert [(s.name, s.parameter_types) for s in signatures] == [
        ("__init__", (str,)),
        ("with_size", (int,)),
    ]
    assert all(s.is_public for s in signatures)


def test_underscore_factories_are_not_public(registry):
    names = {s.name for s in registry.constructors_of(Guarded)}
    public = {s.name for s in registry.public_constructors_of(Guarded)}
    assert names == {"__init__", "from_bytes", "_from_int"}
    assert public == {"__init__", "from_bytes"}


def test_inherited_init_is_used_but_alternates_are_own(registry):
    signatures = registry.constructors_of(GaussOperator)
    assert [(s.name, s.parameter_types) for s in signatures] == [
        ("__init__", (float,)),
        ("from_count", (int,)),
    ]


def test_unannotated_and_generic_parameters(registry):
    (init,) = registry.constructors_of(Untyped)
    assert init.parameter_types == (object, list)


def test_zero_argument_init(registry):
    init = registry.constructors_of(Nullary)[0]
    assert init.arity == 0
    assert isinstance(init.invoke(()), Nullary)


def test_class_without_init_has_nullary_constructor(registry):
    class Bare:
        pass

    (init,) = registry.constructors_of(Bare)
    assert init.parameter_types == ()


def test_discovery_is_cached(registry):
    assert registry.constructors_of(Point) is registry.constructors_of(Point)


def test_signature_description(registry):
    alternate = registry.constructors_of(Sized)[1]
    assert alternate.describe() == "Sized.with_size(int)"
    assert registry.constructors_of(Point)[0].describe() == "Point(int, int)"
    sized = alternate.invoke((5,))
    assert sized.size == 5


def test_arguments_taken_in_new_are_discovered(registry):
    (init,) = registry.constructors_of(PointTuple)
    assert init.parameter_types == (int, int)
    assert init.invoke((1, 2)) == PointTuple(1, 2)


def test_defaults_lower_the_minimum_arity(registry):
    (init,) = registry.constructors_of(Padded)
    assert (init.min_arity, init.arity) == (1, 2)
    assert init.accepts_count(1) and init.accepts_count(2)
    assert not init.accepts_count(0) and not init.accepts_count(3)
