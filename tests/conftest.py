# tests/conftest.py
import pytest

from dspace_core.parameters import Bound, Numeric, ParameterNode, ParamKind, ParameterStore
from dspace_core.mapping import CodeMapping, TypeRegistry


@pytest.fixture
def registry():
    """A fresh, empty type registry so tests never leak registrations into each other."""
    return TypeRegistry()


@pytest.fixture
def make_param():
    """
    Factory for parameter nodes.
    e.g.: make_param("B", numeric=Numeric.INTEGER, incl_max="A + 1")
    """
    def _make(param_id, kind=ParamKind.STRUCTURED, numeric=None, children=(), **bounds):
        bound_map = {
            Bound.INCL_MIN: bounds.get("incl_min"),
            Bound.EXCL_MIN: bounds.get("excl_min"),
            Bound.INCL_MAX: bounds.get("incl_max"),
            Bound.EXCL_MAX: bounds.get("excl_max"),
        }
        return ParameterNode(
            param_id,
            kind=kind,
            bounds={k: v for k, v in bound_map.items() if v is not None},
            numeric=numeric,
            children=children,
        )
    return _make


@pytest.fixture
def make_space(registry):
    """
    Factory building a ParameterStore from root nodes and attaching code mappings,
    given as {param_id: (class_name, constructor_signature_or_None)}.
    """
    def _make(roots, mappings=None):
        store = ParameterStore(roots)
        if mappings:
            store.attach_mappings(
                [CodeMapping(param_id=pid, class_name=cls, constructor_signature=sig)
                 for pid, (cls, sig) in mappings.items()],
                registry=registry,
            )
        return store
    return _make


@pytest.fixture
def integer_param(make_param):
    return lambda param_id, **bounds: make_param(param_id, numeric=Numeric.INTEGER, **bounds)
