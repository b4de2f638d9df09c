# src/dspace_core/parameters/__init__.py
from .exceptions import (
    ParameterError,
    ParameterDefinitionError,
    ParameterLookupError,
    CircularParameterDependencyError,
)
from .node import ParameterNode, ParamKind, Bound, Numeric
from .dependency_parser import ASTDependencyExtractor
from .linker import DependencyLinker, MatchMode
from .ordering import EvaluationOrderComparator, DescriptorElement
from .store import ParameterStore

__all__ = [
    # Exceptions
    "ParameterError",
    "ParameterDefinitionError",
    "ParameterLookupError",
    "CircularParameterDependencyError",
    # Data Model
    "ParameterNode",
    "ParamKind",
    "Bound",
    "Numeric",
    # Dependency Analysis and Ordering
    "ASTDependencyExtractor",
    "DependencyLinker",
    "MatchMode",
    "EvaluationOrderComparator",
    "DescriptorElement",
    # Lookup Service
    "ParameterStore",
]
