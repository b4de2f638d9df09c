# src/dspace_core/__init__.py
import logging
from .log_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)
logger.debug("dspace_core package initialized.")

from .errors import DesignSpaceError, DiagnosableError
from .parameters import (
    ParameterNode, ParamKind, Bound, Numeric,
    DependencyLinker, MatchMode, EvaluationOrderComparator, DescriptorElement,
    ParameterStore,
    ParameterError, CircularParameterDependencyError,
)
from .mapping import (
    CodeMapping, CodeMappingReader,
    TypeRegistry, TYPE_REGISTRY, register_type, constructor,
    ConstructorResolver, Instantiator,
    MappingError, MappingErrorKind,
)

__all__ = [
    # Parameter Model
    "ParameterNode", "ParamKind", "Bound", "Numeric",
    # Dependencies and Evaluation Order
    "DependencyLinker", "MatchMode", "EvaluationOrderComparator", "DescriptorElement",
    "ParameterStore",
    # Code Mappings
    "CodeMapping", "CodeMappingReader",
    "TypeRegistry", "TYPE_REGISTRY", "register_type", "constructor",
    "ConstructorResolver", "Instantiator",
    # Errors (Actionable Diagnostics)
    "DesignSpaceError", "DiagnosableError",
    "ParameterError", "CircularParameterDependencyError",
    "MappingError", "MappingErrorKind",
]
