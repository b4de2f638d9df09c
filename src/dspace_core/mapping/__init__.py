# src/dspace_core/mapping/__init__.py
from .raw_data import CodeMapping
from .exceptions import (
    MappingError,
    MappingErrorKind,
    MappingParsingError,
    MappingSchemaError,
)
from .registry import (
    TypeRegistry,
    TYPE_REGISTRY,
    ConstructorSignature,
    register_type,
    constructor,
)
from .resolver import ConstructorResolver, ResolutionState, IdentifierKind
from .instantiator import Instantiator
from .reader import CodeMappingReader

__all__ = [
    # Records
    "CodeMapping",
    # Exceptions
    "MappingError",
    "MappingErrorKind",
    "MappingParsingError",
    "MappingSchemaError",
    # Type Registry
    "TypeRegistry",
    "TYPE_REGISTRY",
    "ConstructorSignature",
    "register_type",
    "constructor",
    # Resolution and Instantiation
    "ConstructorResolver",
    "ResolutionState",
    "IdentifierKind",
    "Instantiator",
    # Mapping Files
    "CodeMappingReader",
]
