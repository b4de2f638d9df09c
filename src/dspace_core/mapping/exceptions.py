# src/dspace_core/mapping/exceptions.py
"""
Defines the custom, diagnosable exceptions for the code-mapping subsystem.

Constructor resolution and instantiation report every failure through one
unified type, `MappingError`, whose `kind` tells the variants apart. The
mapping-file reader has its own two errors (`MappingParsingError` for file
and YAML problems, `MappingSchemaError` for structural problems), mirroring
how descriptor-level and model-level failures are kept apart elsewhere.
"""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from ..errors import DiagnosableError, format_diagnostic_report


class MappingErrorKind(Enum):
    MAPPING_NOT_FOUND = "Mapping Not Found"
    IDENTIFIER_UNRESOLVABLE = "Unresolvable Formal Argument"
    CONSTRUCTOR_NOT_FOUND = "Constructor Not Found"
    CONSTRUCTOR_AMBIGUOUS = "Ambiguous Constructor"
    CONSTRUCTOR_INACCESSIBLE = "Constructor Not Accessible"
    NOT_INSTANTIABLE = "Class Not Instantiable"
    ARGUMENT_MISMATCH = "Argument Type Mismatch"
    INVOCATION_FAILED = "Constructor Raised"


_SUGGESTIONS = {
    MappingErrorKind.MAPPING_NOT_FOUND: "Check the 'type' entry of the code mapping. The class must be registered with the TypeRegistry or importable by its dotted path.",
    MappingErrorKind.IDENTIFIER_UNRESOLVABLE: "Each constructor identifier must be a parameter id (global or local), a numeric keyword (e.g., 'integer', 'double') or a class name.",
    MappingErrorKind.CONSTRUCTOR_NOT_FOUND: "Make the 'constructor' identifiers of the mapping match the argument types of one of the class's public constructors.",
    MappingErrorKind.CONSTRUCTOR_AMBIGUOUS: "Several constructors fit the mapping. Declare the 'constructor' identifiers explicitly so only one signature matches.",
    MappingErrorKind.CONSTRUCTOR_INACCESSIBLE: "Only public constructors (no leading underscore) can be used by a code mapping.",
    MappingErrorKind.NOT_INSTANTIABLE: "Map the parameter to a concrete subclass; abstract classes cannot be instantiated.",
    MappingErrorKind.ARGUMENT_MISMATCH: "Make sure the values supplied for the constructor arguments have the types the constructor declares.",
    MappingErrorKind.INVOCATION_FAILED: "The constructor itself raised an exception. See the chained exception for the cause.",
}


@dataclass(eq=False)
class MappingError(DiagnosableError):
    """The single, unified error of constructor resolution and instantiation."""
    param_id: str
    kind: MappingErrorKind
    details: str
    class_name: Optional[str] = None
    argument_types: Tuple[str, ...] = field(default_factory=tuple)

    def __str__(self):
        message = f"{self.param_id}: {self.details}"
        if self.class_name:
            message += f" (class: '{self.class_name}')"
        if self.argument_types:
            message += f" [argument types: {', '.join(self.argument_types)}]"
        return message

    def get_diagnostic_report(self) -> str:
        details = self.details
        if self.argument_types:
            details += f"\nActual argument types: {', '.join(self.argument_types)}"
        return format_diagnostic_report(
            error_type=self.kind.value,
            details=details,
            suggestion=_SUGGESTIONS[self.kind],
            context={'param_id': self.param_id, 'class_name': self.class_name}
        )


class BaseMappingFileError(DiagnosableError):
    """Base class for errors raised while reading a code-mapping file."""
    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Generic Mapping File Error",
            details=str(self),
            suggestion="Please check the format and content of the code-mapping YAML file.",
            context={}
        )


@dataclass(eq=False)
class MappingParsingError(BaseMappingFileError):
    """The mapping file is missing, unreadable, or not a YAML mapping."""
    details: str
    file_path: Optional[Path] = None

    def __str__(self):
        return f"{self.details} (file: '{self.file_path}')" if self.file_path else self.details

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Mapping File Error",
            details=self.details,
            suggestion="Check that the file exists, is readable and contains valid YAML.",
            context={'source_file': self.file_path}
        )


@dataclass(eq=False)
class MappingSchemaError(BaseMappingFileError):
    """The mapping file is valid YAML but violates the mapping schema."""
    errors: Dict[str, Any]
    file_path: Optional[Path] = None

    def __str__(self):
        return f"Mapping file '{self.file_path}' failed schema validation: {self.errors}"

    def get_diagnostic_report(self) -> str:
        details = "\n".join(self._flatten(self.errors))
        return format_diagnostic_report(
            error_type="Mapping Schema Violation",
            details=details or str(self.errors),
            suggestion="Each entry under 'mappings' needs an 'id' and a 'type'; 'constructor' is optional.",
            context={'source_file': self.file_path}
        )

    @classmethod
    def _flatten(cls, errors: Any, path: str = "") -> list:
        lines = []
        if isinstance(errors, dict):
            for key, value in errors.items():
                lines.extend(cls._flatten(value, f"{path}.{key}" if path else str(key)))
        elif isinstance(errors, list):
            for item in errors:
                lines.extend(cls._flatten(item, path))
        else:
            lines.append(f"{path}: {errors}")
        return lines
