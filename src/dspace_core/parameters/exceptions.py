# src/dspace_core/parameters/exceptions.py
"""
Defines the custom, diagnosable exceptions for the parameter subsystem.

Every error that can occur while declaring parameters, looking them up, or
linking their bound dependencies derives from `ParameterError`, which in turn
derives from `DiagnosableError`. Callers can therefore catch the whole family
with a single `except ParameterError:` and still render a full report through
`get_diagnostic_report()`.
"""

from dataclasses import dataclass
from typing import List

from ..errors import DiagnosableError, format_diagnostic_report


class ParameterError(DiagnosableError):
    """
    A concrete base class for all parameter-related errors.
    """
    def get_diagnostic_report(self) -> str:
        """
        Provides a generic, fallback diagnostic report for the base class.
        Subclasses are expected to provide more specific implementations.
        """
        return format_diagnostic_report(
            error_type="Generic Parameter Error",
            details=str(self),
            suggestion="Review the parameter declarations of your design space.",
            context={}
        )


@dataclass(eq=False)
class ParameterDefinitionError(ParameterError):
    """Raised when a parameter node is declared inconsistently (e.g., duplicate ids)."""
    param_id: str
    details: str

    def __str__(self):
        return f"Parameter '{self.param_id}': {self.details}"

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Invalid Parameter Definition",
            details=self.details,
            suggestion="Ensure every parameter id is unique within its scope.",
            context={'param_id': self.param_id}
        )


@dataclass(eq=False)
class ParameterLookupError(ParameterError):
    """Raised when a parameter id cannot be found in the parameter store."""
    param_id: str
    details: str

    def __str__(self):
        return f"Unknown parameter '{self.param_id}': {self.details}"

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Unknown Parameter",
            details=self.details,
            suggestion="Check the spelling of the id. Nested parameters are addressed by their dotted id (e.g., 'Mutation.Rate').",
            context={'param_id': self.param_id}
        )


@dataclass(eq=False)
class CircularParameterDependencyError(ParameterError):
    """Raised when the bound expressions of two or more parameters reference each other in a loop."""
    cycle: List[str]

    def __str__(self):
        # Display-friendly version of the cycle, e.g., A -> B -> A
        cycle_display = self.cycle + [self.cycle[0]] if self.cycle and self.cycle[0] != self.cycle[-1] else self.cycle
        return f"Circular dependency detected: {' -> '.join(cycle_display)}"

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Circular Parameter Dependency",
            details=f"The bound expressions of the following parameters reference each other:\n{' -> '.join(self.cycle)}",
            suggestion="Break the cycle by removing the reference from one of the minimum/maximum expressions in the loop.",
            context={'param_id': self.cycle[0] if self.cycle else None}
        )
