# src/dspace_core/errors.py
import logging
from abc import abstractmethod
from typing import Any, Dict, Protocol
from typing import runtime_checkable

logger = logging.getLogger(__name__)

# --- User-Facing Exception Hierarchy ---

class DesignSpaceError(Exception):
    """
    Raised to callers of a design space (descriptor tooling, samplers) when a
    parameter cannot be linked, ordered or instantiated. Its message is the
    rendered diagnostic report of the internal error that caused it.
    """
    pass


# --- Diagnostic Protocol & Base Exception ---

@runtime_checkable
class Diagnosable(Protocol):
    """
    Anything that can explain a failure in terms of the design space: which
    parameter, which mapped class, which mapping file. Samplers only rely on
    this method, never on the concrete error type.
    """
    def get_diagnostic_report(self) -> str:
        """Renders the failure as a multi-line report naming the offending parameter."""
        ...

class DiagnosableError(Exception, Diagnosable):
    """
    Common base of `ParameterError`, `MappingError` and the mapping-file
    errors. Each subclass carries its own fields (parameter id, error kind,
    class name, argument types) and decides which of them appear in its report.
    """
    @abstractmethod
    def get_diagnostic_report(self) -> str:
        """Subclasses render their own fields through `format_diagnostic_report`."""
        raise NotImplementedError

    def to_user_error(self) -> DesignSpaceError:
        """Wraps this error into the user-facing `DesignSpaceError`."""
        return DesignSpaceError(self.get_diagnostic_report())


# --- Stateless Formatting Utility ---

def format_diagnostic_report(
    error_type: str,
    details: str,
    suggestion: str,
    context: Dict[str, Any]
) -> str:
    """
    A stateless helper to format the final multi-line report string, ensuring a
    consistent look and feel for all user-facing diagnostics.

    Args:
        error_type: The high-level category of the error (e.g., "Mapping Not Found").
        details: A detailed, potentially multi-line description of the problem.
        suggestion: Actionable advice for the user to resolve the issue.
        context: A dictionary of contextual information (parameter id, class name,
                 source file, ...).

    Returns:
        A formatted, user-friendly diagnostic report string ready for display.
    """
    lines = [
        "\n",
        "============== dspace_core: Actionable Diagnostic Report ==============",
        f"Error Type:     {error_type}",
    ]
    if param_id := context.get('param_id'):
        lines.append(f"Parameter:      {param_id}")
    if class_name := context.get('class_name'):
        lines.append(f"Class:          {class_name}")
    if source_file := context.get('source_file'):
        lines.append(f"Source File:    {source_file}")
    if user_input := context.get('user_input'):
        lines.append(f"User Input:     '{user_input}'")

    lines.append("\nDetails:")
    for line in details.splitlines():
        lines.append(f"  {line}")

    if suggestion:
        lines.append("\nSuggestion:")
        for line in suggestion.splitlines():
            lines.append(f"  {line}")

    lines.append("=======================================================================")
    return "\n".join(lines)
