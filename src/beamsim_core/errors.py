# src/beamsim_core/errors.py
import logging
from typing import Any, Dict, Protocol, abstractmethod
from typing import runtime_checkable

logger = logging.getLogger(__name__)

# --- User-Facing Exception Hierarchy ---

class BeamSimError(Exception):
    """Base class for all custom, user-facing errors in BeamSim Core."""
    pass

class ScenarioBuildError(BeamSimError):
    """
    Raised when a scenario cannot be loaded or built, from YAML parsing to unit
    conversion. The message is a pre-formatted, user-friendly diagnostic report.
    """
    pass

class SimulationRunError(BeamSimError):
    """
    Raised when a field evaluation fails after a scenario has been built, such as a
    semantic validation error or an unresolvable emitter signal.
    The message is a pre-formatted, user-friendly diagnostic report.
    """
    pass


# --- Diagnostic Protocol & Base Exception ---

@runtime_checkable
class Diagnosable(Protocol):
    """
    A protocol for exceptions that can generate their own rich diagnostic report.
    """
    def get_diagnostic_report(self) -> str:
        """Generates a complete, user-friendly, multi-line report string."""
        ...

class DiagnosableError(Exception, Diagnosable):
    """
    A common, concrete base class for all internal exceptions that are diagnosable.

    It inherits from `Exception`, so it can be used in `except` clauses, and declares
    `get_diagnostic_report` abstract so that every subclass must provide a report.
    """
    @abstractmethod
    def get_diagnostic_report(self) -> str:
        """
        Abstract method to generate the diagnostic report.
        Subclasses MUST implement this.
        """
        raise NotImplementedError


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
        error_type: The high-level category of the error (e.g., "Unresolved Reference").
        details: A detailed, potentially multi-line description of the problem.
        suggestion: Actionable advice for the user to resolve the issue.
        context: A dictionary of contextual information (identifier, collection,
                 source file, region, simulation time).

    Returns:
        A formatted, user-friendly diagnostic report string ready for display.
    """
    lines = [
        "\n",
        "=============== BeamSim Core: Actionable Diagnostic Report ===============",
        f"Error Type:     {error_type}",
    ]
    if identifier := context.get('identifier'):
        lines.append(f"Identifier:     {identifier}")
    if collection := context.get('collection'):
        lines.append(f"Collection:     {collection}")
    if source_file := context.get('source_file'):
        lines.append(f"Source File:    {source_file}")
    if region := context.get('region'):
        lines.append(f"Region:         {region}")
    if (sim_time := context.get('sim_time')) is not None:
        lines.append(f"Sim Time:       {sim_time}")

    lines.append("\nDetails:")
    for line in details.splitlines():
        lines.append(f"  {line}")

    if suggestion:
        lines.append("\nSuggestion:")
        for line in suggestion.splitlines():
            lines.append(f"  {line}")

    lines.append("==========================================================================")
    return "\n".join(lines)
