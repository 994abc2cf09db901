# src/beamsim_core/model/exceptions.py
"""
Defines the diagnosable exceptions raised by the scenario domain model.

A scenario that cannot resolve one of its references cannot produce a single
sample, so these are configuration errors: they are surfaced immediately and never
retried.
"""
from dataclasses import dataclass
from typing import Tuple

from ..errors import DiagnosableError, format_diagnostic_report


class ConfigurationError(DiagnosableError):
    """Base class for all errors caused by an invalid scenario configuration."""
    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Scenario Configuration Error",
            details=str(self),
            suggestion="Review the scenario definition.",
            context={}
        )


@dataclass()
class UnresolvedReferenceError(ConfigurationError, KeyError):
    """
    Raised when a signal or emitter id cannot be found in the scenario collection
    that was searched.
    """
    identifier: str
    collection: str

    def __str__(self):
        return f"No such entry '{self.identifier}' in scenario {self.collection}."

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Unresolved Reference",
            details=str(self),
            suggestion=(f"Check the spelling of '{self.identifier}' and make sure it is declared "
                        f"in the scenario's {self.collection} before it is referenced."),
            context={'identifier': self.identifier, 'collection': self.collection}
        )


@dataclass()
class ScenarioLockedError(DiagnosableError):
    """
    Raised when a scenario is mutated while a region evaluation run is reading it.
    """
    operation: str
    emitter_ids: Tuple[str, ...]

    def __str__(self):
        return f"Cannot {self.operation} for emitter(s) {list(self.emitter_ids)} while an evaluation run is active."

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Scenario Modified During Evaluation",
            details=str(self),
            suggestion="Cancel the active run, or wait for it to complete, before changing emitter delays or amplitudes.",
            context={'identifier': ", ".join(self.emitter_ids)}
        )
