# src/beamsim_core/simulation/exceptions.py
"""
Defines the diagnosable exceptions specific to field evaluation and scheduling.
"""
from dataclasses import dataclass

from ..errors import DiagnosableError, format_diagnostic_report
from ..geometry import AxisAlignedRegion


@dataclass()
class RegionEvaluationError(DiagnosableError):
    """
    Wraps any failure raised while a scheduled task evaluated its region, adding the
    region and simulation time in which it occurred.

    The scheduler reports it through the task's completion callback so that one
    failing region does not abort the remaining ones.
    """
    region: AxisAlignedRegion
    sim_time: float
    original_error: Exception

    def __str__(self):
        return f"Evaluation of {self.region} at t={self.sim_time} s failed: {self.original_error}"

    def get_diagnostic_report(self) -> str:
        if isinstance(self.original_error, DiagnosableError):
            root_cause = self.original_error.get_diagnostic_report()
        else:
            root_cause = f"{type(self.original_error).__name__}: {self.original_error}"
        return format_diagnostic_report(
            error_type="Region Evaluation Failure",
            details=(
                f"An error occurred while evaluating the sub-region {self.region}.\n\n"
                f"--- Details of the Root Cause ---\n{root_cause}"
            ),
            suggestion="Address the root cause detailed above. Other sub-regions of the run were still evaluated.",
            context={'region': str(self.region), 'sim_time': f"{self.sim_time} s"}
        )
