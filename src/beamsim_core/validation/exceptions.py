# src/beamsim_core/validation/exceptions.py
"""
Defines the diagnosable exception raised when a scenario fails validation.
"""
from typing import List

from .issues import ValidationIssue, ValidationIssueLevel
from ..errors import DiagnosableError, format_diagnostic_report


class ScenarioValidationError(DiagnosableError):
    """
    Raised when the `ScenarioValidator` finds one or more error-level issues.

    Only the ERROR issues of the list it is given are kept; warnings and info
    messages have already been logged by the validator.
    """
    def __init__(self, issues: List[ValidationIssue]):
        self.issues: List[ValidationIssue] = [
            issue for issue in issues if issue.level == ValidationIssueLevel.ERROR
        ]
        if not self.issues:
            summary_message = "ScenarioValidationError was raised with no error-level issues."
        else:
            summary_message = (
                f"Scenario validation failed with {len(self.issues)} error(s):\n"
                + "\n".join(f"  - {issue}" for issue in self.issues)
            )
        super().__init__(summary_message)

    def get_diagnostic_report(self) -> str:
        details = (
            f"One or more errors were found in the scenario definition.\n"
            f"Found {len(self.issues)} error(s). See details below:\n\n"
            + "\n".join(f"  - {issue}" for issue in self.issues)
        )

        # The first error is reported as the primary point of failure.
        context = {}
        if self.issues:
            first_issue = self.issues[0]
            context['identifier'] = first_issue.element_id
            context['collection'] = first_issue.collection

        return format_diagnostic_report(
            error_type="Scenario Validation Error",
            details=details,
            suggestion="Review and correct all validation errors listed above in the scenario definition.",
            context=context
        )
