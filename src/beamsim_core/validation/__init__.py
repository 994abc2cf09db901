# src/beamsim_core/validation/__init__.py
import logging
logger = logging.getLogger(__name__)

from .issues import ValidationIssue, ValidationIssueLevel
from .issue_codes import ScenarioIssueCode
from .scenario_validator import ScenarioValidator
from .exceptions import ScenarioValidationError

__all__ = [
    "ValidationIssue",
    "ValidationIssueLevel",
    "ScenarioIssueCode",
    "ScenarioValidator",
    "ScenarioValidationError",
]
