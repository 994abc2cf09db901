# src/beamsim_core/validation/issues.py
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)


class ValidationIssueLevel(Enum):
    """Severity level of a validation issue."""
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"

    def __str__(self):
        return self.value


@dataclass
class ValidationIssue:
    """
    Represents a single issue found while checking a scenario.

    `element_id` names the signal, emitter or reflector concerned, and `collection`
    the scenario collection it belongs to; both are None for scenario-wide issues.
    """
    level: ValidationIssueLevel
    code: str
    message: str
    element_id: Optional[str] = None
    collection: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        parts = [f"[{self.level.name} - {self.code}]"]
        if self.collection and self.element_id:
            parts.append(f"Element: {self.collection}/{self.element_id}")
        parts.append(f"Message: {self.message}")

        if self.details:
            filtered_details = {
                k: v for k, v in self.details.items()
                if k not in ['element_id', 'collection']
            }
            if filtered_details:
                details_str = ", ".join(f"{k}={v}" for k, v in sorted(filtered_details.items()))
                parts.append(f"Details: ({details_str})")

        return " ".join(parts)
