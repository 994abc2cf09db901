# src/beamsim_core/parser/exceptions.py
"""
Defines the diagnosable exceptions for the scenario file parsing stage.

`ParsingError` covers file-level and syntax problems, `SchemaValidationError`
structural problems found by the Cerberus schema, and `UnitConversionError`
physical values whose units cannot be converted to the SI unit a field expects.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Union

from ..errors import DiagnosableError, format_diagnostic_report


class BaseParsingError(DiagnosableError):
    """A local base class for all scenario file parsing errors."""
    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Generic Parsing Error",
            details=str(self),
            suggestion="Please check the format and content of the scenario YAML file.",
            context={}
        )


@dataclass(frozen=True)
class ParsingError(BaseParsingError):
    """
    Raised for file-system issues or YAML that cannot be loaded at all: a missing
    file, an empty document, invalid syntax or a root that is not a mapping.
    """
    details: str
    file_path: Union[Path, str]

    def __str__(self):
        return f"Parsing error in '{self.file_path}': {self.details}"

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="YAML Parsing or File Error",
            details=self.details,
            suggestion="Ensure the file exists, has the correct read permissions, and contains valid YAML syntax.",
            context={'source_file': self.file_path}
        )


@dataclass(frozen=True)
class SchemaValidationError(BaseParsingError):
    """
    Raised when the YAML is syntactically valid but does not match the scenario
    schema (missing keys, invalid identifiers, duplicate ids, malformed vectors).
    """
    errors: Dict[str, Any]
    file_path: Union[Path, str]

    def _error_lines(self):
        return [f"  - Field '{k}': {v[0]}" for k, v in sorted(self.errors.items())]

    def __str__(self):
        return f"YAML schema validation failed for '{self.file_path}':\n" + "\n".join(self._error_lines())

    def get_diagnostic_report(self) -> str:
        details = (
            "The structure of the scenario file does not conform to the required schema.\n"
            f"See details for {len(self.errors)} issue(s) below:\n\n" + "\n".join(self._error_lines())
        )
        return format_diagnostic_report(
            error_type="YAML Schema Validation Error",
            details=details,
            suggestion="Correct the specified fields to match the documented scenario format. Check for invalid identifiers, duplicate ids, or positions that are not two-element lists.",
            context={'source_file': self.file_path}
        )


@dataclass(frozen=True)
class UnitConversionError(BaseParsingError):
    """Raised when a physical value cannot be converted to the unit its field expects."""
    field_path: str
    raw_value: Any
    target_units: str
    details: str
    file_path: Union[Path, str]

    def __str__(self):
        return f"Cannot convert '{self.raw_value}' for field '{self.field_path}' to {self.target_units}: {self.details}"

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Unit Conversion Error",
            details=str(self),
            suggestion=(f"Give '{self.field_path}' as a plain number in {self.target_units}, or as a string with "
                        f"units compatible with {self.target_units} (e.g. '40 kHz', '25 us', '343 m/s')."),
            context={'identifier': self.field_path, 'source_file': self.file_path}
        )
