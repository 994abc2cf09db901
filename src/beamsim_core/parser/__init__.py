# src/beamsim_core/parser/__init__.py
from .parser import ScenarioParser, EnhancedValidator, load_scenario
from .exceptions import ParsingError, SchemaValidationError, UnitConversionError

__all__ = [
    # Parser
    "ScenarioParser",
    "EnhancedValidator",
    "load_scenario",
    # Exceptions
    "ParsingError",
    "SchemaValidationError",
    "UnitConversionError",
]
