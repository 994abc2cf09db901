# src/beamsim_core/parser/parser.py
import logging
import math
import re
import string
from pathlib import Path
from typing import Any, Dict, List, Union

import cerberus
import yaml
from pint.errors import PintError

from ..errors import DiagnosableError, ScenarioBuildError, format_diagnostic_report
from ..geometry import AxisAlignedRegion
from ..model import Emitter, EmitterKind, Medium, Reflector, Scenario, Signal, SignalKind
from ..units import to_si_magnitude
from .exceptions import ParsingError, SchemaValidationError, UnitConversionError

logger = logging.getLogger(__name__)

# Identifiers start with a letter or underscore and contain only letters, digits
# and underscores.
ID_REGEX = r"^[a-zA-Z_][a-zA-Z0-9_]*$"
ALLOWED_ID_CHARS = set(string.ascii_letters + string.digits + "_")

SourceName = Union[Path, str]


class EnhancedValidator(cerberus.Validator):
    """Custom Cerberus validator enforcing identifier syntax and per-collection unique ids."""
    def __init__(self, *args, **kwargs):
        super(EnhancedValidator, self).__init__(*args, **kwargs)
        self.rules['id_regex'] = {'schema': {'type': 'boolean'}}
        self.rules['unique_elements_by_key'] = {'schema': {'type': 'string'}}

    def _validate_id_regex(self, constraint: bool, field: str, value: Any):
        """
        Validates that a string is a valid scenario identifier.
        The rule's arguments are validated against this schema:
        {'type': 'boolean'}
        """
        if not constraint: return
        if not isinstance(value, str):
            self._error(field, "must be a string to be validated by id_regex.")
            return

        if not re.match(ID_REGEX, value):
            invalid_chars = sorted(list(set(value) - ALLOWED_ID_CHARS))
            message = (
                f"Identifier '{value}' is invalid. Identifiers must start with a letter or underscore, "
                "and can only contain letters, numbers, and underscores. "
                f"This identifier contains the following forbidden character(s): {invalid_chars}"
            )
            self._error(field, message)

    def _validate_unique_elements_by_key(self, key_for_uniqueness: str, field: str, value: List[Dict]):
        """
        Validates that all dictionaries in a list have a unique value for a given key.
        The rule's arguments are validated against this schema:
        {'type': 'string'}
        """
        if not isinstance(value, list):
            return

        seen_keys = set()
        duplicates = []
        for item in value:
            if not isinstance(item, dict):
                continue
            item_key = item.get(key_for_uniqueness)
            if item_key is not None:
                if item_key in seen_keys:
                    duplicates.append(item_key)
                else:
                    seen_keys.add(item_key)

        if duplicates:
            unique_duplicates = sorted(list(set(duplicates)))
            self._error(field, f"Duplicate values found for key '{key_for_uniqueness}': {unique_duplicates}")


class ScenarioParser:
    """
    Parses and validates a scenario YAML document and builds the Scenario it describes.

    Physical values may be plain numbers, taken in SI units, or strings with units
    that pint converts ('343 m/s', '40 kHz', '25 us', '90 deg'). Positions, sizes
    and directions are two-element lists in metres.
    """
    _id_rule = {"type": "string", "required": True, "empty": False, "id_regex": True}
    _ref_rule = {"type": "string", "required": True, "empty": False, "id_regex": True}
    _vector_rule = {"type": "list", "minlength": 2, "maxlength": 2, "schema": {"type": "number"}}
    _quantity_rule = {"type": ["string", "number"]}

    _signal_schema = {
        "id": _id_rule,
        "type": {"type": "string", "allowed": [k.value for k in SignalKind], "default": SignalKind.SINE.value},
        "frequency": {**_quantity_rule, "required": True},
        "duration": {**_quantity_rule, "required": False, "nullable": True},
    }

    _emitter_schema = {
        "id": _id_rule,
        "signal": _ref_rule,
        "position": {**_vector_rule, "required": True},
        "type": {"type": "string", "allowed": [k.value for k in EmitterKind], "default": EmitterKind.OMNI.value},
        "amplitude": {"type": "number", "required": False},
        "delay": {**_quantity_rule, "required": False},
        "direction": {**_vector_rule, "required": False},
        "half_angle": {**_quantity_rule, "required": False},
    }

    _reflector_schema = {
        "id": _id_rule,
        "position": {**_vector_rule, "required": True},
        "geometry": {"type": "string", "allowed": ["Circle"], "default": "Circle"},
        "radius": {**_quantity_rule, "required": False},
    }

    _schema = {
        "name": {"type": "string", "required": False, "empty": False},
        "medium": {
            "type": "dict", "required": False, "schema": {
                "propagation_speed": {**_quantity_rule, "required": True},
            },
        },
        "sim_area": {
            "type": "dict", "required": True, "schema": {
                "min_corner": {**_vector_rule, "required": True},
                "size": {**_vector_rule, "required": True},
            },
        },
        "signals": {"type": "list", "required": True, "unique_elements_by_key": "id", "schema": {"type": "dict", "schema": _signal_schema}},
        "emitters": {"type": "list", "required": True, "unique_elements_by_key": "id", "schema": {"type": "dict", "schema": _emitter_schema}},
        "reflectors": {"type": "list", "required": False, "unique_elements_by_key": "id", "schema": {"type": "dict", "schema": _reflector_schema}},
    }

    def __init__(self):
        self._validator = EnhancedValidator(self._schema)
        self._validator.allow_unknown = False
        logger.info("ScenarioParser initialized with strict structural validation rules.")

    def parse_file(self, yaml_path: Union[str, Path]) -> Scenario:
        """Loads, validates and builds the scenario described by a YAML file."""
        resolved_path = Path(yaml_path).resolve()
        logger.info(f"Parsing scenario file: {resolved_path}")
        content = self._load_yaml(resolved_path)
        return self.parse_data(content, source=resolved_path, default_name=resolved_path.stem)

    def parse_text(self, text: str, source: SourceName = "<string>") -> Scenario:
        """Loads, validates and builds the scenario described by a YAML string."""
        try:
            content = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ParsingError(details=f"Invalid YAML syntax: {e}", file_path=source) from e
        self._check_root(content, source)
        return self.parse_data(content, source=source)

    def parse_data(self, content: Dict[str, Any], source: SourceName = "<data>", default_name: str = "scenario") -> Scenario:
        """Validates an already loaded document and builds its Scenario."""
        if not self._validator.validate(content):
            raise SchemaValidationError(errors=self._validator.errors, file_path=source)
        data = self._validator.document
        return self._build_scenario(data, source, default_name)

    # --- Scenario synthesis ---

    def _build_scenario(self, data: Dict[str, Any], source: SourceName, default_name: str) -> Scenario:
        medium = Medium()
        if "medium" in data:
            medium = Medium(propagation_speed=self._convert(
                data["medium"]["propagation_speed"], "m/s", "medium.propagation_speed", source))

        area = data["sim_area"]
        try:
            sim_area = AxisAlignedRegion(area["min_corner"], area["size"])
        except ValueError as e:
            raise SchemaValidationError(errors={"sim_area.size": [str(e)]}, file_path=source) from e

        signals = [self._build_signal(raw, source) for raw in data["signals"]]
        emitters = [self._build_emitter(raw, source) for raw in data["emitters"]]
        reflectors = [self._build_reflector(raw, source) for raw in data.get("reflectors", [])]

        scenario = Scenario(
            name=data.get("name", default_name),
            medium=medium,
            sim_area=sim_area,
            signals=signals,
            emitters=emitters,
            reflectors=reflectors,
        )
        logger.info(f"Built {scenario!r} from '{source}'.")
        return scenario

    def _build_signal(self, raw: Dict[str, Any], source: SourceName) -> Signal:
        prefix = f"signals.{raw['id']}"
        duration = raw.get("duration")
        return Signal(
            id=raw["id"],
            frequency=self._convert(raw["frequency"], "Hz", f"{prefix}.frequency", source),
            kind=SignalKind(raw.get("type", SignalKind.SINE.value)),
            duration=None if duration is None else self._convert(duration, "s", f"{prefix}.duration", source),
        )

    def _build_emitter(self, raw: Dict[str, Any], source: SourceName) -> Emitter:
        prefix = f"emitters.{raw['id']}"
        kwargs: Dict[str, Any] = {}
        if "amplitude" in raw:
            kwargs["amplitude"] = float(raw["amplitude"])
        if "delay" in raw:
            kwargs["delay"] = self._convert(raw["delay"], "s", f"{prefix}.delay", source)
        if "direction" in raw:
            kwargs["direction"] = tuple(raw["direction"])
        if "half_angle" in raw:
            kwargs["half_angle_rad"] = self._convert(raw["half_angle"], "rad", f"{prefix}.half_angle", source)
        return Emitter(
            id=raw["id"],
            signal_id=raw["signal"],
            position=tuple(raw["position"]),
            kind=EmitterKind(raw.get("type", EmitterKind.OMNI.value)),
            **kwargs,
        )

    def _build_reflector(self, raw: Dict[str, Any], source: SourceName) -> Reflector:
        radius = 0.0
        if "radius" in raw:
            radius = self._convert(raw["radius"], "m", f"reflectors.{raw['id']}.radius", source)
        return Reflector(
            id=raw["id"],
            position=(float(raw["position"][0]), float(raw["position"][1])),
            geometry=raw.get("geometry", "Circle"),
            radius=radius,
        )

    @staticmethod
    def _convert(raw_value: Any, target_units: str, field_path: str, source: SourceName) -> float:
        try:
            value = to_si_magnitude(raw_value, target_units)
        except (PintError, ValueError, TypeError) as e:
            raise UnitConversionError(
                field_path=field_path, raw_value=raw_value, target_units=target_units,
                details=str(e), file_path=source
            ) from e
        if not math.isfinite(value):
            raise UnitConversionError(
                field_path=field_path, raw_value=raw_value, target_units=target_units,
                details="value is not finite", file_path=source
            )
        return value

    # --- File loading ---

    def _load_yaml(self, source: Path) -> Dict[str, Any]:
        """Loads and performs basic sanity checks on a YAML file."""
        if not source.is_file():
            raise ParsingError(details=f"Scenario file not found at path: {source}", file_path=source)
        try:
            with source.open("r", encoding="utf-8") as f:
                content = yaml.safe_load(f)
        except PermissionError as e:
            raise ParsingError(details=f"Permission denied when trying to read file: {e}", file_path=source) from e
        except yaml.YAMLError as e:
            raise ParsingError(details=f"Invalid YAML syntax: {e}", file_path=source) from e
        self._check_root(content, source)
        return content

    @staticmethod
    def _check_root(content: Any, source: SourceName) -> None:
        if content is None:
            raise ParsingError(details="The YAML document is empty or contains no valid content.", file_path=source)
        if not isinstance(content, dict):
            raise ParsingError(details="The root of the YAML document must be a dictionary (mapping).", file_path=source)


def load_scenario(yaml_path: Union[str, Path]) -> Scenario:
    """
    Public entry point for building a Scenario from a YAML file.

    Raises:
        ScenarioBuildError: A user-friendly diagnostic report for any parsing, schema
                            or unit error. The original exception is chained.
    """
    try:
        return ScenarioParser().parse_file(yaml_path)
    except DiagnosableError as e:
        logger.error(f"A diagnosable error occurred while loading scenario '{yaml_path}': {e}")
        raise ScenarioBuildError(e.get_diagnostic_report()) from e
    except Exception as e:
        logger.critical(f"An unexpected internal error occurred while loading scenario '{yaml_path}': {e}", exc_info=True)
        report = format_diagnostic_report(
            error_type=f"An Unexpected Scenario Loading Error Occurred ({type(e).__name__})",
            details=f"The scenario loader encountered an unexpected internal error: {e}",
            suggestion="Check the scenario file for unusual content. If it appears valid, this may be a bug.",
            context={'source_file': yaml_path}
        )
        raise ScenarioBuildError(report) from e
