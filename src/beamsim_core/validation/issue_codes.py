# src/beamsim_core/validation/issue_codes.py
import logging
from enum import Enum

logger = logging.getLogger(__name__)


class ScenarioIssueCode(Enum):
    """
    Registry of scenario validation issue codes and their message templates.
    Each enum member's value is a tuple: (code_str, message_template_str).
    """

    # --- Medium Issues (MEDIUM_...) ---
    MEDIUM_SPEED_NONPOSITIVE = ("MEDIUM_SPEED_NONPOSITIVE", "Propagation speed must be positive, got {propagation_speed} m/s.")

    # --- Signal Issues (SIG_...) ---
    SIG_FREQ_NONPOSITIVE = ("SIG_FREQ_NONPOSITIVE", "Signal '{element_id}' has non-positive frequency {frequency} Hz.")
    SIG_DURATION_NEGATIVE = ("SIG_DURATION_NEGATIVE", "Signal '{element_id}' has negative duration {duration} s.")
    SIG_DUPLICATE_ID = ("SIG_DUPLICATE_ID", "Signal id '{element_id}' is defined {count} times; lookups use the first definition.")

    # --- Emitter Issues (EMIT_...) ---
    EMIT_NONE = ("EMIT_NONE", "Scenario '{scenario_name}' has no emitters; the field is zero everywhere.")
    EMIT_SIGNAL_UNRESOLVED = ("EMIT_SIGNAL_UNRESOLVED", "Emitter '{element_id}' references unknown signal '{signal_id}'. Available signals: {available_signals}.")
    EMIT_DUPLICATE_ID = ("EMIT_DUPLICATE_ID", "Emitter id '{element_id}' is defined {count} times; lookups use the first definition.")
    EMIT_INFO_DIRECTIONAL = ("EMIT_INFO_DIRECTIONAL", "Emitter '{element_id}' is directional but will be evaluated as an omnidirectional point source.")
    EMIT_INFO_OUTSIDE_AREA = ("EMIT_INFO_OUTSIDE_AREA", "Emitter '{element_id}' at {position} lies outside the simulation area {sim_area}.")

    # --- Reflector Issues (REFL_...) ---
    REFL_INFO_IGNORED = ("REFL_INFO_IGNORED", "Scenario declares {count} reflector(s); reflections are not modelled and they will be ignored.")

    @property
    def code(self) -> str:
        return self.value[0]

    @property
    def template(self) -> str:
        return self.value[1]

    def format_message(self, **kwargs) -> str:
        """Formats the message template with provided keyword arguments."""
        try:
            return self.template.format(**kwargs)
        except KeyError as e:
            logger.error(f"Missing key {e} for formatting message template of {self.name} (code: {self.code}): '{self.template}'. Provided args: {kwargs}")
            return f"Error formatting message for {self.code}: Missing key {e}. Template: '{self.template}' Args: {kwargs}"
