# --- src/beamsim_core/constants.py ---
import logging

logger = logging.getLogger(__name__)

# --- Physical Defaults ---

#: Speed of sound in air at roughly 20 degC, the default propagation medium.
SPEED_OF_SOUND_AIR_M_PER_S: float = 343.0

# --- Domain Model Defaults ---

DEFAULT_SIGNAL_ID: str = "S0"
DEFAULT_SIGNAL_FREQUENCY_HZ: float = 440.0
DEFAULT_EMITTER_ID: str = "E0"
DEFAULT_EMITTER_AMPLITUDE: float = 30.0
DEFAULT_SIM_AREA_MIN_CORNER = (-10.0, -10.0)
DEFAULT_SIM_AREA_SIZE = (20.0, 20.0)

# --- Numerical Constants for Simulation ---

#: Distances from an emitter below this radius are clamped to it when computing the
#: 1/r spreading term, so that sampling at (or next to) an emitter stays finite.
#: Value: 1 mm.
NEAR_FIELD_RADIUS_M: float = 1.0e-3

#: Default spacing between field samples when a region is evaluated. Value: 5 cm.
DEFAULT_SAMPLE_SPACING_M: float = 0.05

#: Delay between two scheduled region tasks, giving the host event loop a turn.
DEFAULT_YIELD_DELAY_S: float = 0.005

#: Total progress of a run, in percent.
PROGRESS_COMPLETE: float = 100.0

logger.debug("Defined core constants: NEAR_FIELD_RADIUS_M, DEFAULT_SAMPLE_SPACING_M, DEFAULT_YIELD_DELAY_S")
