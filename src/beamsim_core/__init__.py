# src/beamsim_core/__init__.py
import logging
from .log_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)
logger.info("BeamSim Core package initialized.")

from .units import ureg, pint, Quantity
from . import vector_math
from .geometry import AxisAlignedRegion, model_to_normalized_coordinate
from .model import (
    Signal, SignalKind, Emitter, EmitterKind, Reflector,
    Medium, Scenario, SimulationClock, default_scenario,
)
from .parser import ScenarioParser, load_scenario
from .validation import ScenarioValidator
from .simulation import (
    PropagationEngine, RegionTaskScheduler, SampleMode, AreaEvaluationResult,
    compute_delays, apply_delays, steer, run_area_evaluation, evaluate_area,
)
from .errors import BeamSimError, ScenarioBuildError, SimulationRunError

__all__ = [
    # Units
    "ureg", "pint", "Quantity",
    # Vector Math & Geometry
    "vector_math", "AxisAlignedRegion", "model_to_normalized_coordinate",
    # Domain Model
    "Signal", "SignalKind", "Emitter", "EmitterKind", "Reflector",
    "Medium", "Scenario", "SimulationClock", "default_scenario",
    # Parser & Validation
    "ScenarioParser", "load_scenario", "ScenarioValidator",
    # Simulation
    "PropagationEngine", "RegionTaskScheduler", "SampleMode", "AreaEvaluationResult",
    "compute_delays", "apply_delays", "steer",
    "run_area_evaluation", "evaluate_area",
    # Top-Level Errors (Actionable Diagnostics)
    "BeamSimError", "ScenarioBuildError", "SimulationRunError",
]
