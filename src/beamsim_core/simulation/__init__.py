# src/beamsim_core/simulation/__init__.py
from .exceptions import RegionEvaluationError
from .results import SampleMode, SampledField, RegionResult, AreaEvaluationResult
from .propagation import PropagationEngine
from .steering import EmitterDelay, compute_delays, apply_delays, steer
from .scheduler import RegionCallback, RegionTaskScheduler, SchedulerState, SimTask
from .execution import run_area_evaluation, evaluate_area

__all__ = [
    # Exceptions
    "RegionEvaluationError",
    # Result Contracts
    "SampleMode",
    "SampledField",
    "RegionResult",
    "AreaEvaluationResult",
    # Core Classes
    "PropagationEngine",
    "RegionTaskScheduler",
    "SchedulerState",
    "SimTask",
    "RegionCallback",
    # Beam Steering
    "EmitterDelay",
    "compute_delays",
    "apply_delays",
    "steer",
    # Facade
    "run_area_evaluation",
    "evaluate_area",
]
