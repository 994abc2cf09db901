# src/beamsim_core/model/__init__.py
from .signals import Signal, SignalKind
from .emitters import Emitter, EmitterKind, Reflector
from .clock import SimulationClock
from .scenario import Medium, ModelChangeEvent, ModelChangeListener, Scenario, default_scenario
from .exceptions import ConfigurationError, UnresolvedReferenceError, ScenarioLockedError

__all__ = [
    # Domain Types
    "Signal", "SignalKind",
    "Emitter", "EmitterKind", "Reflector",
    "Medium", "Scenario", "default_scenario",
    "SimulationClock",
    # Model-Changed Notifications
    "ModelChangeEvent", "ModelChangeListener",
    # Exceptions
    "ConfigurationError", "UnresolvedReferenceError", "ScenarioLockedError",
]
