# src/beamsim_core/model/clock.py
import logging
from dataclasses import dataclass

from ..constants import PROGRESS_COMPLETE

logger = logging.getLogger(__name__)


@dataclass
class SimulationClock:
    """
    The simulation instant at which fields are evaluated, and the progress of the
    current evaluation run in percent.

    Time never advances on its own; only `set_time`, `advance` and `reset` change it.
    """
    sim_time: float = 0.0
    progress: float = 0.0

    def set_time(self, sim_time: float) -> None:
        if sim_time < 0:
            raise ValueError(f"Simulation time must be >= 0, got {sim_time}.")
        self.sim_time = float(sim_time)

    def advance(self, dt: float) -> float:
        """Moves the clock forward by `dt` seconds and returns the new time."""
        self.set_time(self.sim_time + dt)
        return self.sim_time

    def add_progress(self, increment: float) -> float:
        self.progress = min(PROGRESS_COMPLETE, self.progress + increment)
        return self.progress

    def reset(self) -> None:
        self.sim_time = 0.0
        self.progress = 0.0
