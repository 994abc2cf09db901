# src/beamsim_core/simulation/propagation.py
"""
Defines the `PropagationEngine`, the wave-physics model of the simulator.

Every emitter is an omnidirectional point source. Its contribution at a point is
its signal evaluated at the retarded time (simulation time minus propagation delay
minus transmit delay), scaled by amplitude and attenuated by 1/distance. The field
at a point is the plain superposition of all contributions.

Near-field policy: the spreading term uses max(distance, near_field_radius), so the
field stays finite at and around an emitter's own position.
"""
import logging
import math
from typing import List, Sequence, Tuple

import numpy as np

from ..constants import DEFAULT_SAMPLE_SPACING_M, NEAR_FIELD_RADIUS_M
from ..geometry import AxisAlignedRegion
from ..model import Emitter, Scenario, Signal
from .. import vector_math
from .results import SampledField, SampleMode

logger = logging.getLogger(__name__)


class PropagationEngine:
    """
    A stateless service that evaluates the superposed wave field of a Scenario.

    The engine only reads the scenario, so repeated evaluations with identical
    arguments and no intervening scenario changes return identical results.
    """
    def __init__(self, scenario: Scenario, near_field_radius: float = NEAR_FIELD_RADIUS_M):
        """
        Args:
            scenario: The scenario to evaluate.
            near_field_radius: Distances below this radius (m) are clamped to it in
                               the 1/distance spreading term. Must be > 0.
        """
        if near_field_radius <= 0:
            raise ValueError(f"near_field_radius must be > 0, got {near_field_radius}.")
        self.scenario = scenario
        self.near_field_radius = float(near_field_radius)
        logger.debug(f"PropagationEngine initialized for '{scenario.name}' (near-field radius {near_field_radius} m).")

    # --- Point evaluation ---

    @staticmethod
    def signal_value(signal: Signal, time_offset: float) -> float:
        """
        Value of `signal` at `time_offset` seconds after its start.

        Signals with a duration are zero outside [0, duration]. Without a duration
        the carrier is continuous, so negative offsets are evaluated as well.
        """
        if signal.duration is not None and (time_offset < 0 or time_offset > signal.duration):
            return 0.0
        return math.sin(2 * math.pi * signal.frequency * time_offset)

    def displacement_at(self, emitter: Emitter, point: Sequence[float], sim_time: float) -> float:
        """
        Displacement caused by a single emitter at `point` and absolute `sim_time`.

        Raises:
            UnresolvedReferenceError: If the emitter's signal is not in the scenario.
        """
        signal = self.scenario.signal_for(emitter)
        distance = vector_math.magnitude(vector_math.sub(point, emitter.position))
        propagation_delay = distance / self.scenario.propagation_speed
        retarded_time = sim_time - propagation_delay - emitter.delay
        cycle = self.signal_value(signal, retarded_time)
        return emitter.amplitude * cycle / max(distance, self.near_field_radius)

    def contributions_at(self, point: Sequence[float], sim_time: float) -> np.ndarray:
        """Per-emitter displacement contributions at `point`, in scenario emitter order."""
        return np.array(
            [self.displacement_at(emitter, point, sim_time) for emitter in self.scenario.emitters],
            dtype=float,
        )

    def field_at(self, point: Sequence[float], sim_time: float) -> float:
        """Superposed displacement of all emitters at `point`."""
        return float(sum(self.displacement_at(emitter, point, sim_time) for emitter in self.scenario.emitters))

    def coherence_at(self, point: Sequence[float], sim_time: float) -> float:
        """
        Dispersion of the individual emitter contributions at `point`: the population
        standard deviation around their mean. Lower values indicate a more coherent
        superposition. Zero when the scenario has fewer than two emitters.
        """
        contributions = self.contributions_at(point, sim_time)
        if contributions.size == 0:
            return 0.0
        return float(np.std(contributions))

    # --- Region evaluation ---

    @staticmethod
    def sample_grid(region: AxisAlignedRegion, sample_spacing: float) -> Tuple[np.ndarray, np.ndarray]:
        """
        Sample coordinates of a region's evaluation grid.

        The grid has round(width/spacing) columns and round(height/spacing) rows (at
        least one of each). Column i sits at min_x + i*width/cols and row j at
        top - j*height/rows, so row 0 lies on the top edge.

        Returns:
            (xs, ys): 1D arrays of column x coordinates and row y coordinates.
        """
        if sample_spacing <= 0:
            raise ValueError(f"sample_spacing must be > 0, got {sample_spacing}.")
        cols = max(1, int(round(region.width / sample_spacing)))
        rows = max(1, int(round(region.height / sample_spacing)))
        min_x = region.min_corner[0]
        top = region.top_left()[1]
        xs = min_x + np.arange(cols, dtype=float) * (region.width / cols)
        ys = top - np.arange(rows, dtype=float) * (region.height / rows)
        return xs, ys

    def sample_region(
        self,
        region: AxisAlignedRegion,
        sim_time: float,
        sample_spacing: float = DEFAULT_SAMPLE_SPACING_M,
        mode: SampleMode = SampleMode.DISPLACEMENT,
    ) -> SampledField:
        """
        Evaluates the field over the sampling grid of `region` at one instant.

        This is the numerically hot routine: cost grows with rows x cols x emitters.
        Each emitter's signal is resolved once per call.

        Raises:
            UnresolvedReferenceError: If an emitter's signal is not in the scenario.
        """
        xs, ys = self.sample_grid(region, sample_spacing)
        grid_x, grid_y = np.meshgrid(xs, ys)
        emitters = self.scenario.emitters

        displacement = np.zeros(grid_x.shape, dtype=float)
        contributions: List[np.ndarray] = []
        for emitter in emitters:
            signal = self.scenario.signal_for(emitter)
            contribution = self._displacement_grid(emitter, signal, grid_x, grid_y, sim_time)
            displacement += contribution
            if mode.includes_coherence:
                contributions.append(contribution)

        coherence = None
        if mode.includes_coherence:
            if contributions:
                coherence = np.std(np.stack(contributions), axis=0)
            else:
                coherence = np.zeros(grid_x.shape, dtype=float)

        logger.debug(f"Sampled {region} on a {grid_x.shape[0]}x{grid_x.shape[1]} grid for {len(emitters)} emitter(s).")
        return SampledField(
            region=region,
            sim_time=sim_time,
            mode=mode,
            xs=xs,
            ys=ys,
            displacement=displacement,
            coherence=coherence,
            peak_displacement=float(np.max(displacement)),
            amplitude_sum=self.scenario.amplitude_sum(),
            emitter_ids=tuple(emitter.id for emitter in emitters if region.contains(emitter.position)),
        )

    def _displacement_grid(
        self, emitter: Emitter, signal: Signal, grid_x: np.ndarray, grid_y: np.ndarray, sim_time: float
    ) -> np.ndarray:
        """Vectorised counterpart of `displacement_at` over a coordinate grid."""
        distance = np.hypot(grid_x - emitter.position[0], grid_y - emitter.position[1])
        retarded_time = sim_time - distance / self.scenario.propagation_speed - emitter.delay
        cycle = np.sin(2 * np.pi * signal.frequency * retarded_time)
        if signal.duration is not None:
            outside = (retarded_time < 0) | (retarded_time > signal.duration)
            cycle = np.where(outside, 0.0, cycle)
        return emitter.amplitude * cycle / np.maximum(distance, self.near_field_radius)
