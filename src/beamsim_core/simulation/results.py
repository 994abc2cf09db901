# src/beamsim_core/simulation/results.py
"""
Defines the explicit data contracts produced by field evaluation.

The renderer collaborator receives these objects instead of raw arrays or tuples:
`SampledField` is the evaluated grid of one region, `RegionResult` is what a
scheduled region task reports through its completion callback, and
`AreaEvaluationResult` is the facade's result for a whole run.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import numpy as np

from ..geometry import AxisAlignedRegion
from ..errors import DiagnosableError


class SampleMode(Enum):
    """
    What a region evaluation produces. Displacement is always computed; coherence
    only for the modes that include it.
    """
    DISPLACEMENT = "Disp"
    COHERENCE = "Cohere"
    BOTH = "Cohere+Disp"

    @property
    def includes_coherence(self) -> bool:
        return self in (SampleMode.COHERENCE, SampleMode.BOTH)

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class SampledField:
    """
    The evaluated wave state of one region at a single simulation instant.

    Attributes:
        region: The evaluated region.
        sim_time: The simulation time of the evaluation, in seconds.
        mode: The sample mode the field was evaluated with.
        xs: 1D array of sample x coordinates, one per column, increasing.
        ys: 1D array of sample y coordinates, one per row. Row 0 lies on the
            region's top edge, so ys is decreasing (image row order).
        displacement: 2D array (rows, cols) of superposed displacement.
        coherence: 2D array (rows, cols) of the per-sample standard deviation of
                   the individual emitter contributions, or None when the mode does
                   not include coherence.
        peak_displacement: Largest displacement value in the region.
        amplitude_sum: Sum of all emitter amplitudes in the scenario, the scale a
                       renderer normalises displacement against.
        emitter_ids: Ids of the emitters positioned inside the region.
    """
    region: AxisAlignedRegion
    sim_time: float
    mode: SampleMode
    xs: np.ndarray
    ys: np.ndarray
    displacement: np.ndarray
    coherence: Optional[np.ndarray]
    peak_displacement: float
    amplitude_sum: float
    emitter_ids: Tuple[str, ...]

    @property
    def shape(self) -> Tuple[int, int]:
        return self.displacement.shape


@dataclass(frozen=True)
class RegionResult:
    """
    The outcome of one scheduled region task.

    Exactly one of `field` and `error` is set: a failed evaluation is reported with
    the error that caused it rather than aborting the run.
    """
    region: AxisAlignedRegion
    index: int
    field: Optional[SampledField] = None
    error: Optional[DiagnosableError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class AreaEvaluationResult:
    """
    The user-facing result of evaluating a whole simulation area.

    Attributes:
        region_results: One RegionResult per sub-region, in completion order, which
                        is bottom strip first.
        sim_time: The simulation time of the evaluation.
        progress: Final run progress in percent.
    """
    region_results: Tuple[RegionResult, ...]
    sim_time: float
    progress: float

    @property
    def failed_regions(self) -> Tuple[RegionResult, ...]:
        return tuple(result for result in self.region_results if not result.ok)

    def stitch(self, attribute: str = "displacement") -> np.ndarray:
        """
        Assembles the per-strip grids of `attribute` ('displacement' or 'coherence')
        into one array covering the whole area, top row first.

        Raises:
            ValueError: If any region failed, or the attribute was not computed.
        """
        if self.failed_regions:
            failed = [result.index for result in self.failed_regions]
            raise ValueError(f"Cannot stitch '{attribute}': region(s) {failed} failed to evaluate.")
        grids = []
        # Strips are ordered bottom to top; image rows run top to bottom.
        for result in reversed(self.region_results):
            grid = getattr(result.field, attribute)
            if grid is None:
                raise ValueError(f"Region {result.index} has no '{attribute}' data for mode '{result.field.mode}'.")
            grids.append(grid)
        return np.vstack(grids)
