# src/beamsim_core/simulation/execution.py
"""
Provides the primary public API functions for evaluating a scenario's field.

This module is a thin facade over the `PropagationEngine` and the
`RegionTaskScheduler`. It validates the scenario, runs the region queue and
packages the outcome into an `AreaEvaluationResult`, presenting any diagnosable
failure to the caller as a single `SimulationRunError`.
"""
import asyncio
import logging
from typing import Optional

from ..constants import DEFAULT_SAMPLE_SPACING_M, DEFAULT_YIELD_DELAY_S, NEAR_FIELD_RADIUS_M
from ..errors import DiagnosableError, SimulationRunError, format_diagnostic_report
from ..model import Scenario, SimulationClock
from ..validation import ScenarioValidator, ScenarioValidationError, ValidationIssueLevel
from .propagation import PropagationEngine
from .results import AreaEvaluationResult, SampleMode
from .scheduler import RegionCallback, RegionTaskScheduler

logger = logging.getLogger(__name__)


async def run_area_evaluation(
    scenario: Scenario,
    num_sub_regions: int,
    sim_time: float = 0.0,
    sample_spacing: float = DEFAULT_SAMPLE_SPACING_M,
    mode: SampleMode = SampleMode.DISPLACEMENT,
    on_region_done: Optional[RegionCallback] = None,
    near_field_radius: float = NEAR_FIELD_RADIUS_M,
    yield_delay: float = DEFAULT_YIELD_DELAY_S,
) -> AreaEvaluationResult:
    """
    Evaluates the whole simulation area of `scenario` at `sim_time`, split into
    `num_sub_regions` horizontal strips processed one per event-loop turn.

    Args:
        scenario: The scenario to evaluate. Locked against emitter changes while
                  the run is active.
        num_sub_regions: Number of strips the area is split into.
        sim_time: Simulation instant, in seconds (>= 0).
        sample_spacing: Distance between field samples, in metres.
        mode: Whether coherence is computed in addition to displacement.
        on_region_done: Optional callback invoked as each strip completes, e.g. by
                        a renderer drawing strips progressively.
        near_field_radius: Clamp radius of the 1/distance spreading term.
        yield_delay: Seconds to yield to the event loop between strips.

    Returns:
        An AreaEvaluationResult. Strips that failed are included with their error.

    Raises:
        SimulationRunError: A user-friendly, diagnosable error if the scenario is
                            invalid or the run cannot be set up. The original
                            exception is chained for debugging.
    """
    try:
        logger.info(f"--- Starting area evaluation for '{scenario.name}' at t={sim_time} s ---")
        issues = ScenarioValidator(scenario).validate()
        if any(issue.level == ValidationIssueLevel.ERROR for issue in issues):
            raise ScenarioValidationError(issues)

        clock = SimulationClock()
        clock.set_time(sim_time)
        engine = PropagationEngine(scenario, near_field_radius=near_field_radius)
        scheduler = RegionTaskScheduler(
            engine, clock=clock, sample_spacing=sample_spacing, mode=mode, yield_delay=yield_delay
        )
        region_results = await scheduler.run(num_sub_regions, on_region_done)

        result = AreaEvaluationResult(
            region_results=tuple(region_results),
            sim_time=clock.sim_time,
            progress=clock.progress,
        )
        if result.failed_regions:
            logger.warning(f"Area evaluation finished with {len(result.failed_regions)} failed sub-region(s).")
        else:
            logger.info(f"Area evaluation of '{scenario.name}' successful ({len(region_results)} sub-region(s)).")
        return result

    except DiagnosableError as e:
        logger.error(f"A diagnosable error occurred during area evaluation: {e}")
        raise SimulationRunError(e.get_diagnostic_report()) from e

    except Exception as e:
        logger.critical(f"An unexpected internal error occurred during area evaluation: {e}", exc_info=True)
        report = format_diagnostic_report(
            error_type=f"An Unexpected Evaluation Error Occurred ({type(e).__name__})",
            details=f"The simulator encountered an unexpected internal error: {e}",
            suggestion="Check the evaluation arguments (sub-region count, sample spacing, time). If they are valid, this may be a bug.",
            context={'sim_time': sim_time}
        )
        raise SimulationRunError(report) from e


def evaluate_area(scenario: Scenario, num_sub_regions: int, sim_time: float = 0.0, **kwargs) -> AreaEvaluationResult:
    """
    Synchronous convenience wrapper around `run_area_evaluation` for callers without
    an event loop. Runs a fresh loop with `asyncio.run`, so it must not be called
    from inside a running loop.
    """
    return asyncio.run(run_area_evaluation(scenario, num_sub_regions, sim_time=sim_time, **kwargs))
