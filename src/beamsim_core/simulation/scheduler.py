# src/beamsim_core/simulation/scheduler.py
"""
Defines the `RegionTaskScheduler`, which evaluates a simulation area as a queue of
horizontal strips, one strip per scheduling turn.

The scheduler is cooperative and single-threaded. Between two strips the drain
coroutine awaits `asyncio.sleep(yield_delay)`, handing the event loop back to the
host (for example a UI) so it stays responsive during long evaluations. No
suspension happens while a single strip is evaluated.

Run semantics:
- Tasks complete in FIFO order (bottom strip first) and each one invokes its
  completion callback exactly once with a `RegionResult` and a flag telling
  whether the queue is now empty.
- Starting a run while another is active discards the old queue: the latest run
  wins. The superseded drain notices the generation change before its next
  dequeue and stops.
- `cancel()` clears the queue; cancellation is only observed between tasks.
- A strip whose evaluation raises is reported through its callback with
  `RegionResult.error` set, and the remaining strips are still evaluated.
- While a run is active the scenario is locked against delay/amplitude changes.
"""
import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Deque, List, Optional

from ..constants import DEFAULT_SAMPLE_SPACING_M, DEFAULT_YIELD_DELAY_S, PROGRESS_COMPLETE
from ..geometry import AxisAlignedRegion
from ..model import Scenario, SimulationClock
from .exceptions import RegionEvaluationError
from .propagation import PropagationEngine
from .results import RegionResult, SampleMode

logger = logging.getLogger(__name__)

RegionCallback = Callable[[RegionResult, bool], None]


class SchedulerState(Enum):
    IDLE = "Idle"
    RUNNING = "Running"

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class SimTask:
    """
    One unit of scheduled work: evaluate `target_region` at `sim_time`.

    Attributes:
        target_region: The strip to evaluate.
        progress_increment: Progress, in percent, credited when the task completes.
        on_region_done: Completion callback, called as (result, is_queue_now_empty).
        index: Position of the strip within its run, 0 being the bottom strip.
        generation: The run this task belongs to.
        sim_time: Simulation time captured when the run was started.
    """
    target_region: AxisAlignedRegion
    progress_increment: float
    on_region_done: RegionCallback
    index: int
    generation: int
    sim_time: float


class RegionTaskScheduler:
    """
    Drives the evaluation of a scenario's simulation area, strip by strip.

    The scheduler holds only its task queue, the clock and the run generation; the
    physics lives in the PropagationEngine it delegates to.
    """
    def __init__(
        self,
        engine: PropagationEngine,
        clock: Optional[SimulationClock] = None,
        sample_spacing: float = DEFAULT_SAMPLE_SPACING_M,
        mode: SampleMode = SampleMode.DISPLACEMENT,
        yield_delay: float = DEFAULT_YIELD_DELAY_S,
    ):
        if sample_spacing <= 0:
            raise ValueError(f"sample_spacing must be > 0, got {sample_spacing}.")
        if yield_delay < 0:
            raise ValueError(f"yield_delay must be >= 0, got {yield_delay}.")
        self.engine = engine
        self.clock = clock if clock is not None else SimulationClock()
        self.sample_spacing = sample_spacing
        self.mode = mode
        self.yield_delay = yield_delay
        self._queue: Deque[SimTask] = deque()
        self._generation = 0
        self._holds_scenario_lock = False
        self._drain_task: Optional[asyncio.Task] = None

    @property
    def scenario(self) -> Scenario:
        return self.engine.scenario

    @property
    def state(self) -> SchedulerState:
        return SchedulerState.RUNNING if self._queue else SchedulerState.IDLE

    @property
    def pending_tasks(self) -> int:
        return len(self._queue)

    @property
    def generation(self) -> int:
        return self._generation

    # --- Run control ---

    def enqueue_run(self, num_sub_regions: int, on_region_done: RegionCallback) -> int:
        """
        Partitions the simulation area into `num_sub_regions` strips and queues one
        task per strip, replacing any queued work. Does not start draining; use
        `start_run` for that, or call `process_next` from a custom loop.

        Returns:
            The generation number of the new run.
        """
        if num_sub_regions < 1:
            raise ValueError(f"num_sub_regions must be at least 1, got {num_sub_regions}.")

        if self._queue:
            logger.info(
                f"Discarding {len(self._queue)} queued task(s) of run {self._generation}: "
                "a new run was started."
            )
        self._generation += 1
        self._queue.clear()
        self.clock.progress = 0.0

        progress_increment = PROGRESS_COMPLETE / num_sub_regions
        sim_time = self.clock.sim_time
        for index, strip in enumerate(self.scenario.sim_area.split_horizontal(num_sub_regions)):
            self._queue.append(SimTask(
                target_region=strip,
                progress_increment=progress_increment,
                on_region_done=on_region_done,
                index=index,
                generation=self._generation,
                sim_time=sim_time,
            ))
        self._acquire_scenario_lock()
        logger.info(
            f"Run {self._generation}: queued {num_sub_regions} sub-region(s) of '{self.scenario.name}' "
            f"at t={sim_time} s."
        )
        return self._generation

    def start_run(self, num_sub_regions: int, on_region_done: RegionCallback) -> "asyncio.Task[None]":
        """
        Queues a run and starts draining it on the running event loop.

        Must be called from within a running asyncio event loop.

        Returns:
            The asyncio Task draining the queue; awaiting it waits for the run to
            finish, be cancelled, or be superseded.
        """
        loop = asyncio.get_running_loop()
        generation = self.enqueue_run(num_sub_regions, on_region_done)
        self._drain_task = loop.create_task(self._drain(generation))
        # A task cancelled before its first step never enters _drain.
        self._drain_task.add_done_callback(lambda _task: self._abandon_run(generation))
        return self._drain_task

    async def run(self, num_sub_regions: int, on_region_done: Optional[RegionCallback] = None) -> List[RegionResult]:
        """
        Starts a run and waits for it to end.

        Returns:
            The RegionResults delivered by this run, in completion order. The list is
            partial if the run was cancelled or superseded.
        """
        results: List[RegionResult] = []

        def collect(result: RegionResult, is_queue_now_empty: bool) -> None:
            results.append(result)
            if on_region_done is not None:
                on_region_done(result, is_queue_now_empty)

        await self.start_run(num_sub_regions, collect)
        return results

    def cancel(self) -> int:
        """
        Drops every queued task. A task already being evaluated still completes.

        Returns:
            The number of tasks dropped.
        """
        dropped = len(self._queue)
        self._generation += 1
        self._queue.clear()
        self._release_scenario_lock()
        if dropped:
            logger.info(f"Cancelled run: dropped {dropped} queued task(s).")
        return dropped

    # --- Task processing ---

    def process_next(self) -> Optional[RegionResult]:
        """
        Processes exactly one queued task: evaluates its region, credits progress and
        invokes its completion callback.

        Returns:
            The task's RegionResult, or None if the queue was empty.
        """
        if not self._queue:
            return None
        task = self._queue.popleft()
        result = self._evaluate(task)
        self.clock.add_progress(task.progress_increment)

        is_queue_now_empty = not self._queue
        if is_queue_now_empty:
            # Released before the callback so that it may already update the scenario.
            self._release_scenario_lock()
            logger.info(f"Run {task.generation} complete ({self.clock.progress:.0f}%).")
        task.on_region_done(result, is_queue_now_empty)
        return result

    async def _drain(self, generation: int) -> None:
        try:
            while self._generation == generation and self._queue:
                self.process_next()
                await asyncio.sleep(self.yield_delay)
        finally:
            self._abandon_run(generation)

    def _abandon_run(self, generation: int) -> None:
        # A run interrupted by a failing callback or a cancelled drain task must not
        # leave its queue behind or the scenario locked.
        if self._generation == generation and (self._queue or self._holds_scenario_lock):
            logger.warning(f"Run {generation} interrupted with {len(self._queue)} task(s) pending.")
            self.cancel()

    def _evaluate(self, task: SimTask) -> RegionResult:
        logger.debug(f"Run {task.generation}: evaluating sub-region {task.index} {task.target_region}.")
        try:
            sampled = self.engine.sample_region(
                task.target_region, task.sim_time, sample_spacing=self.sample_spacing, mode=self.mode
            )
        except Exception as e:
            # Per-task isolation: the failure is reported through the callback and
            # the remaining tasks are still processed.
            error = RegionEvaluationError(region=task.target_region, sim_time=task.sim_time, original_error=e)
            logger.error(f"Run {task.generation}: sub-region {task.index} failed: {e}")
            return RegionResult(region=task.target_region, index=task.index, error=error)
        return RegionResult(region=task.target_region, index=task.index, field=sampled)

    # --- Scenario guard ---

    def _acquire_scenario_lock(self) -> None:
        if not self._holds_scenario_lock:
            self.scenario.lock_for_evaluation()
            self._holds_scenario_lock = True

    def _release_scenario_lock(self) -> None:
        if self._holds_scenario_lock:
            self.scenario.unlock_evaluation()
            self._holds_scenario_lock = False
