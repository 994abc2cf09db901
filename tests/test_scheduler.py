# --- tests/test_scheduler.py ---
import asyncio
import logging

import pytest

from beamsim_core import PropagationEngine, RegionTaskScheduler, SimulationClock
from beamsim_core.simulation import RegionEvaluationError, SampleMode, SchedulerState


@pytest.fixture
def scheduler(two_emitter_scenario):
    engine = PropagationEngine(two_emitter_scenario)
    return RegionTaskScheduler(engine, sample_spacing=0.25, yield_delay=0.0)


class Recorder:
    """Collects completion callbacks and the scenario lock state seen by each."""
    def __init__(self, scenario=None):
        self.calls = []
        self.lock_states = []
        self.scenario = scenario

    def __call__(self, result, is_queue_now_empty):
        self.calls.append((result, is_queue_now_empty))
        if self.scenario is not None:
            self.lock_states.append(self.scenario.is_locked)

    @property
    def flags(self):
        return [flag for _, flag in self.calls]

    @property
    def indices(self):
        return [result.index for result, _ in self.calls]


def test_scheduler_rejects_invalid_arguments(two_emitter_scenario):
    engine = PropagationEngine(two_emitter_scenario)
    with pytest.raises(ValueError):
        RegionTaskScheduler(engine, sample_spacing=0.0)
    with pytest.raises(ValueError):
        RegionTaskScheduler(engine, yield_delay=-1.0)


@pytest.mark.parametrize("num_sub_regions", [0, -1])
def test_enqueue_rejects_fewer_than_one_region(scheduler, num_sub_regions):
    with pytest.raises(ValueError):
        scheduler.enqueue_run(num_sub_regions, Recorder())
    assert scheduler.pending_tasks == 0
    assert not scheduler.scenario.is_locked


def test_four_region_run(scheduler, two_emitter_scenario):
    recorder = Recorder(two_emitter_scenario)
    results = asyncio.run(scheduler.run(4, recorder))

    assert len(recorder.calls) == 4
    assert recorder.flags == [False, False, False, True]
    assert recorder.indices == [0, 1, 2, 3]
    assert results == [result for result, _ in recorder.calls]
    assert all(result.ok for result in results)
    # Strips are delivered bottom to top.
    assert [r.region for r in results] == two_emitter_scenario.sim_area.split_horizontal(4)
    assert scheduler.clock.progress == pytest.approx(100.0)
    assert scheduler.state == SchedulerState.IDLE
    assert scheduler.pending_tasks == 0


def test_scenario_is_locked_until_last_callback(scheduler, two_emitter_scenario):
    recorder = Recorder(two_emitter_scenario)
    asyncio.run(scheduler.run(3, recorder))
    assert recorder.lock_states == [True, True, False]
    assert not two_emitter_scenario.is_locked


def test_process_next_without_event_loop(scheduler):
    recorder = Recorder()
    generation = scheduler.enqueue_run(2, recorder)
    assert generation == scheduler.generation
    assert scheduler.state == SchedulerState.RUNNING
    assert scheduler.pending_tasks == 2

    first = scheduler.process_next()
    assert first.index == 0
    assert scheduler.clock.progress == pytest.approx(50.0)
    second = scheduler.process_next()
    assert second.index == 1
    assert scheduler.process_next() is None

    assert recorder.flags == [False, True]
    assert scheduler.state == SchedulerState.IDLE


def test_tasks_use_sim_time_captured_at_start(scheduler):
    scheduler.clock.set_time(0.01)
    recorder = Recorder()
    scheduler.enqueue_run(2, recorder)
    scheduler.clock.set_time(0.5)
    scheduler.process_next()
    scheduler.process_next()
    assert [result.field.sim_time for result, _ in recorder.calls] == [0.01, 0.01]


def test_progress_resets_for_each_run(scheduler):
    asyncio.run(scheduler.run(2))
    assert scheduler.clock.progress == pytest.approx(100.0)
    scheduler.enqueue_run(4, Recorder())
    assert scheduler.clock.progress == 0.0
    scheduler.process_next()
    assert scheduler.clock.progress == pytest.approx(25.0)


def test_region_results_carry_requested_mode(two_emitter_scenario):
    engine = PropagationEngine(two_emitter_scenario)
    scheduler = RegionTaskScheduler(engine, sample_spacing=0.5, mode=SampleMode.BOTH, yield_delay=0.0)
    results = asyncio.run(scheduler.run(2))
    assert all(result.field.coherence is not None for result in results)


def test_start_run_requires_running_loop(scheduler):
    with pytest.raises(RuntimeError):
        scheduler.start_run(2, Recorder())
    assert scheduler.pending_tasks == 0


def test_cancel_from_callback_stops_run(scheduler, two_emitter_scenario):
    recorder = Recorder()

    def cancel_after_first(result, is_queue_now_empty):
        recorder(result, is_queue_now_empty)
        scheduler.cancel()

    results = asyncio.run(scheduler.run(4, cancel_after_first))

    assert len(results) == 1
    assert recorder.flags == [False]
    assert scheduler.pending_tasks == 0
    assert not two_emitter_scenario.is_locked


def test_cancel_returns_dropped_task_count(scheduler, caplog):
    scheduler.enqueue_run(5, Recorder())
    scheduler.process_next()
    with caplog.at_level(logging.INFO):
        assert scheduler.cancel() == 4
    assert "dropped 4 queued task(s)" in caplog.text
    assert scheduler.cancel() == 0
    assert not scheduler.scenario.is_locked


def test_latest_run_wins(scheduler, two_emitter_scenario, caplog):
    first = Recorder()
    second = Recorder()

    async def main():
        task_a = scheduler.start_run(4, first)
        task_b = scheduler.start_run(2, second)
        await asyncio.gather(task_a, task_b)

    with caplog.at_level(logging.INFO):
        asyncio.run(main())

    assert first.calls == []
    assert second.flags == [False, True]
    assert "Discarding 4 queued task(s)" in caplog.text
    assert scheduler.clock.progress == pytest.approx(100.0)
    assert not two_emitter_scenario.is_locked


def test_new_run_started_mid_run_supersedes_old_queue(scheduler, two_emitter_scenario):
    first = Recorder()
    second = Recorder()
    started = []

    def start_second_run(result, is_queue_now_empty):
        first(result, is_queue_now_empty)
        if result.index == 1:
            started.append(scheduler.start_run(2, second))

    async def main():
        await scheduler.start_run(4, start_second_run)
        await started[0]

    asyncio.run(main())

    assert first.indices == [0, 1]
    assert first.flags == [False, False]
    assert second.indices == [0, 1]
    assert second.flags == [False, True]
    assert not two_emitter_scenario.is_locked


def test_scheduler_yields_between_regions(scheduler):
    events = []

    async def ticker():
        for _ in range(10):
            events.append("tick")
            await asyncio.sleep(0)

    async def main():
        run = scheduler.start_run(4, lambda result, done: events.append("region"))
        await asyncio.gather(run, ticker())

    asyncio.run(main())

    region_positions = [k for k, event in enumerate(events) if event == "region"]
    assert len(region_positions) == 4
    ticks_during_run = [k for k, event in enumerate(events)
                        if event == "tick" and region_positions[0] < k < region_positions[-1]]
    assert ticks_during_run


def test_failing_region_is_reported_and_run_continues(broken_signal_scenario, caplog):
    engine = PropagationEngine(broken_signal_scenario)
    scheduler = RegionTaskScheduler(engine, sample_spacing=0.5, yield_delay=0.0)
    recorder = Recorder()

    with caplog.at_level(logging.ERROR):
        results = asyncio.run(scheduler.run(3, recorder))

    assert recorder.flags == [False, False, True]
    assert all(not result.ok for result in results)
    assert all(result.field is None for result in results)
    error = results[0].error
    assert isinstance(error, RegionEvaluationError)
    assert error.region == results[0].region
    report = error.get_diagnostic_report()
    assert "Region Evaluation Failure" in report
    assert "Unresolved Reference" in report
    assert "sub-region 0 failed" in caplog.text
    assert not broken_signal_scenario.is_locked


def test_callback_exception_ends_run(scheduler, two_emitter_scenario):
    def explode(result, is_queue_now_empty):
        raise RuntimeError("renderer crashed")

    with pytest.raises(RuntimeError, match="renderer crashed"):
        asyncio.run(scheduler.run(3, explode))
    assert scheduler.pending_tasks == 0
    assert not two_emitter_scenario.is_locked


@pytest.mark.parametrize("steps_before_cancel", [0, 1, 2])
def test_cancelled_drain_task_releases_scenario(scheduler, two_emitter_scenario, steps_before_cancel):
    recorder = Recorder()

    async def start_then_cancel():
        task = scheduler.start_run(4, recorder)
        for _ in range(steps_before_cancel):
            await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(start_then_cancel())

    assert len(recorder.calls) < 4
    assert scheduler.pending_tasks == 0
    assert scheduler.state == SchedulerState.IDLE
    assert not two_emitter_scenario.is_locked
    two_emitter_scenario.set_emitter_delay("E0", 1.0e-4)
    assert two_emitter_scenario.find_emitter("E0").delay == 1.0e-4


def test_run_interrupted_by_timeout_releases_scenario(two_emitter_scenario):
    engine = PropagationEngine(two_emitter_scenario)
    slow = RegionTaskScheduler(engine, sample_spacing=0.25, yield_delay=0.05)

    async def run_with_timeout():
        await asyncio.wait_for(slow.run(8), timeout=0.01)

    with pytest.raises(asyncio.TimeoutError):
        asyncio.run(run_with_timeout())
    assert slow.pending_tasks == 0
    assert not two_emitter_scenario.is_locked


def test_shared_clock_is_used(two_emitter_scenario):
    clock = SimulationClock()
    clock.set_time(0.002)
    scheduler = RegionTaskScheduler(PropagationEngine(two_emitter_scenario), clock=clock,
                                    sample_spacing=0.5, yield_delay=0.0)
    results = asyncio.run(scheduler.run(1))
    assert results[0].field.sim_time == 0.002
    assert clock.progress == pytest.approx(100.0)
