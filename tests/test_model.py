# --- tests/test_model.py ---
import math

import pytest

from beamsim_core import (
    AxisAlignedRegion, Emitter, EmitterKind, Medium, Reflector, Scenario, Signal, SignalKind,
    SimulationClock, default_scenario,
)
from beamsim_core.model import ModelChangeEvent, ScenarioLockedError, UnresolvedReferenceError


def test_signal_defaults_and_wavelength():
    signal = Signal(id="S0", frequency=440.0)
    assert signal.kind == SignalKind.SINE
    assert signal.duration is None
    assert Signal(id="S1", frequency=343.0).wavelength(343.0) == pytest.approx(1.0)


def test_emitter_defaults():
    emitter = Emitter()
    assert emitter.id == "E0"
    assert emitter.signal_id == "S0"
    assert emitter.position == (0.0, 0.0)
    assert emitter.amplitude == 30.0
    assert emitter.delay == 0.0
    assert emitter.kind == EmitterKind.OMNI
    assert emitter.direction == (0.0, 1.0)
    assert emitter.half_angle_rad == pytest.approx(math.pi)


def test_emitter_position_is_normalised_to_float_tuple():
    assert Emitter(position=[1, 2]).position == (1.0, 2.0)


def test_default_scenario():
    scenario = default_scenario()
    assert scenario.propagation_speed == 343.0
    assert scenario.sim_area == AxisAlignedRegion((-10.0, -10.0), (20.0, 20.0))
    assert [s.id for s in scenario.signals] == ["S0"]
    assert scenario.find_signal("S0").frequency == 440.0
    assert [e.id for e in scenario.emitters] == ["E0"]
    assert scenario.find_emitter("E0").position == (0.0, 0.0)
    assert scenario.reflectors == (Reflector(id="T0", position=(0.0, 6.0), geometry="Circle", radius=0.1),)


def test_lookups(two_emitter_scenario):
    assert two_emitter_scenario.find_emitter("E1").position == (0.5, 0.0)
    emitter = two_emitter_scenario.find_emitter("E0")
    assert two_emitter_scenario.signal_for(emitter).id == "S0"


def test_lookups_return_first_duplicate(unit_area):
    scenario = Scenario(
        sim_area=unit_area,
        signals=[Signal(id="S0", frequency=100.0), Signal(id="S0", frequency=200.0)],
    )
    assert scenario.find_signal("S0").frequency == 100.0


@pytest.mark.parametrize("method, identifier, collection", [
    ("find_signal", "NOPE", "signals"),
    ("find_emitter", "E9", "emitters"),
])
def test_unresolved_lookup_raises(two_emitter_scenario, method, identifier, collection):
    with pytest.raises(UnresolvedReferenceError) as excinfo:
        getattr(two_emitter_scenario, method)(identifier)
    error = excinfo.value
    assert isinstance(error, KeyError)
    assert error.identifier == identifier
    assert error.collection == collection
    report = error.get_diagnostic_report()
    assert "Unresolved Reference" in report
    assert identifier in report


def test_signal_for_unresolved(broken_signal_scenario):
    emitter = broken_signal_scenario.find_emitter("E0")
    with pytest.raises(UnresolvedReferenceError, match="MISSING"):
        broken_signal_scenario.signal_for(emitter)


def test_collections_are_read_only_snapshots(two_emitter_scenario):
    emitters = two_emitter_scenario.emitters
    assert isinstance(emitters, tuple)
    assert len(emitters) == 2


def test_amplitude_sum(two_emitter_scenario):
    assert two_emitter_scenario.amplitude_sum() == pytest.approx(2.0)
    two_emitter_scenario.set_emitter_amplitude("E1", 4.0)
    assert two_emitter_scenario.amplitude_sum() == pytest.approx(5.0)


def test_update_delays_notifies_listeners_once(two_emitter_scenario):
    events = []
    two_emitter_scenario.subscribe(events.append)

    changed = two_emitter_scenario.update_delays([("E0", 0.0), ("E1", 1e-3)])

    assert changed == ("E0", "E1")
    assert two_emitter_scenario.find_emitter("E1").delay == pytest.approx(1e-3)
    assert events == [ModelChangeEvent(emitter_ids=("E0", "E1"), attribute="delay")]


def test_update_delays_with_unknown_id_changes_nothing(two_emitter_scenario):
    events = []
    two_emitter_scenario.subscribe(events.append)
    with pytest.raises(UnresolvedReferenceError):
        two_emitter_scenario.update_delays([("E0", 5.0), ("E7", 1.0)])
    assert two_emitter_scenario.find_emitter("E0").delay == 0.0
    assert events == []


def test_set_emitter_amplitude_notifies(two_emitter_scenario):
    events = []
    two_emitter_scenario.subscribe(events.append)
    two_emitter_scenario.set_emitter_amplitude("E0", 2.5)
    assert two_emitter_scenario.find_emitter("E0").amplitude == 2.5
    assert events == [ModelChangeEvent(emitter_ids=("E0",), attribute="amplitude")]


def test_unsubscribe_stops_notifications(two_emitter_scenario):
    events = []
    two_emitter_scenario.subscribe(events.append)
    two_emitter_scenario.unsubscribe(events.append)
    two_emitter_scenario.set_emitter_delay("E0", 1.0)
    assert events == []


def test_locked_scenario_rejects_mutation(two_emitter_scenario):
    two_emitter_scenario.lock_for_evaluation()
    assert two_emitter_scenario.is_locked
    with pytest.raises(ScenarioLockedError) as excinfo:
        two_emitter_scenario.set_emitter_delay("E0", 1.0)
    assert excinfo.value.emitter_ids == ("E0",)
    assert "Scenario Modified During Evaluation" in excinfo.value.get_diagnostic_report()
    with pytest.raises(ScenarioLockedError):
        two_emitter_scenario.set_emitter_amplitude("E1", 3.0)

    two_emitter_scenario.unlock_evaluation()
    assert not two_emitter_scenario.is_locked
    two_emitter_scenario.set_emitter_delay("E0", 1.0)
    assert two_emitter_scenario.find_emitter("E0").delay == 1.0


def test_unlock_without_lock_raises(two_emitter_scenario):
    with pytest.raises(RuntimeError):
        two_emitter_scenario.unlock_evaluation()


def test_medium_default_is_air(unit_area):
    assert Scenario(sim_area=unit_area).propagation_speed == 343.0
    assert Scenario(sim_area=unit_area, medium=Medium(1500.0)).propagation_speed == 1500.0


def test_simulation_clock():
    clock = SimulationClock()
    assert clock.sim_time == 0.0
    assert clock.progress == 0.0

    clock.set_time(0.5)
    assert clock.advance(0.25) == pytest.approx(0.75)
    with pytest.raises(ValueError):
        clock.set_time(-1.0)
    assert clock.sim_time == pytest.approx(0.75)

    clock.add_progress(60.0)
    assert clock.add_progress(60.0) == 100.0

    clock.reset()
    assert (clock.sim_time, clock.progress) == (0.0, 0.0)
