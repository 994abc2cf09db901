# tests/conftest.py
import pytest

from beamsim_core import AxisAlignedRegion, Emitter, Medium, Scenario, Signal


# Speed and frequency are chosen so that the wavelength is exactly 1 m.
TEST_SPEED_M_PER_S = 343.0
TEST_FREQUENCY_HZ = 343.0


@pytest.fixture
def unit_area():
    """A 2 m x 2 m simulation area centred on the origin."""
    return AxisAlignedRegion((-1.0, -1.0), (2.0, 2.0))


@pytest.fixture
def single_emitter_scenario(unit_area):
    return Scenario(
        name="single",
        medium=Medium(propagation_speed=TEST_SPEED_M_PER_S),
        sim_area=unit_area,
        signals=[Signal(id="S0", frequency=TEST_FREQUENCY_HZ)],
        emitters=[Emitter(id="E0", signal_id="S0", position=(0.0, 0.0), amplitude=1.0)],
    )


@pytest.fixture
def two_emitter_scenario(unit_area):
    """Two identical emitters placed symmetrically about the y axis."""
    return Scenario(
        name="pair",
        medium=Medium(propagation_speed=TEST_SPEED_M_PER_S),
        sim_area=unit_area,
        signals=[Signal(id="S0", frequency=TEST_FREQUENCY_HZ)],
        emitters=[
            Emitter(id="E0", signal_id="S0", position=(-0.5, 0.0), amplitude=1.0),
            Emitter(id="E1", signal_id="S0", position=(0.5, 0.0), amplitude=1.0),
        ],
    )


@pytest.fixture
def line_array_scenario():
    """Four emitters spaced 1 m apart along the x axis, E0 at the origin."""
    return Scenario(
        name="line_array",
        medium=Medium(propagation_speed=TEST_SPEED_M_PER_S),
        sim_area=AxisAlignedRegion((-5.0, -5.0), (10.0, 10.0)),
        signals=[Signal(id="S0", frequency=TEST_FREQUENCY_HZ)],
        emitters=[
            Emitter(id=f"E{k}", signal_id="S0", position=(float(k), 0.0), amplitude=1.0)
            for k in range(4)
        ],
    )


@pytest.fixture
def broken_signal_scenario(unit_area):
    """An emitter referencing a signal that does not exist."""
    return Scenario(
        name="broken",
        sim_area=unit_area,
        signals=[Signal(id="S0", frequency=TEST_FREQUENCY_HZ)],
        emitters=[Emitter(id="E0", signal_id="MISSING", position=(0.0, 0.0))],
    )
