# --- tests/test_units.py ---
import logging
import math

import pint
import pytest

from beamsim_core.log_config import PACKAGE_LOGGER_NAME, setup_logging
from beamsim_core.units import to_si_magnitude


@pytest.mark.parametrize("raw_value, target_units, expected", [
    (343, "m/s", 343.0),
    (2.5, "s", 2.5),
    ("343 m/s", "m/s", 343.0),
    ("1.2 km/s", "m/s", 1200.0),
    ("40 kHz", "Hz", 40000.0),
    ("25 us", "s", 25e-6),
    ("10 cm", "m", 0.1),
    ("180 deg", "rad", math.pi),
    ("1e3", "Hz", 1000.0),
])
def test_to_si_magnitude(raw_value, target_units, expected):
    value = to_si_magnitude(raw_value, target_units)
    assert isinstance(value, float)
    assert value == pytest.approx(expected)


def test_to_si_magnitude_rejects_incompatible_units():
    with pytest.raises(pint.DimensionalityError):
        to_si_magnitude("3 m", "Hz")


def test_setup_logging_does_not_duplicate_handlers():
    setup_logging(logging.DEBUG)
    setup_logging(logging.INFO)
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    assert len(package_logger.handlers) == 1
    assert package_logger.level == logging.INFO
