# --- src/beamsim_core/units.py ---
import logging
from typing import Union

import pint

logger = logging.getLogger(__name__)
ureg = pint.UnitRegistry()
Quantity = ureg.Quantity
logger.debug("Pint Unit Registry initialized.")


def to_si_magnitude(raw_value: Union[str, int, float], target_units: str) -> float:
    """
    Converts a raw configuration value to a plain float in `target_units`.

    Strings are parsed by pint and must carry units compatible with the target
    (e.g. '40 kHz' -> 40000.0 for 'Hz'). Bare numbers, and strings without
    units, are taken to already be expressed in the target units. Angles are
    dimensionless in pint but still converted ('90 deg' -> 1.5707... for 'rad').

    Raises:
        pint.DimensionalityError: The value's units are incompatible with the target.
        pint.UndefinedUnitError: The string names an unknown unit.
    """
    if isinstance(raw_value, (int, float)) and not isinstance(raw_value, bool):
        return float(raw_value)
    quantity = Quantity(raw_value)
    if quantity.unitless:
        return float(quantity.magnitude)
    return float(quantity.to(target_units).magnitude)
