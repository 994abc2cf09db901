# src/beamsim_core/vector_math.py
"""
Stateless 2-D vector arithmetic for the beamforming model.

Vectors are plain tuples of floats; any indexable sequence is accepted on input.
All operations iterate the indices of their first argument, so their behaviour is
undefined for arguments of mismatched dimensionality.
"""
import logging
import math
from dataclasses import dataclass
from typing import Sequence, Tuple

from .errors import DiagnosableError, format_diagnostic_report

logger = logging.getLogger(__name__)

Vector2 = Tuple[float, float]

_PREFIXES_MACRO = ('k', 'M', 'G', 'T', 'P')
_PREFIXES_MICRO = ('m', 'μ', 'n', 'p', 'f')
_MAX_PREFIX_BUCKET = 5
_SIGNIFICANT_DIGITS = 3


@dataclass()
class ZeroMagnitudeError(DiagnosableError, ValueError):
    """
    Raised when an angle is requested for a vector of zero length, for which the
    direction is undefined.
    """
    operation: str
    vector: Tuple[float, ...]

    def __str__(self):
        return f"Cannot compute '{self.operation}' for zero-magnitude vector {self.vector}."

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Zero-Magnitude Vector",
            details=str(self),
            suggestion="Guard the call site against coincident points, e.g. two emitters placed at the same position.",
            context={}
        )


@dataclass(frozen=True)
class PolarCoordinate:
    """Polar form of a 2-D vector. `angle` is in radians, in (-pi, pi]."""
    radius: float
    angle: float


def deg_to_rad(deg: float) -> float:
    return math.pi * deg / 180.0


def rad_to_deg(rad: float) -> float:
    return 180.0 * rad / math.pi


def add(a: Sequence[float], b: Sequence[float]) -> Tuple[float, ...]:
    return tuple(a[k] + b[k] for k in range(len(a)))


def sub(a: Sequence[float], b: Sequence[float]) -> Tuple[float, ...]:
    return tuple(a[k] - b[k] for k in range(len(a)))


def magnitude(v: Sequence[float]) -> float:
    return math.sqrt(sum(component * component for component in v))


def dot(a: Sequence[float], b: Sequence[float]) -> float:
    return sum(a[k] * b[k] for k in range(len(a)))


def angle_between(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Unsigned angle between two vectors, in [0, pi].

    Raises:
        ZeroMagnitudeError: If either vector has zero magnitude.
    """
    mag_a = magnitude(a)
    mag_b = magnitude(b)
    if mag_a == 0.0 or mag_b == 0.0:
        zero_vector = a if mag_a == 0.0 else b
        raise ZeroMagnitudeError(operation="angle_between", vector=tuple(zero_vector))
    cos_theta = dot(a, b) / (mag_a * mag_b)
    # Rounding can push |cos| slightly past 1 for (anti)parallel vectors.
    return math.acos(max(-1.0, min(1.0, cos_theta)))


def to_polar(v: Sequence[float]) -> PolarCoordinate:
    """
    Converts a 2-D vector to polar form.

    The angle is measured from +x, positive towards +y. The zero vector maps to
    radius 0 and angle 0.
    """
    return PolarCoordinate(radius=magnitude(v), angle=math.atan2(v[1], v[0]))


def polar_to_vector(angle: float, radius: float) -> Vector2:
    return (radius * math.cos(angle), radius * math.sin(angle))


def to_engineering_string(value: float, unit: str) -> str:
    """
    Writes a quantity with an SI prefix, e.g. ``to_engineering_string(1500, "Hz")``
    gives ``"1.50kHz"`` and ``to_engineering_string(2.5e-5, "s")`` gives ``"25.0μs"``.

    The power-of-1000 bucket is ``floor(log10(|value|) / 3)``. The mantissa keeps
    three significant digits, trailing zeros included. Buckets outside the
    available prefixes (beyond peta and femto) fall back to scientific notation.
    Infinities and NaN are written as Python formats them (``"infHz"``).
    """
    if not math.isfinite(value):
        return f"{value}" + unit
    if value == 0:
        return "0" + unit
    abs_value = abs(value)
    order = math.floor(math.log10(abs_value))
    shifter = math.floor(order / 3)
    if shifter > _MAX_PREFIX_BUCKET or shifter < -_MAX_PREFIX_BUCKET:
        return f"{value:.{_SIGNIFICANT_DIGITS - 1}e}" + unit

    shifted = float(f"{abs_value * 10.0 ** (-3 * shifter):.{_SIGNIFICANT_DIGITS}g}")
    if shifted >= 1000.0:
        # e.g. 999.7 rounds to 1000, which belongs to the next bucket
        shifted /= 1000.0
        shifter += 1
        if shifter > _MAX_PREFIX_BUCKET:
            return f"{value:.{_SIGNIFICANT_DIGITS - 1}e}" + unit

    decimals = max(0, _SIGNIFICANT_DIGITS - 1 - math.floor(math.log10(shifted)))
    sign = "-" if value < 0 else ""
    if shifter == 0:
        prefix = ""
    elif shifter < 0:
        prefix = _PREFIXES_MICRO[-shifter - 1]
    else:
        prefix = _PREFIXES_MACRO[shifter - 1]
    return f"{sign}{shifted:.{decimals}f}{prefix}{unit}"
