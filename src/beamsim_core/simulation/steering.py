# src/beamsim_core/simulation/steering.py
"""
Beam steering for a continuous-wave carrier.

Steering a fixed-frequency carrier only requires a transmit delay per emitter,
relative to a reference ("lead") emitter whose delay is zero by definition. Each
other emitter waits for the time the lead element's wavefront needs to cover the
emitter's offset projected onto the steering direction.

Delays cannot be negative for a live signal, so the lead element must transmit
first: the caller should choose the emitter furthest from the target direction as
the reference. Any other choice produces negative delays for some emitters; these
are returned as computed and logged, never rejected.
"""
import logging
import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from ..model import Scenario
from .. import vector_math

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmitterDelay:
    """A computed transmit delay, in seconds, for one emitter."""
    emitter_id: str
    delay: float


def compute_delays(scenario: Scenario, reference_emitter_id: str, steering_angle_rad: float) -> List[EmitterDelay]:
    """
    Computes the transmit delays that align all wavefronts along `steering_angle_rad`.

    The angle is measured from +x, positive towards +y, as in `vector_math.to_polar`.

    Args:
        scenario: The scenario whose emitters are steered. It is not modified.
        reference_emitter_id: The lead emitter, which gets delay 0.
        steering_angle_rad: Direction of constructive interference.

    Returns:
        One EmitterDelay per emitter, in the scenario's emitter order, reference included.

    Raises:
        UnresolvedReferenceError: If the reference emitter does not exist.
    """
    reference = scenario.find_emitter(reference_emitter_id)
    propagation_speed = scenario.propagation_speed
    delays = []
    for emitter in scenario.emitters:
        if emitter.id == reference.id:
            delay = 0.0
        else:
            baseline = vector_math.to_polar(vector_math.sub(emitter.position, reference.position))
            rotated_angle = steering_angle_rad - baseline.angle
            projected_offset = baseline.radius * math.cos(rotated_angle)
            delay = projected_offset / propagation_speed
        delays.append(EmitterDelay(emitter_id=emitter.id, delay=delay))

    negative = [d.emitter_id for d in delays if d.delay < 0]
    if negative:
        logger.warning(
            f"Steering to {vector_math.rad_to_deg(steering_angle_rad):.1f} deg with reference "
            f"'{reference_emitter_id}' gives negative delays for {negative}. "
            "Choose the emitter furthest from the target direction as the reference."
        )
    logger.debug(f"Computed {len(delays)} steering delay(s) for '{scenario.name}'.")
    return delays


def apply_delays(scenario: Scenario, delays: Sequence[EmitterDelay]) -> Tuple[str, ...]:
    """
    Writes `delays` into the scenario's emitters and notifies model-changed listeners
    once with the ids of every changed emitter.

    Returns:
        The ids of the changed emitters.
    """
    changed = scenario.update_delays([(d.emitter_id, d.delay) for d in delays])
    logger.info(f"Applied transmit delays to {len(changed)} emitter(s) of '{scenario.name}'.")
    return changed


def steer(scenario: Scenario, reference_emitter_id: str, steering_angle_rad: float) -> List[EmitterDelay]:
    """Computes the steering delays for `steering_angle_rad` and applies them."""
    delays = compute_delays(scenario, reference_emitter_id, steering_angle_rad)
    apply_delays(scenario, delays)
    return delays
