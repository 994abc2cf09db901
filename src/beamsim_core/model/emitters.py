# src/beamsim_core/model/emitters.py
import logging
import math
from dataclasses import dataclass
from enum import Enum

from ..constants import DEFAULT_EMITTER_AMPLITUDE, DEFAULT_EMITTER_ID, DEFAULT_SIGNAL_ID
from ..vector_math import Vector2

logger = logging.getLogger(__name__)


class EmitterKind(Enum):
    """
    Radiation pattern of an emitter. DIRECTIONAL is accepted in configurations
    but is evaluated exactly like OMNI.
    """
    OMNI = "Omni"
    DIRECTIONAL = "Directional"

    def __str__(self):
        return self.value


@dataclass
class Emitter:
    """
    A point source transmitting a shared Signal.

    `delay` (the transmit delay, in seconds) is rewritten by beam steering, and
    `amplitude` may be changed through the owning Scenario; everything else is
    fixed after creation. `direction` and `half_angle_rad` are reserved for
    directional emitters and are not used by the propagation model.
    """
    id: str = DEFAULT_EMITTER_ID
    signal_id: str = DEFAULT_SIGNAL_ID
    position: Vector2 = (0.0, 0.0)
    amplitude: float = DEFAULT_EMITTER_AMPLITUDE
    delay: float = 0.0
    kind: EmitterKind = EmitterKind.OMNI
    direction: Vector2 = (0.0, 1.0)
    half_angle_rad: float = math.pi

    def __post_init__(self):
        self.position = (float(self.position[0]), float(self.position[1]))
        self.direction = (float(self.direction[0]), float(self.direction[1]))


@dataclass(frozen=True)
class Reflector:
    """
    A passive scatterer declared by a scenario. Carried through configuration
    unchanged; the propagation model does not consult reflectors.
    """
    id: str
    position: Vector2
    geometry: str = "Circle"
    radius: float = 0.0
