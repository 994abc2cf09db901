# src/beamsim_core/model/signals.py
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class SignalKind(Enum):
    """Supported time-domain waveforms. Only a continuous sine carrier exists."""
    SINE = "Sine"

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class Signal:
    """
    A time-domain waveform definition shared by one or more emitters.

    Attributes:
        id: Identifier, unique within a scenario.
        frequency: Carrier frequency in Hz.
        kind: Waveform kind.
        duration: Optional length of the transmission in seconds. When set, the
                  signal is zero outside [0, duration]; when unset the carrier is
                  continuous for all time, including negative offsets.
    """
    id: str
    frequency: float
    kind: SignalKind = SignalKind.SINE
    duration: Optional[float] = None

    def wavelength(self, propagation_speed: float) -> float:
        """Wavelength in metres in a medium with the given propagation speed (m/s)."""
        return propagation_speed / self.frequency
