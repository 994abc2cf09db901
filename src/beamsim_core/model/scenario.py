# src/beamsim_core/model/scenario.py
"""
Defines the `Scenario`, the data container for one beamforming configuration.

A Scenario owns the propagation medium, the simulation area and the signal,
emitter and reflector collections. It holds no simulation logic: the propagation
engine, beam steering and the region scheduler all operate on it from outside.
The only in-place mutations are emitter delay and amplitude updates, which are
announced to every subscribed model-changed listener.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from ..constants import (
    DEFAULT_SIGNAL_FREQUENCY_HZ, DEFAULT_SIGNAL_ID, DEFAULT_EMITTER_ID,
    DEFAULT_SIM_AREA_MIN_CORNER, DEFAULT_SIM_AREA_SIZE, SPEED_OF_SOUND_AIR_M_PER_S,
)
from ..geometry import AxisAlignedRegion
from .emitters import Emitter, Reflector
from .exceptions import ScenarioLockedError, UnresolvedReferenceError
from .signals import Signal

logger = logging.getLogger(__name__)


@dataclass
class Medium:
    """The propagation medium. `propagation_speed` is in m/s and must be > 0."""
    propagation_speed: float = SPEED_OF_SOUND_AIR_M_PER_S


@dataclass(frozen=True)
class ModelChangeEvent:
    """
    Sent to model-changed listeners after emitters were modified in place.

    Attributes:
        emitter_ids: Ids of the changed emitters, in the order they were updated.
        attribute: Name of the emitter attribute that changed ('delay' or 'amplitude').
    """
    emitter_ids: Tuple[str, ...]
    attribute: str


ModelChangeListener = Callable[[ModelChangeEvent], None]


class Scenario:
    """
    A complete wave transport scenario: medium, simulation area, signals, emitters
    and reflectors.

    Ids are expected to be unique within each collection. Lookups return the first
    match, so duplicates are not rejected here; the ScenarioValidator reports them.
    """

    def __init__(
        self,
        sim_area: AxisAlignedRegion,
        signals: Iterable[Signal] = (),
        emitters: Iterable[Emitter] = (),
        reflectors: Iterable[Reflector] = (),
        medium: Optional[Medium] = None,
        name: str = "scenario",
    ):
        self.name = name
        self.medium: Medium = medium if medium is not None else Medium()
        self.sim_area: AxisAlignedRegion = sim_area
        self._signals: List[Signal] = list(signals)
        self._emitters: List[Emitter] = list(emitters)
        self._reflectors: List[Reflector] = list(reflectors)
        self._listeners: List[ModelChangeListener] = []
        self._evaluation_locks = 0
        logger.debug(
            f"Scenario '{name}' created with {len(self._signals)} signal(s), "
            f"{len(self._emitters)} emitter(s), {len(self._reflectors)} reflector(s)."
        )

    # --- Collections ---

    @property
    def propagation_speed(self) -> float:
        return self.medium.propagation_speed

    @property
    def signals(self) -> Tuple[Signal, ...]:
        return tuple(self._signals)

    @property
    def emitters(self) -> Tuple[Emitter, ...]:
        return tuple(self._emitters)

    @property
    def reflectors(self) -> Tuple[Reflector, ...]:
        return tuple(self._reflectors)

    def find_signal(self, signal_id: str) -> Signal:
        for signal in self._signals:
            if signal.id == signal_id:
                return signal
        raise UnresolvedReferenceError(identifier=signal_id, collection="signals")

    def find_emitter(self, emitter_id: str) -> Emitter:
        for emitter in self._emitters:
            if emitter.id == emitter_id:
                return emitter
        raise UnresolvedReferenceError(identifier=emitter_id, collection="emitters")

    def signal_for(self, emitter: Emitter) -> Signal:
        """Resolves the signal transmitted by `emitter`."""
        return self.find_signal(emitter.signal_id)

    def amplitude_sum(self) -> float:
        """Sum of all emitter amplitudes; a renderer's natural normalisation scale."""
        return sum(emitter.amplitude for emitter in self._emitters)

    # --- Mutation ---

    def set_emitter_delay(self, emitter_id: str, delay: float) -> None:
        self.update_delays([(emitter_id, delay)])

    def set_emitter_amplitude(self, emitter_id: str, amplitude: float) -> None:
        self._check_unlocked("set amplitude", (emitter_id,))
        emitter = self.find_emitter(emitter_id)
        emitter.amplitude = float(amplitude)
        self._notify(ModelChangeEvent(emitter_ids=(emitter.id,), attribute="amplitude"))

    def update_delays(self, delays: Sequence[Tuple[str, float]]) -> Tuple[str, ...]:
        """
        Writes transmit delays for several emitters and notifies listeners once.

        All ids are resolved before any emitter is changed, so an unknown id leaves
        the scenario untouched.

        Args:
            delays: (emitter_id, delay_seconds) pairs.

        Returns:
            The ids of the changed emitters, in update order.
        """
        delays = list(delays)
        self._check_unlocked("set delay", tuple(emitter_id for emitter_id, _ in delays))
        resolved = [(self.find_emitter(emitter_id), delay) for emitter_id, delay in delays]
        for emitter, delay in resolved:
            emitter.delay = float(delay)
        changed = tuple(emitter.id for emitter, _ in resolved)
        logger.debug(f"Updated transmit delays for emitter(s) {list(changed)}.")
        self._notify(ModelChangeEvent(emitter_ids=changed, attribute="delay"))
        return changed

    # --- Model-changed listeners ---

    def subscribe(self, listener: ModelChangeListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: ModelChangeListener) -> None:
        self._listeners.remove(listener)

    def _notify(self, event: ModelChangeEvent) -> None:
        for listener in list(self._listeners):
            listener(event)

    # --- Evaluation guard ---

    @property
    def is_locked(self) -> bool:
        return self._evaluation_locks > 0

    def lock_for_evaluation(self) -> None:
        """Marks the scenario as being read by an evaluation run."""
        self._evaluation_locks += 1

    def unlock_evaluation(self) -> None:
        if self._evaluation_locks == 0:
            raise RuntimeError(f"Scenario '{self.name}' is not locked for evaluation.")
        self._evaluation_locks -= 1

    def _check_unlocked(self, operation: str, emitter_ids: Tuple[str, ...]) -> None:
        if self.is_locked:
            raise ScenarioLockedError(operation=operation, emitter_ids=emitter_ids)

    def __repr__(self):
        return (f"Scenario(name={self.name!r}, sim_area={self.sim_area}, "
                f"signals={len(self._signals)}, emitters={len(self._emitters)})")


def default_scenario() -> Scenario:
    """
    A single omnidirectional 440 Hz emitter at the origin of a 20 m x 20 m area in
    air, with one (inert) circular reflector 6 m in front of it.
    """
    return Scenario(
        name="default",
        medium=Medium(propagation_speed=SPEED_OF_SOUND_AIR_M_PER_S),
        sim_area=AxisAlignedRegion(DEFAULT_SIM_AREA_MIN_CORNER, DEFAULT_SIM_AREA_SIZE),
        signals=[Signal(id=DEFAULT_SIGNAL_ID, frequency=DEFAULT_SIGNAL_FREQUENCY_HZ)],
        emitters=[Emitter(id=DEFAULT_EMITTER_ID, signal_id=DEFAULT_SIGNAL_ID, position=(0.0, 0.0))],
        reflectors=[Reflector(id="T0", position=(0.0, 6.0), geometry="Circle", radius=0.1)],
    )
