# src/beamsim_core/validation/scenario_validator.py
import logging
from collections import Counter
from typing import List

from ..model import EmitterKind, Scenario
from .issues import ValidationIssue, ValidationIssueLevel
from .issue_codes import ScenarioIssueCode

logger = logging.getLogger(__name__)


class ScenarioValidator:
    """
    Performs semantic validation on a built Scenario.

    The validator only reads the scenario and collects issues; it never raises for
    problems it finds. The calling context (e.g. `run_area_evaluation`) decides
    whether ERROR-level issues halt the run.
    """

    def __init__(self, scenario: Scenario):
        if not isinstance(scenario, Scenario):
            raise TypeError("ScenarioValidator requires a Scenario object.")
        self.scenario = scenario
        self.issues: List[ValidationIssue] = []

    def validate(self) -> List[ValidationIssue]:
        """
        Runs every check against the scenario.

        Returns:
            A list of all `ValidationIssue` objects found (errors, warnings and info).
        """
        self.issues = []
        logger.info(f"Starting validation of scenario '{self.scenario.name}'...")
        self._check_medium()
        self._check_signals()
        self._check_emitters()
        self._check_reflectors()

        if self.issues:
            errors = sum(1 for i in self.issues if i.level == ValidationIssueLevel.ERROR)
            warnings = sum(1 for i in self.issues if i.level == ValidationIssueLevel.WARNING)
            infos = sum(1 for i in self.issues if i.level == ValidationIssueLevel.INFO)
            logger.info(f"Validation complete. Found: {errors} errors, {warnings} warnings, {infos} info messages.")
        else:
            logger.info("Validation complete with no issues found.")

        return self.issues

    def _add_issue(self, level: ValidationIssueLevel, code_enum: ScenarioIssueCode, **kwargs):
        message = code_enum.format_message(**kwargs)
        self.issues.append(ValidationIssue(
            level=level, code=code_enum.code, message=message,
            element_id=kwargs.get('element_id'), collection=kwargs.get('collection'), details=kwargs
        ))

    def _check_medium(self):
        speed = self.scenario.propagation_speed
        if speed <= 0:
            self._add_issue(ValidationIssueLevel.ERROR, ScenarioIssueCode.MEDIUM_SPEED_NONPOSITIVE, propagation_speed=speed)

    def _check_signals(self):
        signals = self.scenario.signals
        for signal in signals:
            if signal.frequency <= 0:
                self._add_issue(
                    ValidationIssueLevel.ERROR, ScenarioIssueCode.SIG_FREQ_NONPOSITIVE,
                    element_id=signal.id, collection="signals", frequency=signal.frequency
                )
            if signal.duration is not None and signal.duration < 0:
                self._add_issue(
                    ValidationIssueLevel.ERROR, ScenarioIssueCode.SIG_DURATION_NEGATIVE,
                    element_id=signal.id, collection="signals", duration=signal.duration
                )
        for signal_id, count in Counter(s.id for s in signals).items():
            if count > 1:
                self._add_issue(
                    ValidationIssueLevel.WARNING, ScenarioIssueCode.SIG_DUPLICATE_ID,
                    element_id=signal_id, collection="signals", count=count
                )

    def _check_emitters(self):
        emitters = self.scenario.emitters
        if not emitters:
            self._add_issue(ValidationIssueLevel.WARNING, ScenarioIssueCode.EMIT_NONE, scenario_name=self.scenario.name)
            return

        signal_ids = sorted({s.id for s in self.scenario.signals})
        sim_area = self.scenario.sim_area
        for emitter in emitters:
            if emitter.signal_id not in signal_ids:
                self._add_issue(
                    ValidationIssueLevel.ERROR, ScenarioIssueCode.EMIT_SIGNAL_UNRESOLVED,
                    element_id=emitter.id, collection="emitters",
                    signal_id=emitter.signal_id, available_signals=signal_ids
                )
            if emitter.kind == EmitterKind.DIRECTIONAL:
                self._add_issue(
                    ValidationIssueLevel.INFO, ScenarioIssueCode.EMIT_INFO_DIRECTIONAL,
                    element_id=emitter.id, collection="emitters"
                )
            if not sim_area.contains(emitter.position):
                self._add_issue(
                    ValidationIssueLevel.INFO, ScenarioIssueCode.EMIT_INFO_OUTSIDE_AREA,
                    element_id=emitter.id, collection="emitters",
                    position=emitter.position, sim_area=str(sim_area)
                )
        for emitter_id, count in Counter(e.id for e in emitters).items():
            if count > 1:
                self._add_issue(
                    ValidationIssueLevel.WARNING, ScenarioIssueCode.EMIT_DUPLICATE_ID,
                    element_id=emitter_id, collection="emitters", count=count
                )

    def _check_reflectors(self):
        reflectors = self.scenario.reflectors
        if reflectors:
            self._add_issue(ValidationIssueLevel.INFO, ScenarioIssueCode.REFL_INFO_IGNORED, count=len(reflectors))
