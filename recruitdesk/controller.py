from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from .accumulator import merge, utcnow
from .navigation import OutOfRange, StepState, can_navigate_to, next_step, previous_step, progress_percent, step_state
from .process_steps import FIRST_STEP, STATUS_STEP, STEP_SEQUENCE, TERMINAL_STEP, ProcessStep
from .records import CandidateRecord, SessionProgress
from .resume import initial_step
from .status import Evaluation, evaluate
from .step_definitions import STEPS_BY_ID, build_submission, default_values, execute_step_validators
from .storage import MalformedSession, RecordStore, upsert_record
from .utils import LOG_LEVEL, StepDefinition

# --- Logging Setup ---
logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


class CaseSession:
    """
    One operator walking one candidate through the wizard.

    Holds the current step, the record built so far, the values staged on the
    current screen and the validation errors of the last submit. Every change
    is written through to the store so a reload can pick up where it stopped.
    """

    def __init__(
        self,
        store: RecordStore,
        clock: Callable[[], datetime] = utcnow,
        current_step: ProcessStep = FIRST_STEP,
        record: CandidateRecord | None = None,
        draft: dict[str, Any] | None = None,
    ) -> None:
        self.store = store
        self.clock = clock
        self.current_step = ProcessStep(current_step)
        self.record = record or CandidateRecord()
        self.draft: dict[str, Any] = dict(draft or {})
        self.errors: dict[str, str] = {}

    @classmethod
    def start(
        cls,
        store: RecordStore,
        edit_record: CandidateRecord | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> CaseSession:
        """
        Opens the wizard. A record picked for editing wins over any saved
        session; otherwise a saved session is resumed; otherwise a blank
        registration form is shown.
        """
        if edit_record is not None:
            session = cls(store, clock, initial_step(edit_record), edit_record)
            logger.info(f"Editing candidate {edit_record.id} at step '{session.current_step.value}'.")
            session._persist()
            return session

        try:
            progress = store.load_session()
        except MalformedSession as e:
            logger.warning(f"Discarding saved session: {e}")
            store.clear_session()
            return cls(store, clock)

        if progress is None:
            return cls(store, clock)
        logger.info(f"Resuming session at step '{progress.current_step.value}'.")
        return cls(store, clock, progress.current_step, progress.record, progress.draft)

    # --- Read-only views for the screens ---

    @property
    def step_definition(self) -> StepDefinition:
        return STEPS_BY_ID[self.current_step]

    @property
    def evaluation(self) -> Evaluation:
        """Live clearance overview, shown on the status screen."""
        return evaluate(self.record)

    @property
    def progress(self) -> int:
        return progress_percent(self.current_step)

    def step_states(self) -> dict[ProcessStep, StepState]:
        return {step: step_state(self.record, self.current_step, step) for step in STEP_SEQUENCE}

    def form_values(self) -> dict[str, Any]:
        """
        Values to fill the current screen with: field defaults, overlaid with
        what the record already holds for this step, overlaid with the draft.
        """
        values = default_values(self.current_step)
        record_key = STEPS_BY_ID[self.current_step]['record_key']
        source: Any = self.record if record_key is None else getattr(self.record, record_key)
        if source is not None and self.current_step in self.record.completed_steps:
            for key in values:
                values[key] = getattr(source, key, values[key])
        values.update(self.draft)
        return values

    # --- Operations ---

    def stage(self, values: dict[str, Any]) -> None:
        """Keeps field values typed on the current screen without submitting them."""
        self.draft.update(values)
        self._persist()

    def submit(self, values: dict[str, Any] | None = None) -> bool:
        """
        Confirms the current screen. Returns False and fills `errors` when a
        field fails validation; otherwise merges, saves and moves on.
        """
        step = self.current_step
        if step is TERMINAL_STEP:
            logger.warning("Nothing to submit on the completed step.")
            return False

        self.draft.update(values or {})
        form_data = self.form_values()
        is_valid, self.errors = execute_step_validators(STEPS_BY_ID[step], form_data)
        if not is_valid:
            logger.info(f"Step '{step.value}' has {len(self.errors)} invalid field(s): {', '.join(self.errors)}")
            self._persist()
            return False

        submission = build_submission(step, form_data)
        disposition = evaluate(self.record).disposition if step is STATUS_STEP else None
        record = merge(self.record, step, submission, disposition=disposition, now=self.clock())
        self.record = upsert_record(self.store, record)
        self.draft = {}

        try:
            self.current_step = next_step(step)
        except OutOfRange:
            pass
        logger.info(f"Candidate {self.record.id}: '{step.value}' done, now at '{self.current_step.value}'.")
        self._persist()
        return True

    def go_back(self) -> None:
        try:
            self.current_step = previous_step(self.current_step)
        except OutOfRange:
            return
        self._reset_screen()

    def navigate_to(self, target: ProcessStep | str) -> bool:
        """Jumps to `target` when the progress bar allows it."""
        target = ProcessStep(target)
        if not can_navigate_to(self.record, self.current_step, target):
            logger.warning(f"Cannot jump from '{self.current_step.value}' to '{target.value}'.")
            return False
        if target is TERMINAL_STEP and STATUS_STEP not in self.record.completed_steps:
            logger.warning(f"Candidate {self.record.id} has no decision yet; submit '{STATUS_STEP.value}' first.")
            return False
        self.current_step = target
        self._reset_screen()
        return True

    def new_candidate(self) -> None:
        """Drops the current walkthrough and opens a blank registration form."""
        self.store.clear_session()
        self.current_step = FIRST_STEP
        self.record = CandidateRecord()
        self.draft = {}
        self.errors = {}

    # --- Internals ---

    def _reset_screen(self) -> None:
        self.draft = {}
        self.errors = {}
        self._persist()

    def _persist(self) -> None:
        # A finished walkthrough leaves no session behind.
        if self.current_step is TERMINAL_STEP:
            self.store.clear_session()
            return
        self.store.save_session(SessionProgress(self.current_step, self.record, dict(self.draft)))
