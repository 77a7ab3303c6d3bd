# tests/test_navigation.py
from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the `recruitdesk` directory importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from recruitdesk.navigation import (
    OutOfRange, can_navigate_to, next_step, previous_step, progress_percent, step_state
)
from recruitdesk.process_steps import STEP_SEQUENCE, ProcessStep, step_index
from recruitdesk.records import CandidateRecord


def test_step_sequence_order() -> None:
    """The sequence is fixed and ends at the summary screen."""
    assert [s.value for s in STEP_SEQUENCE] == [
        'registration', 'document_upload', 'visa_contract', 'elmis_status',
        'ticket_status', 'pregnancy_check', 'process_status', 'completed',
    ]
    assert step_index('elmis_status') == 3, "Plain string ids should resolve too"


def test_next_step() -> None:
    """Tests the logic for calculating the next step."""
    assert next_step(ProcessStep.REGISTRATION) == ProcessStep.DOCUMENT_UPLOAD, "Should go from the first step to the second"
    assert next_step(ProcessStep.PROCESS_STATUS) == ProcessStep.COMPLETED, "Should go from the status step to completed"

    with pytest.raises(OutOfRange):
        next_step(ProcessStep.COMPLETED)


def test_previous_step() -> None:
    """Tests the logic for calculating the previous step."""
    assert previous_step(ProcessStep.VISA_CONTRACT) == ProcessStep.DOCUMENT_UPLOAD, "Should go from a middle step to the previous"

    with pytest.raises(OutOfRange):
        previous_step(ProcessStep.REGISTRATION)


def test_unknown_step_id_is_rejected() -> None:
    with pytest.raises(ValueError):
        next_step('review')  # type: ignore[arg-type]


def test_can_navigate_to_allows_one_step_lookahead() -> None:
    record = CandidateRecord(completed_steps=(ProcessStep.REGISTRATION,))
    current = ProcessStep.REGISTRATION

    assert can_navigate_to(record, current, ProcessStep.DOCUMENT_UPLOAD), "One step ahead should be reachable"
    assert not can_navigate_to(record, current, ProcessStep.VISA_CONTRACT), "Skipping an unfinished step should be refused"
    assert can_navigate_to(record, current, ProcessStep.REGISTRATION), "The current step is always reachable"


def test_can_navigate_to_completed_steps_anywhere() -> None:
    """Completed steps stay reachable from any position, ahead or behind."""
    record = CandidateRecord(completed_steps=(
        ProcessStep.REGISTRATION, ProcessStep.DOCUMENT_UPLOAD, ProcessStep.VISA_CONTRACT, ProcessStep.ELMIS_STATUS,
    ))
    assert can_navigate_to(record, ProcessStep.DOCUMENT_UPLOAD, ProcessStep.ELMIS_STATUS), "Jumping forward over completed steps is fine"
    assert can_navigate_to(record, ProcessStep.ELMIS_STATUS, ProcessStep.REGISTRATION)
    assert not can_navigate_to(record, ProcessStep.DOCUMENT_UPLOAD, ProcessStep.PREGNANCY_CHECK)


def test_step_state() -> None:
    record = CandidateRecord(completed_steps=(ProcessStep.REGISTRATION,))
    current = ProcessStep.DOCUMENT_UPLOAD

    assert step_state(record, current, ProcessStep.REGISTRATION) == 'completed'
    assert step_state(record, current, ProcessStep.DOCUMENT_UPLOAD) == 'current'
    assert step_state(record, current, ProcessStep.TICKET_STATUS) == 'upcoming'


def test_progress_percent() -> None:
    assert progress_percent(ProcessStep.REGISTRATION) == 0
    assert progress_percent(ProcessStep.PROCESS_STATUS) == 86
    assert progress_percent(ProcessStep.COMPLETED) == 100
