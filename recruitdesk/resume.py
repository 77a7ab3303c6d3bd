from __future__ import annotations

from .process_steps import ProcessStep, STEP_SEQUENCE, TERMINAL_STEP
from .records import CandidateRecord


def resume_step(record: CandidateRecord) -> ProcessStep:
    """
    Guesses the next unfinished step from which field groups are filled in.

    The table is checked top-down, so the furthest stage with data wins. It
    does not look at `completed_steps`, which lets it pick up records written
    before that list existed.
    """
    if record.process_status:
        return ProcessStep.COMPLETED
    if record.pregnancy_status is not None:
        return ProcessStep.PROCESS_STATUS
    if record.ticket_data is not None:
        return ProcessStep.PREGNANCY_CHECK
    if record.elmis_status is not None:
        return ProcessStep.TICKET_STATUS
    if record.visa_data is not None:
        return ProcessStep.ELMIS_STATUS
    if record.documents is not None:
        return ProcessStep.VISA_CONTRACT
    if record.passport is not None or record.photo is not None:
        return ProcessStep.DOCUMENT_UPLOAD
    return ProcessStep.REGISTRATION


def initial_step(record: CandidateRecord) -> ProcessStep:
    """
    Step to open when an existing record is loaded. `completed_steps` is
    authoritative when present; records without it fall back to
    resume_step().
    """
    if not record.completed_steps:
        return resume_step(record)
    if record.process_status:
        return TERMINAL_STEP
    for step in STEP_SEQUENCE:
        if step not in record.completed_steps:
            return step
    return TERMINAL_STEP
