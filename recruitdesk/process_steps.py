from __future__ import annotations
from enum import Enum

# ===================================================================
# 1. THE STEPS OF A CANDIDATE CASE
# ===================================================================
# Type-safe identifiers for every screen of the wizard. The string values
# are what gets persisted in `completed_steps` and in the session pointer.

class ProcessStep(str, Enum):
    REGISTRATION = 'registration'
    DOCUMENT_UPLOAD = 'document_upload'
    VISA_CONTRACT = 'visa_contract'
    ELMIS_STATUS = 'elmis_status'
    TICKET_STATUS = 'ticket_status'
    PREGNANCY_CHECK = 'pregnancy_check'
    PROCESS_STATUS = 'process_status'
    COMPLETED = 'completed'

# ===================================================================
# 2. THE ASSEMBLY LINE
# ===================================================================
# The one ordered sequence every component reads. Order is fixed at build
# time and is the same for every candidate.

STEP_SEQUENCE: tuple[ProcessStep, ...] = (
    # Intake
    ProcessStep.REGISTRATION,
    ProcessStep.DOCUMENT_UPLOAD,
    # Clearances
    ProcessStep.VISA_CONTRACT,
    ProcessStep.ELMIS_STATUS,
    ProcessStep.TICKET_STATUS,
    ProcessStep.PREGNANCY_CHECK,
    # Decision
    ProcessStep.PROCESS_STATUS,
    ProcessStep.COMPLETED,
)

FIRST_STEP: ProcessStep = STEP_SEQUENCE[0]
TERMINAL_STEP: ProcessStep = STEP_SEQUENCE[-1]
# The step whose submission fixes the candidate's disposition.
STATUS_STEP: ProcessStep = ProcessStep.PROCESS_STATUS
# Steps an operator fills in, i.e. everything but the terminal summary.
WORKING_STEP_COUNT: int = len(STEP_SEQUENCE) - 1


def step_index(step: ProcessStep | str) -> int:
    """Position of a step in STEP_SEQUENCE. Raises ValueError for unknown ids."""
    return STEP_SEQUENCE.index(ProcessStep(step))
