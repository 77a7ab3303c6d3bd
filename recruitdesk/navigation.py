from __future__ import annotations
from typing import Literal

from .process_steps import ProcessStep, STEP_SEQUENCE, WORKING_STEP_COUNT, step_index
from .records import CandidateRecord

StepState = Literal['completed', 'current', 'upcoming']


class OutOfRange(IndexError):
    """Raised when navigation would leave the step sequence."""


def next_step(current: ProcessStep) -> ProcessStep:
    """The step right after `current`. Raises OutOfRange on the terminal step."""
    current_index = step_index(current)
    if current_index >= len(STEP_SEQUENCE) - 1:
        raise OutOfRange(f"'{ProcessStep(current).value}' is the last step; there is no next step.")
    return STEP_SEQUENCE[current_index + 1]

def previous_step(current: ProcessStep) -> ProcessStep:
    """The step right before `current`. Raises OutOfRange on the first step."""
    current_index = step_index(current)
    if current_index == 0:
        raise OutOfRange(f"'{ProcessStep(current).value}' is the first step; there is no previous step.")
    return STEP_SEQUENCE[current_index - 1]

def can_navigate_to(record: CandidateRecord, current: ProcessStep, target: ProcessStep) -> bool:
    """
    Operators may jump to any step they already completed, plus one step of
    lookahead past the current one. Skipping over an unfinished step is not
    allowed.
    """
    if ProcessStep(target) in record.completed_steps:
        return True
    return step_index(target) <= step_index(current) + 1

def step_state(record: CandidateRecord, current: ProcessStep, step: ProcessStep) -> StepState:
    """How a step shows up in the progress bar."""
    if ProcessStep(step) in record.completed_steps:
        return 'completed'
    if step_index(step) <= step_index(current):
        return 'current'
    return 'upcoming'

def progress_percent(current: ProcessStep) -> int:
    """Position of `current` along the sequence, 0 at registration and 100 when completed."""
    return round(step_index(current) / WORKING_STEP_COUNT * 100)
