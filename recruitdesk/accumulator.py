from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from .process_steps import ProcessStep, STATUS_STEP
from .records import BOOKKEEPING_FIELDS, CandidateRecord, Disposition

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def merge(
    record: CandidateRecord,
    step: ProcessStep,
    submitted: dict[str, Any],
    disposition: Disposition | str | None = None,
    now: datetime | None = None,
) -> CandidateRecord:
    """
    Folds one step's submission into the record and returns the new record.

    Keys are merged shallowly: a key that is already set is overwritten whole,
    so resubmitting a step replaces its sub-record instead of patching it.
    Keys that are not record fields are kept in `extra`. Values are stored
    as they come; validation happens before this point, never here.

    Merging the status step also records the disposition (pending when the
    caller gives none) and the completion time.
    """
    step = ProcessStep(step)
    timestamp = now or utcnow()
    known = CandidateRecord.field_names()

    changes: dict[str, Any] = {}
    extra = dict(record.extra)
    for key, value in submitted.items():
        if key in BOOKKEEPING_FIELDS:
            logger.warning(f"Ignoring '{key}' in the '{step.value}' submission; it is maintained by the wizard.")
            continue
        if key in known and key != 'extra':
            changes[key] = value
        else:
            extra[key] = value

    completed_steps = record.completed_steps
    if step not in completed_steps:
        completed_steps = (*completed_steps, step)

    changes.update(
        extra=extra,
        completed_steps=completed_steps,
        created_at=record.created_at or timestamp,
        updated_at=timestamp,
    )

    if step is STATUS_STEP:
        changes['process_status'] = _as_disposition(disposition)
        changes['completed_at'] = record.completed_at or timestamp

    return replace(record, **changes)


def _as_disposition(disposition: Disposition | str | None) -> Disposition:
    if not disposition:
        return Disposition.PENDING
    try:
        return Disposition(disposition)
    except ValueError:
        logger.warning(f"Unknown disposition '{disposition}'; recording the case as pending.")
        return Disposition.PENDING
