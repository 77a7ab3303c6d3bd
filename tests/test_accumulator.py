# tests/test_accumulator.py
from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from recruitdesk.accumulator import merge
from recruitdesk.process_steps import ProcessStep
from recruitdesk.records import CandidateRecord, Disposition, VisaData

T0 = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)
T1 = T0 + timedelta(hours=2)


def test_merge_marks_step_complete_and_stamps_times() -> None:
    record = merge(CandidateRecord(), ProcessStep.REGISTRATION, {'full_name': 'A. Sharma'}, now=T0)

    assert record.full_name == 'A. Sharma'
    assert record.completed_steps == (ProcessStep.REGISTRATION,)
    assert record.created_at == T0 and record.updated_at == T0
    assert record.process_status is None, "Only the status step sets a disposition"


def test_merge_is_idempotent_on_completed_steps() -> None:
    once = merge(CandidateRecord(), ProcessStep.REGISTRATION, {'full_name': 'A. Sharma'}, now=T0)
    twice = merge(once, ProcessStep.REGISTRATION, {'full_name': 'A. Sharma'}, now=T1)

    assert twice.completed_steps == (ProcessStep.REGISTRATION,), "A step is listed once however often it is merged"
    assert twice.created_at == T0, "created_at is set once"
    assert twice.updated_at == T1, "updated_at moves on every merge"


def test_resubmission_replaces_whole_sub_record() -> None:
    first = merge(CandidateRecord(), ProcessStep.VISA_CONTRACT,
                  {'visa_data': VisaData(contract_status='pending', visa_number='V-123')}, now=T0)
    second = merge(first, ProcessStep.VISA_CONTRACT, {'visa_data': VisaData(contract_status='approved')}, now=T1)

    assert second.visa_data == VisaData(contract_status='approved')
    assert second.visa_data.visa_number == '', "Fields missing from the resubmission are not carried over"


def test_merge_does_not_mutate_its_input() -> None:
    original = CandidateRecord(full_name='A. Sharma')
    merge(original, ProcessStep.REGISTRATION, {'full_name': 'B. Thapa', 'referral': 'walk-in'}, now=T0)

    assert original.full_name == 'A. Sharma'
    assert original.extra == {} and original.completed_steps == ()


def test_unknown_keys_are_kept_as_is() -> None:
    record = merge(CandidateRecord(), ProcessStep.REGISTRATION, {'referral': 'walk-in', 'phone': None}, now=T0)

    assert record.extra == {'referral': 'walk-in'}
    assert record.phone is None, "Values are stored without validation"


def test_bookkeeping_keys_cannot_be_submitted() -> None:
    record = merge(CandidateRecord(id=7), ProcessStep.REGISTRATION,
                   {'id': 99, 'process_status': 'approved', 'completed_steps': []}, now=T0)

    assert record.id == 7
    assert record.process_status is None
    assert record.completed_steps == (ProcessStep.REGISTRATION,)


def test_status_step_records_disposition_and_completion() -> None:
    record = merge(CandidateRecord(), ProcessStep.PROCESS_STATUS, {'final_remarks': 'Cleared'},
                   disposition=Disposition.APPROVED, now=T0)
    assert record.process_status is Disposition.APPROVED
    assert record.completed_at == T0

    again = merge(record, ProcessStep.PROCESS_STATUS, {}, disposition='rejected', now=T1)
    assert again.process_status is Disposition.REJECTED, "The disposition is recomputed on every pass"
    assert again.completed_at == T0, "completed_at keeps the first completion time"


def test_status_step_without_disposition_is_pending() -> None:
    assert merge(CandidateRecord(), ProcessStep.PROCESS_STATUS, {}, now=T0).process_status is Disposition.PENDING
    assert merge(CandidateRecord(), ProcessStep.PROCESS_STATUS, {}, disposition='on_hold', now=T0).process_status is Disposition.PENDING
