# tests/test_validation.py
from __future__ import annotations

import sys
from pathlib import Path
from datetime import date
from typing import Any

# This is a standard way to make the `recruitdesk` directory importable
# without having to install the project in editable mode.
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from recruitdesk.records import Attachment, PregnancyData, TicketData, VisaData
from recruitdesk.process_steps import ProcessStep
from recruitdesk.step_definitions import STEPS_BY_ID, build_submission, execute_step_validators
from recruitdesk.utils import AppSchema
from recruitdesk.validation import (
    required,
    required_choice,
    required_when,
    one_of,
    match_pattern,
    is_within_date_range,
    is_date_after,
    is_attachment,
    max_length,
    FULL_NAME_PATTERN,
    PHONE_PATTERN,
)

# Test data is just a dummy dict for context, as our validators require it.
FORM_DATA: dict[str, Any] = {}

PDF = Attachment(filename='scan.pdf', media_type='application/pdf', content=b'%PDF-1.4')
JPEG = Attachment(filename='photo.jpg', media_type='image/jpeg', content=b'\xff\xd8\xff')


def test_max_length_validator() -> None:
    """Tests the `max_length` validator."""
    validator = max_length(10, "Cannot exceed 10 characters.")

    # --- Passing Cases ---
    is_valid_exact, _ = validator("1234567890", FORM_DATA)
    assert is_valid_exact, "Should pass for a string at the exact limit"

    # --- Failing Cases ---
    is_invalid_over, msg = validator("12345678901", FORM_DATA)
    assert not is_invalid_over, "Should fail for a string over the limit"
    assert msg == "Cannot exceed 10 characters."

    # --- Edge Cases ---
    is_valid_none, _ = validator(None, FORM_DATA)
    assert is_valid_none, "Should pass for None (not its responsibility)"


def test_required_validator() -> None:
    """Tests the `required` validator for various empty/non-empty cases."""
    validator = required("This field is required.")

    # --- Failing Cases ---
    for empty in (None, "", "   ", [], {}):
        is_valid, _ = validator(empty, FORM_DATA)
        assert not is_valid, f"Should fail for {empty!r}"

    # --- Passing Cases ---
    is_valid_str, _ = validator("some value", FORM_DATA)
    assert is_valid_str, "Should pass for a valid string"

    is_valid_upload, _ = validator(PDF, FORM_DATA)
    assert is_valid_upload, "Should pass for an uploaded file"


def test_required_choice_validator() -> None:
    """A select or radio answer is given once any option key is picked."""
    validator = required_choice("Pick a status.")

    for unpicked in (None, "", "  "):
        is_valid, msg = validator(unpicked, FORM_DATA)
        assert not is_valid and msg == "Pick a status.", f"Should fail for {unpicked!r}"

    assert validator("issued", FORM_DATA)[0], "Should pass for a picked option"
    assert validator(ProcessStep.REGISTRATION, FORM_DATA)[0], "Enum option keys count as picked"


def test_match_pattern_leaves_blank_text_to_required() -> None:
    validator = match_pattern(PHONE_PATTERN, "Invalid phone number.")
    assert validator("   ", FORM_DATA)[0], "Whitespace-only text is a missing answer, not a bad one"
    assert validator("  +977 9841234567  ", FORM_DATA)[0], "Surrounding whitespace is ignored"
    assert not validator("  call me  ", FORM_DATA)[0]


def test_required_when_validator() -> None:
    """Tests conditional requirements driven by another field of the step."""
    when_rejected = required_when('status', ('rejected',), "Give a reason.")

    is_valid, msg = when_rejected("", {'status': 'rejected'})
    assert not is_valid and msg == "Give a reason.", "Should require the value when triggered"

    is_valid_other, _ = when_rejected("", {'status': 'issued'})
    assert is_valid_other, "Should not require the value for other statuses"

    unless_not_booked = required_when('status', ('not_booked',), "Enter the airline.", negate=True)
    is_valid_booked, _ = unless_not_booked("", {'status': 'booked'})
    assert not is_valid_booked, "Negated trigger should require the value for any other status"

    is_valid_not_booked, _ = unless_not_booked("", {'status': 'not_booked'})
    assert is_valid_not_booked, "Negated trigger should skip the listed status"


def test_one_of_validator() -> None:
    validator = one_of({'male': 'Male', 'female': 'Female'}, "Unknown option.")

    assert validator('female', FORM_DATA)[0], "Should pass for a known option key"
    assert not validator('Female', FORM_DATA)[0], "Should fail for a label instead of a key"
    assert validator('', FORM_DATA)[0], "Should leave empty values to required_choice"


def test_match_pattern_validator() -> None:
    """Tests the `match_pattern` validator with the phone number pattern."""
    validator = match_pattern(PHONE_PATTERN, "Invalid phone number.")

    # --- Passing Cases ---
    is_valid_phone, _ = validator("0987654321", FORM_DATA)
    assert is_valid_phone, "Should pass for a valid 10-digit phone number"

    is_valid_intl, _ = validator("+977 9841234567", FORM_DATA)
    assert is_valid_intl, "Should pass for an international number with a space"

    # --- Failing Cases ---
    is_valid_short, _ = validator("12345", FORM_DATA)
    assert not is_valid_short, "Should fail for a number that is too short"

    is_valid_long, _ = validator("12345678901234567", FORM_DATA)
    assert not is_valid_long, "Should fail for a number that is too long"

    is_valid_chars, _ = validator("0987abcde", FORM_DATA)
    assert not is_valid_chars, "Should fail for a number with characters"

    # --- Edge Cases ---
    # `match_pattern` should ignore empty values; that's `required`'s job.
    is_valid_empty, _ = validator("", FORM_DATA)
    assert is_valid_empty, "Should pass for an empty string (not its responsibility)"


def test_full_name_pattern() -> None:
    """Names with initials, apostrophes and accents are accepted; digits are not."""
    validator = match_pattern(FULL_NAME_PATTERN, "Invalid name.")
    for name in ("A. Sharma", "Ram Bahadur Thapa", "O'Neil", "Mary-Jane", "José Núñez"):
        assert validator(name, FORM_DATA)[0], f"Should accept {name!r}"
    for name in ("John3", "_Anna", "R2 D2"):
        assert not validator(name, FORM_DATA)[0], f"Should reject {name!r}"


def test_is_within_date_range_validator() -> None:
    """Tests the date range validator."""
    min_d = date(2020, 1, 1)
    max_d = date(2020, 12, 31)
    validator = is_within_date_range(min_date=min_d, max_date=max_d)

    # --- Passing Cases ---
    is_valid_start, _ = validator("2020-01-01", FORM_DATA)
    assert is_valid_start, "Should pass for a date on the start boundary"

    is_valid_end, _ = validator("2020-12-31", FORM_DATA)
    assert is_valid_end, "Should pass for a date on the end boundary"

    # --- Failing Cases ---
    is_valid_before, _ = validator("2019-12-31", FORM_DATA)
    assert not is_valid_before, "Should fail for a date before the range"

    is_valid_after, _ = validator("2021-01-01", FORM_DATA)
    assert not is_valid_after, "Should fail for a date after the range"

    is_valid_format, msg = validator("31/12/2020", FORM_DATA)
    assert not is_valid_format, "Should fail for a date in the wrong format"
    assert "YYYY-MM-DD" in msg


def test_is_date_after_validator() -> None:
    """Tests that one YYYY-MM-DD date is after another."""
    validator = is_date_after('issue_date', "Expiry must be after issue.")

    # --- Passing Case ---
    data_valid = {'issue_date': '2024-01-10', 'expiry_date': '2026-01-10'}
    is_valid, _ = validator(data_valid['expiry_date'], data_valid)
    assert is_valid, "Should pass when expiry is after issue"

    # --- Failing Cases ---
    data_same = {'issue_date': '2024-01-10', 'expiry_date': '2024-01-10'}
    is_invalid_same, _ = validator(data_same['expiry_date'], data_same)
    assert not is_invalid_same, "Should fail when both dates are the same"

    # --- Edge Cases ---
    is_valid_missing, _ = validator('2024-01-10', {'issue_date': ''})
    assert is_valid_missing, "Should pass when the other date is missing"


def test_is_attachment_validator() -> None:
    validator = is_attachment(['image/jpeg', 'image/png'], "Upload a JPG or PNG.")

    assert validator(JPEG, FORM_DATA)[0], "Should pass for an accepted media type"
    assert not validator(PDF, FORM_DATA)[0], "Should fail for a PDF where only images are accepted"
    assert validator(None, FORM_DATA)[0], "Should pass when nothing was uploaded"
    assert not validator("photo.jpg", FORM_DATA)[0], "Should fail for a bare file name"

# ===================================================================
# STEP DEFINITIONS
# ===================================================================

def test_schema_fields_match_record_attributes() -> None:
    """Every field a screen collects must land on an attribute of its sub-record."""
    groups = {
        ProcessStep.VISA_CONTRACT: (AppSchema.Visa, VisaData),
        ProcessStep.TICKET_STATUS: (AppSchema.Ticket, TicketData),
        ProcessStep.PREGNANCY_CHECK: (AppSchema.Pregnancy, PregnancyData),
    }
    for step, (group, record_type) in groups.items():
        schema_keys = {f.key for f in AppSchema.get_group_fields(group)}
        step_keys = {conf['field'].key for conf in STEPS_BY_ID[step]['fields']}
        assert schema_keys == step_keys, f"{step.value} should ask for every field of its schema group"
        assert schema_keys <= set(record_type.__dataclass_fields__), f"{step.value} keys must exist on {record_type.__name__}"


def test_ticket_step_requires_flight_details_once_booked() -> None:
    step_def = STEPS_BY_ID[ProcessStep.TICKET_STATUS]

    is_valid, errors = execute_step_validators(step_def, {'status': 'not_booked', 'currency': 'USD'})
    assert is_valid, f"A ticket that is not booked needs no flight details, got {errors}"

    is_valid, errors = execute_step_validators(step_def, {'status': 'booked', 'currency': 'USD'})
    assert not is_valid
    assert {'airline', 'departure_airport', 'departure_date'} <= errors.keys()


def test_pregnancy_step_requires_result_when_tested() -> None:
    step_def = STEPS_BY_ID[ProcessStep.PREGNANCY_CHECK]

    is_valid, errors = execute_step_validators(step_def, {'status': 'tested'})
    assert not is_valid
    assert set(errors) == {'test_date', 'result'}

    is_valid, _ = execute_step_validators(step_def, {'status': 'exempt'})
    assert is_valid, "An exempt candidate needs no test details"


def test_execute_step_validators_reports_first_error_per_field() -> None:
    step_def = STEPS_BY_ID[ProcessStep.REGISTRATION]
    is_valid, errors = execute_step_validators(step_def, {'full_name': '', 'email': 'not-an-email'})

    assert not is_valid
    assert errors['full_name'] == "Please enter the candidate's full name."
    assert errors['email'] == "The email address is not valid."
    assert 'passport' in errors and 'photo' in errors


def test_build_submission_wraps_sub_records() -> None:
    submission = build_submission(ProcessStep.DOCUMENT_UPLOAD, {'coc': PDF, 'medical_report': PDF})
    assert list(submission) == ['documents']
    assert submission['documents'].coc == PDF

    flat = build_submission(ProcessStep.PROCESS_STATUS, {'final_remarks': 'Cleared', 'reviewed_by': 'desk 2'})
    assert flat == {'final_remarks': 'Cleared', 'reviewed_by': 'desk 2'}, "Flat steps pass unknown keys through"

    pregnancy = build_submission(ProcessStep.PREGNANCY_CHECK, {})
    assert pregnancy['pregnancy_status'].status == 'not_tested', "Missing values fall back to field defaults"
    assert pregnancy['pregnancy_status'].test_date == ''
