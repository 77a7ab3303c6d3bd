# recruitdesk/utils.py
from __future__ import annotations
import os
from pathlib import Path
from typing import Any, TypedDict
from dataclasses import dataclass

from .choices import (
    genders, experience_levels, visa_types, contract_statuses,
    elmis_statuses, ticket_statuses, currencies,
    pregnancy_test_statuses, pregnancy_results
)
from .process_steps import ProcessStep
from .validation import ValidatorFunc

# ===================================================================
# 1. CORE DATA STRUCTURES & TYPE ALIASES
# ===================================================================

@dataclass(frozen=True)
class FormField:
    """Defines everything about a form field in one place."""
    key: str
    label: str
    ui_type: str = 'text'
    options: list[str] | dict[str, str] | None = None
    default_value: Any = ''
    max_length: int | None = None

class FieldConfig(TypedDict):
    field: FormField
    validators: list[ValidatorFunc]

class StepDefinition(TypedDict):
    id: ProcessStep
    name: str
    title: str
    subtitle: str
    # Where the step's submission lands on the record. None means the
    # fields are written flat onto the record itself.
    record_key: str | None
    fields: list[FieldConfig]

# ===================================================================
# 2. THE APPLICATION SCHEMA (Single Source of Truth)
# ===================================================================

class AppSchema:
    """
    Defines every field an intake screen collects. The keys match the
    attribute names on CandidateRecord and its sub-records.
    """
    class Registration:
        FULL_NAME = FormField(key='full_name', label='Full Name', max_length=80)
        EMAIL = FormField(key='email', label='Email Address', max_length=120)
        PHONE = FormField(key='phone', label='Phone Number', max_length=20)
        DOB = FormField(key='dob', label='Date of Birth', ui_type='date', default_value=None)
        GENDER = FormField(key='gender', label='Gender', ui_type='select', options=genders)
        EXPERIENCE_LEVEL = FormField(key='experience_level', label='Experience Level', ui_type='select', options=experience_levels)
        ADDRESS = FormField(key='address', label='Address', ui_type='textarea', max_length=250)
        PASSPORT = FormField(key='passport', label='Passport Scan', ui_type='file', default_value=None)
        PHOTO = FormField(key='photo', label='Passport-size Photo', ui_type='file', default_value=None)

    class Documents:
        COC = FormField(key='coc', label='Certificate of Conduct (COC)', ui_type='file', default_value=None)
        MEDICAL_REPORT = FormField(key='medical_report', label='Medical Report', ui_type='file', default_value=None)

    class Visa:
        VISA_TYPE = FormField(key='visa_type', label='Visa Type', ui_type='select', options=visa_types)
        CONTRACT_STATUS = FormField(key='contract_status', label='Contract Status', ui_type='select',
                                    options=contract_statuses, default_value='pending')
        VISA_NUMBER = FormField(key='visa_number', label='Visa Number', max_length=40)
        ISSUE_DATE = FormField(key='issue_date', label='Issue Date', ui_type='date', default_value=None)
        EXPIRY_DATE = FormField(key='expiry_date', label='Expiry Date', ui_type='date', default_value=None)
        EMPLOYER_NAME = FormField(key='employer_name', label='Employer Name', max_length=120)
        EMPLOYER_ADDRESS = FormField(key='employer_address', label='Employer Address', ui_type='textarea', max_length=250)
        JOB_TITLE = FormField(key='job_title', label='Job Title', max_length=80)
        SALARY = FormField(key='salary', label='Monthly Salary', max_length=20)
        CONTRACT_DURATION = FormField(key='contract_duration', label='Contract Duration', max_length=40)
        VISA_DOCUMENT = FormField(key='visa_document', label='Visa Document', ui_type='file', default_value=None)
        CONTRACT_DOCUMENT = FormField(key='contract_document', label='Contract Document', ui_type='file', default_value=None)
        NOTES = FormField(key='notes', label='Notes', ui_type='textarea', max_length=500)

    class Elmis:
        STATUS = FormField(key='status', label='ELMIS Status', ui_type='select',
                           options=elmis_statuses, default_value='pending')
        REFERENCE_NUMBER = FormField(key='reference_number', label='Reference Number', max_length=40)
        SUBMISSION_DATE = FormField(key='submission_date', label='Submission Date', ui_type='date', default_value=None)
        APPROVAL_DATE = FormField(key='approval_date', label='Approval Date', ui_type='date', default_value=None)
        EXPIRY_DATE = FormField(key='expiry_date', label='Expiry Date', ui_type='date', default_value=None)
        VERIFIED_BY = FormField(key='verified_by', label='Verified By', max_length=80)
        VERIFICATION_DATE = FormField(key='verification_date', label='Verification Date', ui_type='date', default_value=None)
        QR_CODE = FormField(key='qr_code', label='QR Code', max_length=200)
        REJECTION_REASON = FormField(key='rejection_reason', label='Rejection Reason', ui_type='textarea', max_length=500)
        DOCUMENT = FormField(key='document', label='ELMIS Document', ui_type='file', default_value=None)
        NOTES = FormField(key='notes', label='Notes', ui_type='textarea', max_length=500)

    class Ticket:
        STATUS = FormField(key='status', label='Ticket Status', ui_type='select',
                           options=ticket_statuses, default_value='not_booked')
        AIRLINE = FormField(key='airline', label='Airline', max_length=80)
        FLIGHT_NUMBER = FormField(key='flight_number', label='Flight Number', max_length=20)
        DEPARTURE_AIRPORT = FormField(key='departure_airport', label='Departure Airport', max_length=80)
        ARRIVAL_AIRPORT = FormField(key='arrival_airport', label='Arrival Airport', max_length=80)
        DEPARTURE_DATE = FormField(key='departure_date', label='Departure Date', ui_type='date', default_value=None)
        DEPARTURE_TIME = FormField(key='departure_time', label='Departure Time', ui_type='time')
        ARRIVAL_DATE = FormField(key='arrival_date', label='Arrival Date', ui_type='date', default_value=None)
        ARRIVAL_TIME = FormField(key='arrival_time', label='Arrival Time', ui_type='time')
        TICKET_FARE = FormField(key='ticket_fare', label='Ticket Fare', max_length=12)
        CURRENCY = FormField(key='currency', label='Currency', ui_type='select', options=currencies, default_value='USD')
        TICKET_NUMBER = FormField(key='ticket_number', label='Ticket Number', max_length=40)
        BOOKING_REFERENCE = FormField(key='booking_reference', label='Booking Reference (PNR)', max_length=20)
        TICKET_DOCUMENT = FormField(key='ticket_document', label='Ticket Document', ui_type='file', default_value=None)
        NOTES = FormField(key='notes', label='Notes', ui_type='textarea', max_length=500)

    class Pregnancy:
        STATUS = FormField(key='status', label='Test Status', ui_type='select',
                           options=pregnancy_test_statuses, default_value='not_tested')
        TEST_DATE = FormField(key='test_date', label='Test Date', ui_type='date', default_value=None)
        TEST_CENTER = FormField(key='test_center', label='Test Center', max_length=120)
        RESULT = FormField(key='result', label='Result', ui_type='select', options=pregnancy_results)
        MEDICAL_REPORT = FormField(key='medical_report', label='Medical Report', ui_type='file', default_value=None)
        NOTES = FormField(key='notes', label='Notes', ui_type='textarea', max_length=500)

    class Decision:
        FINAL_REMARKS = FormField(key='final_remarks', label='Final Remarks', ui_type='textarea', max_length=1000)

    @classmethod
    def get_group_fields(cls, group: type) -> list[FormField]:
        return [
            field_instance for field_instance in group.__dict__.values()
            if isinstance(field_instance, FormField)
        ]

# ===================================================================
# 3. CENTRALIZED CONSTANTS & CONFIGURATION
# ===================================================================

# Keys inside the key-value store
RECORDS_KEY: str = 'candidate_records'
SESSION_KEY: str = 'current_session_progress'

# Where the SQLite-backed store keeps its file. Point it at a persistent disk
# in deployments.
DATA_DIR: Path = Path(os.environ.get('RECRUITDESK_DATA_DIR', '.'))
DB_PATH: Path = DATA_DIR / 'recruitdesk.db'
LOG_LEVEL: str = os.environ.get('RECRUITDESK_LOG_LEVEL', 'INFO').upper()
