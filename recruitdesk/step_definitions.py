# recruitdesk/step_definitions.py
from __future__ import annotations
from typing import Any

from .choices import (
    genders, experience_levels, contract_statuses, elmis_statuses,
    ticket_statuses, currencies, pregnancy_test_statuses, pregnancy_results,
    document_media_types, photo_media_types
)
from .process_steps import ProcessStep
from .records import SUBRECORD_TYPES
from .utils import AppSchema, FieldConfig, StepDefinition
from .validation import (
    required, required_choice, required_when, one_of, match_pattern, max_length,
    is_within_date_range, is_date_after, is_attachment, ValidatorFunc,
    FULL_NAME_PATTERN, EMAIL_PATTERN, PHONE_PATTERN, TIME_PATTERN, AMOUNT_PATTERN
)

_R, _D, _V, _E, _T, _P = (AppSchema.Registration, AppSchema.Documents, AppSchema.Visa,
                          AppSchema.Elmis, AppSchema.Ticket, AppSchema.Pregnancy)

_DOCUMENT_TYPE_MSG = "Upload a JPG, PNG or PDF file."
# Flight details are only asked for once a ticket is actually in play.
_NOT_BOOKED = ('not_booked',)


def _flight_field(message: str) -> ValidatorFunc:
    return required_when('status', _NOT_BOOKED, message, negate=True)


STEPS_BY_ID: dict[ProcessStep, StepDefinition] = {
    ProcessStep.REGISTRATION: {
        'id': ProcessStep.REGISTRATION, 'name': 'registration', 'title': 'Client Registration',
        'subtitle': 'Basic identity and contact details of the candidate.',
        'record_key': None,
        'fields': [
            {'field': _R.FULL_NAME, 'validators': [
                required("Please enter the candidate's full name."),
                match_pattern(FULL_NAME_PATTERN, "The name may only contain letters, spaces, dots, hyphens and apostrophes."),
                max_length(80, "The name cannot exceed 80 characters.")
            ]},
            {'field': _R.EMAIL, 'validators': [
                required('Please enter an email address.'),
                match_pattern(EMAIL_PATTERN, "The email address is not valid.")
            ]},
            {'field': _R.PHONE, 'validators': [
                required('Please enter a phone number.'),
                match_pattern(PHONE_PATTERN, "The phone number is not valid.")
            ]},
            {'field': _R.DOB, 'validators': [required('Please enter the date of birth.'), is_within_date_range()]},
            {'field': _R.GENDER, 'validators': [
                required_choice("Please select a gender."), one_of(genders, "Unknown gender option.")
            ]},
            {'field': _R.EXPERIENCE_LEVEL, 'validators': [
                required_choice("Please select an experience level."),
                one_of(experience_levels, "Unknown experience level.")
            ]},
            {'field': _R.ADDRESS, 'validators': [
                required("Please enter an address."), max_length(250, "The address cannot exceed 250 characters.")
            ]},
            {'field': _R.PASSPORT, 'validators': [
                required("Please upload the passport."), is_attachment(document_media_types, _DOCUMENT_TYPE_MSG)
            ]},
            {'field': _R.PHOTO, 'validators': [
                required("Please upload a photo."), is_attachment(photo_media_types, "Upload a JPG or PNG photo.")
            ]},
        ]
    },
    ProcessStep.DOCUMENT_UPLOAD: {
        'id': ProcessStep.DOCUMENT_UPLOAD, 'name': 'document_upload', 'title': 'Document Upload',
        'subtitle': 'Certificate of conduct and medical report.',
        'record_key': 'documents',
        'fields': [
            {'field': _D.COC, 'validators': [
                required("Please upload the COC."), is_attachment(document_media_types, _DOCUMENT_TYPE_MSG)
            ]},
            {'field': _D.MEDICAL_REPORT, 'validators': [
                required("Please upload the medical report."), is_attachment(document_media_types, _DOCUMENT_TYPE_MSG)
            ]},
        ]
    },
    ProcessStep.VISA_CONTRACT: {
        'id': ProcessStep.VISA_CONTRACT, 'name': 'visa_contract', 'title': 'Visa & Contract Status',
        'subtitle': 'Visa details and the employment contract with the foreign employer.',
        'record_key': 'visa_data',
        'fields': [
            {'field': _V.VISA_TYPE, 'validators': [required_choice("Please select a visa type.")]},
            {'field': _V.CONTRACT_STATUS, 'validators': [
                required_choice("Please select the contract status."),
                one_of(contract_statuses, "Unknown contract status.")
            ]},
            {'field': _V.VISA_NUMBER, 'validators': [max_length(40, "The visa number cannot exceed 40 characters.")]},
            {'field': _V.ISSUE_DATE, 'validators': [is_within_date_range()]},
            {'field': _V.EXPIRY_DATE, 'validators': [
                is_date_after('issue_date', "The expiry date must be after the issue date.")
            ]},
            {'field': _V.EMPLOYER_NAME, 'validators': [required("Please enter the employer name.")]},
            {'field': _V.EMPLOYER_ADDRESS, 'validators': [max_length(250, "The address cannot exceed 250 characters.")]},
            {'field': _V.JOB_TITLE, 'validators': [required("Please enter the job title.")]},
            {'field': _V.SALARY, 'validators': [
                required("Please enter the salary."), match_pattern(AMOUNT_PATTERN, "The salary must be a number.")
            ]},
            {'field': _V.CONTRACT_DURATION, 'validators': [required("Please enter the contract duration.")]},
            {'field': _V.VISA_DOCUMENT, 'validators': [is_attachment(document_media_types, _DOCUMENT_TYPE_MSG)]},
            {'field': _V.CONTRACT_DOCUMENT, 'validators': [is_attachment(document_media_types, _DOCUMENT_TYPE_MSG)]},
            {'field': _V.NOTES, 'validators': [max_length(500, "Notes cannot exceed 500 characters.")]},
        ]
    },
    ProcessStep.ELMIS_STATUS: {
        'id': ProcessStep.ELMIS_STATUS, 'name': 'elmis_status', 'title': 'ELMIS Status',
        'subtitle': 'Labour permit status in the Electronic Labor Migration Information System.',
        'record_key': 'elmis_status',
        'fields': [
            {'field': _E.STATUS, 'validators': [
                required_choice("Please select the ELMIS status."), one_of(elmis_statuses, "Unknown ELMIS status.")
            ]},
            {'field': _E.REFERENCE_NUMBER, 'validators': [required("Please enter the ELMIS reference number.")]},
            {'field': _E.SUBMISSION_DATE, 'validators': [is_within_date_range()]},
            {'field': _E.APPROVAL_DATE, 'validators': [is_within_date_range()]},
            {'field': _E.EXPIRY_DATE, 'validators': [
                is_date_after('approval_date', "The expiry date must be after the approval date.")
            ]},
            {'field': _E.VERIFICATION_DATE, 'validators': [is_within_date_range()]},
            {'field': _E.REJECTION_REASON, 'validators': [
                required_when('status', ('rejected',), "Please give the reason for the rejection.")
            ]},
            {'field': _E.DOCUMENT, 'validators': [is_attachment(document_media_types, _DOCUMENT_TYPE_MSG)]},
            {'field': _E.VERIFIED_BY, 'validators': []},
            {'field': _E.QR_CODE, 'validators': []},
            {'field': _E.NOTES, 'validators': [max_length(500, "Notes cannot exceed 500 characters.")]},
        ]
    },
    ProcessStep.TICKET_STATUS: {
        'id': ProcessStep.TICKET_STATUS, 'name': 'ticket_status', 'title': 'Ticket Status',
        'subtitle': 'Flight booking for the departure to the destination country.',
        'record_key': 'ticket_data',
        'fields': [
            {'field': _T.STATUS, 'validators': [
                required_choice("Please select the ticket status."), one_of(ticket_statuses, "Unknown ticket status.")
            ]},
            {'field': _T.AIRLINE, 'validators': [_flight_field("Please enter the airline.")]},
            {'field': _T.FLIGHT_NUMBER, 'validators': []},
            {'field': _T.DEPARTURE_AIRPORT, 'validators': [_flight_field("Please enter the departure airport.")]},
            {'field': _T.ARRIVAL_AIRPORT, 'validators': [_flight_field("Please enter the arrival airport.")]},
            {'field': _T.DEPARTURE_DATE, 'validators': [_flight_field("Please enter the departure date.")]},
            {'field': _T.DEPARTURE_TIME, 'validators': [
                _flight_field("Please enter the departure time."), match_pattern(TIME_PATTERN, "Use the HH:MM format.")
            ]},
            {'field': _T.ARRIVAL_DATE, 'validators': [_flight_field("Please enter the arrival date.")]},
            {'field': _T.ARRIVAL_TIME, 'validators': [
                _flight_field("Please enter the arrival time."), match_pattern(TIME_PATTERN, "Use the HH:MM format.")
            ]},
            {'field': _T.TICKET_FARE, 'validators': [
                _flight_field("Please enter the ticket fare."), match_pattern(AMOUNT_PATTERN, "The fare must be a number.")
            ]},
            {'field': _T.CURRENCY, 'validators': [
                _flight_field("Please select a currency."), one_of(currencies, "Unknown currency.")
            ]},
            {'field': _T.TICKET_NUMBER, 'validators': []},
            {'field': _T.BOOKING_REFERENCE, 'validators': []},
            {'field': _T.TICKET_DOCUMENT, 'validators': [is_attachment(document_media_types, _DOCUMENT_TYPE_MSG)]},
            {'field': _T.NOTES, 'validators': [max_length(500, "Notes cannot exceed 500 characters.")]},
        ]
    },
    ProcessStep.PREGNANCY_CHECK: {
        'id': ProcessStep.PREGNANCY_CHECK, 'name': 'pregnancy_check', 'title': 'Pregnancy Investigation',
        'subtitle': 'Pre-departure pregnancy test required by some destination countries.',
        'record_key': 'pregnancy_status',
        'fields': [
            {'field': _P.STATUS, 'validators': [
                required_choice("Please select the test status."),
                one_of(pregnancy_test_statuses, "Unknown test status.")
            ]},
            {'field': _P.TEST_DATE, 'validators': [
                required_when('status', ('tested',), "Please enter the test date."), is_within_date_range()
            ]},
            {'field': _P.RESULT, 'validators': [
                required_when('status', ('tested',), "Please select the test result."),
                one_of(pregnancy_results, "Unknown test result.")
            ]},
            {'field': _P.TEST_CENTER, 'validators': []},
            {'field': _P.MEDICAL_REPORT, 'validators': [is_attachment(document_media_types, _DOCUMENT_TYPE_MSG)]},
            {'field': _P.NOTES, 'validators': [max_length(500, "Notes cannot exceed 500 characters.")]},
        ]
    },
    ProcessStep.PROCESS_STATUS: {
        'id': ProcessStep.PROCESS_STATUS, 'name': 'process_status', 'title': 'Process Status',
        'subtitle': 'Review every clearance and confirm the final decision.',
        'record_key': None,
        'fields': [
            {'field': AppSchema.Decision.FINAL_REMARKS, 'validators': [
                max_length(1000, "Remarks cannot exceed 1000 characters.")
            ]},
        ]
    },
    ProcessStep.COMPLETED: {
        'id': ProcessStep.COMPLETED, 'name': 'completed', 'title': 'Candidate Dashboard',
        'subtitle': 'Complete profile overview.',
        'record_key': None,
        'fields': []
    },
}

# ===================================================================
# VALIDATION & SUBMISSION BUILDING
# ===================================================================

def _validate_field(field_conf: FieldConfig, form_data: dict[str, Any], errors: dict[str, str]) -> bool:
    field_key = field_conf['field'].key
    value_to_validate = form_data.get(field_key)
    for validator_func in field_conf['validators']:
        is_valid, msg = validator_func(value_to_validate, form_data)
        if not is_valid:
            if field_key not in errors: errors[field_key] = msg
            return False
    return True

def execute_step_validators(step_def: StepDefinition, form_data: dict[str, Any]) -> tuple[bool, dict[str, str]]:
    """Runs every field validator of a step; returns (all_valid, first error per field)."""
    new_errors: dict[str, str] = {}
    is_step_valid = True
    for field_conf in step_def.get('fields', []):
        if not _validate_field(field_conf, form_data, new_errors):
            is_step_valid = False
    return is_step_valid, new_errors

def default_values(step: ProcessStep) -> dict[str, Any]:
    """The blank form of a step, as a screen would first show it."""
    return {conf['field'].key: conf['field'].default_value for conf in STEPS_BY_ID[step]['fields']}

def build_submission(step: ProcessStep, values: dict[str, Any]) -> dict[str, Any]:
    """
    Turns the flat values of one screen into the payload the accumulator
    merges. Registration and the decision step write flat keys; every other
    step produces one whole sub-record under its record key.
    """
    step_def = STEPS_BY_ID[step]
    collected: dict[str, Any] = {}
    for field_conf in step_def['fields']:
        form_field = field_conf['field']
        value = values.get(form_field.key, form_field.default_value)
        # Unfilled text inputs are stored as empty strings, missing files as None.
        if value is None and form_field.ui_type != 'file':
            value = ''
        collected[form_field.key] = value

    record_key = step_def['record_key']
    if record_key is None:
        # Keys the screen sent beyond its declared fields are passed through
        # and end up in the record's `extra`.
        passthrough = {k: v for k, v in values.items() if k not in collected}
        return {**passthrough, **collected}

    return {record_key: SUBRECORD_TYPES[record_key].from_dict(collected)}
