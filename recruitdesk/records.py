from __future__ import annotations

import base64
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, cast

from .choices import pregnancy_results
from .process_steps import ProcessStep, STEP_SEQUENCE

logger = logging.getLogger(__name__)

# ===================================================================
# 1. ENUMS & ATTACHMENTS
# ===================================================================

class Disposition(str, Enum):
    """Final outcome of a candidate case."""
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'

TERMINAL_DISPOSITIONS: frozenset[Disposition] = frozenset({Disposition.APPROVED, Disposition.REJECTED})

_CAMEL_BOUNDARY = re.compile(r'(?<!^)(?=[A-Z])')

def _snake_case(key: str) -> str:
    """'medicalReport' -> 'medical_report'. Snake-case keys pass through."""
    return _CAMEL_BOUNDARY.sub('_', key).lower()


@dataclass(frozen=True)
class Attachment:
    """An uploaded file, kept verbatim. The bytes are never interpreted."""
    filename: str
    media_type: str
    content: bytes = field(repr=False)

    def to_dict(self) -> dict[str, str]:
        return {
            'filename': self.filename,
            'media_type': self.media_type,
            'content': base64.b64encode(self.content).decode('ascii'),
        }

    @classmethod
    def from_dict(cls, data: Any) -> Attachment | None:
        """
        Rebuilds an attachment from its stored form. Besides our own dict
        layout this accepts bare data URLs, which is how files were kept by
        the browser-only version of the tool.
        """
        if data is None or data == '' or data == {}:
            return None
        if isinstance(data, Attachment):
            return data
        if isinstance(data, str):
            if not data.startswith('data:') or ';base64,' not in data:
                raise ValueError("Attachment string is not a base64 data URL.")
            header, payload = data.split(',', 1)
            media_type = header[len('data:'):].split(';', 1)[0]
            return cls(filename='', media_type=media_type, content=base64.b64decode(payload, validate=True))
        if isinstance(data, Mapping):
            content = data.get('content', '')
            return cls(
                filename=str(data.get('filename') or data.get('name') or ''),
                media_type=str(data.get('media_type') or data.get('type') or ''),
                content=base64.b64decode(content, validate=True) if content else b'',
            )
        raise TypeError(f"Cannot read an attachment from {type(data).__name__}.")


def _looks_like_attachment(value: Any) -> bool:
    return isinstance(value, Mapping) and {'filename', 'media_type', 'content'} <= value.keys()


def _encode(value: Any) -> Any:
    """Converts a record value into something JSON can hold."""
    if isinstance(value, (Attachment, SubRecord)):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_encode(item) for item in value]
    if isinstance(value, Mapping):
        return {str(k): _encode(v) for k, v in value.items()}
    return value

# ===================================================================
# 2. PER-CATEGORY SUB-RECORDS
# ===================================================================
# Each step that is not registration writes exactly one of these. They are
# replaced whole on resubmission, never merged field by field.

class SubRecord:
    ATTACHMENT_FIELDS: ClassVar[tuple[str, ...]] = ()

    def to_dict(self) -> dict[str, Any]:
        return {f.name: _encode(getattr(self, f.name)) for f in fields(cast(Any, self))}

    @classmethod
    def from_dict(cls, data: Any) -> Any:
        if data is None:
            return None
        if isinstance(data, cls):
            return data
        if isinstance(data, str):
            return cls.from_bare_status(data)
        if not isinstance(data, Mapping):
            raise TypeError(f"Expected a mapping for {cls.__name__}, got {type(data).__name__}.")

        known = {f.name for f in fields(cast(Any, cls))}
        values: dict[str, Any] = {}
        for raw_key, raw_value in data.items():
            key = _snake_case(str(raw_key))
            if key not in known:
                logger.debug(f"Dropping unknown key '{raw_key}' from {cls.__name__}.")
                continue
            if key in cls.ATTACHMENT_FIELDS:
                values[key] = Attachment.from_dict(raw_value)
            else:
                values[key] = '' if raw_value is None else raw_value
        return cls(**values)

    @classmethod
    def from_bare_status(cls, status: str) -> Any:
        raise TypeError(f"{cls.__name__} cannot be built from a bare string.")


@dataclass(frozen=True)
class DocumentsData(SubRecord):
    ATTACHMENT_FIELDS: ClassVar[tuple[str, ...]] = ('coc', 'medical_report')

    coc: Attachment | None = None
    medical_report: Attachment | None = None


@dataclass(frozen=True)
class VisaData(SubRecord):
    ATTACHMENT_FIELDS: ClassVar[tuple[str, ...]] = ('visa_document', 'contract_document')

    visa_type: str = ''
    contract_status: str = ''
    visa_number: str = ''
    issue_date: str = ''
    expiry_date: str = ''
    employer_name: str = ''
    employer_address: str = ''
    job_title: str = ''
    salary: str = ''
    contract_duration: str = ''
    visa_document: Attachment | None = None
    contract_document: Attachment | None = None
    notes: str = ''


@dataclass(frozen=True)
class ElmisData(SubRecord):
    ATTACHMENT_FIELDS: ClassVar[tuple[str, ...]] = ('document',)

    status: str = ''
    reference_number: str = ''
    submission_date: str = ''
    approval_date: str = ''
    expiry_date: str = ''
    verified_by: str = ''
    verification_date: str = ''
    qr_code: str = ''
    rejection_reason: str = ''
    document: Attachment | None = None
    notes: str = ''

    @classmethod
    def from_bare_status(cls, status: str) -> ElmisData:
        return cls(status=status)


@dataclass(frozen=True)
class TicketData(SubRecord):
    ATTACHMENT_FIELDS: ClassVar[tuple[str, ...]] = ('ticket_document',)

    status: str = ''
    airline: str = ''
    flight_number: str = ''
    departure_airport: str = ''
    arrival_airport: str = ''
    departure_date: str = ''
    departure_time: str = ''
    arrival_date: str = ''
    arrival_time: str = ''
    ticket_fare: str = ''
    currency: str = ''
    ticket_number: str = ''
    booking_reference: str = ''
    ticket_document: Attachment | None = None
    notes: str = ''


@dataclass(frozen=True)
class PregnancyData(SubRecord):
    ATTACHMENT_FIELDS: ClassVar[tuple[str, ...]] = ('medical_report',)

    status: str = ''
    test_date: str = ''
    test_center: str = ''
    result: str = ''
    medical_report: Attachment | None = None
    notes: str = ''

    @property
    def outcome(self) -> str:
        """
        The single value the disposition rules look at: the test result once
        a test was done, otherwise the test status itself (not_tested/exempt).
        """
        if self.status == 'tested':
            return self.result
        return self.status

    @classmethod
    def from_bare_status(cls, status: str) -> PregnancyData:
        if status in pregnancy_results:
            return cls(status='tested', result=status)
        return cls(status=status)


# Record key -> sub-record type, for every step that writes a sub-record.
SUBRECORD_TYPES: dict[str, type[SubRecord]] = {
    'documents': DocumentsData,
    'visa_data': VisaData,
    'elmis_status': ElmisData,
    'ticket_data': TicketData,
    'pregnancy_status': PregnancyData,
}

# ===================================================================
# 3. THE CANDIDATE RECORD
# ===================================================================

# Fields the wizard maintains itself; a screen submission cannot set them.
BOOKKEEPING_FIELDS: frozenset[str] = frozenset({
    'id', 'completed_steps', 'process_status', 'created_at', 'updated_at', 'completed_at',
})
_TIMESTAMP_FIELDS: tuple[str, ...] = ('created_at', 'updated_at', 'completed_at')
_RECORD_ATTACHMENT_FIELDS: tuple[str, ...] = ('passport', 'photo')


@dataclass(frozen=True)
class CandidateRecord:
    """
    Everything known about one candidate. Starts almost empty at registration
    and grows by one sub-record per step.
    """
    id: int | None = None
    # Core fields, captured at registration
    full_name: str = ''
    experience_level: str = ''
    email: str = ''
    phone: str = ''
    address: str = ''
    dob: str = ''
    gender: str = ''
    passport: Attachment | None = None
    photo: Attachment | None = None
    # Per-category sub-records
    documents: DocumentsData | None = None
    visa_data: VisaData | None = None
    elmis_status: ElmisData | None = None
    ticket_data: TicketData | None = None
    pregnancy_status: PregnancyData | None = None
    # Outcome
    process_status: Disposition | None = None
    final_remarks: str = ''
    completed_steps: tuple[ProcessStep, ...] = ()
    created_at: datetime | None = None
    updated_at: datetime | None = None
    completed_at: datetime | None = None
    # Submitted keys with no field of their own, kept as they came in
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def is_terminal(self) -> bool:
        return self.process_status in TERMINAL_DISPOSITIONS

    @classmethod
    def field_names(cls) -> frozenset[str]:
        return frozenset(f.name for f in fields(cls))

    def to_dict(self) -> dict[str, Any]:
        return {f.name: _encode(getattr(self, f.name)) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Any) -> CandidateRecord:
        """
        Rebuilds a record from storage. Accepts both our snake_case layout and
        the camelCase keys written by the browser-only tool. Raises ValueError
        or TypeError when the data cannot be a record.
        """
        if not isinstance(data, Mapping):
            raise TypeError(f"Expected a mapping for a candidate record, got {type(data).__name__}.")

        known = cls.field_names()
        values: dict[str, Any] = {}
        extra: dict[str, Any] = dict(cast(Mapping[str, Any], data.get('extra') or {}))
        for raw_key, raw_value in data.items():
            if raw_key == 'extra':
                continue
            key = _snake_case(str(raw_key))
            if key not in known:
                extra[str(raw_key)] = raw_value
                continue
            values[key] = _decode_record_field(key, raw_value)
        return cls(**values, extra=extra)


def _decode_record_field(key: str, raw_value: Any) -> Any:
    if key == 'id':
        return None if raw_value is None else int(raw_value)
    if key in _RECORD_ATTACHMENT_FIELDS:
        return Attachment.from_dict(raw_value)
    if key in SUBRECORD_TYPES:
        return SUBRECORD_TYPES[key].from_dict(raw_value)
    if key == 'process_status':
        return Disposition(raw_value) if raw_value else None
    if key == 'completed_steps':
        return _decode_completed_steps(raw_value)
    if key in _TIMESTAMP_FIELDS:
        if not raw_value:
            return None
        return raw_value if isinstance(raw_value, datetime) else parse_timestamp(str(raw_value))
    return '' if raw_value is None else raw_value


def parse_timestamp(text: str) -> datetime:
    """ISO-8601 text to a datetime. A trailing 'Z', as JavaScript writes it, means UTC."""
    if text.endswith(('Z', 'z')):
        text = text[:-1] + '+00:00'
    return datetime.fromisoformat(text)


def _decode_completed_steps(raw_value: Any) -> tuple[ProcessStep, ...]:
    if not raw_value:
        return ()
    if not isinstance(raw_value, (list, tuple)):
        raise TypeError("completed_steps must be a list of step ids.")
    known_ids = {step.value for step in STEP_SEQUENCE}
    steps: list[ProcessStep] = []
    for item in raw_value:
        if item not in known_ids:
            logger.warning(f"Ignoring unknown step id '{item}' in completed_steps.")
            continue
        step = ProcessStep(item)
        if step not in steps:
            steps.append(step)
    return tuple(steps)

# ===================================================================
# 4. SESSION PROGRESS
# ===================================================================

@dataclass(frozen=True)
class SessionProgress:
    """The resumable pointer into an unfinished walkthrough."""
    current_step: ProcessStep
    record: CandidateRecord
    # Values typed on the current screen but not yet submitted
    draft: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            'current_step': self.current_step.value,
            'record': self.record.to_dict(),
            'draft': _encode(self.draft),
        }

    @classmethod
    def from_dict(cls, data: Any) -> SessionProgress:
        if not isinstance(data, Mapping):
            raise TypeError(f"Expected a mapping for session progress, got {type(data).__name__}.")
        raw_step = data.get('current_step', data.get('currentStep'))
        raw_record = data.get('record', data.get('clientData')) or {}
        raw_draft = data.get('draft') or {}
        if not isinstance(raw_draft, Mapping):
            raise TypeError("Session draft must be a mapping.")
        draft = {
            str(key): Attachment.from_dict(value) if _looks_like_attachment(value) else value
            for key, value in raw_draft.items()
        }
        return cls(
            current_step=ProcessStep(raw_step),
            record=CandidateRecord.from_dict(raw_record),
            draft=draft,
        )
