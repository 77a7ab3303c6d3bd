from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .records import CandidateRecord, Disposition

INCOMPLETE: str = 'incomplete'
COMPLETE: str = 'complete'

# Values that count towards approval, per category
VISA_APPROVED: frozenset[str] = frozenset({'approved', 'issued', 'verified'})
ELMIS_APPROVED: frozenset[str] = frozenset({'issued', 'verified', 'checked'})
TICKET_APPROVED: frozenset[str] = frozenset({'issued', 'booked', 'confirmed'})
PREGNANCY_CLEARED: frozenset[str] = frozenset({'negative', 'exempt', 'not_tested'})


class Category(str, Enum):
    REGISTRATION = 'registration'
    DOCUMENTS = 'documents'
    COC_MEDICAL = 'coc_medical'
    VISA = 'visa'
    ELMIS = 'elmis'
    TICKET = 'ticket'
    PREGNANCY = 'pregnancy'


@dataclass(frozen=True)
class CategoryStatus:
    completed: bool
    # 'complete'/'incomplete' for presence checks, the raw recorded value
    # for the clearance categories
    status: str


@dataclass(frozen=True)
class Evaluation:
    per_category: dict[Category, CategoryStatus]
    disposition: Disposition
    reasons: tuple[str, ...]


def _presence(completed: bool) -> CategoryStatus:
    return CategoryStatus(completed=completed, status=COMPLETE if completed else INCOMPLETE)

def _recorded(present: bool, value: object) -> CategoryStatus:
    # Anything that is not a non-empty string is treated as not yet recorded.
    if not present or not isinstance(value, str) or not value:
        return CategoryStatus(completed=present, status=INCOMPLETE)
    return CategoryStatus(completed=True, status=value)


def category_statuses(record: CandidateRecord) -> dict[Category, CategoryStatus]:
    """Derives each category's status from whatever sub-records are present."""
    documents = record.documents
    return {
        Category.REGISTRATION: _presence(bool(record.full_name)),
        Category.DOCUMENTS: _presence(record.passport is not None and record.photo is not None),
        Category.COC_MEDICAL: _presence(
            documents is not None and documents.coc is not None and documents.medical_report is not None
        ),
        Category.VISA: _recorded(record.visa_data is not None,
                                 record.visa_data.contract_status if record.visa_data else None),
        Category.ELMIS: _recorded(record.elmis_status is not None,
                                  record.elmis_status.status if record.elmis_status else None),
        Category.TICKET: _recorded(record.ticket_data is not None,
                                   record.ticket_data.status if record.ticket_data else None),
        Category.PREGNANCY: _recorded(record.pregnancy_status is not None,
                                      record.pregnancy_status.outcome if record.pregnancy_status else None),
    }


def evaluate(record: CandidateRecord) -> Evaluation:
    """
    Computes the candidate's disposition. Rules are checked in priority order
    and the first match wins:

    1. rejected  - a positive pregnancy test, or a rejected visa or ELMIS permit
    2. approved  - every category complete with an approving value
    3. pending   - anything else

    Pure: the same record always gives the same result.
    """
    details = category_statuses(record)
    visa = details[Category.VISA].status
    elmis = details[Category.ELMIS].status
    ticket = details[Category.TICKET].status
    pregnancy = details[Category.PREGNANCY].status

    rejections: list[str] = []
    if pregnancy == 'positive':
        rejections.append("Pregnancy test is positive")
    if visa == 'rejected':
        rejections.append("Visa/contract was rejected")
    if elmis == 'rejected':
        rejections.append("ELMIS permit was rejected")
    if rejections:
        return Evaluation(details, Disposition.REJECTED, tuple(rejections))

    # Every approval condition, with the reason reported when it fails
    conditions: list[tuple[bool, str]] = [
        (details[Category.REGISTRATION].completed, "Registration is incomplete"),
        (details[Category.DOCUMENTS].completed, "Passport or photo is missing"),
        (details[Category.COC_MEDICAL].completed, "COC or medical report is missing"),
        (visa in VISA_APPROVED, f"Visa/contract status is '{visa}'"),
        (elmis in ELMIS_APPROVED, f"ELMIS status is '{elmis}'"),
        (ticket in TICKET_APPROVED, f"Ticket status is '{ticket}'"),
        (pregnancy in PREGNANCY_CLEARED, f"Pregnancy check is '{pregnancy}'"),
    ]
    outstanding = tuple(reason for passed, reason in conditions if not passed)
    if not outstanding:
        return Evaluation(details, Disposition.APPROVED, ("All clearances are in order",))
    return Evaluation(details, Disposition.PENDING, outstanding)
