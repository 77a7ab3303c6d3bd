from __future__ import annotations

import logging
from typing import Literal

import fitz

from .process_steps import WORKING_STEP_COUNT
from .records import CandidateRecord
from .status import Category, evaluate

logger = logging.getLogger(__name__)

Tone = Literal['positive', 'negative', 'pending', 'neutral']

UPLOADED: str = 'Uploaded'
MISSING: str = 'Missing'

POSITIVE_VALUES: frozenset[str] = frozenset({'approved', 'completed', 'verified', 'issued', 'negative'})
NEGATIVE_VALUES: frozenset[str] = frozenset({'rejected', 'positive', 'cancelled'})
PENDING_VALUES: frozenset[str] = frozenset({'pending', 'incomplete', 'not_tested'})

CATEGORY_LABELS: dict[Category, str] = {
    Category.REGISTRATION: 'Registration',
    Category.DOCUMENTS: 'Passport & Photo',
    Category.COC_MEDICAL: 'COC & Medical',
    Category.VISA: 'Visa/Contract',
    Category.ELMIS: 'ELMIS',
    Category.TICKET: 'Ticket',
    Category.PREGNANCY: 'Pregnancy Check',
}

# ===================================================================
# 1. DASHBOARD FIGURES
# ===================================================================

def completion_percentage(record: CandidateRecord) -> int:
    """Share of working steps done, 0-100."""
    return min(100, round(len(record.completed_steps) / WORKING_STEP_COUNT * 100))

def document_checklist(record: CandidateRecord) -> dict[str, str]:
    documents, visa = record.documents, record.visa_data
    elmis, ticket = record.elmis_status, record.ticket_data
    present = {
        'Passport': record.passport,
        'Profile Photo': record.photo,
        'COC Certificate': documents.coc if documents else None,
        'Medical Report': documents.medical_report if documents else None,
        'Visa Document': visa.visa_document if visa else None,
        'Contract Document': visa.contract_document if visa else None,
        'ELMIS Document': elmis.document if elmis else None,
        'Flight Ticket': ticket.ticket_document if ticket else None,
    }
    return {name: UPLOADED if attachment is not None else MISSING for name, attachment in present.items()}

def status_tone(value: str | None) -> Tone:
    """Colour family a status badge is drawn in. Case does not matter."""
    value = (value or '').lower()
    if value in POSITIVE_VALUES:
        return 'positive'
    if value in NEGATIVE_VALUES:
        return 'negative'
    if value in PENDING_VALUES:
        return 'pending'
    return 'neutral'

# ===================================================================
# 2. PRINTABLE CASE SUMMARY (PyMuPDF)
# ===================================================================

def _summary_lines(record: CandidateRecord) -> list[tuple[str, float]]:
    """(text, font size) pairs, top to bottom."""
    evaluation = evaluate(record)
    disposition = record.process_status or evaluation.disposition
    lines: list[tuple[str, float]] = [
        ("Candidate Case Summary", 16),
        ("", 11),
        (f"Name: {record.full_name}", 11),
        (f"Case ID: {record.id if record.id is not None else '-'}", 11),
        (f"Email: {record.email}    Phone: {record.phone}", 11),
        (f"Date of birth: {record.dob}    Gender: {record.gender}", 11),
        (f"Experience: {record.experience_level}", 11),
        (f"Address: {record.address}", 11),
        ("", 11),
        (f"Progress: {completion_percentage(record)}% complete", 11),
        (f"Disposition: {disposition.value}", 13),
        ("", 11),
        ("Clearances", 13),
    ]
    for category, category_status in evaluation.per_category.items():
        lines.append((f"  {CATEGORY_LABELS[category]}: {category_status.status}", 11))
    lines.append(("", 11))
    lines.append(("Documents", 13))
    for name, state in document_checklist(record).items():
        lines.append((f"  {name}: {state}", 11))
    if evaluation.reasons:
        lines.append(("", 11))
        lines.append(("Notes", 13))
        lines.extend((f"  - {reason}", 11) for reason in evaluation.reasons)
    if record.final_remarks:
        lines.append(("", 11))
        lines.append((f"Remarks: {record.final_remarks}", 11))
    return lines

def render_case_summary(record: CandidateRecord) -> bytes:
    """Renders a one-page PDF summary of the case and returns its bytes."""
    LEFT_MARGIN: float = 56
    TOP_MARGIN: float = 64
    LINE_SPACING: float = 1.4

    doc = fitz.open()
    try:
        page = doc.new_page()  # A4 portrait
        y = TOP_MARGIN
        for text, size in _summary_lines(record):
            if text:
                page.insert_text(fitz.Point(LEFT_MARGIN, y), text, fontname='helv', fontsize=size)
            y += size * LINE_SPACING
        pdf_bytes = doc.tobytes(garbage=4, deflate=True)
    finally:
        doc.close()
    logger.info(f"Rendered case summary for '{record.full_name}' ({len(pdf_bytes)} bytes).")
    return pdf_bytes
