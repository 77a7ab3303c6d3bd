# recruitdesk/validation.py
from __future__ import annotations
import re
from re import Pattern
from typing import Any
from collections.abc import Callable, Collection
from datetime import date, datetime

# --- Type Aliases ---
ValidationResult = tuple[bool, str]
# A validator gets the value and the whole step submission for context
ValidatorFunc = Callable[[Any | None, dict[str, Any]], ValidationResult]

# --- Regex Patterns (centralized) ---
FULL_NAME_PATTERN: Pattern[str] = re.compile(r"^[^\W\d_][^\W\d_ .'-]*(?:[ .'-]+[^\W\d_]+)*\.?$")
PHONE_PATTERN: Pattern[str] = re.compile(r'^\+?[0-9][0-9 -]{6,14}$')
EMAIL_PATTERN: Pattern[str] = re.compile(r"^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+$")
TIME_PATTERN: Pattern[str] = re.compile(r'^(?:[01]\d|2[0-3]):[0-5]\d$')
AMOUNT_PATTERN: Pattern[str] = re.compile(r'^\d+(?:\.\d{1,2})?$')
DATE_FORMAT_STORAGE: str = '%Y-%m-%d'

# ===================================================================
# GENERIC VALIDATOR GENERATORS
# ===================================================================

def _is_blank(value: Any | None) -> bool:
    """No answer: None, whitespace-only text or an empty list/dict."""
    if isinstance(value, str):
        return value.strip() == ''
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return value is None

def required(message: str = "This field is required.") -> ValidatorFunc:
    """Fails on a blank answer. Uploads and other objects count as given."""
    def validator(value: Any | None, form_data: dict[str, Any]) -> ValidationResult:
        return (False, message) if _is_blank(value) else (True, "")
    return validator

def required_choice(message: str = "Please make a selection.") -> ValidatorFunc:
    """Fails when a select or radio field has no option key picked."""
    def validator(value: Any | None, form_data: dict[str, Any]) -> ValidationResult:
        picked = '' if value is None else str(value)
        return (True, "") if picked.strip() else (False, message)
    return validator

def required_when(other_field_key: str, trigger_values: Collection[str], message: str,
                  negate: bool = False) -> ValidatorFunc:
    """
    Requires a value only when another field of the same submission holds one
    of `trigger_values` (or, with `negate`, holds anything else).
    """
    def validator(value: Any | None, form_data: dict[str, Any]) -> ValidationResult:
        triggered = form_data.get(other_field_key) in trigger_values
        if negate:
            triggered = not triggered
        if not triggered:
            return True, ""
        return (False, message) if _is_blank(value) else (True, "")
    return validator

def one_of(options: Collection[str], message: str) -> ValidatorFunc:
    """Ensures a non-empty value is one of the allowed option keys."""
    def validator(value: Any | None, form_data: dict[str, Any]) -> ValidationResult:
        if value is None or value == '':
            return True, ""  # `required_choice` reports missing values.
        if value not in options:
            return False, message
        return True, ""
    return validator

def match_pattern(pattern: Pattern[str], message: str) -> ValidatorFunc:
    """
    Checks text against `pattern`, ignoring surrounding whitespace. Blank and
    non-text values pass, so pair it with `required` where an answer is needed.
    """
    def validator(value: Any | None, form_data: dict[str, Any]) -> ValidationResult:
        text = value.strip() if isinstance(value, str) else ''
        if text and pattern.match(text) is None:
            return False, message
        return True, ""
    return validator

def max_length(limit: int, message: str) -> ValidatorFunc:
    """Ensures a string value does not exceed `limit` characters."""
    def validator(value: Any | None, form_data: dict[str, Any]) -> ValidationResult:
        if not value or not isinstance(value, str):
            return True, ""
        if len(value) > limit:
            return False, message
        return True, ""
    return validator

def is_within_date_range(
    min_date: date | None = date(1900, 1, 1), max_date: date | None = None,
    message: str = "The selected date is outside the allowed range."
) -> ValidatorFunc:
    """Ensures a YYYY-MM-DD date string is within the specified min/max range."""
    def validator(value: str | None, form_data: dict[str, Any]) -> ValidationResult:
        if not value:
            return True, ''
        upper = max_date or date.today()
        try:
            dt_object = datetime.strptime(value, DATE_FORMAT_STORAGE).date()
            if (min_date and dt_object < min_date) or dt_object > upper:
                return False, message
        except (ValueError, TypeError):
            return False, "Invalid date format, expected YYYY-MM-DD."
        return True, ''
    return validator

def is_date_after(other_field_key: str, message: str) -> ValidatorFunc:
    """
    Validates that a YYYY-MM-DD date in one field comes strictly after the
    date in another field of the same submission (e.g. expiry after issue).
    """
    def validator(value: str | None, form_data: dict[str, Any]) -> ValidationResult:
        other_value = form_data.get(other_field_key)

        # Missing or malformed dates are reported by other validators.
        if not value or not other_value:
            return True, ""

        try:
            this_date = datetime.strptime(value, DATE_FORMAT_STORAGE).date()
            other_date = datetime.strptime(other_value, DATE_FORMAT_STORAGE).date()
        except (ValueError, TypeError):
            return True, ""

        if this_date <= other_date:
            return False, message
        return True, ""
    return validator

def is_attachment(media_types: Collection[str], message: str) -> ValidatorFunc:
    """
    Ensures an uploaded file, when present, carries one of the accepted media
    types. Anything exposing a `media_type` attribute counts as an upload.
    """
    def validator(value: Any | None, form_data: dict[str, Any]) -> ValidationResult:
        if value is None or value == '':
            return True, ""
        media_type = getattr(value, 'media_type', None)
        if media_type not in media_types:
            return False, message
        return True, ""
    return validator
