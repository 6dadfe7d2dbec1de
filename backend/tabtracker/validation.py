from __future__ import annotations

import math
from typing import Any


class TrackerError(Exception):
    """Base for every failure a route turns into {ok: false, error}."""

    status_code = 500

    def __init__(self, message: str | None = None):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__


class InvalidInput(TrackerError):
    """400-level input problem (missing or malformed field)."""
    status_code = 400


class UnknownLocation(InvalidInput):
    """Location name outside the configured set."""


class InvalidScan(InvalidInput):
    """Scanned value does not satisfy the current office intake step."""


class MixedLocations(InvalidInput):
    """One upload resolved to more than one location."""


class NoLocationDetermined(InvalidInput):
    pass


class NoUsableRows(InvalidInput):
    pass


class Unauthorized(TrackerError):
    """Picker not on the allow-list."""
    status_code = 403


class NotFound(TrackerError):
    """Record absent from the stage it was expected in."""
    status_code = 404


class AlreadyTracked(TrackerError):
    """Key already lives in some stage; creating it again would duplicate it."""
    status_code = 409


class AlreadyComplete(TrackerError):
    """409-level: office intake has no step left to fill."""
    status_code = 409


class StoreError(TrackerError):
    """The underlying store rejected a statement."""
    status_code = 500


def require_text(payload: dict, field: str, *, label: str | None = None) -> str:
    value = payload.get(field)
    text = "" if value is None else str(value).strip()
    if not text:
        raise InvalidInput(f"Missing {label or field}")
    return text


def parse_finite_number(value: Any, field: str) -> float:
    """
    Accept ints, floats and numeric strings; reject bools, blanks, NaN and infinities.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidInput(f"Missing/invalid {field}")
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise InvalidInput(f"Missing/invalid {field}")
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        raise InvalidInput(f"Missing/invalid {field}")
    if not math.isfinite(number):
        raise InvalidInput(f"Missing/invalid {field}")
    return number


def parse_non_negative_number(value: Any, field: str) -> float:
    number = parse_finite_number(value, field)
    if number < 0:
        raise InvalidInput(f"{field} must not be negative")
    return number


def parse_int_in_range(value: Any, field: str, *, minimum: int, maximum: int) -> int:
    """Whole numbers only: 3, "3" and 3.0 pass, 3.5 and "3.5" do not."""
    number = parse_finite_number(value, field)
    if not number.is_integer():
        raise InvalidInput(f"{field} must be a whole number")
    number = int(number)
    if number < minimum or number > maximum:
        raise InvalidInput(f"{field} must be between {minimum} and {maximum}")
    return number


def require_list(payload: dict, field: str, *, empty_message: str) -> list:
    value = payload.get(field)
    if not isinstance(value, list):
        value = []
    if not value:
        raise InvalidInput(empty_message)
    return value
