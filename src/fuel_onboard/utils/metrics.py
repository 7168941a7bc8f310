"""Unit conversion and rounding helpers for body metrics."""

import math
import re
from datetime import date

LB_PER_KG = 2.2046226218
CM_PER_INCH = 2.54
INCHES_PER_FOOT = 12

# Profile storage bounds (pounds)
MIN_WEIGHT_LB = 45.0
MAX_WEIGHT_LB = 880.0

# Canonical precision for values written to the profile
WEIGHT_LB_DECIMALS = 3
BODY_FAT_DECIMALS = 2
HEIGHT_CM_DECIMALS = 1

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def kg_to_lb(kg: float) -> float:
    """Convert kilograms to pounds."""
    return kg * LB_PER_KG


def lb_to_kg(lb: float) -> float:
    """Convert pounds to kilograms."""
    return lb / LB_PER_KG


def ft_in_to_cm(feet: float, inches: float = 0.0) -> float:
    """Convert a feet + inches height to centimetres."""
    return (feet * INCHES_PER_FOOT + inches) * CM_PER_INCH


def cm_to_ft_in(cm: float) -> tuple[int, float]:
    """Convert centimetres to (feet, inches), inches rounded to 1 decimal."""
    total_inches = cm / CM_PER_INCH
    feet = int(total_inches // INCHES_PER_FOOT)
    inches = round_to(total_inches - feet * INCHES_PER_FOOT, 1)
    if inches >= INCHES_PER_FOOT:
        feet += 1
        inches = 0.0
    return feet, inches


def round_to(value: float, decimals: int) -> float:
    """Round half away from zero to a fixed number of decimals."""
    factor = 10**decimals
    scaled = abs(value) * factor
    rounded = math.floor(scaled + 0.5) / factor
    return math.copysign(rounded, value)


def round_weight_lb(lb: float) -> float:
    return round_to(lb, WEIGHT_LB_DECIMALS)


def round_body_fat(percent: float) -> float:
    return round_to(percent, BODY_FAT_DECIMALS)


def round_height_cm(cm: float) -> float:
    return round_to(cm, HEIGHT_CM_DECIMALS)


def parse_positive_float(raw: str | float | int | None) -> float | None:
    """Parse user input into a positive finite float.

    Returns None for empty, non-numeric, non-finite, zero or negative input.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = raw.strip().replace(",", ".")
        if not text:
            return None
        try:
            value = float(text)
        except ValueError:
            return None
    if not math.isfinite(value) or value <= 0:
        return None
    return value


def parse_inches(raw: str | float | None) -> float | None:
    """Parse the inches part of a ft/in height. Blank means 0; valid range is [0, 12)."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return 0.0
    if isinstance(raw, str):
        try:
            value = float(raw.strip().replace(",", "."))
        except ValueError:
            return None
    else:
        value = float(raw)
    if not math.isfinite(value) or value < 0 or value >= INCHES_PER_FOOT:
        return None
    return value


def parse_iso_date(raw: str | None) -> date | None:
    """Parse a strict YYYY-MM-DD string, returning None if malformed."""
    if not raw or not _ISO_DATE.match(raw.strip()):
        return None
    try:
        return date.fromisoformat(raw.strip())
    except ValueError:
        return None


def age_from_dob(dob: date | str, today: date | None = None) -> int:
    """Whole years between a date of birth and today.

    Raises:
        ValueError: If dob is a string that is not a valid YYYY-MM-DD date
    """
    if isinstance(dob, str):
        parsed = parse_iso_date(dob)
        if parsed is None:
            raise ValueError(f"Invalid date of birth: {dob}. Expected YYYY-MM-DD")
        dob = parsed
    today = today or date.today()
    age = today.year - dob.year
    if (today.month, today.day) < (dob.month, dob.day):
        age -= 1
    return age


def weight_to_lb(value: float, unit: str) -> float:
    """Convert a weight in the given display unit ("kg" or "lb"/"lbs") to pounds."""
    return kg_to_lb(value) if unit == "kg" else value


def weight_from_lb(lb: float, unit: str) -> float:
    """Convert pounds to the given display unit, rounded to 1 decimal."""
    return round_to(lb_to_kg(lb) if unit == "kg" else lb, 1)
