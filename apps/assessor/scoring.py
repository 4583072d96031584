"""
Risk Scoring Functions

Pure per-field scorers. Each takes the raw value exactly as the patient API
sent it and returns a ScoreResult; missing or unparsable input gives
ScoreResult(score=0, is_invalid=True) and never raises.

Blood pressure (higher stage wins):
- Stage 2: systolic >= 140 or diastolic >= 90   -> 3
- Stage 1: systolic 130-139 or diastolic 80-89  -> 2
- Elevated: systolic 120-129 and diastolic < 80 -> 1
- Normal / anything else                        -> 0

Temperature (F): >= 101.0 -> 2, 99.6-100.9 -> 1, otherwise 0
Age (years): > 65 -> 2, 40-65 -> 1, otherwise 0
"""

import math
import re
from typing import Any, Optional

from utils.schemas import ScoreResult

_BP_PATTERN = re.compile(r"(\d+)/(\d+)")
# Readings may carry trailing units ("45 years", "101.2F"); the leading number counts
_INTEGER_PREFIX = re.compile(r"\s*([+-]?\d+)")
_NUMBER_PREFIX = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_number(value: Any) -> Optional[float]:
    """Parse a finite number from a number or the leading number of a text, else None."""
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        match = _NUMBER_PREFIX.match(value)
        if match is None:
            return None
        number = float(match.group(1))
    else:
        return None

    return number if math.isfinite(number) else None


def parse_integer(value: Any) -> Optional[int]:
    """Parse an integer from a number or the leading digits of a text, else None.

    Fractional values are truncated toward zero.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, int):
        return value

    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None

    if isinstance(value, str):
        match = _INTEGER_PREFIX.match(value)
        return int(match.group(1)) if match else None

    return None


def calculate_bp_risk(value: Any) -> ScoreResult:
    """Score a 'systolic/diastolic' blood pressure reading."""
    if not isinstance(value, str) or not value:
        return ScoreResult.invalid()

    match = _BP_PATTERN.fullmatch(value)
    if match is None:
        return ScoreResult.invalid()

    systolic, diastolic = int(match.group(1)), int(match.group(2))

    if systolic >= 140 or diastolic >= 90:
        return ScoreResult(score=3)
    if 130 <= systolic <= 139 or 80 <= diastolic <= 89:
        return ScoreResult(score=2)
    if 120 <= systolic <= 129 and diastolic < 80:
        return ScoreResult(score=1)
    return ScoreResult(score=0)


def calculate_temp_risk(value: Any) -> ScoreResult:
    temperature = parse_number(value)
    if temperature is None:
        return ScoreResult.invalid()

    if temperature >= 101.0:
        return ScoreResult(score=2)
    if temperature >= 99.6:
        return ScoreResult(score=1)
    return ScoreResult(score=0)


def calculate_age_risk(value: Any) -> ScoreResult:
    age = parse_integer(value)
    if age is None:
        return ScoreResult.invalid()

    if age > 65:
        return ScoreResult(score=2)
    if age >= 40:
        return ScoreResult(score=1)
    return ScoreResult(score=0)
