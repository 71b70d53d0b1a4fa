"""Derived-field calculator — turns raw numeric inputs into bucket labels.

Two groups are never chosen by the user but computed from numeric inputs:

  - ``bmi``             from weight (kg) and height (cm)
  - ``blood_pressure``  from systolic pressure (mmHg)

All functions here are pure: the same inputs always produce the same
labels, and nothing is cached between calls.  The bucket boundaries are
policy and are reproduced exactly.
"""

from __future__ import annotations

import math
from typing import Any, Mapping

BMI_OVERWEIGHT = ">=25"
BMI_NORMAL = ">=18.5"
BMI_NOT_APPLICABLE = "N/a"


def parse_positive(value: Any) -> float | None:
    """Return *value* as a finite float > 0, or ``None``.

    Accepts ints, floats, and numeric strings (surrounding whitespace
    ignored).  Booleans, blanks, non-numeric text, NaN, infinities, zero and
    negatives all yield ``None``.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    return number


def bmi_bucket(weight: Any, height: Any) -> str:
    """Bucket BMI computed from weight (kg) and height (cm).

    >>> bmi_bucket(70, 175)
    '>=18.5'
    """
    w = parse_positive(weight)
    h = parse_positive(height)
    if w is None or h is None:
        return BMI_NOT_APPLICABLE

    bmi = w / (h / 100) ** 2
    if bmi >= 25:
        return BMI_OVERWEIGHT
    if bmi >= 18.5:
        return BMI_NORMAL
    return BMI_NOT_APPLICABLE


def blood_pressure_bucket(systolic: Any) -> str | None:
    """Bucket a systolic reading (mmHg).  ``None`` when absent or <= 0."""
    s = parse_positive(systolic)
    if s is None:
        return None

    if s == 120:
        return "120/80"
    if 120 < s < 130:
        return "<130/80"
    if s == 130:
        return ">=130/80"
    if 130 < s < 140:
        return ">130/80"
    if 140 <= s < 145:
        return ">140/80"
    # Everything outside the named ranges, including readings below 120
    return "95-145/80"


def compute_derived(values: Mapping[str, Any]) -> dict[str, str | None]:
    """Compute every derived group from the raw answer values."""
    return {
        "bmi": bmi_bucket(values.get("weight"), values.get("height")),
        "blood_pressure": blood_pressure_bucket(values.get("systolic")),
    }
