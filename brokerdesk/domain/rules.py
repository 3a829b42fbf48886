# brokerdesk/domain/rules.py
"""
Per-request validation rules that span more than one field.

Pure functions: no session, no settings. Field-level shape (lengths, enums,
positive prices) is enforced by the pydantic schemas before these run.
"""
from __future__ import annotations

import math
from datetime import date, datetime
from typing import Optional

from ..errors import ValidationError

ROOMED_PROPERTY_TYPES = ("apartment", "house")


def validate_budget_range(budget_min: Optional[float], budget_max: Optional[float]) -> None:
    if budget_min is not None and not (math.isfinite(budget_min) and budget_min > 0):
        raise ValidationError("budget_min must be a positive value")
    if budget_max is not None and not (math.isfinite(budget_max) and budget_max > 0):
        raise ValidationError("budget_max must be a positive value")
    if budget_min is not None and budget_max is not None and budget_min > budget_max:
        raise ValidationError("budget_min cannot be greater than budget_max")


def validate_property_rooms(property_type: str, bedrooms: Optional[int], bathrooms: Optional[int]) -> None:
    if property_type in ROOMED_PROPERTY_TYPES:
        if bedrooms is None:
            raise ValidationError(f"bedrooms are required for property type '{property_type}'")
        if bathrooms is None:
            raise ValidationError(f"bathrooms are required for property type '{property_type}'")

    if bedrooms is not None and bedrooms < 0:
        raise ValidationError("bedrooms must be zero or more")
    if bathrooms is not None and bathrooms < 0:
        raise ValidationError("bathrooms must be zero or more")


def parse_date_of_birth(value: str) -> date:
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError("invalid date of birth format, use YYYY-MM-DD")
