"""Caller-side checks run before handing inputs to the engine."""

from __future__ import annotations

import math
from typing import Any

from stoichsim.errors import InvalidQuantityError, UnknownUnitError
from stoichsim.models import QuantityInput, Unit

SUPPORTED_UNITS = tuple(unit.value for unit in Unit)


def validate_quantity(value: Any) -> float:
    """Return ``value`` as a float, rejecting missing, non-finite or non-positive input."""
    if value is None or isinstance(value, bool):
        raise InvalidQuantityError(f"Invalid quantity: {value!r}")
    try:
        quantity = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidQuantityError(f"Invalid quantity: {value!r}") from exc
    if not math.isfinite(quantity) or quantity <= 0:
        raise InvalidQuantityError(
            f"Invalid quantity: {value!r} (must be a positive number)"
        )
    return quantity


def validate_unit(unit: str, strict: bool = True) -> str:
    if strict and unit not in SUPPORTED_UNITS:
        raise UnknownUnitError(
            f"Unknown unit {unit!r}; expected one of {', '.join(SUPPORTED_UNITS)}"
        )
    return unit


def validated_input(quantity: Any, unit: str, strict_units: bool = True) -> QuantityInput:
    return QuantityInput(
        quantity=validate_quantity(quantity),
        unit=validate_unit(unit, strict=strict_units),
    )
