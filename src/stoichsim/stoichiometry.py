"""Stoichiometry engine.

Converts reactant inputs to moles, picks the limiting reagent by comparing
extent ratios (moles / coefficient), and derives products formed, leftover
excess reagent and theoretical yield. Every step of the arithmetic is also
recorded as a human-readable line for display.

The functions here are pure: no validation, no I/O and no state between
calls. Degenerate inputs (zero molar masses or coefficients, NaN) propagate
as non-finite floats instead of raising; rejecting them is the caller's job.
"""

from __future__ import annotations

import logging
from typing import List

import numpy as np

from stoichsim.constants import ASSUMED_MOLARITY, ML_PER_LITRE, TRACE_DECIMALS
from stoichsim.models import (
    ConvertedInput,
    ExcessReagent,
    ProductFormed,
    ReagentTag,
    Reaction,
    SimulationResult,
    Unit,
)

logger = logging.getLogger(__name__)


def _divide(numerator: float, denominator: float) -> float:
    # IEEE semantics: x/0 -> inf, 0/0 -> nan.
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.divide(np.float64(numerator), np.float64(denominator)))


def _fmt(value: float) -> str:
    return f"{value:.{TRACE_DECIMALS}f}"


def convert_to_moles(quantity: float, unit: str, molar_mass: float) -> float:
    """Convert a quantity in ``unit`` to moles.

    Volumes are read as millilitres of a fixed 1 mol/L solution. Unknown
    unit tags are passed through as if already in moles.
    """
    if unit == Unit.GRAMS.value:
        return _divide(quantity, molar_mass)
    if unit == Unit.MOLES.value:
        return float(quantity)
    if unit == Unit.MILLILITRES.value:
        return _divide(quantity, ML_PER_LITRE) * ASSUMED_MOLARITY
    logger.warning("Unrecognized unit %r; treating quantity as moles", unit)
    return float(quantity)


def calculate_stoichiometry(
    reaction: Reaction,
    quantity_a: float,
    unit_a: str,
    quantity_b: float,
    unit_b: str,
) -> SimulationResult:
    """Run the stoichiometry calculation for inputs in catalog (A, B) order.

    Ties between extent ratios go to reactant A.
    """
    a = reaction.reactant_a
    b = reaction.reactant_b
    steps: List[str] = []

    moles_a = convert_to_moles(quantity_a, unit_a, a.molar_mass)
    moles_b = convert_to_moles(quantity_b, unit_b, b.molar_mass)

    steps.append("Step 1: Convert reactants to moles")
    steps.append(_conversion_line(a.name, quantity_a, unit_a, a.molar_mass, moles_a))
    steps.append(_conversion_line(b.name, quantity_b, unit_b, b.molar_mass, moles_b))

    ratio_a = _divide(moles_a, a.coefficient)
    ratio_b = _divide(moles_b, b.coefficient)

    steps.append("Step 2: Calculate mole ratios")
    steps.append(f"{a.name}: {_fmt(moles_a)} mol ÷ {a.coefficient} = {_fmt(ratio_a)}")
    steps.append(f"{b.name}: {_fmt(moles_b)} mol ÷ {b.coefficient} = {_fmt(ratio_b)}")

    limiting = ReagentTag.A if ratio_a <= ratio_b else ReagentTag.B
    extent = float(np.minimum(ratio_a, ratio_b))

    steps.append("Step 3: Identify limiting reagent")
    steps.append(f"{reaction.reactant(limiting).name} is the limiting reagent (smaller ratio)")

    products = []
    for product in reaction.products:
        product_moles = extent * product.coefficient
        product_mass = product_moles * product.molar_mass
        steps.append(f"Calculating {product.name}:")
        steps.append(f"Moles = {_fmt(extent)} × {product.coefficient} = {_fmt(product_moles)} mol")
        steps.append(
            f"Mass = {_fmt(product_moles)} mol × {product.molar_mass} g/mol"
            f" = {_fmt(product_mass)} g"
        )
        products.append(
            ProductFormed(
                name=product.name,
                formula=product.formula,
                moles=product_moles,
                mass=product_mass,
                coefficient=product.coefficient,
            )
        )

    if limiting is ReagentTag.A:
        excess, excess_moles = b, moles_b
    else:
        excess, excess_moles = a, moles_a
    leftover_moles = excess_moles - extent * excess.coefficient
    leftover_mass = leftover_moles * excess.molar_mass

    steps.append("Step 4: Calculate excess reagent")
    steps.append(
        f"{excess.name} leftover: {_fmt(leftover_moles)} mol = {_fmt(leftover_mass)} g"
    )

    theoretical_yield = 0.0
    for formed in products:
        theoretical_yield += formed.mass

    steps.append("Step 5: Theoretical yield")
    steps.append(f"Total products mass: {_fmt(theoretical_yield)} g")

    logger.debug(
        "Stoichiometry for %s: limiting=%s extent=%.6g yield=%.6g g",
        reaction.balanced_equation,
        limiting.value,
        extent,
        theoretical_yield,
    )

    return SimulationResult(
        reaction=reaction,
        input_a=ConvertedInput(quantity=quantity_a, unit=unit_a, moles=moles_a),
        input_b=ConvertedInput(quantity=quantity_b, unit=unit_b, moles=moles_b),
        limiting_reagent=limiting,
        limiting_extent=extent,
        excess_reagent=ExcessReagent(
            name=excess.name,
            leftover_moles=leftover_moles,
            leftover_mass=leftover_mass,
        ),
        products_formed=tuple(products),
        theoretical_yield=theoretical_yield,
        calculation_steps=tuple(steps),
    )


def _conversion_line(
    name: str, quantity: float, unit: str, molar_mass: float, moles: float
) -> str:
    if unit == Unit.GRAMS.value:
        return f"{name}: {quantity} g ÷ {molar_mass} g/mol = {_fmt(moles)} mol"
    if unit == Unit.MILLILITRES.value:
        return (
            f"{name}: {quantity} mL × {ASSUMED_MOLARITY:g} mol/L ÷ {ML_PER_LITRE:g} mL/L"
            f" = {_fmt(moles)} mol"
        )
    return f"{name}: {quantity} {unit} = {_fmt(moles)} mol"
