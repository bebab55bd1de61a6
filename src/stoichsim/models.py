"""Data structures for reactions and simulation results."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class Unit(str, Enum):
    GRAMS = "grams"
    MOLES = "moles"
    MILLILITRES = "mL"


class ReagentTag(str, Enum):
    A = "A"
    B = "B"


@dataclass(frozen=True)
class Reactant:
    name: str
    formula: str
    molar_mass: float  # g/mol
    coefficient: int


@dataclass(frozen=True)
class Product:
    name: str
    formula: str
    molar_mass: float  # g/mol
    coefficient: int
    state: str = ""


@dataclass(frozen=True)
class Reaction:
    """A pre-balanced two-reactant reaction.

    Attributes:
        reactant_a: First reactant in catalog order.
        reactant_b: Second reactant in catalog order.
        products: Products in display order.
        balanced_equation: Equation string for display.
        reaction_type: Free-form label such as "Neutralization".
        enthalpy_kj: Reaction enthalpy (kJ/mol), negative when exothermic.
        observation: What a student would see in the lab.
        state_changes: Free-text description of phase changes.
        id: Catalog identifier, if the record came from a catalog.
    """

    reactant_a: Reactant
    reactant_b: Reactant
    products: Tuple[Product, ...]
    balanced_equation: str
    reaction_type: str
    enthalpy_kj: Optional[float] = None
    observation: Optional[str] = None
    state_changes: Optional[str] = None
    id: Optional[str] = None

    @property
    def is_exothermic(self) -> bool:
        return self.enthalpy_kj is not None and self.enthalpy_kj < 0

    def reactant(self, tag: ReagentTag) -> Reactant:
        return self.reactant_a if tag is ReagentTag.A else self.reactant_b


@dataclass(frozen=True)
class QuantityInput:
    quantity: float
    unit: str = Unit.GRAMS.value


@dataclass(frozen=True)
class ConvertedInput:
    quantity: float
    unit: str
    moles: float


@dataclass(frozen=True)
class ProductFormed:
    name: str
    formula: str
    moles: float
    mass: float  # g
    coefficient: int


@dataclass(frozen=True)
class ExcessReagent:
    name: str
    leftover_moles: float
    leftover_mass: float  # g


@dataclass(frozen=True)
class SimulationResult:
    reaction: Reaction
    input_a: ConvertedInput
    input_b: ConvertedInput
    limiting_reagent: ReagentTag
    limiting_extent: float  # mol, min(moles / coefficient)
    excess_reagent: ExcessReagent
    products_formed: Tuple[ProductFormed, ...]
    theoretical_yield: float  # g
    calculation_steps: Tuple[str, ...]

    @property
    def limiting_reagent_name(self) -> str:
        return self.reaction.reactant(self.limiting_reagent).name

    @property
    def excess_reagent_tag(self) -> ReagentTag:
        return ReagentTag.B if self.limiting_reagent is ReagentTag.A else ReagentTag.A

    def converted_input(self, tag: ReagentTag) -> ConvertedInput:
        return self.input_a if tag is ReagentTag.A else self.input_b

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["limiting_reagent"] = self.limiting_reagent.value
        payload["limiting_reagent_name"] = self.limiting_reagent_name
        return payload
