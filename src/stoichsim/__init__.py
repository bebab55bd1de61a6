"""StoichSim core package."""

from stoichsim.catalog import ReactionCatalog, default_catalog, load_catalog, normalize_inputs
from stoichsim.models import Product, QuantityInput, Reactant, Reaction, ReagentTag, SimulationResult, Unit
from stoichsim.stoichiometry import calculate_stoichiometry, convert_to_moles

__all__ = [
    "Product",
    "QuantityInput",
    "Reactant",
    "Reaction",
    "ReactionCatalog",
    "ReagentTag",
    "SimulationResult",
    "Unit",
    "calculate_stoichiometry",
    "convert_to_moles",
    "default_catalog",
    "load_catalog",
    "normalize_inputs",
]
