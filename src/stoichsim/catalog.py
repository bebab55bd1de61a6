"""Reaction catalog: loading, lookup and reactant-order normalization."""

from __future__ import annotations

import json
import logging
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

from stoichsim.errors import CatalogError, ReactionNotFoundError
from stoichsim.models import Product, QuantityInput, Reactant, Reaction

logger = logging.getLogger(__name__)


def _parse_reactant(data: Mapping[str, Any], prefix: str) -> Reactant:
    return Reactant(
        name=str(data[prefix]),
        formula=str(data.get(f"{prefix}_formula", "")),
        molar_mass=float(data[f"{prefix}_molar_mass"]),
        coefficient=int(data.get(f"{prefix}_coefficient", 1)),
    )


def _parse_products(raw: Any) -> Tuple[Product, ...]:
    # Stored records may carry the product list as a JSON string.
    if isinstance(raw, str):
        raw = json.loads(raw)
    products = []
    for item in raw:
        products.append(
            Product(
                name=str(item["name"]),
                formula=str(item.get("formula", "")),
                molar_mass=float(item["molar_mass"]),
                coefficient=int(item.get("coefficient", 1)),
                state=str(item.get("state", "")),
            )
        )
    return tuple(products)


def reaction_from_dict(data: Mapping[str, Any]) -> Reaction:
    """Build a Reaction from a flat catalog record."""
    try:
        enthalpy = data.get("enthalpy_kj")
        return Reaction(
            reactant_a=_parse_reactant(data, "reactant_a"),
            reactant_b=_parse_reactant(data, "reactant_b"),
            products=_parse_products(data.get("products", [])),
            balanced_equation=str(data["balanced_equation"]),
            reaction_type=str(data.get("reaction_type", "")),
            enthalpy_kj=float(enthalpy) if enthalpy is not None else None,
            observation=data.get("observation"),
            state_changes=data.get("state_changes"),
            id=str(data["id"]) if data.get("id") is not None else None,
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise CatalogError(f"Malformed reaction record: {exc}") from exc


class ReactionCatalog:
    """In-memory collection of reactions keyed by reactant pair."""

    def __init__(self, reactions: Iterable[Reaction]):
        self.reactions: List[Reaction] = list(reactions)

    def __len__(self) -> int:
        return len(self.reactions)

    def __iter__(self):
        return iter(self.reactions)

    def find(self, first: str, second: str) -> Reaction:
        """Return the reaction combining ``first`` and ``second`` in either order."""
        for reaction in self.reactions:
            names = (reaction.reactant_a.name, reaction.reactant_b.name)
            if names == (first, second) or names == (second, first):
                return reaction
        raise ReactionNotFoundError(first, second)

    def reactants(self) -> List[str]:
        names = set()
        for reaction in self.reactions:
            names.add(reaction.reactant_a.name)
            names.add(reaction.reactant_b.name)
        return sorted(names)

    def partners(self, name: str) -> List[str]:
        """Reactants that have a catalog reaction with ``name``."""
        partners = set()
        for reaction in self.reactions:
            if reaction.reactant_a.name == name:
                partners.add(reaction.reactant_b.name)
            elif reaction.reactant_b.name == name:
                partners.add(reaction.reactant_a.name)
        return sorted(partners)


def catalog_from_records(records: Sequence[Mapping[str, Any]]) -> ReactionCatalog:
    return ReactionCatalog(reaction_from_dict(record) for record in records)


def load_catalog(path: str | Path) -> ReactionCatalog:
    """Load a catalog from a JSON file holding a list of reaction records."""
    with open(path, "r", encoding="utf-8") as f:
        records = json.load(f)
    if not isinstance(records, list):
        raise CatalogError(f"Catalog {path} must contain a JSON list of reactions")
    catalog = catalog_from_records(records)
    logger.info("Loaded %d reactions from %s", len(catalog), path)
    return catalog


def default_catalog() -> ReactionCatalog:
    """Catalog bundled with the package."""
    text = resources.files("stoichsim.data").joinpath("reactions.json").read_text(
        encoding="utf-8"
    )
    return catalog_from_records(json.loads(text))


def normalize_inputs(
    reaction: Reaction,
    first_name: str,
    first: QuantityInput,
    second: QuantityInput,
) -> Tuple[QuantityInput, QuantityInput]:
    """Order user inputs to match the reaction's (A, B) reactants.

    ``first`` belongs to the reactant the user picked first, named
    ``first_name``; the pair is swapped when that reactant is B.
    """
    if reaction.reactant_a.name != first_name:
        logger.debug("Swapping inputs: %s is reactant B", first_name)
        return second, first
    return first, second


def as_records(catalog: ReactionCatalog) -> List[Dict[str, Any]]:
    """Flatten a catalog back to the record shape accepted by ``reaction_from_dict``."""
    records = []
    for reaction in catalog:
        record: Dict[str, Any] = {"id": reaction.id}
        for prefix, reactant in (
            ("reactant_a", reaction.reactant_a),
            ("reactant_b", reaction.reactant_b),
        ):
            record[prefix] = reactant.name
            record[f"{prefix}_formula"] = reactant.formula
            record[f"{prefix}_molar_mass"] = reactant.molar_mass
            record[f"{prefix}_coefficient"] = reactant.coefficient
        record["products"] = [
            {
                "name": p.name,
                "formula": p.formula,
                "molar_mass": p.molar_mass,
                "coefficient": p.coefficient,
                "state": p.state,
            }
            for p in reaction.products
        ]
        record["balanced_equation"] = reaction.balanced_equation
        record["reaction_type"] = reaction.reaction_type
        record["enthalpy_kj"] = reaction.enthalpy_kj
        record["observation"] = reaction.observation
        record["state_changes"] = reaction.state_changes
        records.append(record)
    return records
