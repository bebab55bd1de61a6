"""Exception types raised around the stoichiometry engine."""

from __future__ import annotations


class StoichSimError(Exception):
    """Base class for all StoichSim errors."""


class InvalidQuantityError(StoichSimError, ValueError):
    """A reactant quantity is missing, non-numeric or not strictly positive."""


class UnknownUnitError(StoichSimError, ValueError):
    """A unit tag is not one of the supported units."""


class ReactionNotFoundError(StoichSimError, LookupError):
    """No catalog reaction combines the requested reactants."""

    def __init__(self, first: str, second: str) -> None:
        super().__init__(f"Reaction not found: {first} + {second}")
        self.first = first
        self.second = second


class CatalogError(StoichSimError, ValueError):
    """A catalog record is malformed."""


class PersistenceError(StoichSimError, RuntimeError):
    """Saving or reading simulation history failed."""
