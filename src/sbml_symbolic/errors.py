"""Domain-specific exceptions for model conversion."""

from __future__ import annotations

from typing import Optional


class ConversionError(ValueError):
    """Base class for conversion errors.

    Parameters
    ----------
    message:
        Human-readable description.
    element:
        Identifier of the offending reaction, rule or event, if known.
    """

    def __init__(self, message: str, element: Optional[str] = None) -> None:
        super().__init__(message)
        self.element = element


class UnsupportedOperator(ConversionError):
    """Raised when an expression applies a function with no symbolic mapping."""


class UnsupportedConstruct(ConversionError):
    """Raised for lambda nodes and other expression nodes that cannot be interpreted."""


class SeparationError(ConversionError):
    """Raised when a reversible kinetic law cannot be split into forward and reverse parts."""


class InconsistentReactants(ConversionError):
    """Raised when exactly one of reactants / reactant stoichiometry is absent."""


class InvalidRule(ConversionError):
    """Raised when a rule targets an unknown species, compartment or parameter."""


class InvalidEvent(ConversionError):
    """Raised for non-relational triggers or event assignments to non-states."""


class ZeroStoichiometry(ConversionError):
    """Raised when a stoichiometric coefficient is zero."""


class UnknownSpecies(ConversionError):
    """Raised when a reaction references an identifier that is not a species."""


class UnknownLeafType(ConversionError):
    """Raised when the mass-action leaf walk meets an expression it cannot classify."""


__all__ = [
    "ConversionError",
    "UnsupportedOperator",
    "UnsupportedConstruct",
    "SeparationError",
    "InconsistentReactants",
    "InvalidRule",
    "InvalidEvent",
    "ZeroStoichiometry",
    "UnknownSpecies",
    "UnknownLeafType",
]
