from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple, Union

import sympy as sp

from .symbols import symbol_name

Stoich = Union[int, float]


@dataclass(frozen=True)
class CompiledReaction:
    """A single directed reaction of the network.

    Parameters
    ----------
    rate:
        Rate constant, or the complete rate expression when `only_use_rate`.
    reactants, products:
        Species symbols, or None when the side is absent.
    substoich, prodstoich:
        Stoichiometric coefficients aligned with `reactants` / `products`,
        or None when the side is absent.
    only_use_rate:
        True if `rate` already is the full reaction rate.
    name:
        Identifier of the source reaction (reverse halves end in ``_rev``).

    Notes
    -----
    For ``only_use_rate=False`` mass action yields the rate law

        rate * prod_i x_i**s_i / s_i!

    (combinatoric form) and the term ``ratelaw * (p - s)`` in dx/dt.
    """

    rate: sp.Expr
    reactants: Optional[Tuple[sp.Expr, ...]]
    products: Optional[Tuple[sp.Expr, ...]]
    substoich: Optional[Tuple[Stoich, ...]]
    prodstoich: Optional[Tuple[Stoich, ...]]
    only_use_rate: bool = False
    name: str = ""

    def __post_init__(self) -> None:
        if (self.reactants is None) != (self.substoich is None):
            raise ValueError("reactants and substoich must both be given or both be None")
        if (self.products is None) != (self.prodstoich is None):
            raise ValueError("products and prodstoich must both be given or both be None")
        if self.reactants is not None and len(self.reactants) != len(self.substoich):
            raise ValueError("reactants and substoich must have the same length")
        if self.products is not None and len(self.products) != len(self.prodstoich):
            raise ValueError("products and prodstoich must have the same length")

    def reactant_pairs(self) -> Tuple[Tuple[sp.Expr, Stoich], ...]:
        if self.reactants is None:
            return ()
        return tuple(zip(self.reactants, self.substoich))

    def product_pairs(self) -> Tuple[Tuple[sp.Expr, Stoich], ...]:
        if self.products is None:
            return ()
        return tuple(zip(self.products, self.prodstoich))

    def net_stoichiometry(self) -> Dict[sp.Expr, Stoich]:
        """Return species -> (product - reactant) coefficient, zeros dropped."""
        net: Dict[sp.Expr, Stoich] = {}
        for x, s in self.reactant_pairs():
            net[x] = net.get(x, 0) - s
        for x, s in self.product_pairs():
            net[x] = net.get(x, 0) + s
        return {x: v for x, v in net.items() if v != 0}

    def reactant_monomial(self, combinatoric: bool = True) -> sp.Expr:
        """Return the mass-action monomial ∏ x_i^{s_i} (divided by ∏ s_i! if combinatoric)."""
        mon = sp.Integer(1)
        for x, s in self.reactant_pairs():
            mon *= x ** s
            if combinatoric:
                mon /= sp.factorial(s)
        return mon

    def rate_law(self, combinatoric: bool = True) -> sp.Expr:
        """Return the full rate of this reaction."""
        if self.only_use_rate:
            return self.rate
        return self.rate * self.reactant_monomial(combinatoric)

    def contribution(self, species: Sequence[sp.Expr], combinatoric: bool = True) -> sp.Matrix:
        """Return this reaction's contribution to dx/dt for the given species order."""
        net = self.net_stoichiometry()
        law = self.rate_law(combinatoric)
        return sp.Matrix([net.get(x, 0) * law for x in species])

    def to_string(self) -> str:
        def complex_to_str(pairs):
            terms = []
            for x, s in pairs:
                name = symbol_name(x)
                terms.append(name if s == 1 else f"{s}{name}")
            return " + ".join(terms) if terms else "0"

        arrow = "=>" if self.only_use_rate else "-->"
        return (
            f"{sp.sstr(self.rate)}, {complex_to_str(self.reactant_pairs())} "
            f"{arrow} {complex_to_str(self.product_pairs())}"
        )
