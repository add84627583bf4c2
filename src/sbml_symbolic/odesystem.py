"""Expansion of a reaction network into a differential-algebraic system."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np
import sympy as sp
from sympy.core.function import AppliedUndef

from .equation import Equation
from .errors import ConversionError
from .events import CompiledEvent, EventCompiler
from .symbols import TIME, get_substitutions


@dataclass(frozen=True)
class NumericRHS:
    """NumPy right-hand side ``f(t, u, p)`` of the differential equations."""

    states: Tuple[sp.Expr, ...]
    parameters: Tuple[sp.Symbol, ...]
    func: Callable[..., Any]

    def __call__(self, t: float, u, p) -> np.ndarray:
        val = np.array(self.func(t, list(u), list(p)), dtype=float)
        return val.reshape((len(self.states),))


@dataclass
class ODESystem:
    """Differential-algebraic equations with defaults and continuous events.

    Parameters
    ----------
    equations:
        Differential equations ``Derivative(x(t), t) ~ f``.
    algebraic_equations:
        Implicit equations ``0 ~ g``.
    observed:
        Explicit assignments ``y(t) ~ h``.
    events:
        Trigger/assignment records.
    """

    equations: List[Equation]
    states: List[sp.Expr]
    parameters: List[sp.Symbol]
    algebraic_equations: List[Equation] = field(default_factory=list)
    observed: List[Equation] = field(default_factory=list)
    defaults: Dict[sp.Basic, sp.Basic] = field(default_factory=dict)
    events: List[CompiledEvent] = field(default_factory=list)
    iv: sp.Symbol = TIME

    @classmethod
    def from_network(
        cls,
        network,
        include_zero_odes: bool = False,
        combinatoric_ratelaws: bool = True,
        events: Optional[List[CompiledEvent]] = None,
    ) -> "ODESystem":
        """Build the equation system of `network`.

        States targeted by assignment or rate rules take their equations from
        the rules; all other species get ``dx/dt = Σ_j v_ij ratelaw_j``.
        Zero right-hand sides are dropped unless `include_zero_odes`.
        """
        iv = network.iv
        rules = network.constraints
        ruled = {eq.lhs for eq in rules.observed}
        ruled |= {eq.lhs.args[0] for eq in rules.rate if isinstance(eq.lhs, sp.Derivative)}

        F = network.rhs(combinatoric_ratelaws)
        rows = {x: F[i, 0] for i, x in enumerate(network.species)}

        eqs: List[Equation] = []
        for x in network.states:
            if x in ruled:
                continue
            rhs = rows.get(x, sp.Integer(0))
            if rhs == 0 and not include_zero_odes:
                continue
            eqs.append(Equation(sp.Derivative(x, iv), rhs))
        eqs.extend(rules.rate)

        if events is None:
            events = []
            if network.model is not None and network.model.events:
                subs = get_substitutions(network.model, iv)
                events = EventCompiler(network.model, network.states, network.options, subs).compile_all()

        return cls(
            equations=eqs,
            states=list(network.states),
            parameters=list(network.parameters),
            algebraic_equations=list(rules.algebraic),
            observed=list(rules.observed),
            defaults=dict(network.defaults),
            events=list(events),
            iv=iv,
        )

    @property
    def unknowns(self) -> List[sp.Expr]:
        """States with a differential equation, in equation order."""
        return [eq.lhs.args[0] for eq in self.equations]

    def _inline_observed(self, exprs: List[sp.Expr]) -> List[sp.Expr]:
        obs = {eq.lhs: eq.rhs for eq in self.observed}
        for _ in range(len(obs) + 1):
            new = [e.xreplace(obs) for e in exprs]
            if new == exprs:
                break
            exprs = new
        return exprs

    def to_function(self) -> NumericRHS:
        """Return a NumPy callable ``f(t, u, p)`` for the differential equations.

        Observed variables are inlined; time-varying quantities without a
        differential equation are frozen at their default values.
        """
        if self.algebraic_equations:
            raise ConversionError(
                f"System has {len(self.algebraic_equations)} algebraic equations; "
                "a plain ODE right-hand side cannot be generated"
            )
        unknowns = self.unknowns
        rhs = self._inline_observed([eq.rhs for eq in self.equations])
        if any(e.has(sp.Derivative) for e in rhs):
            raise ConversionError("rateOf() in a right-hand side cannot be converted to a numeric function")

        frozen: Dict[sp.Basic, sp.Basic] = {}
        for e in rhs:
            for atom in e.atoms(AppliedUndef):
                if atom in unknowns or atom in frozen:
                    continue
                if atom not in self.defaults:
                    raise ConversionError(f"No equation and no default value for {atom}")
                frozen[atom] = self.defaults[atom]
        rhs = [e.xreplace(frozen) for e in rhs]

        u = [sp.Dummy(f"u{i}") for i in range(len(unknowns))]
        rhs = [e.xreplace(dict(zip(unknowns, u))) for e in rhs]
        func = sp.lambdify((self.iv, u, self.parameters), rhs, modules="numpy")
        return NumericRHS(tuple(unknowns), tuple(self.parameters), func)

    def initial_values(self) -> np.ndarray:
        """Default initial values of `unknowns` (NaN where unknown)."""
        return np.array([_as_float(self.defaults.get(x)) for x in self.unknowns], dtype=float)

    def parameter_values(self) -> np.ndarray:
        """Default values of `parameters` (NaN where unknown)."""
        return np.array([_as_float(self.defaults.get(k)) for k in self.parameters], dtype=float)


def _as_float(value) -> float:
    if value is None:
        return float("nan")
    try:
        return float(value)
    except TypeError:
        # Symbolic default (e.g. depends on an unset parameter).
        return float("nan")


__all__ = ["ODESystem", "NumericRHS"]
