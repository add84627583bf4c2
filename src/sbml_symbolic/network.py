from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import sympy as sp

from .compiler import ReactionCompiler
from .config import ConversionOptions
from .model import Model
from .reaction import CompiledReaction
from .rules import CompiledRules, RuleCompiler
from .symbols import TIME, create_param, create_var, get_substitutions, is_constant_flag, symbol_name

logger = logging.getLogger(__name__)


def get_u0map(model: Model, iv: sp.Symbol = TIME) -> List[Tuple[sp.Expr, Optional[float]]]:
    """Return (state, initial value) pairs: species, then time-varying compartments and parameters."""
    u0s: List[Tuple[sp.Expr, Optional[float]]] = []
    inits = model.initial_amounts()
    for k in model.species:
        u0s.append((create_var(k, iv), inits[k]))
    for k, v in model.compartments.items():
        if not is_constant_flag(v.constant):
            u0s.append((create_var(k, iv), v.size))
    for k, v in model.parameters.items():
        if not is_constant_flag(v.constant):
            u0s.append((create_var(k, iv), v.value))
    return u0s


def get_paramap(model: Model) -> List[Tuple[sp.Symbol, Optional[float]]]:
    """Return (parameter, value) pairs: constant parameters, then constant compartments."""
    paramap: List[Tuple[sp.Symbol, Optional[float]]] = []
    for k, v in model.parameters.items():
        if is_constant_flag(v.constant):
            paramap.append((create_param(k), v.value))
    for k, v in model.compartments.items():
        if is_constant_flag(v.constant):
            paramap.append((create_param(k), v.size))
    return paramap


@dataclass
class ReactionNetwork:
    """A symbolic reaction network compiled from a model.

    Parameters
    ----------
    reactions:
        Directed `CompiledReaction` objects.
    species:
        Time-varying species symbols, in model order.
    states:
        All time-varying symbols: species, then non-constant compartments
        and parameters.
    parameters:
        Constant symbols: constant parameters, then constant compartments.
    defaults:
        Initial values of states and values of parameters, where known.
    constraints:
        Rule equations.

    Notes
    -----
    The species part of the ODE system is
        dx/dt = Σ_j ratelaw_j(x) v_j
    with rate laws as in `CompiledReaction.rate_law` and net stoichiometry v_j.
    """

    reactions: List[CompiledReaction]
    species: List[sp.Expr]
    states: List[sp.Expr] = field(default_factory=list)
    parameters: List[sp.Symbol] = field(default_factory=list)
    defaults: Dict[sp.Basic, sp.Basic] = field(default_factory=dict)
    constraints: CompiledRules = field(default_factory=CompiledRules)
    iv: sp.Symbol = TIME
    model: Optional[Model] = None
    options: Optional[ConversionOptions] = None

    def __post_init__(self) -> None:
        if not self.states:
            self.states = list(self.species)
        known = set(self.species)
        for r in self.reactions:
            for x, _ in r.reactant_pairs() + r.product_pairs():
                if x not in known:
                    raise ValueError(f"reaction '{r.name}' uses {x}, which is not a species of the network")

    # -----------------------------
    # Constructors
    # -----------------------------

    @classmethod
    def from_model(cls, model: Model, options: Optional[ConversionOptions] = None) -> "ReactionNetwork":
        """Compile `model` into a reaction network.

        Reactions, rules and defaults share one substitution table.
        """
        options = options or ConversionOptions()
        iv = options.iv
        subs = get_substitutions(model, iv)

        rxs = ReactionCompiler(model, options, subs).compile_all()
        rules = RuleCompiler(model, options, subs).compile_all()

        u0map = get_u0map(model, iv)
        parammap = get_paramap(model)
        defaults: Dict[sp.Basic, sp.Basic] = {}
        for k, v in u0map + parammap:
            if v is not None:
                defaults[k] = sp.sympify(v)
        for o in rules.observed:
            defaults[o.lhs] = o.rhs.subs(defaults)

        net = cls(
            reactions=rxs,
            species=[create_var(k, iv) for k in model.species],
            states=[k for k, _ in u0map],
            parameters=[k for k, _ in parammap],
            defaults=defaults,
            constraints=rules,
            iv=iv,
            model=model,
            options=options,
        )
        logger.info(
            "Compiled network: %d reactions, %d states, %d parameters, %d constraints",
            len(net.reactions),
            len(net.states),
            len(net.parameters),
            len(rules.all()),
        )
        return net

    @classmethod
    def from_string(cls, text: str, options: Optional[ConversionOptions] = None, **kwargs) -> "ReactionNetwork":
        """Parse reaction lines (see `ModelParser`) and compile them."""
        from .parser import ModelParser  # local import to avoid circular import

        return cls.from_model(ModelParser().parse_model(text, **kwargs), options)

    # -----------------------------
    # Structure
    # -----------------------------

    @property
    def n_species(self) -> int:
        return len(self.species)

    @property
    def species_names(self) -> List[str]:
        return [symbol_name(x) for x in self.species]

    @property
    def x_symbols(self) -> Tuple[sp.Expr, ...]:
        return tuple(self.species)

    @property
    def rate_constants(self) -> List[sp.Symbol]:
        """Unique constant symbols appearing in reaction rates (in order of appearance)."""
        seen = set()
        out: List[sp.Symbol] = []
        for r in self.reactions:
            for sym in sorted(r.rate.free_symbols - {self.iv}, key=lambda z: str(z)):
                if sym not in seen:
                    seen.add(sym)
                    out.append(sym)
        return out

    def state(self, name: str) -> sp.Expr:
        """Return the state symbol called `name`."""
        for x in self.states:
            if symbol_name(x) == name:
                return x
        raise KeyError(name)

    def stoichiometric_matrix(self) -> sp.Matrix:
        """Return the net stoichiometric matrix S (species × reactions)."""
        if not self.reactions:
            return sp.Matrix.zeros(self.n_species, 0)
        cols = []
        for r in self.reactions:
            net = r.net_stoichiometry()
            cols.append(sp.Matrix([net.get(x, 0) for x in self.species]))
        return sp.Matrix.hstack(*cols)

    def reactant_matrix(self) -> sp.Matrix:
        """Return the reactant stoichiometry matrix M with columns reactant complexes."""
        if not self.reactions:
            return sp.Matrix.zeros(self.n_species, 0)
        cols = []
        for r in self.reactions:
            sub = dict(r.reactant_pairs())
            cols.append(sp.Matrix([sub.get(x, 0) for x in self.species]))
        return sp.Matrix.hstack(*cols)

    # -----------------------------
    # Dynamics
    # -----------------------------

    def rate_laws(self, combinatoric: bool = True) -> List[sp.Expr]:
        return [r.rate_law(combinatoric) for r in self.reactions]

    def rhs(self, combinatoric: bool = True, simplify: bool = False) -> sp.Matrix:
        """Return the reaction part of dx/dt as an n×1 SymPy Matrix."""
        F = sp.Matrix.zeros(self.n_species, 1)
        for r in self.reactions:
            F += r.contribution(self.species, combinatoric)
        return sp.simplify(F) if simplify else F

    def jacobian(self, combinatoric: bool = True) -> sp.Matrix:
        """Return the Jacobian of `rhs` with respect to the species."""
        F = self.rhs(combinatoric)
        return F.jacobian(self.x_symbols)

    def to_odesystem(self, include_zero_odes: bool = False, combinatoric_ratelaws: bool = True):
        """Expand the network into a differential-algebraic `ODESystem` with events."""
        from .odesystem import ODESystem  # local import to avoid circular import

        return ODESystem.from_network(
            self, include_zero_odes=include_zero_odes, combinatoric_ratelaws=combinatoric_ratelaws
        )

    # -----------------------------
    # Presentation
    # -----------------------------

    def summary(self) -> str:
        """Human-readable summary."""
        lines = []
        lines.append(f"ReactionNetwork(n_species={self.n_species}, n_reactions={len(self.reactions)})")
        lines.append("Species: " + ", ".join(self.species_names))
        lines.append("Parameters: " + ", ".join(str(k) for k in self.parameters))
        lines.append("Rate constants: " + ", ".join(str(k) for k in self.rate_constants))
        n_rules = len(self.constraints.all())
        if n_rules:
            lines.append(f"Constraints: {n_rules}")
        return "\n".join(lines)

    def to_latex(self, combinatoric: bool = True) -> str:
        """Export the reaction ODEs to LaTeX.

        Returns an ``align`` environment with equations of the form
            \\frac{d}{dt} x_i = F_i(x,k).
        """
        F = self.rhs(combinatoric)
        lines = []
        for i, xi in enumerate(self.species):
            lhs = f"\\frac{{d}}{{dt}} {sp.latex(xi)}"
            rhs = sp.latex(F[i, 0])
            lines.append(f"{lhs} &= {rhs}")
        body = " \\\\\n".join(lines)
        return "\\begin{align}\n" + body + "\n\\end{align}"

    def reactions_to_latex(self) -> str:
        """Export directed reactions to LaTeX.

        Notes
        -----
        Reversible source reactions appear as two directed lines. Rates of
        reactions with ``only_use_rate`` are full rate laws.
        """

        def complex_to_str(pairs):
            terms = []
            for x, c in pairs:
                name = symbol_name(x)
                if c == 1:
                    terms.append(f"{name}")
                else:
                    terms.append(f"{c}{name}")
            return " + ".join(terms) if terms else "\\varnothing"

        lines = []
        for r in self.reactions:
            lhs = complex_to_str(r.reactant_pairs())
            rhs = complex_to_str(r.product_pairs())
            k = sp.latex(r.rate)
            lines.append(f"{lhs} \\xrightarrow{{{k}}} {rhs}")

        body = " \\\\\n".join(lines)
        return "\\begin{align}\n" + body + "\n\\end{align}"


def reaction_network(model: Model, options: Optional[ConversionOptions] = None) -> ReactionNetwork:
    """Compile `model` into a `ReactionNetwork`."""
    return ReactionNetwork.from_model(model, options)


__all__ = ["ReactionNetwork", "reaction_network", "get_u0map", "get_paramap"]
