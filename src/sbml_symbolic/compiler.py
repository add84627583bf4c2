"""Compile model reactions into directed mass-action reactions.

For every reaction the compiler

1. collects reactant/product symbols and stoichiometry (boundary species are
   consumed and regenerated, so they never change net),
2. interprets the kinetic law and, for reversible reactions, splits it into a
   forward and a reverse rate,
3. applies the substitution table,
4. tries to isolate a mass-action rate constant by dividing out the reactant
   monomial, and
5. multiplies surviving rate constants by ∏ s! so that the combinatoric rate
   law reproduces the source kinetics.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

import sympy as sp
from sympy.core.function import AppliedUndef
from sympy.logic.boolalg import BooleanAtom

from .config import ConversionOptions
from .errors import (
    ConversionError,
    InconsistentReactants,
    SeparationError,
    UnknownLeafType,
    UnknownSpecies,
    ZeroStoichiometry,
)
from .model import Model, Reaction
from .reaction import CompiledReaction
from .symbols import TIME, create_var, get_substitutions, substitute

logger = logging.getLogger(__name__)

Reagents = Tuple[
    Optional[List[sp.Expr]],
    Optional[List[sp.Expr]],
    Optional[List[float]],
    Optional[List[float]],
]


def stoich_convert_to_ints(xs: Optional[Sequence[float]]):
    """Return `xs` as ints if every entry is integral, else unchanged."""
    if xs is not None and all(float(x).is_integer() for x in xs):
        return [int(x) for x in xs]
    return xs


def get_reagents(
    reaction: Reaction,
    model: Model,
    *,
    rev: bool = False,
    iv: sp.Symbol = TIME,
    zero_stoichiometry: str = "error",
) -> Reagents:
    """Return (reactants, products, reactant stoich, product stoich).

    A side without species is returned as None rather than an empty list.
    With ``rev=True`` reactants and products swap roles.
    """
    rstoichdict = reaction.reactants
    pstoichdict = reaction.products
    if rev:
        rstoichdict, pstoichdict = pstoichdict, rstoichdict

    reactants: List[sp.Expr] = []
    products: List[sp.Expr] = []
    rstoich: List[float] = []
    pstoich: List[float] = []

    for k, v in rstoichdict.items():
        _check_stoichiometry(reaction, k, v, zero_stoichiometry)
        species = _lookup_species(model, reaction, k)
        reactants.append(create_var(k, iv))
        rstoich.append(v)
        if species.boundary_condition:
            products.append(create_var(k, iv))
            pstoich.append(v)

    for k, v in pstoichdict.items():
        _check_stoichiometry(reaction, k, v, zero_stoichiometry)
        species = _lookup_species(model, reaction, k)
        if not species.boundary_condition:
            products.append(create_var(k, iv))
            pstoich.append(v)

    return (
        reactants or None,
        products or None,
        rstoich if reactants else None,
        pstoich if products else None,
    )


def _lookup_species(model: Model, reaction: Reaction, k: str):
    try:
        return model.species[k]
    except KeyError:
        raise UnknownSpecies(
            f"Reaction '{reaction.id}' references '{k}', which is not a species", reaction.id
        ) from None


def _check_stoichiometry(reaction: Reaction, k: str, v: float, mode: str) -> None:
    if v != 0:
        return
    msg = f"Stoichiometry of {k} in reaction '{reaction.id}' must be non-zero"
    if mode == "warn":
        logger.warning(msg)
        return
    raise ZeroStoichiometry(msg, reaction.id)


def get_unidirectional_components(
    bidirectional_math: sp.Expr,
    *,
    simplify: bool = True,
) -> Tuple[sp.Expr, sp.Expr]:
    """Infer forward and reverse components of a bidirectional kinetic law.

    The law is expanded into a sum; the single term with a negative
    coefficient (negated) is the reverse rate and the single remaining term is
    the forward rate. Expansion leaves denominators alone, so
    ``Vf*A/(Km + A) - Vr*B/(Kp + B)`` splits as written. With `simplify`, a
    law that does not split that way is passed through ``sympy.simplify``
    and expanded once more.
    """
    err = (
        f"Cannot separate bidirectional kineticLaw `{sp.sstr(bidirectional_math)}` to forward "
        "and reverse part. Please make reaction irreversible or rearrange kineticLaw to the "
        "form `term1 - term2`."
    )
    expr = sp.sympify(bidirectional_math)
    parts = _split_terms(sp.expand(expr))
    if parts is None and simplify:
        parts = _split_terms(sp.expand(sp.simplify(expr)))
    if parts is None:
        raise SeparationError(err)
    return parts


def _split_terms(expr: sp.Expr) -> Optional[Tuple[sp.Expr, sp.Expr]]:
    if not isinstance(expr, sp.Add):
        return None
    fw_terms: List[sp.Expr] = []
    rv_terms: List[sp.Expr] = []
    for term in expr.args:
        coeff, _ = term.as_coeff_Mul()
        if coeff.is_negative:
            rv_terms.append(-term)
        else:
            fw_terms.append(term)
    if len(fw_terms) != 1 or len(rv_terms) != 1:
        return None
    return fw_terms[0], rv_terms[0]


def _simplify_fractions(expr: sp.Expr) -> sp.Expr:
    try:
        return sp.cancel(expr)
    except sp.PolynomialError:
        # cancel() cannot treat e.g. Piecewise as a rational function.
        return sp.simplify(expr)


def _is_constant_expression(expr, iv: sp.Symbol) -> bool:
    """Walk the leaves of `expr`: False as soon as one depends on time."""
    if expr == iv:
        return False
    if isinstance(expr, AppliedUndef):
        return False  # state leaf
    if isinstance(expr, sp.Symbol):
        return True  # parameter leaf
    if isinstance(expr, (sp.Number, sp.NumberSymbol, BooleanAtom, int, float)):
        return True
    if isinstance(expr, sp.Basic):
        if expr.args:
            return all(_is_constant_expression(arg, iv) for arg in expr.args)
        if expr.is_number:
            return True
    raise UnknownLeafType(f"Cannot handle {type(expr).__name__} types.")


def get_mass_action(
    kl: sp.Expr,
    reactants: Optional[Sequence[sp.Expr]],
    stoich: Optional[Sequence[float]],
    iv: sp.Symbol = TIME,
) -> Optional[sp.Expr]:
    """Return the mass-action rate constant of `kl`, or None if there is none."""
    if reactants is None and stoich is None:
        rate_const = kl
    elif reactants is None or stoich is None:
        raise InconsistentReactants(
            f"`reactants` and `stoich` are inconsistent: `reactants` are {reactants} "
            f"and `stoich` is {stoich}."
        )
    else:
        monomial = sp.Mul(*[x ** s for x, s in zip(reactants, stoich)])
        rate_const = _simplify_fractions(kl / monomial)
    return rate_const if _is_constant_expression(rate_const, iv) else None


def use_rate(
    kl: sp.Expr,
    reactants: Optional[Sequence[sp.Expr]],
    stoich: Optional[Sequence[float]],
    iv: sp.Symbol = TIME,
) -> Tuple[sp.Expr, bool]:
    """Return (rate, only_use_rate) for a kinetic law."""
    rate_const = get_mass_action(kl, reactants, stoich, iv)
    if rate_const is not None:
        return rate_const, False
    return kl, True


def from_noncombinatoric(rl: sp.Expr, stoich: Optional[Sequence[float]], only_use_rate: bool) -> sp.Expr:
    """Multiply a rate constant by ∏ s! over coefficients other than one."""
    if stoich is not None and not only_use_rate:
        coef = sp.Integer(1)
        for s in stoich:
            if s == 1:
                continue
            coef *= sp.factorial(s)
        if coef != 1:
            rl = rl * coef
    return rl


class ReactionCompiler:
    """Compile the reactions of one model.

    The substitution table is built once per compiler; `compile` may then be
    called for each reaction in turn.
    """

    def __init__(
        self,
        model: Model,
        options: Optional[ConversionOptions] = None,
        subs: Optional[Dict[sp.Expr, sp.Expr]] = None,
    ) -> None:
        self.model = model
        self.options = options or ConversionOptions()
        self.iv = self.options.iv
        self.subs = subs if subs is not None else get_substitutions(model, self.iv)
        self.interpreter = self.options.interpreter()

    def compile_all(self) -> List[CompiledReaction]:
        rxs: List[CompiledReaction] = []
        for reaction in self.model.reactions.values():
            rxs.extend(self.compile(reaction))
        return rxs

    def compile(self, reaction: Reaction) -> List[CompiledReaction]:
        """Return the directed reactions for `reaction` (0, 1 or 2 of them)."""
        try:
            return self._compile(reaction)
        except ConversionError as exc:
            if exc.element is None:
                exc.element = reaction.id
            raise

    def _reagents(self, reaction: Reaction, rev: bool = False) -> Reagents:
        reactants, products, rstoich, pstoich = get_reagents(
            reaction,
            self.model,
            rev=rev,
            iv=self.iv,
            zero_stoichiometry=self.options.zero_stoichiometry,
        )
        return reactants, products, stoich_convert_to_ints(rstoich), stoich_convert_to_ints(pstoich)

    def _compile(self, reaction: Reaction) -> List[CompiledReaction]:
        reactants, products, rstoich, pstoich = self._reagents(reaction)
        if reactants is None and products is None:
            logger.debug("Skipping reaction '%s': no reactants and no products", reaction.id)
            return []
        if reaction.kinetic_math is None:
            raise ConversionError(f"Reaction '{reaction.id}' has no kinetic law", reaction.id)

        symbolic_math = self.interpreter.interpret(reaction.kinetic_math)

        if not reaction.reversible:
            kl = substitute(symbolic_math, self.subs)
            return [self._directed(reaction.id, kl, reactants, products, rstoich, pstoich)]

        kl_fw, kl_rv = get_unidirectional_components(
            symbolic_math, simplify=self.options.simplify_reversible
        )
        kl_fw = substitute(kl_fw, self.subs)
        kl_rv = substitute(kl_rv, self.subs)
        out = [self._directed(reaction.id, kl_fw, reactants, products, rstoich, pstoich)]

        reactants_rev, products_rev, rstoich_rev, pstoich_rev = self._reagents(reaction, rev=True)
        out.append(
            self._directed(
                f"{reaction.id}_rev", kl_rv, reactants_rev, products_rev, rstoich_rev, pstoich_rev
            )
        )
        return out

    def _directed(self, name, kl, reactants, products, rstoich, pstoich) -> CompiledReaction:
        rate, our = use_rate(kl, reactants, rstoich, self.iv)
        rate = from_noncombinatoric(rate, rstoich, our)
        logger.debug(
            "Reaction '%s': %s rate %s",
            name,
            "full" if our else "mass-action",
            rate,
        )
        return CompiledReaction(
            rate=rate,
            reactants=tuple(reactants) if reactants is not None else None,
            products=tuple(products) if products is not None else None,
            substoich=tuple(rstoich) if rstoich is not None else None,
            prodstoich=tuple(pstoich) if pstoich is not None else None,
            only_use_rate=our,
            name=name,
        )


def compile_reactions(model: Model, options: Optional[ConversionOptions] = None) -> List[CompiledReaction]:
    """Compile every reaction of `model`."""
    return ReactionCompiler(model, options).compile_all()


__all__ = [
    "ReactionCompiler",
    "compile_reactions",
    "get_reagents",
    "get_unidirectional_components",
    "get_mass_action",
    "use_rate",
    "from_noncombinatoric",
    "stoich_convert_to_ints",
]
