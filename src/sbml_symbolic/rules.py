from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import sympy as sp

from .config import ConversionOptions
from .equation import Equation
from .errors import ConversionError, InvalidRule
from .model import AlgebraicRule, AssignmentRule, Model, RateRule, Rule
from .symbols import create_var, get_substitutions


@dataclass
class CompiledRules:
    """Rule equations grouped by kind, in model order."""

    algebraic: List[Equation] = field(default_factory=list)
    observed: List[Equation] = field(default_factory=list)
    rate: List[Equation] = field(default_factory=list)

    def all(self) -> List[Equation]:
        return self.algebraic + self.rate + self.observed


def _rule_label(rule: Rule) -> str:
    return getattr(rule, "id", None) or type(rule).__name__


class RuleCompiler:
    """Turn algebraic, assignment and rate rules into equations.

    - algebraic:  ``0 ~ f``
    - assignment: ``x(t) ~ f``
    - rate:       ``Derivative(x(t), t) ~ f``
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

    def _target(self, rule: Rule) -> sp.Expr:
        rid = rule.id
        if rid in self.model.species or rid in self.model.compartments or rid in self.model.parameters:
            return create_var(rid, self.iv)
        raise InvalidRule(f"invalid rule: '{rid}' is not a species, compartment or parameter", rid)

    def compile_rule(self, rule: Rule) -> Equation:
        try:
            if isinstance(rule, AlgebraicRule):
                if rule.id is not None:
                    self._target(rule)
                eq = Equation(sp.Integer(0), self.interpreter.interpret(rule.math))
            elif isinstance(rule, AssignmentRule):
                eq = Equation(self._target(rule), self.interpreter.interpret(rule.math))
            elif isinstance(rule, RateRule):
                var = self._target(rule)
                eq = Equation(sp.Derivative(var, self.iv), self.interpreter.interpret(rule.math))
            else:
                raise InvalidRule(f"invalid rule: unknown rule type {type(rule).__name__}")
        except ConversionError as exc:
            if exc.element is None:
                exc.element = _rule_label(rule)
            raise
        return eq.subs(self.subs)

    def compile_all(self) -> CompiledRules:
        out = CompiledRules()
        for rule in self.model.rules:
            eq = self.compile_rule(rule)
            if isinstance(rule, AlgebraicRule):
                out.algebraic.append(eq)
            elif isinstance(rule, AssignmentRule):
                out.observed.append(eq)
            else:
                out.rate.append(eq)
        return out


def get_rules(model: Model, options: Optional[ConversionOptions] = None) -> CompiledRules:
    """Compile all rules of `model`."""
    return RuleCompiler(model, options).compile_all()


__all__ = ["CompiledRules", "RuleCompiler", "get_rules"]
