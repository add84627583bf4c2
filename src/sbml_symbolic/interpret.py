"""Interpretation of expression trees as SymPy expressions."""

from __future__ import annotations

from functools import partial
from typing import Callable, Dict, Mapping, Optional

import sympy as sp

from .errors import UnsupportedConstruct, UnsupportedOperator
from .expression import Math, MathApply, MathConst, MathIdent, MathLambda, MathTime, MathVal
from .symbols import TIME, create_var

FunctionBuilder = Callable[..., sp.Basic]


def _plus(*args):
    return sp.Add(*args)


def _minus(*args):
    if len(args) == 1:
        return -args[0]
    if len(args) != 2:
        raise TypeError(f"minus takes 1 or 2 arguments, got {len(args)}")
    return args[0] - args[1]


def _times(*args):
    return sp.Mul(*args)


def _divide(a, b):
    return a / b


def _power(a, b):
    return sp.Pow(a, b)


def _root(*args):
    # MathML puts the degree first.
    if len(args) == 1:
        return sp.sqrt(args[0])
    degree, x = args
    return sp.Pow(x, 1 / sp.sympify(degree))


def _log(*args):
    # One argument means base 10; two means (base, x).
    if len(args) == 1:
        return sp.log(args[0], 10)
    base, x = args
    return sp.log(x, base)


def _piecewise(*args):
    pairs = []
    n_pairs = len(args) // 2
    for i in range(n_pairs):
        value, cond = args[2 * i], args[2 * i + 1]
        pairs.append((value, cond))
    if len(args) % 2:
        pairs.append((args[-1], True))
    return sp.Piecewise(*pairs)


def _quotient(a, b):
    return sp.floor(a / b)


def _xor(*args):
    return sp.Xor(*args)


def _number(val) -> sp.Basic:
    # Integral floats become integers so that A**2.0 cancels against A**2.
    if isinstance(val, float) and val.is_integer():
        return sp.Integer(int(val))
    return sp.sympify(val)


def rate_of(x, iv: sp.Symbol = TIME):
    """Time derivative of `x` (the ``rateOf`` operator)."""
    return sp.Derivative(x, iv)


DEFAULT_FUNCTIONS: Dict[str, FunctionBuilder] = {
    "+": _plus,
    "plus": _plus,
    "-": _minus,
    "minus": _minus,
    "*": _times,
    "times": _times,
    "/": _divide,
    "divide": _divide,
    "^": _power,
    "power": _power,
    "pow": _power,
    "root": _root,
    "sqrt": sp.sqrt,
    "exp": sp.exp,
    "ln": sp.log,
    "log": _log,
    "abs": sp.Abs,
    "floor": sp.floor,
    "ceiling": sp.ceiling,
    "factorial": sp.factorial,
    "min": sp.Min,
    "max": sp.Max,
    "rem": sp.Mod,
    "quotient": _quotient,
    "sin": sp.sin,
    "cos": sp.cos,
    "tan": sp.tan,
    "sec": sp.sec,
    "csc": sp.csc,
    "cot": sp.cot,
    "sinh": sp.sinh,
    "cosh": sp.cosh,
    "tanh": sp.tanh,
    "sech": sp.sech,
    "csch": sp.csch,
    "coth": sp.coth,
    "arcsin": sp.asin,
    "arccos": sp.acos,
    "arctan": sp.atan,
    "arcsec": sp.asec,
    "arccsc": sp.acsc,
    "arccot": sp.acot,
    "arcsinh": sp.asinh,
    "arccosh": sp.acosh,
    "arctanh": sp.atanh,
    "arcsech": sp.asech,
    "arccsch": sp.acsch,
    "arccoth": sp.acoth,
    "eq": sp.Eq,
    "neq": sp.Ne,
    "lt": sp.Lt,
    "leq": sp.Le,
    "gt": sp.Gt,
    "geq": sp.Ge,
    "and": sp.And,
    "or": sp.Or,
    "not": sp.Not,
    "xor": _xor,
    "implies": sp.Implies,
    "piecewise": _piecewise,
    "rateOf": rate_of,
}

DEFAULT_CONSTANTS: Dict[str, sp.Basic] = {
    "true": sp.true,
    "false": sp.false,
    "pi": sp.pi,
    "exponentiale": sp.E,
    "avogadro": sp.Float("6.02214076e23"),
    "infinity": sp.oo,
    "notanumber": sp.nan,
}


class ExpressionInterpreter:
    """Recursive-descent interpreter from expression trees to SymPy.

    Parameters
    ----------
    functions:
        Function-name -> builder table. Builders receive interpreted arguments.
    constants:
        Constant-name -> value table.
    iv:
        Independent variable that ``MathTime`` nodes resolve to.

    Identifiers are interpreted as time-varying symbols ``id(t)``; resolving
    them to constants is the job of the substitution table.
    """

    def __init__(
        self,
        functions: Optional[Mapping[str, FunctionBuilder]] = None,
        constants: Optional[Mapping[str, sp.Basic]] = None,
        iv: sp.Symbol = TIME,
    ) -> None:
        self.functions = dict(DEFAULT_FUNCTIONS if functions is None else functions)
        self.constants = dict(DEFAULT_CONSTANTS if constants is None else constants)
        self.iv = iv
        if self.functions.get("rateOf") is rate_of:
            self.functions["rateOf"] = partial(rate_of, iv=iv)

    def __call__(self, node: Math) -> sp.Basic:
        return self.interpret(node)

    def interpret(self, node: Math) -> sp.Basic:
        if isinstance(node, MathApply):
            return self._apply(node)
        if isinstance(node, MathIdent):
            return create_var(node.id, self.iv)
        if isinstance(node, MathVal):
            return _number(node.val)
        if isinstance(node, MathTime):
            return self.iv
        if isinstance(node, MathConst):
            try:
                return self.constants[node.id]
            except KeyError:
                raise UnsupportedConstruct(f"Unknown constant '{node.id}'") from None
        if isinstance(node, MathLambda):
            raise UnsupportedConstruct("Lambda functions are not supported")
        raise UnsupportedConstruct(f"Cannot interpret expression node of type {type(node).__name__}")

    def _apply(self, node: MathApply) -> sp.Basic:
        builder = self.functions.get(node.fn)
        if builder is None:
            raise UnsupportedOperator(f"Unsupported function '{node.fn}'")
        args = [self.interpret(a) for a in node.args]
        return builder(*args)


def interpret_math(node: Math, functions=None, constants=None, iv: sp.Symbol = TIME) -> sp.Basic:
    """Interpret `node` with the given (or default) tables."""
    return ExpressionInterpreter(functions, constants, iv).interpret(node)


__all__ = [
    "DEFAULT_FUNCTIONS",
    "DEFAULT_CONSTANTS",
    "ExpressionInterpreter",
    "interpret_math",
    "rate_of",
]
