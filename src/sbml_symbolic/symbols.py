"""Canonical symbols and the per-model substitution table.

Time-varying quantities are undefined functions applied to the independent
variable, ``A(t)``; constants are plain symbols, ``k``. The expression
interpreter produces the time-varying form for every identifier and the
substitution table rewrites constants afterwards.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional, Set

import sympy as sp
from sympy.core.function import AppliedUndef

from .model import Model

# Independent variable shared by every converted model.
TIME = sp.Symbol("t", real=True)


def _sanitize_symbol_name(name: str) -> str:
    # SymPy accepts most names; keep ids intact except for whitespace.
    if not name:
        return "x"
    return "".join("_" if ch.isspace() else ch for ch in name)


def create_var(name: str, iv: sp.Symbol = TIME) -> sp.Expr:
    """Return the time-varying symbol ``name(iv)``."""
    return sp.Function(_sanitize_symbol_name(name))(iv)


def create_param(name: str) -> sp.Symbol:
    """Return the constant symbol ``name``."""
    return sp.Symbol(_sanitize_symbol_name(name))


def is_time_varying(expr: sp.Basic, iv: sp.Symbol = TIME) -> bool:
    """True iff `expr` is a time-varying leaf, ``x(t)``."""
    return isinstance(expr, AppliedUndef) and expr.args == (iv,)


def symbol_name(expr: sp.Basic) -> str:
    """Return the entity name behind a canonical symbol."""
    if isinstance(expr, AppliedUndef):
        return expr.func.__name__
    if isinstance(expr, sp.Symbol):
        return expr.name
    raise TypeError(f"Not a canonical symbol: {expr!r}")


def is_constant_flag(flag: Optional[bool]) -> bool:
    # An absent flag means time-varying.
    return bool(flag) if flag is not None else False


def get_substitutions(model: Model, iv: sp.Symbol = TIME) -> Dict[sp.Expr, sp.Expr]:
    """Build the substitution table of `model`.

    Keys are the bare symbols the interpreter emits for each identifier.
    Species always stay time-varying; parameters and compartments become
    constants when their ``constant`` flag is set.
    """
    subs: Dict[sp.Expr, sp.Expr] = {}
    for k in model.species:
        subs[create_var(k, iv)] = create_var(k, iv)
    for k, v in model.parameters.items():
        subs[create_var(k, iv)] = create_param(k) if is_constant_flag(v.constant) else create_var(k, iv)
    for k, v in model.compartments.items():
        subs[create_var(k, iv)] = create_param(k) if is_constant_flag(v.constant) else create_var(k, iv)
    return subs


def substitute(expr: sp.Expr, subs: Dict[sp.Expr, sp.Expr]) -> sp.Expr:
    """Apply the substitution table to a SymPy expression."""
    if not isinstance(expr, sp.Basic):
        return sp.sympify(expr)
    changed = {k: v for k, v in subs.items() if k != v}
    if not changed:
        return expr
    return expr.xreplace(changed)


def unresolved_symbols(exprs: Iterable[sp.Basic], subs: Dict[sp.Expr, sp.Expr]) -> Set[sp.Expr]:
    """Return bare symbols in `exprs` that the table maps to something else."""
    changed = {k for k, v in subs.items() if k != v}
    out = set()
    for e in exprs:
        for atom in e.atoms(AppliedUndef):
            if atom in changed:
                out.add(atom)
    return out


__all__ = [
    "TIME",
    "create_var",
    "create_param",
    "is_time_varying",
    "is_constant_flag",
    "symbol_name",
    "get_substitutions",
    "substitute",
    "unresolved_symbols",
]
