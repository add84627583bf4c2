from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

import sympy as sp

from .symbols import substitute


@dataclass(frozen=True)
class Equation:
    """Symbolic equality ``lhs ~ rhs``.

    Kept as a plain pair rather than ``sympy.Eq`` so that trivially true
    equations (``0 ~ 0``) are not collapsed to ``True``.
    """

    lhs: sp.Basic
    rhs: sp.Basic

    def subs(self, mapping: Dict[sp.Basic, sp.Basic]) -> "Equation":
        return Equation(substitute(self.lhs, mapping), substitute(self.rhs, mapping))

    def residual(self) -> sp.Expr:
        """Return ``lhs - rhs``."""
        return self.lhs - self.rhs

    def atoms(self, *types):
        return self.lhs.atoms(*types) | self.rhs.atoms(*types)

    def __str__(self) -> str:
        return f"{sp.sstr(self.lhs)} ~ {sp.sstr(self.rhs)}"
