from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

import sympy as sp

from .interpret import DEFAULT_CONSTANTS, DEFAULT_FUNCTIONS, ExpressionInterpreter, FunctionBuilder
from .symbols import TIME

ZERO_STOICHIOMETRY_MODES = ("error", "warn")


@dataclass
class ConversionOptions:
    """Tunable knobs for model conversion.

    Parameters
    ----------
    functions:
        Function-name -> SymPy builder table used by the interpreter.
    constants:
        Constant-name -> value table used by the interpreter.
    zero_stoichiometry:
        ``"error"`` raises `ZeroStoichiometry`; ``"warn"`` logs and continues.
    simplify_reversible:
        If a reversible kinetic law does not split after plain expansion,
        retry once after ``sympy.simplify``.
    iv:
        Independent variable.
    """

    functions: Dict[str, FunctionBuilder] = field(default_factory=lambda: dict(DEFAULT_FUNCTIONS))
    constants: Dict[str, sp.Basic] = field(default_factory=lambda: dict(DEFAULT_CONSTANTS))
    zero_stoichiometry: str = "error"
    simplify_reversible: bool = True
    iv: sp.Symbol = TIME

    def __post_init__(self) -> None:
        if self.zero_stoichiometry not in ZERO_STOICHIOMETRY_MODES:
            raise ValueError(
                f"zero_stoichiometry must be one of {ZERO_STOICHIOMETRY_MODES}; got '{self.zero_stoichiometry}'"
            )

    def interpreter(self) -> ExpressionInterpreter:
        return ExpressionInterpreter(self.functions, self.constants, self.iv)
