"""Generic mathematical expression trees handed over by the model loader.

The tree is a small tagged union of frozen dataclasses. Nodes carry no
semantics of their own; `sbml_symbolic.interpret` turns them into SymPy
expressions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union


@dataclass(frozen=True)
class MathVal:
    """Numeric literal."""

    val: float


@dataclass(frozen=True)
class MathIdent:
    """Reference to a species, parameter or compartment by identifier."""

    id: str


@dataclass(frozen=True)
class MathConst:
    """Named mathematical constant such as ``pi`` or ``exponentiale``."""

    id: str


@dataclass(frozen=True)
class MathTime:
    """Reference to the model's independent (time) variable."""

    id: str = "time"


@dataclass(frozen=True)
class MathApply:
    """Application of the function named `fn` to `args`."""

    fn: str
    args: Tuple["Math", ...] = ()


@dataclass(frozen=True)
class MathLambda:
    """Anonymous function definition (not supported by the interpreter)."""

    args: Tuple[str, ...]
    body: "Math"


Math = Union[MathVal, MathIdent, MathConst, MathTime, MathApply, MathLambda]


def apply(fn: str, *args: Math) -> MathApply:
    """Shorthand for ``MathApply(fn, args)``."""
    return MathApply(fn, tuple(args))


def identifiers(node: Math) -> Tuple[str, ...]:
    """Return identifiers referenced in `node`, in order of first appearance."""
    seen = {}
    stack = [node]
    while stack:
        cur = stack.pop()
        if isinstance(cur, MathIdent):
            seen.setdefault(cur.id, None)
        elif isinstance(cur, MathApply):
            stack.extend(reversed(cur.args))
    return tuple(seen)


__all__ = [
    "Math",
    "MathVal",
    "MathIdent",
    "MathConst",
    "MathTime",
    "MathApply",
    "MathLambda",
    "apply",
    "identifiers",
]
