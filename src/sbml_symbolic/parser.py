"""Text front end: infix formulas and reaction lines to input models.

This is a convenience for writing small models by hand; it is not an SBML
reader.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .expression import (
    Math,
    MathApply,
    MathConst,
    MathIdent,
    MathLambda,
    MathTime,
    MathVal,
    apply,
    identifiers,
)
from .interpret import DEFAULT_CONSTANTS
from .model import Model, Parameter, Reaction, Species

# Formula tokens, longest operators first.
_TOKEN_RE = re.compile(
    r"\s*(?:"
    r"(?P<num>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"
    r"|(?P<name>[A-Za-z_][A-Za-z0-9_]*)"
    r"|(?P<op>==|!=|<=|>=|&&|\|\||[-+*/^(),<>!])"
    r")"
)

_RELATIONS = {"==": "eq", "!=": "neq", "<": "lt", "<=": "leq", ">": "gt", ">=": "geq"}

# A single term like "2A" or "2 A" or "1.5 A" or "A".
_TERM_RE = re.compile(r"^\s*(?:(\d+(?:\.\d+)?)\s*)?([A-Za-z_][A-Za-z0-9_]*)\s*$")

# Supported arrow tokens. We normalize these to either "->" or "<->".
_ARROW_RE = re.compile(r"(<=>|<->|=>|->)")

_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _tokenize(text: str) -> List[Tuple[str, str]]:
    tokens: List[Tuple[str, str]] = []
    pos = 0
    text = text.rstrip()
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if not m or m.end() == pos:
            raise ValueError(f"Could not parse formula '{text}' at position {pos}")
        kind = m.lastgroup
        tokens.append((kind, m.group(kind)))
        pos = m.end()
    return tokens


class _FormulaParser:
    """Recursive-descent parser for infix formulas."""

    def __init__(self, text: str, constants: Iterable[str]) -> None:
        self.text = text
        self.tokens = _tokenize(text)
        self.pos = 0
        self.constants = set(constants)

    def parse(self) -> Math:
        if not self.tokens:
            raise ValueError("Empty formula")
        node = self._or()
        if self.pos != len(self.tokens):
            raise ValueError(f"Unexpected token '{self.tokens[self.pos][1]}' in formula '{self.text}'")
        return node

    def _peek(self) -> Optional[str]:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos][1]
        return None

    def _next(self) -> Tuple[str, str]:
        if self.pos >= len(self.tokens):
            raise ValueError(f"Unexpected end of formula '{self.text}'")
        tok = self.tokens[self.pos]
        self.pos += 1
        return tok

    def _expect(self, value: str) -> None:
        kind, tok = self._next()
        if tok != value:
            raise ValueError(f"Expected '{value}' but found '{tok}' in formula '{self.text}'")

    def _or(self) -> Math:
        node = self._and()
        while self._peek() == "||":
            self._next()
            node = apply("or", node, self._and())
        return node

    def _and(self) -> Math:
        node = self._comparison()
        while self._peek() == "&&":
            self._next()
            node = apply("and", node, self._comparison())
        return node

    def _comparison(self) -> Math:
        node = self._sum()
        if self._peek() in _RELATIONS:
            _, op = self._next()
            node = apply(_RELATIONS[op], node, self._sum())
        return node

    def _sum(self) -> Math:
        node = self._product()
        while self._peek() in ("+", "-"):
            _, op = self._next()
            node = apply(op, node, self._product())
        return node

    def _product(self) -> Math:
        node = self._unary()
        while self._peek() in ("*", "/"):
            _, op = self._next()
            node = apply(op, node, self._unary())
        return node

    def _unary(self) -> Math:
        if self._peek() == "-":
            self._next()
            return apply("-", self._unary())
        if self._peek() == "+":
            self._next()
            return self._unary()
        if self._peek() == "!":
            self._next()
            return apply("not", self._unary())
        return self._power()

    def _power(self) -> Math:
        base = self._atom()
        if self._peek() == "^":
            self._next()
            # Right associative; the exponent may carry its own sign.
            return apply("power", base, self._unary())
        return base

    def _atom(self) -> Math:
        kind, tok = self._next()
        if kind == "num":
            val = float(tok)
            return MathVal(int(val) if val.is_integer() and re.fullmatch(r"\d+", tok) else val)
        if kind == "name":
            if self._peek() == "(":
                return self._call(tok)
            if tok == "time":
                return MathTime(tok)
            if tok in self.constants:
                return MathConst(tok)
            return MathIdent(tok)
        if tok == "(":
            node = self._or()
            self._expect(")")
            return node
        raise ValueError(f"Unexpected token '{tok}' in formula '{self.text}'")

    def _call(self, name: str) -> Math:
        self._expect("(")
        args: List[Math] = []
        if self._peek() != ")":
            args.append(self._or())
            while self._peek() == ",":
                self._next()
                args.append(self._or())
        self._expect(")")
        if name == "lambda":
            if not args:
                raise ValueError("lambda requires a body")
            params = []
            for a in args[:-1]:
                if not isinstance(a, MathIdent):
                    raise ValueError("lambda arguments must be plain names")
                params.append(a.id)
            return MathLambda(tuple(params), args[-1])
        return MathApply(name, tuple(args))


def parse_formula(text: str, constants: Optional[Iterable[str]] = None) -> Math:
    """Parse an infix formula such as ``"k1*A - k2*B^2"`` into an expression tree.

    Names followed by ``(`` are function applications, ``time`` is the
    independent variable, and names listed in `constants` (default: the
    interpreter's named constants) become `MathConst` nodes.
    """
    return _FormulaParser(text, DEFAULT_CONSTANTS if constants is None else constants).parse()


def _parse_coefficient(c_str: Optional[str]) -> float:
    if c_str is None:
        return 1
    c = float(c_str)
    return int(c) if c.is_integer() else c


def _parse_complex(complex_str: str) -> Dict[str, float]:
    """Parse a complex string like '2A + B' into {'A':2, 'B':1}.

    Accepted:
    - '0' or '' for the empty complex
    - terms separated by '+'
    - coefficients as nonnegative integers or decimals (e.g. '2A', '2 A', '0.5 A')
    """
    s = complex_str.strip()
    if s == "" or s == "0":
        return {}

    parts = [p.strip() for p in s.split("+") if p.strip()]
    coeffs: Dict[str, float] = {}
    for part in parts:
        m = _TERM_RE.match(part)
        if not m:
            raise ValueError(f"Could not parse complex term: '{part}'")
        name = m.group(2)
        coeffs[name] = coeffs.get(name, 0) + _parse_coefficient(m.group(1))
    return coeffs


def _consume_leading_rate_brackets(s: str) -> Tuple[List[str], str]:
    """Consume leading [ ... ] blocks and return (contents, remainder).

    Supported forms:
        "[k1] C"
        "[k1][km1] C"
        "[k1*A*B - km1*C] C"
    """
    tokens: List[str] = []
    rest = s.strip()

    while rest.startswith("["):
        end = rest.find("]")
        if end == -1:
            raise ValueError(f"Unclosed '[' in rate specification: '{s}'")
        inside = rest[1:end].strip()
        if inside:
            tokens.append(inside)
        rest = rest[end + 1 :].strip()

    return tokens, rest


def _mass_action(rate: str, complex_dict: Mapping[str, float]) -> Math:
    factors: List[Math] = [MathIdent(rate)]
    for name, c in complex_dict.items():
        if c == 1:
            factors.append(MathIdent(name))
        else:
            factors.append(apply("power", MathIdent(name), MathVal(c)))
    if len(factors) == 1:
        return factors[0]
    return MathApply("*", tuple(factors))


@dataclass
class ModelParser:
    """Parse reaction strings into an input `Model`.

    Supported arrows
    ---------------
    - irreversible: '->' or '=>'
    - reversible: '<->' or '<=>'

    Kinetics (optional)
    -------------------
    Bracketed blocks immediately after the arrow give either rate constant
    names (mass action) or full kinetic-law formulas:
    - 'A + B ->[k1] C'
    - 'A + B <->[k1][km1] C'
    - 'A + B <->[k1*A*B - km1*C] C'
    - 'A <->[Vf*A/(Km + A)][Vr*B] B'   (forward law, reverse law)

    Without brackets mass-action laws are generated with rate constants
    k1, k2, ... (irreversible) or k1/km1, ... (reversible). Every formula
    identifier that is not a species becomes a constant parameter.
    """

    rate_prefix: str = "k"
    reaction_prefix: str = "r"
    default_parameter_value: Optional[float] = None

    def parse_model(
        self,
        text: str,
        *,
        species_names: Optional[Sequence[str]] = None,
        boundary_species: Iterable[str] = (),
        initial_amounts: Optional[Mapping[str, float]] = None,
        parameters: Optional[Mapping[str, float]] = None,
    ) -> Model:
        # Split lines (semicolon or newline)
        raw_lines: List[str] = []
        for chunk in text.split(";"):
            raw_lines.extend(chunk.splitlines())
        lines = [ln.strip() for ln in raw_lines if ln.strip() and not ln.strip().startswith("#")]
        if not lines:
            raise ValueError("No reactions found in input")

        parsed = [self._split_reaction_line(ln) for ln in lines]

        # Species in order of first appearance unless given explicitly.
        if species_names is None:
            order: Dict[str, None] = {}
            for lhs, _arrow, rhs, _rates in parsed:
                for name in list(_parse_complex(lhs)) + list(_parse_complex(rhs)):
                    order.setdefault(name, None)
            species_order = list(order)
        else:
            species_order = list(species_names)
        species_set = set(species_order)

        boundary = set(boundary_species)
        unknown = boundary - species_set
        if unknown:
            raise ValueError(f"Unknown boundary species: {sorted(unknown)}")
        inits = dict(initial_amounts or {})
        values = dict(parameters or {})

        reactions: List[Reaction] = []
        param_order: Dict[str, None] = {name: None for name in values}
        for idx, (ln, (lhs_str, arrow, rhs_str, rate_tokens)) in enumerate(zip(lines, parsed), start=1):
            lhs = _parse_complex(lhs_str)
            rhs = _parse_complex(rhs_str)
            missing = (set(lhs) | set(rhs)) - species_set
            if missing:
                raise ValueError(f"Species {sorted(missing)} in line '{ln}' are not in species_names")

            law = self._kinetic_law(ln, arrow, lhs, rhs, rate_tokens, idx)
            for name in identifiers(law):
                if name not in species_set:
                    param_order.setdefault(name, None)

            reactions.append(
                Reaction(
                    id=f"{self.reaction_prefix}{idx}",
                    reactants=lhs,
                    products=rhs,
                    kinetic_math=law,
                    reversible=(arrow == "<->"),
                )
            )

        species = [
            Species(name, initial_amount=inits.get(name), boundary_condition=(name in boundary))
            for name in species_order
        ]
        params = [
            Parameter(name, value=values.get(name, self.default_parameter_value), constant=True)
            for name in param_order
        ]
        return Model.from_lists(species=species, parameters=params, reactions=reactions)

    def _kinetic_law(self, ln, arrow, lhs, rhs, rate_tokens, idx) -> Math:
        names = all(_IDENT_RE.match(tok) for tok in rate_tokens)
        if arrow == "<->":
            # Rate token handling:
            #  - []:            auto k{i}, km{i}
            #  - [kf]:          forward fixed, reverse auto km{i}
            #  - [kf][kr]:      both fixed
            #  - [law]:         full bidirectional law
            #  - [fw][rv]:      forward and reverse laws
            if len(rate_tokens) > 2:
                raise ValueError(
                    f"Too many rate tokens for reversible reaction '{ln}'. "
                    "Use at most two (forward, reverse)."
                )
            if len(rate_tokens) == 1 and not names:
                return parse_formula(rate_tokens[0])
            if len(rate_tokens) == 2 and not names:
                return apply("-", parse_formula(rate_tokens[0]), parse_formula(rate_tokens[1]))
            kf = rate_tokens[0] if rate_tokens else f"{self.rate_prefix}{idx}"
            kr = rate_tokens[1] if len(rate_tokens) == 2 else f"{self.rate_prefix}m{idx}"
            return apply("-", _mass_action(kf, lhs), _mass_action(kr, rhs))

        if len(rate_tokens) > 1:
            raise ValueError(f"Too many rate tokens for irreversible reaction '{ln}'. Use at most one.")
        if rate_tokens and not names:
            return parse_formula(rate_tokens[0])
        kf = rate_tokens[0] if rate_tokens else f"{self.rate_prefix}{idx}"
        return _mass_action(kf, lhs)

    @staticmethod
    def _split_reaction_line(line: str) -> Tuple[str, str, str, List[str]]:
        """Split a reaction line into (lhs, arrow, rhs, rate_tokens)."""
        ln = line.strip()
        m = _ARROW_RE.search(ln)
        if not m:
            raise ValueError(f"No supported arrow found in line: '{line}'")

        arrow_raw = m.group(1)
        arrow = "<->" if arrow_raw in {"<->", "<=>"} else "->"

        lhs = ln[: m.start()].strip()
        rest = ln[m.end() :].strip()

        rate_tokens, rhs = _consume_leading_rate_brackets(rest)
        rhs = rhs.strip()
        if rhs == "":
            raise ValueError(f"Missing RHS complex in line: '{line}'")

        return lhs, arrow, rhs, rate_tokens


def parse_model(text: str, **kwargs) -> Model:
    """Shorthand for ``ModelParser().parse_model(text, **kwargs)``."""
    return ModelParser().parse_model(text, **kwargs)


__all__ = ["ModelParser", "parse_formula", "parse_model"]
