"""Human-readable reporting utilities.

This module provides lightweight helpers to produce readable console /
Markdown reports of compiled networks and equation systems:

- directed reactions with their rates,
- rule and differential equations, and
- events and default values.

Nothing here is required for conversion; it is strictly presentation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import sympy as sp

from .equation import Equation
from .events import CompiledEvent
from .network import ReactionNetwork
from .odesystem import ODESystem
from .reaction import CompiledReaction


def _expr_to_str(e: sp.Basic) -> str:
    """Stable string for SymPy expressions in reports."""
    try:
        return sp.sstr(e)
    except Exception:
        return str(e)


def format_reaction(reaction: CompiledReaction) -> str:
    """Format a directed reaction as ``name: rate, A + 2B --> C``.

    ``=>`` marks reactions whose rate already is the full rate law.
    """
    label = f"{reaction.name}: " if reaction.name else ""
    return label + reaction.to_string()


def format_equations(equations: Sequence[Equation], *, max_items: int = 10) -> List[str]:
    """Format equations as ``lhs ~ rhs``."""
    out: List[str] = []
    for eq in list(equations)[: int(max_items)]:
        out.append(f"{_expr_to_str(eq.lhs)} ~ {_expr_to_str(eq.rhs)}")
    if len(equations) > max_items:
        out.append(f"... ({len(equations) - max_items} more)")
    return out


def format_event(event: CompiledEvent) -> str:
    trig = f"{_expr_to_str(event.trigger.lhs)} ~ {_expr_to_str(event.trigger.rhs)}"
    assigns = "; ".join(f"{_expr_to_str(a.lhs)} = {_expr_to_str(a.rhs)}" for a in event.assignments)
    label = f"{event.name}: " if event.name else ""
    return f"{label}[{trig}] => [{assigns}]"


def format_defaults(defaults: Dict[sp.Basic, sp.Basic], *, max_items: int = 10) -> List[str]:
    items = list(defaults.items())
    out = [f"{_expr_to_str(k)} = {_expr_to_str(v)}" for k, v in items[: int(max_items)]]
    if len(items) > max_items:
        out.append(f"... ({len(items) - max_items} more)")
    return out


@dataclass
class ReportOptions:
    """Tunable knobs for report verbosity."""

    max_reactions: int = 50
    max_equations: int = 50
    include_defaults: bool = False
    max_defaults: int = 50


def format_network_report(network: ReactionNetwork, *, options: Optional[ReportOptions] = None) -> str:
    """Format a compiled reaction network."""
    opt = options or ReportOptions()
    lines: List[str] = [network.summary(), ""]

    lines.append("### Reactions")
    for r in network.reactions[: opt.max_reactions]:
        lines.append("  " + format_reaction(r))
    if len(network.reactions) > opt.max_reactions:
        lines.append(f"  ... ({len(network.reactions) - opt.max_reactions} more)")

    rules = network.constraints.all()
    if rules:
        lines.append("### Constraints")
        lines.extend("  " + s for s in format_equations(rules, max_items=opt.max_equations))

    if opt.include_defaults and network.defaults:
        lines.append("### Defaults")
        lines.extend("  " + s for s in format_defaults(network.defaults, max_items=opt.max_defaults))

    return "\n".join(lines).rstrip() + "\n"


def format_odesystem_report(odesys: ODESystem, *, options: Optional[ReportOptions] = None) -> str:
    """Format an expanded equation system."""
    opt = options or ReportOptions()
    lines: List[str] = []
    lines.append(
        f"ODESystem(n_equations={len(odesys.equations)}, n_algebraic={len(odesys.algebraic_equations)}, "
        f"n_observed={len(odesys.observed)}, n_events={len(odesys.events)})"
    )

    sections = (
        ("Differential equations", odesys.equations),
        ("Algebraic equations", odesys.algebraic_equations),
        ("Observed", odesys.observed),
    )
    for title, eqs in sections:
        if eqs:
            lines.append(f"### {title}")
            lines.extend("  " + s for s in format_equations(eqs, max_items=opt.max_equations))

    if odesys.events:
        lines.append("### Events")
        lines.extend("  " + format_event(ev) for ev in odesys.events)

    if opt.include_defaults and odesys.defaults:
        lines.append("### Defaults")
        lines.extend("  " + s for s in format_defaults(odesys.defaults, max_items=opt.max_defaults))

    return "\n".join(lines).rstrip() + "\n"


__all__ = [
    "ReportOptions",
    "format_reaction",
    "format_equations",
    "format_event",
    "format_defaults",
    "format_network_report",
    "format_odesystem_report",
]
