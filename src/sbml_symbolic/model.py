"""Structured, already-parsed model objects.

These mirror what an external SBML loader hands over: entities keyed by
identifier, kinetic laws already in extensive (amount) form, and rules and
events carrying expression trees from `sbml_symbolic.expression`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .expression import Math


@dataclass(frozen=True)
class Species:
    """A species of the model.

    `constant` is carried over from the loader for reference only; species
    always resolve to time-varying symbols.
    """

    id: str
    compartment: Optional[str] = None
    initial_amount: Optional[float] = None
    initial_concentration: Optional[float] = None
    boundary_condition: bool = False
    constant: bool = False


@dataclass(frozen=True)
class Parameter:
    id: str
    value: Optional[float] = None
    constant: Optional[bool] = None


@dataclass(frozen=True)
class Compartment:
    id: str
    size: Optional[float] = None
    constant: Optional[bool] = None


@dataclass(frozen=True)
class Reaction:
    """A reaction as read from the model.

    Parameters
    ----------
    id:
        Reaction identifier.
    reactants, products:
        Mapping species id -> stoichiometric coefficient.
    kinetic_math:
        Kinetic law expression tree in extensive form.
    reversible:
        Whether `kinetic_math` encodes a forward and a reverse rate.
    """

    id: str
    reactants: Mapping[str, float] = field(default_factory=dict)
    products: Mapping[str, float] = field(default_factory=dict)
    kinetic_math: Optional[Math] = None
    reversible: bool = False


@dataclass(frozen=True)
class AlgebraicRule:
    math: Math
    id: Optional[str] = None


@dataclass(frozen=True)
class AssignmentRule:
    id: str
    math: Math


@dataclass(frozen=True)
class RateRule:
    id: str
    math: Math


Rule = Union[AlgebraicRule, AssignmentRule, RateRule]


@dataclass(frozen=True)
class EventAssignment:
    variable: str
    math: Math


@dataclass(frozen=True)
class Event:
    trigger: Math
    assignments: Tuple[EventAssignment, ...] = ()
    id: Optional[str] = None


@dataclass
class Model:
    """Container for a parsed model.

    Dict fields preserve insertion order, which fixes the order of reactions,
    states and parameters downstream.
    """

    species: Dict[str, Species] = field(default_factory=dict)
    parameters: Dict[str, Parameter] = field(default_factory=dict)
    compartments: Dict[str, Compartment] = field(default_factory=dict)
    reactions: Dict[str, Reaction] = field(default_factory=dict)
    rules: List[Rule] = field(default_factory=list)
    events: Dict[str, Event] = field(default_factory=dict)

    def initial_amounts(self) -> Dict[str, Optional[float]]:
        """Return initial amounts of all species.

        An initial concentration is converted to an amount using the size of
        the species' compartment. If neither is available the value is None.
        """
        out: Dict[str, Optional[float]] = {}
        for sid, sp_ in self.species.items():
            if sp_.initial_amount is not None:
                out[sid] = float(sp_.initial_amount)
                continue
            amount = None
            if sp_.initial_concentration is not None:
                comp = self.compartments.get(sp_.compartment) if sp_.compartment else None
                if comp is not None and comp.size is not None:
                    amount = float(sp_.initial_concentration) * float(comp.size)
                elif comp is None:
                    amount = float(sp_.initial_concentration)
            out[sid] = amount
        return out

    @classmethod
    def from_lists(
        cls,
        species: Sequence[Species] = (),
        parameters: Sequence[Parameter] = (),
        compartments: Sequence[Compartment] = (),
        reactions: Sequence[Reaction] = (),
        rules: Sequence[Rule] = (),
        events: Sequence[Event] = (),
    ) -> "Model":
        """Build a model from lists of entities, keyed by their ids."""
        evs: Dict[str, Event] = {}
        for i, ev in enumerate(events):
            evs[ev.id or f"event{i + 1}"] = ev
        return cls(
            species={s.id: s for s in species},
            parameters={p.id: p for p in parameters},
            compartments={c.id: c for c in compartments},
            reactions={r.id: r for r in reactions},
            rules=list(rules),
            events=evs,
        )


__all__ = [
    "Species",
    "Parameter",
    "Compartment",
    "Reaction",
    "AlgebraicRule",
    "AssignmentRule",
    "RateRule",
    "Rule",
    "EventAssignment",
    "Event",
    "Model",
]
