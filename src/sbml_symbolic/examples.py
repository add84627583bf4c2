from __future__ import annotations

from .expression import MathIdent, MathVal, apply
from .model import (
    AssignmentRule,
    Compartment,
    Event,
    EventAssignment,
    Model,
    Parameter,
    RateRule,
    Reaction,
    Species,
)
from .parser import ModelParser, parse_formula


def michaelis_menten_model() -> Model:
    """Reversible Michaelis--Menten system.

    Reaction scheme:
        S + E <-> C <-> E + P

    Species order: [S, E, C, P]
    Rate constants: k1, km1, k2, km2
    """
    return ModelParser().parse_model(
        """
        S + E <->[k1][km1] C
        C <->[k2][km2] E + P
        """,
        initial_amounts={"S": 1.0, "E": 0.5, "C": 0.0, "P": 0.0},
        parameters={"k1": 1.0, "km1": 0.1, "k2": 0.5, "km2": 0.01},
    )


def dimerisation_model() -> Model:
    """Dimerisation 2 M -> D with rate law ``k*M^2`` in a unit compartment.

    The compiled rate constant is ``2*k`` so that the combinatoric law
    ``2*k*M^2/2!`` reproduces ``k*M^2``.
    """
    law = apply("*", MathIdent("k"), apply("power", MathIdent("M"), MathVal(2)))
    return Model.from_lists(
        species=[
            Species("M", compartment="cell", initial_amount=10.0),
            Species("D", compartment="cell", initial_amount=0.0),
        ],
        parameters=[Parameter("k", value=0.2, constant=True)],
        compartments=[Compartment("cell", size=1.0, constant=True)],
        reactions=[Reaction("dimerisation", reactants={"M": 2}, products={"D": 1}, kinetic_math=law)],
    )


def boundary_source_model() -> Model:
    """Source reaction driven by a boundary species.

    Network:
        Src -> Src + X     (Src is a boundary species)
        X -> 0
    """
    return Model.from_lists(
        species=[
            Species("Src", initial_amount=1.0, boundary_condition=True),
            Species("X", initial_amount=0.0),
        ],
        parameters=[Parameter("ks", value=2.0, constant=True), Parameter("kd", value=0.5, constant=True)],
        reactions=[
            Reaction("production", reactants={"Src": 1}, products={"X": 1}, kinetic_math=parse_formula("ks*Src")),
            Reaction("decay", reactants={"X": 1}, products={}, kinetic_math=parse_formula("kd*X")),
        ],
    )


def rules_and_events_model() -> Model:
    """Decay of A with a growing volume, an observed total, and a refill event.

    - A -> B with Michaelis--Menten kinetics (not mass action)
    - rate rule:       d(V)/dt = g
    - assignment rule: total = A + B
    - event:           when A < 0.1, set A = 1
    """
    return Model.from_lists(
        species=[Species("A", initial_amount=1.0), Species("B", initial_amount=0.0)],
        parameters=[
            Parameter("Vmax", value=1.0, constant=True),
            Parameter("Km", value=0.5, constant=True),
            Parameter("g", value=0.01, constant=True),
            Parameter("total", constant=False),
        ],
        compartments=[Compartment("V", size=1.0, constant=False)],
        reactions=[
            Reaction(
                "conversion",
                reactants={"A": 1},
                products={"B": 1},
                kinetic_math=parse_formula("Vmax*A/(Km + A)"),
            )
        ],
        rules=[
            RateRule("V", parse_formula("g")),
            AssignmentRule("total", parse_formula("A + B")),
        ],
        events=[
            Event(
                trigger=parse_formula("A < 0.1"),
                assignments=(EventAssignment("A", MathVal(1)),),
                id="refill",
            )
        ],
    )


__all__ = [
    "michaelis_menten_model",
    "dimerisation_model",
    "boundary_source_model",
    "rules_and_events_model",
]
