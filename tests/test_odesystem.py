import numpy as np
import pytest
import sympy as sp

from sbml_symbolic import (
    TIME,
    AlgebraicRule,
    ConversionError,
    Parameter,
    Reaction,
    ReactionNetwork,
    boundary_source_model,
    create_param,
    create_var,
    dimerisation_model,
    michaelis_menten_model,
    parse_formula,
    reaction_network,
    rules_and_events_model,
)


def test_michaelis_menten_equations():
    odes = reaction_network(michaelis_menten_model()).to_odesystem()
    assert len(odes.equations) == 4
    assert odes.unknowns == [create_var(n) for n in ("S", "E", "C", "P")]
    assert odes.equations[0].lhs == sp.Derivative(create_var("S"), TIME)
    assert not odes.algebraic_equations and not odes.events


def test_zero_odes_are_dropped_unless_requested():
    net = reaction_network(boundary_source_model())
    assert len(net.to_odesystem().equations) == 1
    odes = net.to_odesystem(include_zero_odes=True)
    assert len(odes.equations) == 2
    assert odes.equations[0].rhs == 0


def test_rules_and_events():
    odes = reaction_network(rules_and_events_model()).to_odesystem()
    A, B, V = create_var("A"), create_var("B"), create_var("V")
    assert odes.unknowns == [A, B, V]
    assert odes.equations[-1].rhs == create_param("g")
    (obs,) = odes.observed
    assert obs.lhs == create_var("total")

    (ev,) = odes.events
    assert ev.name == "refill"
    assert ev.trigger.lhs == A
    assert ev.assignments[0].lhs == A

    np.testing.assert_allclose(odes.initial_values(), [1.0, 0.0, 1.0])
    np.testing.assert_allclose(odes.parameter_values(), [1.0, 0.5, 0.01])

    f = odes.to_function()
    du = f(0.0, [1.0, 0.0, 1.0], [1.0, 0.5, 0.01])
    np.testing.assert_allclose(du, [-2.0 / 3.0, 2.0 / 3.0, 0.01])


def test_numeric_dimerisation():
    odes = reaction_network(dimerisation_model()).to_odesystem()
    f = odes.to_function()
    p = odes.parameter_values()
    np.testing.assert_allclose(p, [0.2, 1.0])
    np.testing.assert_allclose(f(0.0, odes.initial_values(), p), [-40.0, 20.0])


def test_non_ode_states_are_frozen_at_defaults(two_species_model):
    model = two_species_model
    model.reactions["r"] = Reaction("r", {"A": 1}, {"B": 1}, kinetic_math=parse_formula("p*A"))
    odes = reaction_network(model).to_odesystem()
    assert odes.unknowns == [create_var("A"), create_var("B")]
    f = odes.to_function()
    np.testing.assert_allclose(f(0.0, [1.0, 0.0], [0.3]), [-2.0, 2.0])


def test_missing_default_for_frozen_state(two_species_model):
    model = two_species_model
    model.parameters["q"] = Parameter("q", constant=False)
    model.reactions["r"] = Reaction("r", {"A": 1}, {"B": 1}, kinetic_math=parse_formula("q*A"))
    odes = reaction_network(model).to_odesystem()
    with pytest.raises(ConversionError):
        odes.to_function()


def test_algebraic_equations_block_numeric_function(two_species_model):
    model = two_species_model
    model.rules = [AlgebraicRule(parse_formula("A + B - 1"))]
    model.reactions["r"] = Reaction("r", {"A": 1}, {"B": 1}, kinetic_math=parse_formula("k*A"))
    odes = reaction_network(model).to_odesystem()
    assert len(odes.algebraic_equations) == 1
    with pytest.raises(ConversionError):
        odes.to_function()


def test_initial_values_are_nan_when_unknown():
    odes = ReactionNetwork.from_string("A -> B").to_odesystem()
    assert np.isnan(odes.initial_values()).all()
    assert np.isnan(odes.parameter_values()).all()
