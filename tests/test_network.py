import logging

import pytest
import sympy as sp

from sbml_symbolic import (
    CompiledReaction,
    ConversionOptions,
    ReactionNetwork,
    boundary_source_model,
    create_param,
    create_var,
    dimerisation_model,
    michaelis_menten_model,
    reaction_network,
    rules_and_events_model,
)


def test_michaelis_menten_structure():
    net = reaction_network(michaelis_menten_model())
    assert net.species_names == ["S", "E", "C", "P"]
    assert [r.name for r in net.reactions] == ["r1", "r1_rev", "r2", "r2_rev"]
    assert net.rate_constants == [create_param(k) for k in ("k1", "km1", "k2", "km2")]
    assert all(not r.only_use_rate for r in net.reactions)

    S = net.stoichiometric_matrix()
    expected = sp.Matrix([
        [-1, 1, 0, 0],
        [-1, 1, 1, -1],
        [1, -1, -1, 1],
        [0, 0, 1, -1],
    ])
    assert S == expected


def test_michaelis_menten_defaults():
    net = reaction_network(michaelis_menten_model())
    assert net.defaults[create_var("S")] == 1.0
    assert net.defaults[create_var("E")] == 0.5
    assert net.defaults[create_param("k1")] == 1.0
    assert net.defaults[create_param("km2")] == 0.01
    assert net.parameters == [create_param(k) for k in ("k1", "km1", "k2", "km2")]


def test_reactant_matrix():
    net = reaction_network(michaelis_menten_model())
    M = net.reactant_matrix()
    assert M[:, 0] == sp.Matrix([1, 1, 0, 0])
    assert M[:, 1] == sp.Matrix([0, 0, 1, 0])


def test_dimerisation_rhs_and_jacobian():
    net = reaction_network(dimerisation_model())
    M = create_var("M")
    k = create_param("k")
    assert net.reactions[0].rate == 2 * k
    F = net.rhs()
    assert sp.simplify(F[0] - (-2 * k * M**2)) == 0
    assert sp.simplify(F[1] - k * M**2) == 0
    assert net.parameters == [k, create_param("cell")]

    J = net.jacobian()
    assert sp.simplify(J[0, 0] + 4 * k * M) == 0
    assert J[0, 1] == 0
    assert sp.simplify(J[1, 0] - 2 * k * M) == 0


def test_noncombinatoric_rate_laws():
    net = reaction_network(dimerisation_model())
    M = create_var("M")
    k = create_param("k")
    assert net.rate_laws(combinatoric=False) == [2 * k * M**2]


def test_boundary_species_has_no_net_change():
    net = reaction_network(boundary_source_model())
    Src, X = create_var("Src"), create_var("X")
    ks, kd = create_param("ks"), create_param("kd")
    F = net.rhs()
    assert F[0] == 0
    assert sp.expand(F[1] - (ks * Src - kd * X)) == 0


def test_from_string():
    net = ReactionNetwork.from_string("A -> B")
    assert net.species_names == ["A", "B"]
    assert net.parameters == [create_param("k1")]
    assert create_param("k1") not in net.defaults
    assert net.reactions[0].rate == create_param("k1")


def test_states_include_time_varying_parameters_and_compartments():
    net = reaction_network(rules_and_events_model())
    assert net.states == [create_var(n) for n in ("A", "B", "V", "total")]
    assert net.parameters == [create_param(n) for n in ("Vmax", "Km", "g")]
    assert net.state("V") == create_var("V")
    with pytest.raises(KeyError):
        net.state("missing")


def test_observed_value_enters_defaults():
    net = reaction_network(rules_and_events_model())
    assert net.defaults[create_var("total")] == 1.0
    assert net.reactions[0].only_use_rate is True


def test_reaction_must_use_network_species():
    X = create_var("X")
    rx = CompiledReaction(create_param("k"), (X,), None, (1,), None, name="r")
    with pytest.raises(ValueError):
        ReactionNetwork(reactions=[rx], species=[create_var("A")])


def test_summary_and_latex():
    net = reaction_network(michaelis_menten_model())
    text = net.summary()
    assert "ReactionNetwork(n_species=4, n_reactions=4)" in text
    assert "Species: S, E, C, P" in text
    assert "Rate constants: k1, km1, k2, km2" in text
    assert "\\frac{d}{dt}" in net.to_latex()

    decay = reaction_network(boundary_source_model()).reactions_to_latex()
    assert "X \\xrightarrow{" in decay
    assert decay.count("\\varnothing") == 1


def test_compile_logs_summary(caplog):
    with caplog.at_level(logging.INFO, logger="sbml_symbolic.network"):
        reaction_network(michaelis_menten_model(), ConversionOptions())
    assert "4 reactions" in caplog.text
