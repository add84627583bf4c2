import sympy as sp

from sbml_symbolic import Compartment, Model, Parameter, Species, create_param, create_var, get_substitutions
from sbml_symbolic.interpret import interpret_math
from sbml_symbolic.parser import parse_formula
from sbml_symbolic.symbols import is_time_varying, substitute, symbol_name, unresolved_symbols


def _model():
    return Model.from_lists(
        species=[Species("A"), Species("B", constant=True)],
        parameters=[
            Parameter("k", value=1.0, constant=True),
            Parameter("p", value=2.0, constant=False),
            Parameter("q"),
        ],
        compartments=[Compartment("cell", size=1.0, constant=True), Compartment("V", size=2.0, constant=False)],
    )


def test_species_always_time_varying():
    subs = get_substitutions(_model())
    assert subs[create_var("A")] == create_var("A")
    assert is_time_varying(subs[create_var("A")])
    # The species constant flag does not matter.
    assert is_time_varying(subs[create_var("B")])


def test_parameters_and_compartments_follow_constant_flag():
    subs = get_substitutions(_model())
    assert subs[create_var("k")] == create_param("k")
    assert subs[create_var("p")] == create_var("p")
    # Absent flag means time-varying.
    assert subs[create_var("q")] == create_var("q")
    assert subs[create_var("cell")] == create_param("cell")
    assert subs[create_var("V")] == create_var("V")


def test_substitution_is_idempotent():
    subs = get_substitutions(_model())
    expr = interpret_math(parse_formula("k*A*cell/V + p*B - rateOf(A)"))
    once = substitute(expr, subs)
    assert substitute(once, subs) == once
    assert not unresolved_symbols([once], subs)
    assert unresolved_symbols([expr], subs) == {create_var("k"), create_var("cell")}


def test_substituted_expression_uses_constant_symbols():
    subs = get_substitutions(_model())
    once = substitute(interpret_math(parse_formula("k*A")), subs)
    assert once == create_param("k") * create_var("A")
    assert once.free_symbols == {create_param("k"), create_var("A").args[0]}


def test_symbol_name():
    assert symbol_name(create_var("A")) == "A"
    assert symbol_name(create_param("k")) == "k"
    assert isinstance(create_param("k"), sp.Symbol)
