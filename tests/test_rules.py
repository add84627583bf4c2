import pytest
import sympy as sp

from sbml_symbolic import (
    TIME,
    AlgebraicRule,
    AssignmentRule,
    InvalidRule,
    RateRule,
    RuleCompiler,
    create_param,
    create_var,
    get_rules,
    get_substitutions,
    parse_formula,
)
from sbml_symbolic.symbols import unresolved_symbols

A = create_var("A")
B = create_var("B")
k = create_param("k")


def test_three_rule_forms(two_species_model):
    model = two_species_model
    model.rules = [
        AlgebraicRule(parse_formula("A + B - 1")),
        AssignmentRule("p", parse_formula("k*A")),
        RateRule("B", parse_formula("-k*B")),
    ]
    rules = get_rules(model)

    (alg,) = rules.algebraic
    assert alg.lhs == 0
    assert alg.rhs == A + B - 1

    (obs,) = rules.observed
    assert obs.lhs == create_var("p")
    assert obs.rhs == k * A

    (rate,) = rules.rate
    assert rate.lhs == sp.Derivative(B, TIME)
    assert rate.rhs == -k * B

    assert rules.all() == [alg, rate, obs]


def test_rule_equations_have_no_unresolved_symbols(two_species_model):
    model = two_species_model
    model.rules = [AssignmentRule("p", parse_formula("k*A + p*B"))]
    rules = get_rules(model)
    subs = get_substitutions(model)
    exprs = [e.lhs for e in rules.all()] + [e.rhs for e in rules.all()]
    assert not unresolved_symbols(exprs, subs)


def test_trivial_algebraic_rule_is_kept(two_species_model):
    compiler = RuleCompiler(two_species_model)
    eq = compiler.compile_rule(AlgebraicRule(parse_formula("0")))
    assert eq.lhs == 0 and eq.rhs == 0
    assert str(eq) == "0 ~ 0"


def test_assignment_to_unknown_target(two_species_model):
    with pytest.raises(InvalidRule) as info:
        RuleCompiler(two_species_model).compile_rule(AssignmentRule("nope", parse_formula("1")))
    assert info.value.element == "nope"
    assert "invalid rule" in str(info.value)


def test_algebraic_rule_with_unknown_id(two_species_model):
    with pytest.raises(InvalidRule):
        RuleCompiler(two_species_model).compile_rule(AlgebraicRule(parse_formula("A - 1"), id="nope"))


def test_algebraic_rule_with_known_id(two_species_model):
    eq = RuleCompiler(two_species_model).compile_rule(AlgebraicRule(parse_formula("A - 1"), id="A"))
    assert eq.residual() == -(A - 1)
