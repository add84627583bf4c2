import pytest

from sbml_symbolic import (
    MathApply,
    MathConst,
    MathIdent,
    MathLambda,
    MathTime,
    MathVal,
    ModelParser,
    parse_formula,
    parse_model,
)
from sbml_symbolic.expression import identifiers


def test_formula_tree():
    node = parse_formula("k1*A - k2*B")
    assert node == MathApply(
        "-",
        (
            MathApply("*", (MathIdent("k1"), MathIdent("A"))),
            MathApply("*", (MathIdent("k2"), MathIdent("B"))),
        ),
    )


def test_precedence_and_power():
    assert parse_formula("a + b*c") == MathApply(
        "+", (MathIdent("a"), MathApply("*", (MathIdent("b"), MathIdent("c"))))
    )
    # Right associative
    assert parse_formula("a^b^c") == MathApply(
        "power", (MathIdent("a"), MathApply("power", (MathIdent("b"), MathIdent("c"))))
    )
    assert parse_formula("-a^2") == MathApply("-", (MathApply("power", (MathIdent("a"), MathVal(2))),))
    assert parse_formula("(a + b)*c").fn == "*"


def test_numbers():
    assert parse_formula("2") == MathVal(2)
    assert isinstance(parse_formula("2").val, int)
    assert parse_formula("2.0") == MathVal(2.0)
    assert isinstance(parse_formula("2.0").val, float)
    assert parse_formula("1e-3") == MathVal(0.001)


def test_time_constants_and_calls():
    assert parse_formula("time") == MathTime("time")
    assert parse_formula("pi") == MathConst("pi")
    assert parse_formula("exp(-k*time)") == MathApply(
        "exp", (MathApply("*", (MathApply("-", (MathIdent("k"),)), MathTime("time"))),)
    )
    assert parse_formula("piecewise(1, A > 2, 0)").args[1] == MathApply("gt", (MathIdent("A"), MathVal(2)))
    assert parse_formula("A < 1 && B >= 2").fn == "and"
    assert parse_formula("!(A == 1)") == MathApply("not", (MathApply("eq", (MathIdent("A"), MathVal(1))),))


def test_custom_constants():
    assert parse_formula("pi", constants=()) == MathIdent("pi")


def test_lambda():
    node = parse_formula("lambda(x, y, x*y)")
    assert node == MathLambda(("x", "y"), MathApply("*", (MathIdent("x"), MathIdent("y"))))
    assert identifiers(MathApply("+", (node, MathIdent("z")))) == ("z",)


@pytest.mark.parametrize("text", ["", "a +", "(a", "a b", "a $ b", "lambda()", "lambda(2, x)"])
def test_formula_errors(text):
    with pytest.raises(ValueError):
        parse_formula(text)


def test_auto_rate_constants():
    model = ModelParser().parse_model("A + B <-> C; C -> D")
    assert list(model.species) == ["A", "B", "C", "D"]
    assert list(model.reactions) == ["r1", "r2"]
    assert model.reactions["r1"].reversible is True
    assert list(model.parameters) == ["k1", "km1", "k2"]
    assert all(p.constant for p in model.parameters.values())
    assert identifiers(model.reactions["r1"].kinetic_math) == ("k1", "A", "B", "km1", "C")


def test_named_rate_constants_and_values():
    model = parse_model(
        "2A ->[kf] B",
        initial_amounts={"A": 3.0},
        parameters={"kf": 0.5},
    )
    rx = model.reactions["r1"]
    assert rx.reactants == {"A": 2}
    assert rx.kinetic_math == MathApply(
        "*", (MathIdent("kf"), MathApply("power", (MathIdent("A"), MathVal(2))))
    )
    assert model.parameters["kf"].value == 0.5
    assert model.species["A"].initial_amount == 3.0
    assert model.species["B"].initial_amount is None


def test_formula_brackets():
    model = parse_model("A <->[Vf*A/(Km + A)][Vr*B] B")
    rx = model.reactions["r1"]
    assert rx.kinetic_math.fn == "-"
    assert list(model.parameters) == ["Vf", "Km", "Vr"]

    model = parse_model("A <=>[kf*A - kr*B] B")
    assert model.reactions["r1"].kinetic_math == parse_formula("kf*A - kr*B")

    model = parse_model("S ->[V*S/(K + S)] P")
    assert list(model.parameters) == ["V", "K"]


def test_boundary_species_and_empty_complex():
    model = parse_model("0 -> X; X => 0; S -> S + X", boundary_species=["S"])
    assert model.species["S"].boundary_condition is True
    assert model.species["X"].boundary_condition is False
    assert model.reactions["r1"].reactants == {}
    assert model.reactions["r2"].products == {}


def test_decimal_coefficients():
    model = parse_model("0.5 A + 2 B -> C")
    assert model.reactions["r1"].reactants == {"A": 0.5, "B": 2}
    assert isinstance(model.reactions["r1"].reactants["B"], int)


def test_explicit_species_order():
    model = parse_model("A -> B", species_names=["B", "A", "C"])
    assert list(model.species) == ["B", "A", "C"]
    with pytest.raises(ValueError):
        parse_model("A -> Z", species_names=["A"])


def test_custom_prefixes():
    model = ModelParser(rate_prefix="c", reaction_prefix="R", default_parameter_value=1.0).parse_model("A -> B")
    assert list(model.reactions) == ["R1"]
    assert model.parameters["c1"].value == 1.0


@pytest.mark.parametrize(
    "text",
    [
        "",
        "# only a comment",
        "A B",
        "A ->",
        "A -> 2 3",
        "A ->[k1][k2] B",
        "A <->[a][b][c] B",
        "A <->[k1 B",
    ],
)
def test_reaction_line_errors(text):
    with pytest.raises(ValueError):
        parse_model(text)


def test_unknown_boundary_species():
    with pytest.raises(ValueError):
        parse_model("A -> B", boundary_species=["Q"])
