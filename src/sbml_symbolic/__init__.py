"""Top-level package API for sbml_symbolic.

This package converts parsed biochemical models (species, compartments,
parameters, reactions with kinetic-law expression trees, rules and events)
into a symbolic **reaction network** and, from it, a differential-algebraic
equation system built on SymPy.

Public API:
- Model and its entity classes, expression-tree nodes
- ReactionNetwork, ODESystem
- Reaction, rule and event compilers
- Text front end (parse_formula, ModelParser)
- Built-in example models
"""

from .config import ConversionOptions
from .equation import Equation
from .errors import (
    ConversionError,
    InconsistentReactants,
    InvalidEvent,
    InvalidRule,
    SeparationError,
    UnknownLeafType,
    UnknownSpecies,
    UnsupportedConstruct,
    UnsupportedOperator,
    ZeroStoichiometry,
)
from .expression import MathApply, MathConst, MathIdent, MathLambda, MathTime, MathVal
from .model import (
    AlgebraicRule,
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
from .interpret import DEFAULT_CONSTANTS, DEFAULT_FUNCTIONS, ExpressionInterpreter, interpret_math
from .symbols import TIME, create_param, create_var, get_substitutions
from .reaction import CompiledReaction
from .compiler import ReactionCompiler, compile_reactions
from .rules import CompiledRules, RuleCompiler, get_rules
from .events import CompiledEvent, EventCompiler, get_events
from .network import ReactionNetwork, reaction_network
from .odesystem import ODESystem
from .parser import ModelParser, parse_formula, parse_model
from .report import ReportOptions, format_network_report, format_odesystem_report
from .examples import (
    boundary_source_model,
    dimerisation_model,
    michaelis_menten_model,
    rules_and_events_model,
)

__all__ = [
    "ConversionOptions",
    "Equation",
    "ConversionError",
    "UnsupportedOperator",
    "UnsupportedConstruct",
    "SeparationError",
    "InconsistentReactants",
    "InvalidRule",
    "InvalidEvent",
    "ZeroStoichiometry",
    "UnknownSpecies",
    "UnknownLeafType",
    "MathApply",
    "MathConst",
    "MathIdent",
    "MathLambda",
    "MathTime",
    "MathVal",
    "Model",
    "Species",
    "Parameter",
    "Compartment",
    "Reaction",
    "AlgebraicRule",
    "AssignmentRule",
    "RateRule",
    "Event",
    "EventAssignment",
    "DEFAULT_FUNCTIONS",
    "DEFAULT_CONSTANTS",
    "ExpressionInterpreter",
    "interpret_math",
    "TIME",
    "create_var",
    "create_param",
    "get_substitutions",
    "CompiledReaction",
    "ReactionCompiler",
    "compile_reactions",
    "CompiledRules",
    "RuleCompiler",
    "get_rules",
    "CompiledEvent",
    "EventCompiler",
    "get_events",
    "ReactionNetwork",
    "reaction_network",
    "ODESystem",
    "ModelParser",
    "parse_formula",
    "parse_model",
    "ReportOptions",
    "format_network_report",
    "format_odesystem_report",
    "michaelis_menten_model",
    "dimerisation_model",
    "boundary_source_model",
    "rules_and_events_model",
]
