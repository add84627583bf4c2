#!/usr/bin/env python3
"""
Basic Usage Examples for sbml_symbolic

This script walks through conversion of small hand-written models into
reaction networks and equation systems.

Run:
    python examples/basic_usage.py
"""

import logging
import sys
from pathlib import Path

import numpy as np

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))
from sbml_symbolic import (  # noqa: E402
    ReactionNetwork,
    ReportOptions,
    boundary_source_model,
    dimerisation_model,
    format_network_report,
    format_odesystem_report,
    michaelis_menten_model,
    reaction_network,
    rules_and_events_model,
)


def example_1_string_parser():
    """Networks straight from reaction strings."""
    print("\n" + "=" * 50)
    print("Example 1: Creating Networks from Strings")
    print("=" * 50)

    network = ReactionNetwork.from_string("A + B <-> C")
    print("\nFrom 'A + B <-> C':")
    print(f"  Species: {network.species_names}")
    for rxn in network.reactions:
        print(f"    {rxn.name}: {rxn.to_string()}")

    network = ReactionNetwork.from_string("2A -> B; B <->[kf*B][kr*C] C")
    print("\nFrom '2A -> B; B <->[kf*B][kr*C] C':")
    for rxn in network.reactions:
        print(f"    {rxn.name}: {rxn.to_string()}")


def example_2_mass_action():
    """Rate constants recovered from kinetic laws."""
    print("\n" + "=" * 50)
    print("Example 2: Mass-Action Rate Constants")
    print("=" * 50)

    net = reaction_network(michaelis_menten_model())
    print("\n" + net.summary())
    print("\nStoichiometric matrix:")
    print(net.stoichiometric_matrix())

    dim = reaction_network(dimerisation_model())
    print("\nDimerisation (k*M^2 becomes rate constant 2*k):")
    print(f"  {dim.reactions[0].to_string()}")


def example_3_boundary_species():
    """Boundary species are consumed and regenerated."""
    print("\n" + "=" * 50)
    print("Example 3: Boundary Species")
    print("=" * 50)

    net = reaction_network(boundary_source_model())
    print(format_network_report(net, options=ReportOptions(include_defaults=True)))


def example_4_rules_and_events():
    """Rules and events in the expanded equation system."""
    print("\n" + "=" * 50)
    print("Example 4: Rules and Events")
    print("=" * 50)

    odes = reaction_network(rules_and_events_model()).to_odesystem()
    print(format_odesystem_report(odes))


def example_5_numerical_rhs():
    """Evaluate the right-hand side with NumPy."""
    print("\n" + "=" * 50)
    print("Example 5: Numerical Right-Hand Side")
    print("=" * 50)

    odes = reaction_network(michaelis_menten_model()).to_odesystem()
    f = odes.to_function()
    u0 = odes.initial_values()
    p = odes.parameter_values()

    # Forward Euler, enough to show the trend
    u = u0.copy()
    dt = 0.01
    for _ in range(500):
        u = u + dt * f(0.0, u, p)
    print(f"\n  u(0) = {np.round(u0, 4)}")
    print(f"  u(5) ~ {np.round(u, 4)}")


def example_6_latex_export():
    """LaTeX export of reactions and equations."""
    print("\n" + "=" * 50)
    print("Example 6: LaTeX Export")
    print("=" * 50)

    net = reaction_network(michaelis_menten_model())
    print(net.reactions_to_latex())
    print(net.to_latex())


def main():
    """Run all examples."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("=" * 50)
    print("SBML SYMBOLIC - BASIC USAGE EXAMPLES")
    print("=" * 50)

    example_1_string_parser()
    example_2_mass_action()
    example_3_boundary_species()
    example_4_rules_and_events()
    example_5_numerical_rhs()
    example_6_latex_export()

    print("\n" + "=" * 50)
    print("All examples completed successfully!")
    print("=" * 50)


if __name__ == '__main__':
    main()
