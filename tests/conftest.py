from __future__ import annotations

import sys
from pathlib import Path

import pytest


# Allow `pytest` to import the package directly from the src layout
# without requiring an editable install.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture
def two_species_model():
    """A, B species with a constant rate parameter k and a time-varying parameter p."""
    from sbml_symbolic import Model, Parameter, Species

    return Model.from_lists(
        species=[Species("A", initial_amount=1.0), Species("B", initial_amount=0.0)],
        parameters=[Parameter("k", value=0.3, constant=True), Parameter("p", value=2.0, constant=False)],
    )
