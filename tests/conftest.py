"""
Pytest configuration and shared fixtures.
"""

import tempfile
from pathlib import Path

import pytest

from chuk_mcp_harmony.core import CadenceLabel, Key
from chuk_mcp_harmony.models import Phrase, ReharmZone, Template
from chuk_mcp_harmony.templates import TemplateLoader, builtin_library_path


@pytest.fixture
def temp_dir() -> Path:
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def library_path() -> Path:
    """Path to the built-in template library."""
    return builtin_library_path()


@pytest.fixture
def c_major() -> Key:
    """C major."""
    return Key.parse("C_major")


@pytest.fixture
def eight_bar_template() -> Template:
    """Two four-bar phrases: half cadence then perfect cadence."""
    return Template(
        id="eight_bar",
        bars=8,
        phrases=[
            Phrase(name="antecedent", start_bar=0, length=4, cadence=CadenceLabel.HALF),
            Phrase(name="consequent", start_bar=4, length=4, cadence=CadenceLabel.PERFECT),
        ],
        tension_curve=[0.1, 0.3, 0.4, 0.7, 0.2, 0.4, 0.6, 0.1],
        reharm_zones=[ReharmZone(start_bar=4, end_bar=6, risk=0.5)],
    )


@pytest.fixture
def blues_template(library_path: Path) -> Template:
    """The built-in 12-bar blues."""
    return TemplateLoader().load_file(library_path / "blues_12bar_v1.yaml")


@pytest.fixture
def jazz_template(library_path: Path) -> Template:
    """The built-in 32-bar AABA."""
    return TemplateLoader().load_file(library_path / "jazz_aaba_v1.yaml")
