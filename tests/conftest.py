"""
Pytest configuration for the circuit tests.
"""

import sys
from pathlib import Path

import pytest

# Add the project root to the path so absolute imports work
# (tests/ is inside the project root, so parent is the root)
root_dir = Path(__file__).parent.parent
if str(root_dir) not in sys.path:
    sys.path.insert(0, str(root_dir))


@pytest.fixture(scope="session")
def params():
    """Width-5 BN254 round parameters (generated once per session)."""
    from primitives.poseidon_params import params_5x5_bn254
    return params_5x5_bn254()
