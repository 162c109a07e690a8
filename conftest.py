"""
Pytest configuration for project root.

Ensures project modules can be imported in tests.
Provides the committed raw provider responses used by normalizer tests.
"""

import json
import sys
import pytest
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))


# ============================================================================
# RAW RESPONSE FIXTURES - Committed test data
# ============================================================================

@pytest.fixture(scope="session")
def raw_fixtures():
    """Path to committed raw provider responses.

    One trimmed response per provider shape:
    - tensorlake.json (fragment list)
    - mistral.json (per-page markdown)
    - claude.json (Messages API answer with structured_output)
    - textract.json (block graph)
    """
    fixture_dir = project_root / "tests" / "fixtures" / "raw"
    assert fixture_dir.exists(), f"Raw response fixtures not found at {fixture_dir}"
    return fixture_dir


@pytest.fixture
def load_raw(raw_fixtures):
    """Load a raw response fixture by provider name (fresh copy per call)."""
    def _load(name: str) -> dict:
        with open(raw_fixtures / f"{name}.json") as f:
            return json.load(f)
    return _load
