"""
Pytest configuration and fixtures.
"""
import pytest
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from quicklaunch.core.schemas import PageMetadata, VisitEntry, VisitsStore


@pytest.fixture
def sample_registry():
    """Two pages: only the first one matches 'git'."""
    return {
        "p1": PageMetadata(title="GitHub Pull Requests", url="github.com/pr"),
        "p2": PageMetadata(title="Google Docs", url="docs.google.com"),
    }


@pytest.fixture
def sample_visits():
    """Visit history for the sample registry."""
    return VisitsStore({
        "p1": VisitEntry.from_arrays([1000, 1086400], [30, 45], personal_score=0.5),
        "p2": VisitEntry.from_arrays([500000], [10], personal_score=0.5),
    })


@pytest.fixture
def sample_now():
    """Reference time for the sample scenario."""
    return 1100000
