"""
Shared pytest fixtures for matchday tests.

Running tests:
    pytest tests/
"""
import itertools
import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from matchday.models import Team


def make_teams(count):
    """Teams with ids T1..Tn and names Team 1..Team n."""
    return [Team(id=f"T{i}", name=f"Team {i}") for i in range(1, count + 1)]


@pytest.fixture
def teams():
    return make_teams


@pytest.fixture
def id_factory():
    """Predictable fixture ids: F1, F2, ..."""
    counter = itertools.count(1)
    return lambda: f"F{next(counter)}"


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Point the web app at an empty temporary data directory."""
    import app as app_module

    data_dir = tmp_path / "data"
    data_dir.mkdir()
    monkeypatch.setattr(app_module, 'DATA_DIR', str(data_dir))
    return data_dir


@pytest.fixture
def client(temp_data_dir):
    """Create a test client backed by the temporary data directory."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client
