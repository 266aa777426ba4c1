"""
Shared pytest fixtures for tournament tests.

Running tests:
    pytest tests/
"""
import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))
# Keep app import from writing a secret key into the repo data directory
os.environ.setdefault('SECRET_KEY', 'test-secret-key')

from core.models import Competitor, MatchResult


def make_ranking(*names):
    """Build a ranking with rank = position + 1."""
    return [Competitor(name, i + 1) for i, name in enumerate(names)]


@pytest.fixture
def client():
    """Create a test client."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Point the app at an empty temporary data directory with the password gate open."""
    import app as app_module

    data_dir = tmp_path / "data"
    data_dir.mkdir()
    monkeypatch.setattr(app_module, 'DATA_DIR', str(data_dir))
    monkeypatch.setattr(app_module, 'ADMIN_PASSWORD_HASH', None)
    return str(data_dir)


@pytest.fixture
def four_players():
    return make_ranking("Alice", "Bob", "Carol", "Dave")


@pytest.fixture
def thirteen_players():
    return make_ranking(*[f"Player {i}" for i in range(1, 14)])


@pytest.fixture
def two_player_result():
    return MatchResult("X", "Y", 1, "4", "2")
