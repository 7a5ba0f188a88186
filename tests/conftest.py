import pytest

from app import create_app


@pytest.fixture
def app(tmp_path):
    return create_app({
        "TESTING": True,
        "DATABASE_URL": None,
        "DATA_DIR": str(tmp_path),
        "LEADERBOARD_STRICT_NAMES": False,
        "LEADERBOARD_LIMIT": 10,
    })


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    return app.extensions["leaderboard"]
