import pytest
import os

# Ensure JWT_SECRET is set before the auth helpers are imported
os.environ["JWT_SECRET"] = "test_secret"

from backend.auth_service.utils import create_token
from backend.database.user_store import User
from backend.tests.helpers import FakeGenerator, FakeUserStore


@pytest.fixture
def images_dir(tmp_path):
    # Not created up front so tests can assert nothing was written
    return tmp_path / "generated-images"


@pytest.fixture
def user_store():
    return FakeUserStore({"1": User(user_id=1, email="test@example.com", role="user")})


@pytest.fixture
def fake_generator():
    return FakeGenerator()


@pytest.fixture
def app_config(images_dir):
    return {
        "TESTING": True,
        "GENERATED_IMAGES_DIR": str(images_dir),
        "GEMINI_API_KEY": "test-key",
    }


@pytest.fixture
def app(app_config, user_store, fake_generator):
    from backend.gateway.server import create_app

    return create_app(config_overrides=app_config, user_store=user_store, image_generator=fake_generator)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {create_token(1)}"}


@pytest.fixture
def mock_db(mocker):
    """
    Mocks the database connection and cursor.
    """
    mock_conn = mocker.Mock()
    mock_cursor = mocker.Mock()

    # Setup the context manager for connection
    mock_conn.__enter__ = mocker.Mock(return_value=mock_conn)
    mock_conn.__exit__ = mocker.Mock(return_value=None)

    # Setup the context manager for cursor
    mock_cursor.__enter__ = mocker.Mock(return_value=mock_cursor)
    mock_cursor.__exit__ = mocker.Mock(return_value=None)

    # Connect cursor to connection
    mock_conn.cursor.return_value = mock_cursor

    # Mock get_db to return our mock connection
    mocker.patch("backend.database.db_connection.get_db", return_value=mock_conn)

    return mock_conn, mock_cursor
