"""
Pytest configuration and fixtures
"""
import os
import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set test environment
os.environ['DATABASE_URL'] = 'sqlite:///test_godrive.db'
os.environ['ENCRYPTION_KEY'] = 'test-key-for-testing-only-do-not-use-in-production'
os.environ.setdefault('LOG_LEVEL', 'WARNING')

from godrive.database.database import get_engine, get_session_local  # noqa: E402
from godrive.database.models import Base  # noqa: E402
from godrive.utils.config import Config  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Create the test database, remove it at the end of the run"""
    engine = get_engine()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    yield

    Base.metadata.drop_all(bind=engine)
    engine.dispose()

    test_db_path = Path("test_godrive.db")
    if test_db_path.exists():
        test_db_path.unlink()


@pytest.fixture(autouse=True)
def clean_tables():
    """Empty every table before each test"""
    engine = get_engine()
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())
    yield


@pytest.fixture
def db_session():
    """Provide a database session for tests"""
    session = get_session_local()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@pytest.fixture
def test_config():
    """Default configuration"""
    return Config()


@pytest.fixture
def mock_request():
    """Create a mock FastAPI Request object"""
    from unittest.mock import Mock

    request = Mock()
    request.client.host = "127.0.0.1"
    request.headers = {"user-agent": "Test Agent"}

    return request
