"""Shared fixtures."""

import pytest

from jobportal.logging.context import clear_log_context
from jobportal.persistence import close_database, init_database


@pytest.fixture
def database():
    """Fresh in-memory database with all tables."""
    init_database("sqlite:///:memory:")
    yield
    close_database()


@pytest.fixture(autouse=True)
def clean_log_context():
    clear_log_context()
    yield
    clear_log_context()
