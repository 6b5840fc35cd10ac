"""
Shared pytest fixtures for vulnerability feed ingestion tests.

This module provides reusable fixtures that simplify test setup
and reduce code duplication across test modules.
"""
import tempfile
from pathlib import Path
from unittest import mock

import pytest

from ingestion import NodeAdapter
from storage import Database, DuckDBOperation, Operation

TESTDATA = Path(__file__).parent / "testdata"


@pytest.fixture
def temp_db():
    """
    Create a temporary database for testing.

    Yields:
        Database instance with schema initialized

    Cleanup:
        Automatically closes connection and removes file after test
    """
    with tempfile.NamedTemporaryFile(suffix=".duckdb", delete=True) as f:
        db_path = f.name

    db = Database(db_path)
    db.initialize_schema()
    yield db
    db.close()

    Path(db_path).unlink(missing_ok=True)


@pytest.fixture
def mock_dbc():
    """Operation double that records every put."""
    return mock.create_autospec(Operation, instance=True)


@pytest.fixture
def node_adapter(mock_dbc):
    """NodeAdapter writing to the recording Operation."""
    return NodeAdapter({}, mock_dbc)


@pytest.fixture
def duckdb_adapter():
    """NodeAdapter writing to the real DuckDB tables."""
    return NodeAdapter({}, DuckDBOperation())


@pytest.fixture
def feed_dir(tmp_path):
    """
    Feed checkout laid out as <root>/vuln/{npm,core}/*.json.

    Returns:
        Root directory of the checkout
    """
    npm_dir = tmp_path / "vuln" / "npm"
    core_dir = tmp_path / "vuln" / "core"
    npm_dir.mkdir(parents=True)
    core_dir.mkdir(parents=True)

    for name in ["npm_cvssnumberonly.json", "npm_nullcvssscore.json"]:
        (npm_dir / name).write_bytes((TESTDATA / name).read_bytes())
    for name in ["core_cvssnumberandstring.json", "core_nocvssscorepresent.json"]:
        (core_dir / name).write_bytes((TESTDATA / name).read_bytes())

    return tmp_path
