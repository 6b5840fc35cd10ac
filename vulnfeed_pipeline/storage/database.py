"""
Database connection and schema management for vulnerability feed ingestion.

This module provides:
- DuckDB connection lifecycle management
- Key spaces for advisories, vulnerability details and the vulnerability ID index
- Transaction scoping for whole-feed atomic commits
- Ingest run metadata tracking

Design decisions:
- Using DuckDB as the shared store so downstream scanners can query with SQL
- JSON columns for storing the canonical records
- Bucket paths stored as JSON arrays so they are kept exactly as derived
- One transaction per update; any exception rolls the whole batch back
"""
import duckdb
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional


class Database:
    """
    Manages DuckDB connection and schema initialization.

    This class is responsible for:
    - Creating and maintaining a single database connection
    - Initializing the advisory, vulnerability and ingest run tables
    - Handing out transaction handles to source adapters
    - Providing run ID generation for ingest run tracking
    """

    def __init__(self, db_path: str = "vulnfeed.duckdb"):
        """
        Initialize database manager.

        Args:
            db_path: Path to DuckDB database file (created if doesn't exist)
        """
        self.db_path = db_path
        self.conn: Optional[duckdb.DuckDBPyConnection] = None

    def connect(self) -> duckdb.DuckDBPyConnection:
        """
        Get or create database connection.

        Returns:
            Active DuckDB connection
        """
        if self.conn is None:
            self.conn = duckdb.connect(self.db_path)
        return self.conn

    def close(self):
        """Close database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None

    def initialize_schema(self):
        """
        Create all required tables if they don't exist.

        Tables created:
        - advisory_detail: Per (bucket path, package, vulnerability) version ranges
        - vulnerability_detail: Per (vulnerability, source) score and text
        - vulnerability_id: Index of every known vulnerability identifier
        - ingest_runs: Ingest execution metadata
        """
        conn = self.connect()

        conn.execute("""
            CREATE TABLE IF NOT EXISTS advisory_detail (
                bucket_path VARCHAR NOT NULL,
                package_name VARCHAR NOT NULL,
                vulnerability_id VARCHAR NOT NULL,
                advisory JSON NOT NULL
            )
        """)

        conn.execute("""
            CREATE TABLE IF NOT EXISTS vulnerability_detail (
                vulnerability_id VARCHAR NOT NULL,
                source VARCHAR NOT NULL,
                cvss_score DOUBLE,
                detail JSON NOT NULL
            )
        """)

        conn.execute("""
            CREATE TABLE IF NOT EXISTS vulnerability_id (
                vulnerability_id VARCHAR NOT NULL
            )
        """)

        conn.execute("""
            CREATE TABLE IF NOT EXISTS ingest_runs (
                run_id VARCHAR PRIMARY KEY,
                started_at TIMESTAMP,
                completed_at TIMESTAMP,
                status VARCHAR,
                advisories_written INTEGER,
                errors INTEGER,
                metadata JSON
            )
        """)

        conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_ad_package
            ON advisory_detail(package_name)
        """)

        conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_vd_vulnerability
            ON vulnerability_detail(vulnerability_id)
        """)

    @contextmanager
    def transaction(self) -> Iterator[duckdb.DuckDBPyConnection]:
        """
        Scope a block of writes to a single transaction.

        Yields the connection to use as the transaction handle. The
        transaction commits when the block exits normally and rolls back
        when it raises, so no partial batch is ever observable.
        """
        conn = self.connect()
        conn.begin()
        try:
            yield conn
        except BaseException:
            conn.rollback()
            raise
        conn.commit()

    def get_current_run_id(self) -> str:
        """
        Generate a unique run ID for this ingest execution.

        Returns:
            Run ID in format: run_YYYYMMDD_HHMMSS
        """
        return f"run_{datetime.utcnow().strftime('%Y%m%d_%H%M%S')}"

    def __enter__(self):
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
