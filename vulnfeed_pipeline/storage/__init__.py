"""
Storage layer for vulnerability feed ingestion.

This module provides data persistence using DuckDB.

Components:
- Database: Connection management, schema initialization and transactions
- Operation: Write contract consumed by source adapters
- DuckDBOperation: Operation implementation over the DuckDB tables
- Advisory / VulnerabilityDetail: Canonical stored records

Usage:
    from storage import Database, DuckDBOperation

    db = Database("vulnfeed.duckdb")
    db.initialize_schema()

    dbc = DuckDBOperation()
    with db.transaction() as tx:
        dbc.put_vulnerability_id(tx, "CVE-2014-7205")
"""

from .database import Database
from .operation import DuckDBOperation, Operation, StoreError
from .types import NO_CVSS_SCORE, Advisory, VulnerabilityDetail

__all__ = [
    "Database",
    "Operation",
    "DuckDBOperation",
    "StoreError",
    "Advisory",
    "VulnerabilityDetail",
    "NO_CVSS_SCORE",
]
