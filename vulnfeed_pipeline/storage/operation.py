"""
Storage operations shared by all vulnerability source adapters.

Adapters never write SQL themselves; they hand canonical records to an
Operation together with the caller's transaction handle. This keeps the
adapters testable with a mock Operation and leaves transaction lifetime
entirely to the caller.

Design decisions:
- Three independent puts mirroring the three key spaces
- DELETE + INSERT pattern for idempotent re-ingestion
- JSON serialization for the stored records
- Store faults surface as StoreError, chained to the driver error
"""
import json
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List

import duckdb

from .types import Advisory, VulnerabilityDetail

if TYPE_CHECKING:
    from ingestion.sources import VulnSource


class StoreError(RuntimeError):
    """Raised when the underlying store rejects a write."""


class Operation(ABC):
    """Write contract consumed by source adapters."""

    @abstractmethod
    def put_advisory_detail(
        self,
        tx,
        nested_bkt_names: List[str],
        pkg_name: str,
        vulnerability_id: str,
        advisory: Advisory
    ) -> None:
        """Store the version ranges of one package for one vulnerability."""

    @abstractmethod
    def put_vulnerability_detail(
        self,
        tx,
        vulnerability_id: str,
        source: "VulnSource",
        detail: VulnerabilityDetail
    ) -> None:
        """Store the source-specific details of one vulnerability."""

    @abstractmethod
    def put_vulnerability_id(self, tx, vulnerability_id: str) -> None:
        """Record a vulnerability identifier in the ID index."""


class DuckDBOperation(Operation):
    """
    Operation backed by DuckDB tables.

    The transaction handle is a DuckDB connection with an open transaction,
    as handed out by Database.transaction().
    """

    def put_advisory_detail(self, tx, nested_bkt_names, pkg_name, vulnerability_id, advisory):
        bucket_path = json.dumps(list(nested_bkt_names))
        try:
            tx.execute("""
                DELETE FROM advisory_detail
                WHERE bucket_path = ? AND package_name = ? AND vulnerability_id = ?
            """, [bucket_path, pkg_name, vulnerability_id])
            tx.execute("""
                INSERT INTO advisory_detail
                (bucket_path, package_name, vulnerability_id, advisory)
                VALUES (?, ?, ?, ?)
            """, [bucket_path, pkg_name, vulnerability_id, json.dumps(advisory.to_dict())])
        except duckdb.Error as e:
            raise StoreError(f"failed to save advisory {vulnerability_id} for {pkg_name}: {e}") from e

    def put_vulnerability_detail(self, tx, vulnerability_id, source, detail):
        try:
            tx.execute("""
                DELETE FROM vulnerability_detail
                WHERE vulnerability_id = ? AND source = ?
            """, [vulnerability_id, source.source_id])
            tx.execute("""
                INSERT INTO vulnerability_detail
                (vulnerability_id, source, cvss_score, detail)
                VALUES (?, ?, ?, ?)
            """, [vulnerability_id, source.source_id, detail.cvss_score, json.dumps(detail.to_dict())])
        except duckdb.Error as e:
            raise StoreError(f"failed to save vulnerability detail {vulnerability_id}: {e}") from e

    def put_vulnerability_id(self, tx, vulnerability_id):
        try:
            tx.execute(
                "DELETE FROM vulnerability_id WHERE vulnerability_id = ?", [vulnerability_id]
            )
            tx.execute(
                "INSERT INTO vulnerability_id (vulnerability_id) VALUES (?)", [vulnerability_id]
            )
        except duckdb.Error as e:
            raise StoreError(f"failed to save vulnerability ID {vulnerability_id}: {e}") from e
