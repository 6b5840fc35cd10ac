"""
Data quality checks for ingested vulnerability data.

This module implements QualityChecker, which runs SQL-based validation checks
against the stored key spaces after each ingest run.

Checks implemented:
- Advisories have details: every advisory_detail row has a vulnerability_detail
- Details are indexed: every vulnerability_detail row has a vulnerability_id row
- CVSS range: scores are the -1 sentinel or within [0, 10]
- Identifier format: IDs are CVE-YYYY-NNNN+ or NSWG-ECO-N

Design decisions:
- Each check returns a QualityCheckResult with pass/fail and details
- Checks are SQL-based (run against database, not Python)
"""
from typing import List, Dict, Any
from dataclasses import dataclass


@dataclass
class QualityCheckResult:
    """
    Result of a single quality check.

    Attributes:
        check_name: Unique identifier for the check
        passed: True if check passed, False otherwise
        message: Human-readable summary of the result
        details: Optional dict with additional context (e.g., counts)
    """
    check_name: str
    passed: bool
    message: str
    details: Dict[str, Any] = None


class QualityChecker:
    """
    Runs data quality checks against the stored vulnerability data.

    Each check method executes a SQL query against the database and returns
    a QualityCheckResult indicating pass/fail status.
    """

    def __init__(self, database):
        """
        Initialize quality checker.

        Args:
            database: Database instance with initialized schema
        """
        self.db = database

    def run_all_checks(self) -> List[QualityCheckResult]:
        """
        Run all quality checks.

        Returns:
            List of QualityCheckResult objects, one per check
        """
        return [
            self.check_advisories_have_details(),
            self.check_details_indexed(),
            self.check_cvss_range(),
            self.check_identifier_format(),
        ]

    def check_advisories_have_details(self) -> QualityCheckResult:
        """Every stored advisory must have a matching vulnerability detail."""
        conn = self.db.connect()
        result = conn.execute("""
            SELECT count(*) FROM advisory_detail a
            WHERE NOT EXISTS (
                SELECT 1 FROM vulnerability_detail v
                WHERE v.vulnerability_id = a.vulnerability_id
            )
        """).fetchone()[0]

        return QualityCheckResult(
            check_name="advisories_have_details",
            passed=result == 0,
            message=f"{result} advisories without detail" if result > 0 else "All advisories have details",
            details={"missing_count": result}
        )

    def check_details_indexed(self) -> QualityCheckResult:
        """Every vulnerability detail must appear in the ID index."""
        conn = self.db.connect()
        result = conn.execute("""
            SELECT count(*) FROM vulnerability_detail v
            WHERE NOT EXISTS (
                SELECT 1 FROM vulnerability_id i
                WHERE i.vulnerability_id = v.vulnerability_id
            )
        """).fetchone()[0]

        return QualityCheckResult(
            check_name="details_indexed",
            passed=result == 0,
            message=f"{result} details missing from ID index" if result > 0 else "All details indexed",
            details={"missing_count": result}
        )

    def check_cvss_range(self) -> QualityCheckResult:
        """
        Scores must be the -1 sentinel or a valid CVSS score.

        The feed is stored as stated, so a failure here points at the vendor
        data rather than at ingestion.
        """
        conn = self.db.connect()
        result = conn.execute("""
            SELECT count(*) FROM vulnerability_detail
            WHERE cvss_score <> -1
              AND (cvss_score < 0 OR cvss_score > 10)
        """).fetchone()[0]

        return QualityCheckResult(
            check_name="cvss_range",
            passed=result == 0,
            message=f"{result} scores out of range" if result > 0 else "All scores in range",
            details={"invalid_count": result}
        )

    def check_identifier_format(self) -> QualityCheckResult:
        """Identifiers must be CVE IDs or synthesized NSWG-ECO IDs."""
        conn = self.db.connect()
        result = conn.execute("""
            SELECT count(*) FROM vulnerability_id
            WHERE vulnerability_id NOT SIMILAR TO 'CVE-[0-9]{4}-[0-9]{4,}'
              AND vulnerability_id NOT SIMILAR TO 'NSWG-ECO-[0-9]+'
        """).fetchone()[0]

        return QualityCheckResult(
            check_name="identifier_format",
            passed=result == 0,
            message=f"{result} invalid identifiers" if result > 0 else "All identifiers valid",
            details={"invalid_count": result}
        )
