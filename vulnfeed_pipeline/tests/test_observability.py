"""
Lightweight validation tests for the observability layer.

These tests verify:
- IngestMetrics folds adapter health into run totals
- IngestMetrics serializes to dict properly
- QualityChecker passes on clean data and flags bad rows
- RunReporter generates valid Markdown output
"""
from datetime import datetime

from ingestion import SourceHealth
from observability import IngestMetrics, QualityChecker, QualityCheckResult, RunReporter


def make_health(**overrides):
    values = dict(
        source_id="nodejs-security-wg",
        is_healthy=True,
        last_update=datetime(2024, 1, 15, 12, 0, 0),
        entries_seen=10,
        advisories_written=8,
        entries_skipped=2,
    )
    values.update(overrides)
    return SourceHealth(**values)


def test_ingest_metrics_records_source():
    metrics = IngestMetrics(run_id="test_run", started_at=datetime.utcnow())

    metrics.record_source(make_health(), files=10)

    assert metrics.files_processed == 10
    assert metrics.entries_total == 10
    assert metrics.entries_skipped == 2
    assert metrics.advisories_written == 8
    assert metrics.source_health["nodejs-security-wg"] == {
        "healthy": True,
        "records": 8,
        "error": None
    }


def test_ingest_metrics_serialization():
    metrics = IngestMetrics(
        run_id="test_run",
        started_at=datetime(2024, 1, 15, 12, 0, 0),
        completed_at=datetime(2024, 1, 15, 12, 5, 30)
    )
    metrics.record_error("boom", {"source_id": "nodejs-security-wg"})

    data = metrics.to_dict()

    assert data["run_id"] == "test_run"
    assert data["errors"] == 1
    assert data["quality_issues"][0]["message"] == "boom"
    assert data["started_at"] == "2024-01-15T12:00:00"
    assert data["completed_at"] == "2024-01-15T12:05:30"


def test_quality_checker_runs_on_empty_db(temp_db):
    results = QualityChecker(temp_db).run_all_checks()

    assert len(results) == 4
    assert all(isinstance(r, QualityCheckResult) for r in results)
    assert all(r.passed for r in results)


def test_quality_checker_passes_after_update(temp_db, duckdb_adapter, feed_dir):
    duckdb_adapter.update(feed_dir, temp_db)

    results = QualityChecker(temp_db).run_all_checks()

    assert all(r.passed for r in results), [r.message for r in results if not r.passed]


def test_quality_checker_flags_bad_rows(temp_db):
    conn = temp_db.connect()
    conn.execute("""
        INSERT INTO advisory_detail VALUES ('["npm::x"]', 'pkg', 'GHSA-xxxx', '{}')
    """)
    conn.execute("""
        INSERT INTO vulnerability_detail VALUES ('CVE-2020-0001', 'nodejs-security-wg', 11.0, '{}')
    """)
    conn.execute("INSERT INTO vulnerability_id VALUES ('GHSA-xxxx')")

    results = {r.check_name: r for r in QualityChecker(temp_db).run_all_checks()}

    assert not results["advisories_have_details"].passed
    assert not results["details_indexed"].passed
    assert not results["cvss_range"].passed
    assert not results["identifier_format"].passed
    assert results["identifier_format"].details == {"invalid_count": 1}


def test_reporter_generates_markdown(tmp_path):
    metrics = IngestMetrics(
        run_id="test_run",
        started_at=datetime(2024, 1, 15, 12, 0, 0),
        completed_at=datetime(2024, 1, 15, 12, 0, 30)
    )
    metrics.record_source(make_health(), files=10)
    quality = [QualityCheckResult("cvss_range", True, "All scores in range")]

    reporter = RunReporter()
    report = reporter.generate_report(metrics, quality)

    assert "# Ingest Run Report" in report
    assert "**Run ID:** test_run" in report
    assert "Duration:** 30.0 seconds" in report
    assert "Advisories Written" in report
    assert "cvss_range" in report
    assert "nodejs-security-wg" in report

    path = reporter.save_report(report, tmp_path / "reports")
    assert path.exists()
    assert path.read_text() == report
