"""
End-to-end tests for the ingest runner.
"""
import json

import pytest
import yaml

from run_pipeline import IngestPipeline


def write_config(tmp_path, feed_dir, **overrides):
    config = {
        "database": {"path": str(tmp_path / "pipeline.duckdb")},
        "sources": {"nodejs": {"feed_dir": str(feed_dir)}},
        "output": {"report_dir": str(tmp_path / "output")},
    }
    config.update(overrides)
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(config))
    return path


def test_pipeline_run(tmp_path, feed_dir):
    pipeline = IngestPipeline(str(write_config(tmp_path, feed_dir)))
    try:
        metrics = pipeline.run()

        assert metrics.files_processed == 4
        assert metrics.entries_total == 4
        assert metrics.entries_skipped == 2
        assert metrics.advisories_written == 2
        assert metrics.errors == 0

        status, written, metadata = pipeline.db.connect().execute("""
            SELECT status, advisories_written, metadata FROM ingest_runs WHERE run_id = ?
        """, [metrics.run_id]).fetchone()
        assert status == "success"
        assert written == 2
        assert json.loads(metadata)["source_health"]["nodejs-security-wg"]["healthy"] is True

        reports = list((tmp_path / "output").glob("ingest-report-*.md"))
        assert len(reports) == 1
    finally:
        pipeline.db.close()


def test_pipeline_run_failure_is_recorded(tmp_path, feed_dir):
    (feed_dir / "vuln" / "npm" / "broken.json").write_text("[{]")
    pipeline = IngestPipeline(str(write_config(tmp_path, feed_dir)))
    try:
        with pytest.raises(RuntimeError, match="invalid character"):
            pipeline.run()

        conn = pipeline.db.connect()
        assert conn.execute("SELECT count(*) FROM vulnerability_id").fetchone()[0] == 0
        status, errors, written = conn.execute(
            "SELECT status, errors, advisories_written FROM ingest_runs"
        ).fetchone()
        assert status == "failed"
        assert errors == 1
        assert written == 0
    finally:
        pipeline.db.close()


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        IngestPipeline(str(tmp_path / "nope.yaml"))


def test_missing_feed_dir_key(tmp_path, feed_dir):
    path = write_config(tmp_path, feed_dir, sources={"nodejs": {}})
    with pytest.raises(ValueError, match="feed_dir"):
        IngestPipeline(str(path))


def test_missing_database_section(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"sources": {"nodejs": {"feed_dir": "x"}}}))
    with pytest.raises(ValueError, match="database"):
        IngestPipeline(str(path))
