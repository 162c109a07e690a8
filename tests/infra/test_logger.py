"""
Tests for infra/pipeline/logger.py

Key behaviors to verify:
1. Lazy initialization - no files created until first log
2. Single append-only file per stage
3. JSON lines carry the document id, stage and per-attempt fields (log_attempt)
4. Level filtering
"""

import json

from infra.pipeline.logger import PipelineLogger, create_logger
from pipeline.ocr_pages.schemas import AttemptRecord


def read_entries(logger):
    with open(logger.log_file) as f:
        return [json.loads(line) for line in f]


class TestPipelineLoggerLazyInit:
    """Test that logger initializes lazily."""

    def test_no_file_created_on_init(self, tmp_path):
        """Logger should not create any files on instantiation."""
        log_dir = tmp_path / "logs"

        logger = PipelineLogger(document_id="paper", stage="ocr", log_dir=log_dir)

        assert not log_dir.exists(), "Log directory should not be created on init"
        assert logger.log_file is None

    def test_file_created_on_first_log(self, tmp_path):
        log_dir = tmp_path / "logs"
        logger = PipelineLogger(document_id="paper", stage="ocr", log_dir=log_dir)

        logger.info("First message")

        assert logger.log_file == log_dir / "ocr.jsonl"
        assert logger.log_file.exists()
        logger.close()

    def test_close_without_logging_creates_nothing(self, tmp_path):
        log_dir = tmp_path / "logs"

        PipelineLogger(document_id="paper", stage="ocr", log_dir=log_dir).close()

        assert not log_dir.exists(), "Close should not create directories"

    def test_logging_after_close_reopens_file(self, tmp_path):
        logger = PipelineLogger(document_id="paper", stage="ocr", log_dir=tmp_path)

        logger.info("before")
        logger.close()
        logger.info("after")
        logger.close()

        assert [e["message"] for e in read_entries(logger)] == ["before", "after"]


class TestPipelineLoggerSingleFile:
    def test_runs_append_to_same_file(self, tmp_path):
        """A second run on the same stage appends rather than starting a new file."""
        log_dir = tmp_path / "logs"

        with PipelineLogger(document_id="paper", stage="ocr", log_dir=log_dir) as first:
            first.info("run 1")
        with PipelineLogger(document_id="paper", stage="ocr", log_dir=log_dir) as second:
            second.info("run 2")

        assert [f.name for f in log_dir.glob("*.jsonl")] == ["ocr.jsonl"]
        assert [e["message"] for e in read_entries(second)] == ["run 1", "run 2"]

    def test_custom_filename(self, tmp_path):
        logger = PipelineLogger(document_id="paper", stage="ocr", log_dir=tmp_path, filename="paper.jsonl")

        logger.info("x")
        logger.close()

        assert logger.log_file.name == "paper.jsonl"


class TestPipelineLoggerJsonFormat:
    def test_entry_has_required_fields(self, tmp_path):
        logger = PipelineLogger(document_id="paper", stage="ocr", log_dir=tmp_path)

        logger.info("test message")
        logger.close()

        entry = read_entries(logger)[0]
        assert "timestamp" in entry
        assert entry["level"] == "INFO"
        assert entry["message"] == "test message"
        assert entry["document_id"] == "paper"
        assert entry["stage"] == "ocr"

    def test_attempt_fields(self, tmp_path):
        logger = PipelineLogger(document_id="paper", stage="ocr", log_dir=tmp_path)

        logger.warning("Provider failed", provider="tensorlake", attempt=1,
                       error="HTTP 401", error_type="TransportError")
        logger.info("Provider succeeded", provider="mistral", attempt=2, pages=3, duration_seconds=1.5)
        logger.close()

        failed, succeeded = read_entries(logger)
        assert failed["provider"] == "tensorlake"
        assert failed["error"] == "HTTP 401"
        assert failed["error_type"] == "TransportError"
        assert succeeded["attempt"] == 2
        assert succeeded["pages"] == 3
        assert succeeded["duration_seconds"] == 1.5

    def test_log_attempt_failure_carries_record(self, tmp_path):
        record = AttemptRecord(provider="tensorlake", reason="HTTP 401", error_type="TransportError", timestamp="t0")

        with PipelineLogger(document_id="paper", stage="ocr", log_dir=tmp_path) as logger:
            logger.log_attempt("tensorlake", "failed", 1, record=record)

        entry = read_entries(logger)[0]
        assert entry["level"] == "WARNING"
        assert entry["message"] == "Provider failed"
        assert entry["status"] == "failed"
        assert (entry["error"], entry["error_type"], entry["failed_at"]) == ("HTTP 401", "TransportError", "t0")

    def test_log_attempt_success(self, tmp_path):
        with PipelineLogger(document_id="paper", stage="ocr", log_dir=tmp_path) as logger:
            logger.log_attempt("mistral", "succeeded", 2, pages=None, duration_seconds=0.25)

        entry = read_entries(logger)[0]
        assert entry["level"] == "INFO"
        assert (entry["provider"], entry["attempt"], entry["duration_seconds"]) == ("mistral", 2, 0.25)
        assert entry["pages"] is None
        assert "error" not in entry

    def test_unknown_fields_not_serialized(self, tmp_path):
        logger = PipelineLogger(document_id="paper", stage="ocr", log_dir=tmp_path)

        logger.info("x", cost_usd=0.01)
        logger.close()

        assert "cost_usd" not in read_entries(logger)[0]


class TestPipelineLoggerLevels:
    def test_all_log_levels(self, tmp_path):
        logger = PipelineLogger(document_id="paper", stage="ocr", log_dir=tmp_path, level="DEBUG")

        logger.debug("debug msg")
        logger.info("info msg")
        logger.warning("warning msg")
        logger.error("error msg")
        logger.close()

        assert [e["level"] for e in read_entries(logger)] == ["DEBUG", "INFO", "WARNING", "ERROR"]

    def test_level_filtering(self, tmp_path):
        """Log level should filter out lower-priority messages."""
        logger = PipelineLogger(document_id="paper", stage="ocr", log_dir=tmp_path, level="WARNING")

        logger.debug("should not appear")
        logger.info("should not appear")
        logger.warning("should appear")
        logger.close()

        assert [e["level"] for e in read_entries(logger)] == ["WARNING"]


class TestCreateLoggerHelper:
    def test_create_logger_returns_pipeline_logger(self, tmp_path):
        logger = create_logger("paper", "ocr", log_dir=tmp_path)

        assert isinstance(logger, PipelineLogger)
        assert logger.document_id == "paper"
