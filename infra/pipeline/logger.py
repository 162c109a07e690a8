import json
import logging
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from pipeline.ocr_pages.schemas import AttemptRecord


class FlushingFileHandler(logging.FileHandler):
    """FileHandler that flushes after every emit so a crashed run keeps its attempts."""
    def emit(self, record):
        super().emit(record)
        self.flush()


class JSONFormatter(logging.Formatter):
    FIELDS = (
        'document_id', 'stage', 'provider', 'attempt', 'status',
        'pages', 'duration_seconds', 'error', 'error_type', 'failed_at',
    )

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now().astimezone().isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
        }

        for field in self.FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        return json.dumps(log_data)


class PipelineLogger:
    """Attempt log for one document: one JSON object per line, appended to log_dir/filename.

    The directory and file are only created once something is logged, so a
    run that never reaches a provider leaves nothing behind.
    """
    def __init__(
        self,
        document_id: str,
        stage: str,
        log_dir: Path,
        level: str = "INFO",
        filename: Optional[str] = None
    ):
        self.document_id = document_id
        self.stage = stage
        self.log_dir = Path(log_dir)
        self.level = level
        self.filename = filename or f"{stage}.jsonl"

        self._logger = None
        self.log_file = None

    @property
    def logger(self) -> logging.Logger:
        if self._logger is None:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            self.log_file = self.log_dir / self.filename

            handler = FlushingFileHandler(self.log_file, mode='a')
            handler.setFormatter(JSONFormatter())

            # id(self) keeps two loggers for the same document from sharing handlers
            self._logger = logging.getLogger(f"ohseer.{self.document_id}.{self.stage}.{id(self)}")
            self._logger.setLevel(getattr(logging, self.level.upper()))
            self._logger.propagate = False
            self._logger.addHandler(handler)
        return self._logger

    def _log(self, level: int, message: str, **fields):
        exc_info = fields.pop('exc_info', None)
        self.logger.log(
            level,
            message,
            exc_info=exc_info,
            extra={'document_id': self.document_id, 'stage': self.stage, **fields},
        )

    def debug(self, message: str, **fields):
        self._log(logging.DEBUG, message, **fields)

    def info(self, message: str, **fields):
        self._log(logging.INFO, message, **fields)

    def warning(self, message: str, **fields):
        self._log(logging.WARNING, message, **fields)

    def error(self, message: str, **fields):
        self._log(logging.ERROR, message, **fields)

    def log_attempt(
        self,
        provider: str,
        status: str,
        attempt: int,
        record: Optional["AttemptRecord"] = None,
        **fields
    ):
        """
        Write one provider attempt.

        A failed attempt passes its AttemptRecord; the record's reason,
        exception type and timestamp become the error, error_type and
        failed_at fields, and the line is logged at WARNING.

        Args:
            provider: Configured provider name
            status: "succeeded" or "failed"
            attempt: 1-based position in the fallback order
            record: The failure, if the attempt failed
            **fields: Extra attempt fields (pages, duration_seconds)
        """
        if record is not None:
            fields.update(
                error=record.reason,
                error_type=record.error_type,
                failed_at=record.timestamp,
            )
        level = logging.INFO if record is None else logging.WARNING
        self._log(level, f"Provider {status}", provider=provider, status=status, attempt=attempt, **fields)

    def close(self):
        if self._logger is not None:
            for handler in self._logger.handlers[:]:
                handler.close()
                self._logger.removeHandler(handler)
            self._logger = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def create_logger(document_id: str, stage: str, **kwargs) -> PipelineLogger:
    return PipelineLogger(document_id, stage, **kwargs)
