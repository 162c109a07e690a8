"""
Sequential fallback across OCR providers.

Providers are tried one at a time in the given order. The first one whose
submit (and normalize, when pages are extracted) succeeds wins; every earlier
failure is kept in an append-only error log that ends up on the result. If
all of them fail, AllProvidersFailedError carries the full log.

The run is a small state machine:

    PENDING(index, log) --success--> SUCCEEDED
    PENDING(index, log) --failure--> PENDING(index + 1, log + record)
                                     or ALL_FAILED when index was the last one
"""

import logging
import time
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Optional, Sequence, Tuple

from infra.ocr import OCRProvider, AllProvidersFailedError, Document
from infra.pipeline import PipelineLogger
from .normalize.selection import requested_pages
from .schemas import AttemptRecord, ResultEnvelope

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[str], OCRProvider]


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class OrchestratorStatus(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    ALL_FAILED = "all_failed"


@dataclass(frozen=True)
class OrchestratorState:
    status: OrchestratorStatus = OrchestratorStatus.PENDING
    index: int = 0
    error_log: Tuple[AttemptRecord, ...] = ()


class FallbackOrchestrator:
    def __init__(
        self,
        provider_factory: ProviderFactory,
        clock: Optional[Callable[[], str]] = None,
        pipeline_logger: Optional[PipelineLogger] = None
    ):
        self.provider_factory = provider_factory
        self.clock = clock or utc_timestamp
        self.pipeline_logger = pipeline_logger

    def run(
        self,
        document: Document,
        providers: Sequence[str],
        pages: Optional[Iterable[int]] = None,
        options: Optional[Dict[str, Dict[str, Any]]] = None,
        extract_pages: bool = True
    ) -> ResultEnvelope:
        """Try each provider in order until one succeeds.

        Args:
            document: Path (or URL) handed unchanged to each provider
            providers: Provider names in fallback order; non-empty, no duplicates
            pages: 1-based page numbers to keep (None = all)
            options: Provider name -> kwargs passed through to that provider's submit
            extract_pages: False returns the winner's raw response instead of pages

        Raises:
            ValueError: If the provider list is empty or has duplicates
            AllProvidersFailedError: If every provider failed
        """
        providers = list(providers)
        if not providers:
            raise ValueError("At least one OCR provider is required")
        duplicates = sorted({name for name in providers if providers.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate OCR providers: {', '.join(duplicates)}")

        wanted = requested_pages(pages)
        pages = sorted(wanted) if wanted is not None else None
        options = options or {}

        state = OrchestratorState()
        envelope = None

        while state.status == OrchestratorStatus.PENDING:
            name = providers[state.index]
            try:
                envelope = self._attempt(document, name, pages, options.get(name), extract_pages, state)
                state = replace(state, status=OrchestratorStatus.SUCCEEDED)
            except Exception as e:
                state = self._record_failure(state, name, e, providers)

        if state.status == OrchestratorStatus.ALL_FAILED:
            logger.error("All OCR providers failed for %s", document)
            raise AllProvidersFailedError(document, providers, list(state.error_log))

        return envelope

    def _attempt(
        self,
        document: Document,
        name: str,
        pages: Optional[list],
        provider_options: Optional[Dict[str, Any]],
        extract_pages: bool,
        state: OrchestratorState
    ) -> ResultEnvelope:
        attempt = state.index + 1
        logger.info("Attempting OCR with %s (attempt %d)", name, attempt)
        start = time.time()

        provider = self.provider_factory(name)
        raw = provider.submit(document, provider_options)
        output = provider.normalize(raw, pages) if extract_pages else raw

        duration = time.time() - start
        logger.info("Successfully processed with %s in %.1fs", name, duration)
        if self.pipeline_logger:
            self.pipeline_logger.log_attempt(
                name, "succeeded", attempt,
                pages=pages,
                duration_seconds=round(duration, 3),
            )

        return ResultEnvelope(
            provider=name,
            pages=output,
            raw=raw,
            error_log=list(state.error_log),
            normalized=extract_pages,
        )

    def _record_failure(
        self,
        state: OrchestratorState,
        name: str,
        error: Exception,
        providers: Sequence[str]
    ) -> OrchestratorState:
        record = AttemptRecord(
            provider=name,
            reason=str(error),
            error_type=type(error).__name__,
            timestamp=self.clock(),
        )
        logger.warning("Provider %s failed: %s", name, record.reason)
        if self.pipeline_logger:
            self.pipeline_logger.log_attempt(name, "failed", state.index + 1, record=record)

        error_log = state.error_log + (record,)
        if state.index + 1 >= len(providers):
            return OrchestratorState(OrchestratorStatus.ALL_FAILED, state.index, error_log)
        return OrchestratorState(OrchestratorStatus.PENDING, state.index + 1, error_log)
