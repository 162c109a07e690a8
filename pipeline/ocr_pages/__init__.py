from .schemas import (
    CanonicalPage,
    CanonicalTable,
    CanonicalFragment,
    AttemptRecord,
    ResultEnvelope,
)
from .normalize import (
    DEFAULT_EXCLUDE_TYPES,
    get_normalizer,
    normalize_fragment_pages,
    normalize_mistral_pages,
    normalize_claude_pages,
    normalize_textract_pages,
)
from .provider import (
    TensorlakeOCRProvider,
    MistralOCRProvider,
    ClaudeOCRProvider,
    TextractOCRProvider,
    get_provider,
    list_providers,
)
from .availability import ProviderAvailability, check_availability, require_available
from .orchestrator import FallbackOrchestrator, OrchestratorState, OrchestratorStatus
from .runner import run_ocr


__all__ = [
    "run_ocr",
    "FallbackOrchestrator",
    "OrchestratorState",
    "OrchestratorStatus",
    "ProviderAvailability",
    "check_availability",
    "require_available",
    "CanonicalPage",
    "CanonicalTable",
    "CanonicalFragment",
    "AttemptRecord",
    "ResultEnvelope",
    "DEFAULT_EXCLUDE_TYPES",
    "get_normalizer",
    "normalize_fragment_pages",
    "normalize_mistral_pages",
    "normalize_claude_pages",
    "normalize_textract_pages",
    "TensorlakeOCRProvider",
    "MistralOCRProvider",
    "ClaudeOCRProvider",
    "TextractOCRProvider",
    "get_provider",
    "list_providers",
]
