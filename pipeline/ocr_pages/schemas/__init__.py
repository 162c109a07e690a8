from .page_output import CanonicalPage, CanonicalTable, CanonicalFragment, as_text
from .envelope import AttemptRecord, ResultEnvelope

__all__ = [
    "CanonicalPage",
    "CanonicalTable",
    "CanonicalFragment",
    "as_text",
    "AttemptRecord",
    "ResultEnvelope",
]
