import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .page_output import CanonicalPage


class AttemptRecord(BaseModel):
    """One failed provider attempt, kept in attempt order."""
    provider: str = Field(..., description="Provider that failed")
    reason: str = Field(..., description="Error message from the failed attempt")
    error_type: str = Field(default="Exception", description="Exception class name")
    timestamp: str = Field(..., description="ISO-8601 time of the failure")


@dataclass
class ResultEnvelope:
    provider: str
    pages: Any  # List[CanonicalPage], or the raw response when normalized is False
    raw: Dict[str, Any]
    error_log: List[AttemptRecord] = field(default_factory=list)
    normalized: bool = True

    def failed_providers(self) -> List[str]:
        return [record.provider for record in self.error_log]

    def error_log_json(self) -> Optional[str]:
        """JSON object of provider -> {error, error_type, timestamp}; None if nothing failed."""
        if not self.error_log:
            return None
        payload = {
            record.provider: {
                "error": record.reason,
                "error_type": record.error_type,
                "timestamp": record.timestamp,
            }
            for record in self.error_log
        }
        return json.dumps(payload)

    def to_dict(self) -> Dict[str, Any]:
        if self.normalized:
            pages = [page.model_dump() for page in self.pages]
        else:
            pages = self.pages

        return {
            "provider": self.provider,
            "pages": pages,
            "raw": self.raw,
            "error_log": [record.model_dump() for record in self.error_log],
        }


__all__ = ["AttemptRecord", "ResultEnvelope", "CanonicalPage"]
