"""
Credential gate in front of the fallback orchestrator.

Filters a requested provider list down to the providers whose credentials are
present, keeping the requested order. Providers without credentials are
skipped (with a warning), never attempted, and never appear in an error log.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Mapping, Optional, Sequence

from infra.ocr import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class ProviderAvailability:
    available: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


def check_availability(requested: Sequence[str], credentials: Mapping[str, bool]) -> ProviderAvailability:
    """Split requested providers into available and skipped, preserving order.

    A provider missing from the credentials mapping counts as not credentialed.
    """
    result = ProviderAvailability()
    for name in requested:
        if credentials.get(name, False):
            result.available.append(name)
        else:
            result.skipped.append(name)

    if result.skipped:
        logger.warning("Skipping providers without credentials: %s", ", ".join(result.skipped))

    return result


def require_available(
    requested: Sequence[str],
    credentials: Mapping[str, bool],
    key_hint: Optional[Callable[[str], str]] = None
) -> List[str]:
    """Return the available providers, or raise if none are left.

    Args:
        requested: Provider names in fallback order
        credentials: Provider name -> credentials present
        key_hint: Optional lookup naming the env vars a provider needs

    Raises:
        ConfigurationError: If no requested provider has credentials
    """
    availability = check_availability(requested, credentials)
    if availability.available:
        return availability.available

    lines = [f"No OCR providers available. Requested: {', '.join(requested) or '(none)'}"]
    for name in availability.skipped:
        hint = f" (set {key_hint(name)})" if key_hint else ""
        lines.append(f"  - {name}: missing credentials{hint}")
    raise ConfigurationError("\n".join(lines))
