"""
Configuration schemas for ohseer.

Defines the structure of the config file (~/.ohseer/config.yaml by default).
API keys are stored as ${ENV_VAR} references and expanded on demand, so the
OCR core only ever sees explicit values handed to it from here.
"""

from typing import Dict, List, Optional, Any
from pydantic import BaseModel, Field
import os
import re


class ProviderConfig(BaseModel):
    """Configuration for one OCR provider."""
    type: str = Field(..., description="Provider type: tensorlake, mistral-ocr, claude, textract")
    model: Optional[str] = Field(None, description="Model identifier (mistral, claude)")
    api_key_refs: List[str] = Field(
        default_factory=list,
        description="api_keys entries this provider needs; all must resolve to non-empty values"
    )
    timeout: Optional[float] = Field(None, gt=0, description="Maximum seconds to wait for a result (default: defaults.timeout)")
    poll_interval: float = Field(2.0, gt=0, description="Seconds between job status polls")
    enabled: bool = Field(True, description="Whether this provider may be used")
    extra: Dict[str, Any] = Field(default_factory=dict, description="Provider-specific settings")


class DefaultsConfig(BaseModel):
    """Defaults used when a caller does not say otherwise."""
    providers: List[str] = Field(
        default=["tensorlake", "mistral", "claude"],
        description="Provider fallback order"
    )
    timeout: float = Field(default=60.0, gt=0, description="Default per-provider timeout")


class OhseerConfig(BaseModel):
    api_keys: Dict[str, str] = Field(
        default_factory=dict,
        description="API keys (can use ${ENV_VAR} syntax)"
    )
    providers: Dict[str, ProviderConfig] = Field(
        default_factory=dict,
        description="OCR provider definitions"
    )
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)

    def resolve_api_key(self, key_name: str) -> Optional[str]:
        """
        Resolve an API key, expanding ${ENV_VAR} references.

        Returns None if key not found or it resolves to an empty string.
        """
        if key_name not in self.api_keys:
            return None

        value = resolve_env_vars(self.api_keys[key_name]).strip()
        return value or None

    def get_provider(self, name: str) -> Optional[ProviderConfig]:
        return self.providers.get(name)

    def provider_timeout(self, name: str) -> float:
        provider = self.get_provider(name)
        if provider is not None and provider.timeout:
            return provider.timeout
        return self.defaults.timeout

    def has_credentials(self, name: str) -> bool:
        """True if the provider is configured, enabled and every key it needs resolves."""
        provider = self.get_provider(name)
        if provider is None or not provider.enabled:
            return False
        return all(self.resolve_api_key(ref) for ref in provider.api_key_refs)

    def credential_status(self) -> Dict[str, bool]:
        """Map of provider name -> credentials available, for the availability gate."""
        return {name: self.has_credentials(name) for name in self.providers}

    def key_hint(self, name: str) -> str:
        """Human-readable list of env vars behind a provider's keys (for error messages)."""
        provider = self.get_provider(name)
        if provider is None:
            return "not configured"
        hints = []
        for ref in provider.api_key_refs:
            raw = self.api_keys.get(ref, "")
            env_vars = re.findall(r'\$\{([^}]+)\}', raw)
            hints.extend(env_vars or [f"api_keys.{ref}"])
        return ", ".join(hints) if hints else "no keys required"

    @classmethod
    def with_defaults(cls) -> "OhseerConfig":
        """Create a config with the four built-in providers."""
        return cls(
            api_keys={
                "tensorlake": "${TENSORLAKE_API_KEY}",
                "mistral": "${MISTRAL_API_KEY}",
                "anthropic": "${ANTHROPIC_API_KEY}",
                "aws_access_key_id": "${AWS_ACCESS_KEY_ID}",
                "aws_secret_access_key": "${AWS_SECRET_ACCESS_KEY}",
            },
            providers={
                "tensorlake": ProviderConfig(
                    type="tensorlake",
                    api_key_refs=["tensorlake"],
                ),
                "mistral": ProviderConfig(
                    type="mistral-ocr",
                    model="mistral-ocr-latest",
                    api_key_refs=["mistral"],
                ),
                "claude": ProviderConfig(
                    type="claude",
                    model="claude-sonnet-4-5",
                    api_key_refs=["anthropic"],
                    timeout=300.0,
                ),
                "textract": ProviderConfig(
                    type="textract",
                    api_key_refs=["aws_access_key_id", "aws_secret_access_key"],
                    extra={"region": "${AWS_REGION}"},
                ),
            },
            defaults=DefaultsConfig(),
        )


def resolve_env_vars(value: str) -> str:
    """
    Resolve ${ENV_VAR} references in a string.

    Examples:
        "${MISTRAL_API_KEY}" -> actual value from environment
        "literal-value" -> "literal-value"
        "${MISSING_VAR}" -> "" (empty string if not set)
    """
    if not isinstance(value, str):
        return value

    # Pattern matches ${VAR_NAME}
    pattern = r'\$\{([^}]+)\}'

    def replace(match):
        var_name = match.group(1)
        return os.environ.get(var_name, "")

    return re.sub(pattern, replace, value)
