"""
OCR Provider Registry.

Maps provider names and provider types to OCRProvider classes.
Providers can be:
1. Built-in (tensorlake, mistral, claude, textract) - auto-registered on import
2. Config-defined - any name whose config entry has a registered type

Usage:
    from pipeline.ocr_pages.provider.registry import get_provider, list_providers

    # Get a built-in provider with explicit credentials
    provider = get_provider("mistral", api_key="...")

    # Get a provider with credentials, model and limits from config
    provider = get_provider("claude", config=ohseer_config)
"""

from typing import Dict, Type, Optional, TYPE_CHECKING

from infra.config.schemas import resolve_env_vars

if TYPE_CHECKING:
    from infra.ocr import OCRProvider
    from infra.config import OhseerConfig, ProviderConfig


# Registry of provider classes by name
_PROVIDER_REGISTRY: Dict[str, Type["OCRProvider"]] = {}

# Registry of provider type → class for config-defined providers
_PROVIDER_TYPE_REGISTRY: Dict[str, Type["OCRProvider"]] = {}


def register_provider(name: str, provider_class: Type["OCRProvider"]) -> None:
    """Register a built-in provider class.

    Args:
        name: Provider name (e.g., "tensorlake", "mistral")
        provider_class: OCRProvider subclass
    """
    _PROVIDER_REGISTRY[name] = provider_class


def register_provider_type(provider_type: str, provider_class: Type["OCRProvider"]) -> None:
    """Register a provider type for config-based instantiation.

    Args:
        provider_type: Provider type (e.g., "mistral-ocr", "claude")
        provider_class: OCRProvider subclass that handles this type
    """
    _PROVIDER_TYPE_REGISTRY[provider_type] = provider_class


def get_provider(
    name: str,
    config: Optional["OhseerConfig"] = None,
    **kwargs
) -> "OCRProvider":
    """Instantiate a provider by name.

    Looks up provider in this order:
    1. Config-defined providers (if config provided), by their type
    2. Built-in registry, with only the given kwargs

    Args:
        name: Provider name
        config: Optional OhseerConfig supplying credentials, model and limits
        **kwargs: Additional kwargs passed to provider constructor (win over config)

    Returns:
        Instantiated OCRProvider

    Raises:
        ValueError: If provider not found
    """
    if config is not None:
        provider_config = config.get_provider(name)
        if provider_config is not None:
            return _create_from_config(name, provider_config, config, **kwargs)

    if name in _PROVIDER_REGISTRY:
        provider_class = _PROVIDER_REGISTRY[name]
        return provider_class(**kwargs)

    available = list_providers(config)
    raise ValueError(
        f"Unknown OCR provider: '{name}'. "
        f"Available: {', '.join(available)}"
    )


def _create_from_config(
    name: str,
    provider_config: "ProviderConfig",
    config: "OhseerConfig",
    **kwargs
) -> "OCRProvider":
    """Create a provider from its config definition.

    The first api_key_ref becomes api_key and the second (if any) secret_key.
    Extra settings have ${ENV_VAR} references expanded; empty values are dropped.
    """
    provider_type = provider_config.type

    if provider_type not in _PROVIDER_TYPE_REGISTRY:
        raise ValueError(
            f"Unknown provider type: '{provider_type}'. "
            f"Available types: {', '.join(_PROVIDER_TYPE_REGISTRY.keys())}"
        )

    provider_class = _PROVIDER_TYPE_REGISTRY[provider_type]

    init_kwargs = {}
    for key, value in provider_config.extra.items():
        value = resolve_env_vars(value)
        if value not in (None, ""):
            init_kwargs[key] = value

    if provider_config.model:
        init_kwargs["model"] = provider_config.model

    init_kwargs["timeout"] = provider_config.timeout or config.defaults.timeout
    init_kwargs["poll_interval"] = provider_config.poll_interval

    keys = [config.resolve_api_key(ref) for ref in provider_config.api_key_refs]
    for kwarg, value in zip(("api_key", "secret_key"), keys):
        if value:
            init_kwargs[kwarg] = value

    init_kwargs.update(kwargs)
    return provider_class(**init_kwargs)


def list_providers(config: Optional["OhseerConfig"] = None) -> list:
    """List all available providers.

    Args:
        config: Optional OhseerConfig to include config-defined providers

    Returns:
        List of provider names
    """
    providers = list(_PROVIDER_REGISTRY.keys())

    if config is not None:
        # Add config-defined providers that aren't built-in
        for name, provider_config in config.providers.items():
            if name not in providers and provider_config.type in _PROVIDER_TYPE_REGISTRY:
                providers.append(name)

    return sorted(providers)


def list_provider_types() -> list:
    """List registered provider types for config-based instantiation."""
    return sorted(_PROVIDER_TYPE_REGISTRY.keys())


def is_registered(name: str) -> bool:
    """Check if a provider name is registered as built-in."""
    return name in _PROVIDER_REGISTRY


def is_type_registered(provider_type: str) -> bool:
    """Check if a provider type is registered."""
    return provider_type in _PROVIDER_TYPE_REGISTRY
