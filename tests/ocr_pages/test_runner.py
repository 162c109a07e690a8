"""
Tests for run_ocr - config, credential gate and orchestrator wired together.
"""

import pytest
from unittest.mock import MagicMock

from infra.config import OhseerConfig
from infra.ocr import ConfigurationError, AllProvidersFailedError, TransportError
from pipeline.ocr_pages import runner
from pipeline.ocr_pages.runner import run_ocr, validate_providers
from pipeline.ocr_pages.schemas import CanonicalPage, ResultEnvelope


ENV_VARS = ("TENSORLAKE_API_KEY", "MISTRAL_API_KEY", "ANTHROPIC_API_KEY",
            "AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY", "AWS_REGION")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def pdf_file(tmp_path):
    path = tmp_path / "paper.pdf"
    path.write_bytes(b"%PDF-1.4 test")
    return path


@pytest.fixture
def fake_providers(monkeypatch):
    """Patch get_provider; each name maps to a mock that succeeds unless told otherwise."""
    created = {}
    failures = {}

    def fake_get_provider(name, config=None, **kwargs):
        provider = MagicMock()
        provider.name = name
        provider.kwargs = kwargs
        if name in failures:
            provider.submit.side_effect = failures[name]
        else:
            provider.submit.return_value = {"pages": [{"page_number": 1}]}
        provider.normalize.return_value = [CanonicalPage(page_number=1, text=f"from {name}")]
        created[name] = provider
        return provider

    monkeypatch.setattr(runner, "get_provider", fake_get_provider)
    return created, failures


class TestInputs:
    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="File not found"):
            run_ocr(tmp_path / "missing.pdf", config=OhseerConfig.with_defaults())

    def test_unknown_provider(self, pdf_file):
        with pytest.raises(ValueError, match="Unknown OCR provider"):
            run_ocr(pdf_file, providers=["abbyy"], config=OhseerConfig.with_defaults())

    def test_validate_providers_accepts_config_names(self):
        config = OhseerConfig.with_defaults()

        validate_providers(["textract", "claude"], config)

    def test_no_credentials(self, pdf_file):
        with pytest.raises(ConfigurationError) as exc_info:
            run_ocr(pdf_file, providers=["tensorlake", "mistral"], config=OhseerConfig.with_defaults())

        message = str(exc_info.value)
        assert "No OCR providers available" in message
        assert "tensorlake: missing credentials (set TENSORLAKE_API_KEY)" in message
        assert "mistral: missing credentials (set MISTRAL_API_KEY)" in message


class TestRun:
    def test_uses_default_order_and_skips_uncredentialed(self, pdf_file, monkeypatch, fake_providers):
        created, _ = fake_providers
        monkeypatch.setenv("MISTRAL_API_KEY", "m-key")

        result = run_ocr(pdf_file, config=OhseerConfig.with_defaults())

        assert result.provider == "mistral"
        assert list(created) == ["mistral"]
        assert result.error_log == []
        assert result.pages[0].text == "from mistral"

    def test_fallback_through_runner(self, pdf_file, monkeypatch, fake_providers):
        created, failures = fake_providers
        monkeypatch.setenv("TENSORLAKE_API_KEY", "tl-key")
        monkeypatch.setenv("ANTHROPIC_API_KEY", "a-key")
        failures["tensorlake"] = TransportError("HTTP 503")

        result = run_ocr(pdf_file, providers=["tensorlake", "claude"], config=OhseerConfig.with_defaults())

        assert result.provider == "claude"
        assert result.failed_providers() == ["tensorlake"]

    def test_all_failed(self, pdf_file, monkeypatch, fake_providers):
        _, failures = fake_providers
        monkeypatch.setenv("TENSORLAKE_API_KEY", "tl-key")
        failures["tensorlake"] = TransportError("HTTP 503")

        with pytest.raises(AllProvidersFailedError) as exc_info:
            run_ocr(pdf_file, providers=["tensorlake"], config=OhseerConfig.with_defaults())

        assert exc_info.value.attempted == ["tensorlake"]

    def test_exclude_types_passed_to_providers(self, pdf_file, monkeypatch, fake_providers):
        created, _ = fake_providers
        monkeypatch.setenv("MISTRAL_API_KEY", "m-key")

        run_ocr(pdf_file, providers=["mistral"], exclude_types=["figure"], config=OhseerConfig.with_defaults())

        assert created["mistral"].kwargs == {"exclude_types": {"figure"}}

    def test_include_types_relative_to_each_provider(self, pdf_file, monkeypatch):
        monkeypatch.setenv("TENSORLAKE_API_KEY", "tl-key")
        monkeypatch.setenv("ANTHROPIC_API_KEY", "a-key")
        built = {}

        class BuildAll:
            def __init__(self, factory, pipeline_logger=None):
                self.factory = factory

            def run(self, document, providers, **kwargs):
                for name in providers:
                    built[name] = self.factory(name)
                return ResultEnvelope(provider=providers[0], pages=[], raw={})

        monkeypatch.setattr(runner, "FallbackOrchestrator", BuildAll)

        run_ocr(pdf_file, providers=["tensorlake", "claude"], include_types=["page_number"],
                config=OhseerConfig.with_defaults())

        assert built["tensorlake"].exclude_types == {"page_footer"}
        # Claude keeps every fragment type by default; the override must not add any
        assert built["claude"].exclude_types == set()

    def test_url_document_skips_file_check(self, monkeypatch, fake_providers):
        monkeypatch.setenv("MISTRAL_API_KEY", "m-key")

        result = run_ocr("https://example.org/paper.pdf", providers=["mistral"], config=OhseerConfig.with_defaults())

        assert result.provider == "mistral"

    def test_loads_config_when_not_given(self, pdf_file, monkeypatch, tmp_path, fake_providers):
        monkeypatch.setenv("OHSEER_CONFIG", str(tmp_path / "absent.yaml"))
        monkeypatch.setenv("ANTHROPIC_API_KEY", "a-key")

        result = run_ocr(pdf_file)

        assert result.provider == "claude"
