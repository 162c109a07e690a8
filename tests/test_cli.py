"""
Tests for the ohseer command line.
"""

import json

import pytest
import yaml
from unittest.mock import patch

import cli
import cli.ocr
from cli.ocr import parse_pages
from cli.config.set import parse_value
from cli.config.show import _mask_key
from infra.ocr import AllProvidersFailedError
from pipeline.ocr_pages.schemas import AttemptRecord, CanonicalPage, ResultEnvelope


@pytest.fixture
def config_file(tmp_path):
    return tmp_path / "config.yaml"


def run_cli(*argv):
    cli.main(list(argv))


class TestParsePages:
    def test_ranges_and_singles(self):
        assert parse_pages("1,3-5") == [1, 3, 4, 5]

    def test_duplicates_collapsed(self):
        assert parse_pages("2, 2,1-2") == [1, 2]

    def test_empty(self):
        assert parse_pages(None) is None
        assert parse_pages("") is None

    @pytest.mark.parametrize("value", ["5-3", "0", "a", "1-x"])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_pages(value)


class TestConfigCommands:
    def test_init_writes_defaults(self, config_file, capsys):
        run_cli("--config", str(config_file), "config", "init")

        data = yaml.safe_load(config_file.read_text())
        assert set(data["providers"]) == {"tensorlake", "mistral", "claude", "textract"}
        assert "Created config" in capsys.readouterr().out

    def test_init_refuses_overwrite(self, config_file, capsys):
        config_file.write_text("defaults:\n  providers: [claude]\n")

        run_cli("--config", str(config_file), "config", "init")

        assert "already exists" in capsys.readouterr().out
        assert yaml.safe_load(config_file.read_text())["defaults"]["providers"] == ["claude"]

    def test_set_nested_value(self, config_file):
        run_cli("--config", str(config_file), "config", "init")
        run_cli("--config", str(config_file), "config", "set", "providers.claude.timeout", "600")
        run_cli("--config", str(config_file), "config", "set", "defaults.providers", '["claude", "mistral"]')

        data = yaml.safe_load(config_file.read_text())
        assert data["providers"]["claude"]["timeout"] == 600
        assert data["defaults"]["providers"] == ["claude", "mistral"]

    def test_set_invalid_value(self, config_file, capsys):
        run_cli("--config", str(config_file), "config", "init")

        run_cli("--config", str(config_file), "config", "set", "defaults.timeout", "-5")

        assert "Invalid value" in capsys.readouterr().out

    def test_provider_add(self, config_file):
        run_cli("--config", str(config_file), "config", "init")
        run_cli("--config", str(config_file), "config", "provider", "add", "big-claude",
                "--type", "claude", "--model", "claude-opus-4-1", "--key", "anthropic")

        provider = yaml.safe_load(config_file.read_text())["providers"]["big-claude"]
        assert provider["type"] == "claude"
        assert provider["api_key_refs"] == ["anthropic"]

    def test_provider_add_unknown_type(self, config_file, capsys):
        run_cli("--config", str(config_file), "config", "init")

        run_cli("--config", str(config_file), "config", "provider", "add", "x", "--type", "abbyy")

        assert "Unknown provider type: abbyy" in capsys.readouterr().out

    def test_show_json_keeps_key_references(self, config_file, capsys, monkeypatch):
        monkeypatch.setenv("MISTRAL_API_KEY", "m-secret-key")
        run_cli("--config", str(config_file), "config", "init")
        capsys.readouterr()

        run_cli("--config", str(config_file), "config", "show", "--json")

        data = json.loads(capsys.readouterr().out)
        assert data["api_keys"]["mistral"] == "${MISTRAL_API_KEY}"

    def test_parse_value(self):
        assert parse_value("600") == 600
        assert parse_value("true") is True
        assert parse_value("${MY_KEY}") == "${MY_KEY}"
        assert parse_value("") == ""

    def test_mask_key(self):
        assert _mask_key(None) == "(not set)"
        assert _mask_key("short") == "****"
        assert _mask_key("abcd1234efgh") == "abcd...efgh"


class TestOcrCommand:
    def test_missing_file_exits_1(self, config_file, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            run_cli("--config", str(config_file), "ocr", str(tmp_path / "nope.pdf"))

        assert exc_info.value.code == 1
        assert "File not found" in capsys.readouterr().err

    def test_bad_pages_exits_2(self, config_file, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            run_cli("--config", str(config_file), "ocr", str(tmp_path / "a.pdf"), "--pages", "3-1")

        assert exc_info.value.code == 2

    def test_unknown_provider_exits_1(self, config_file, tmp_path, capsys):
        document = tmp_path / "paper.pdf"
        document.write_bytes(b"%PDF-1.4 test")

        with pytest.raises(SystemExit) as exc_info:
            run_cli("--config", str(config_file), "ocr", str(document), "-p", "abbyy")

        assert exc_info.value.code == 1
        assert "Unknown OCR provider" in capsys.readouterr().err

    def test_duplicate_provider_exits_1(self, config_file, tmp_path, capsys, monkeypatch):
        monkeypatch.setenv("MISTRAL_API_KEY", "m-key")
        document = tmp_path / "paper.pdf"
        document.write_bytes(b"%PDF-1.4 test")

        with pytest.raises(SystemExit) as exc_info:
            run_cli("--config", str(config_file), "ocr", str(document), "-p", "mistral", "-p", "mistral")

        assert exc_info.value.code == 1
        assert "Duplicate OCR providers: mistral" in capsys.readouterr().err

    def test_all_failed_exits_1(self, config_file, tmp_path, capsys):
        error = AllProvidersFailedError("paper.pdf", ["mistral"], [])

        with patch.object(cli.ocr, "run_ocr", side_effect=error):
            with pytest.raises(SystemExit) as exc_info:
                run_cli("--config", str(config_file), "ocr", str(tmp_path / "paper.pdf"))

        assert exc_info.value.code == 1
        assert "All OCR providers failed" in capsys.readouterr().err

    def test_writes_output_file(self, config_file, tmp_path):
        result = ResultEnvelope(
            provider="claude",
            pages=[CanonicalPage(page_number=1, text="Hello")],
            raw={"structured_output": {}},
            error_log=[AttemptRecord(provider="mistral", reason="HTTP 401", timestamp="t")],
        )
        output = tmp_path / "out.json"

        with patch.object(cli.ocr, "run_ocr", return_value=result) as run:
            run_cli("--config", str(config_file), "ocr", str(tmp_path / "paper.pdf"),
                    "-p", "mistral", "-p", "claude", "--pages", "1-2", "--timeout", "30",
                    "--include-types", "page_number", "-o", str(output))

        kwargs = run.call_args.kwargs
        assert kwargs["providers"] == ["mistral", "claude"]
        assert kwargs["pages"] == [1, 2]
        assert kwargs["extract_pages"] is True
        assert kwargs["include_types"] == ["page_number"]
        assert "exclude_types" not in kwargs
        assert kwargs["config"].provider_timeout("claude") == 30

        data = json.loads(output.read_text())
        assert data["provider"] == "claude"
        assert data["pages"][0]["text"] == "Hello"
        assert data["error_log"][0]["provider"] == "mistral"
        assert "raw" not in data
