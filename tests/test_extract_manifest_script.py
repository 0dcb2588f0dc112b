"""Tests for the local extraction script's failure reporting."""

from __future__ import annotations

import importlib.util
from pathlib import Path

import pytest

from manifest_bot.config import PipelineConfig, SheetConfig
from manifest_bot.exceptions import DecodeError, ExternalServiceError
from manifest_bot.models import NormalizedManifest

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "extract_manifest.py"


def _load_script():
    spec = importlib.util.spec_from_file_location("extract_manifest", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class StubSettings:
    SHEET_RANGE = "Hoja1!A:N"

    def __init__(self, config: PipelineConfig) -> None:
        self.config = config

    def pipeline_config(self) -> PipelineConfig:
        return self.config

    def sheet_config(self) -> SheetConfig:
        return SheetConfig(sheet_id="sheet-123")


class StubPipeline:
    def __init__(self, config: PipelineConfig, result: NormalizedManifest | Exception) -> None:
        self.config = config
        self.result = result

    async def extract_from_image(self, raw) -> NormalizedManifest:
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


class FailingSheets:
    def __init__(self, config: SheetConfig) -> None:
        self.config = config

    async def append_row_async(self, values):
        raise ExternalServiceError("Google Sheets error (HTTP 403): " + "y" * 300)


@pytest.fixture
def script(monkeypatch: pytest.MonkeyPatch):
    module = _load_script()
    monkeypatch.setattr(module, "SheetsService", FailingSheets)
    return module


def _install(monkeypatch, module, config: PipelineConfig, result) -> None:
    monkeypatch.setattr(module, "get_settings", lambda: StubSettings(config))
    monkeypatch.setattr(module, "ManifestPipeline", lambda cfg: StubPipeline(cfg, result))


@pytest.fixture
def photo(tmp_path: Path) -> Path:
    path = tmp_path / "manifiesto.jpg"
    path.write_bytes(b"\xff\xd8not-really-a-jpeg")
    return path


def test_sink_failure_is_reported_not_raised(script, monkeypatch, photo, capsys) -> None:
    _install(monkeypatch, script, PipelineConfig(), NormalizedManifest(manifiesto_n="M-1"))

    assert script.main([str(photo), "--append"]) == 1

    captured = capsys.readouterr()
    assert '"manifiesto_n": "M-1"' in captured.out
    assert "❌ Error procesando el manifiesto: Google Sheets error (HTTP 403)" in captured.err


def test_error_detail_length_follows_pipeline_config(script, monkeypatch, photo, capsys) -> None:
    _install(monkeypatch, script, PipelineConfig(error_detail_max_chars=40), DecodeError("z" * 100))

    assert script.main([str(photo)]) == 1

    err = capsys.readouterr().err
    assert "z" * 39 + "…" in err
    assert "z" * 40 not in err


def test_missing_image(script, tmp_path: Path, capsys) -> None:
    assert script.main([str(tmp_path / "nope.jpg")]) == 1
    assert "image not found" in capsys.readouterr().err
