"""Shared pytest fixtures for manifest bot tests."""

from __future__ import annotations

import io
import json
from collections.abc import Callable
from typing import Any

import pytest
from PIL import Image, ImageDraw

from manifest_bot.config import PipelineConfig, SheetConfig


def make_image_bytes(
    width: int = 400,
    height: int = 300,
    *,
    fmt: str = "JPEG",
    mode: str = "RGB",
    orientation: int | None = None,
) -> bytes:
    """Render a small fake document: white page with dark text-like bars."""
    image = Image.new(mode, (width, height), "white")
    draw = ImageDraw.Draw(image)
    for y in range(20, height - 20, 30):
        draw.rectangle([20, y, width - 40, y + 8], fill="black")
    buf = io.BytesIO()
    if orientation is not None:
        exif = Image.Exif()
        exif[0x0112] = orientation
        image.save(buf, format=fmt, exif=exif)
    else:
        image.save(buf, format=fmt)
    return buf.getvalue()


def chat_completion(content: str) -> dict[str, Any]:
    return {
        "id": "chatcmpl-test",
        "model": "gpt-4o-mini",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}],
        "usage": {"prompt_tokens": 900, "completion_tokens": 120},
    }


RAW_MANIFEST: dict[str, str] = {
    "fecha_programacion": "3/9/2025",
    "fecha_transporte": "05-09-25",
    "generador": "  Metalúrgica   del Sur S.A. ",
    "domicilio_generador": "Ruta 9 km 45,\nCampana",
    "operador": "Tratamientos Ambientales SRL",
    "domicilio_operador": "Av. Industrial 1200",
    "estado": "Sólido",
    "tipo_transporte": "Camión caja volcadora",
    "cantidad": "aprox 1.250,5",
    "unidad": "Kilogramos",
    "manifiesto_n": "M-004512",
    "tipo_residuo": "residuos ESPECIALES",
    "composicion": "Barros con hidrocarburos",
    "categoria_desecho": "Y9",
}


@pytest.fixture
def pipeline_config() -> PipelineConfig:
    return PipelineConfig(
        twilio_sid="AC123",
        twilio_auth_token="secret-token",
        enhance_target_width=800,
        openai_api_key="sk-test",
        openai_model="gpt-4o-mini",
        llm_max_attempts=4,
        llm_retry_base_seconds=0.5,
        llm_retry_max_seconds=8.0,
    )


@pytest.fixture
def sheet_config() -> SheetConfig:
    return SheetConfig(sheet_id="sheet-123", sheet_range="Manifiestos!A:N")


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def fake_sleep(sleeps: list[float]) -> Callable[[float], Any]:
    async def _sleep(seconds: float) -> None:
        sleeps.append(seconds)

    return _sleep


@pytest.fixture
def raw_manifest_json() -> str:
    return json.dumps(RAW_MANIFEST, ensure_ascii=False)


class FakeSheetsApi:
    """Stands in for the googleapiclient resource chain spreadsheets().values().append()."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []

    def spreadsheets(self) -> "FakeSheetsApi":
        return self

    def values(self) -> "FakeSheetsApi":
        return self

    def append(self, **kwargs: Any) -> "FakeSheetsApi":
        self.calls.append(kwargs)
        return self

    def execute(self) -> dict[str, Any]:
        return {"updates": {"updatedRange": f"Manifiestos!A{len(self.calls) + 1}:N{len(self.calls) + 1}"}}

    @property
    def rows(self) -> list[list[str]]:
        return [row for call in self.calls for row in call["body"]["values"]]


@pytest.fixture
def fake_sheets_api() -> FakeSheetsApi:
    return FakeSheetsApi()


@pytest.fixture
def make_image() -> Callable[..., bytes]:
    return make_image_bytes


@pytest.fixture
def completion() -> Callable[[str], dict[str, Any]]:
    return chat_completion
