"""Pydantic models and value objects for the manifest pipeline."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

# Sink column order (A..N)
FIELD_ORDER: Tuple[str, ...] = (
    "fecha_programacion",
    "fecha_transporte",
    "generador",
    "domicilio_generador",
    "operador",
    "domicilio_operador",
    "estado",
    "tipo_transporte",
    "cantidad",
    "unidad",
    "manifiesto_n",
    "tipo_residuo",
    "composicion",
    "categoria_desecho",
)

DATE_FIELDS: Tuple[str, ...] = ("fecha_programacion", "fecha_transporte")


@dataclass(frozen=True)
class MediaReference:
    """Locator for one inbound image."""

    url: str
    content_type: str = ""
    requires_auth: bool = True


@dataclass(frozen=True)
class RawImage:
    data: bytes
    content_type: str


class ManifestFields(BaseModel):
    """The 14 fields extracted from one manifest. Missing values are ``""``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    fecha_programacion: str = ""
    fecha_transporte: str = ""
    generador: str = ""
    domicilio_generador: str = ""
    operador: str = ""
    domicilio_operador: str = ""
    estado: str = ""
    tipo_transporte: str = ""
    cantidad: str = ""
    unidad: str = ""
    manifiesto_n: str = ""
    tipo_residuo: str = ""
    composicion: str = ""
    categoria_desecho: str = ""

    @field_validator(*FIELD_ORDER, mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> str:
        # Models answer null, numbers or booleans even when asked for strings
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return value if isinstance(value, str) else str(value)

    def to_row(self) -> List[str]:
        return [getattr(self, name) for name in FIELD_ORDER]

    def as_dict(self) -> Dict[str, str]:
        return {name: getattr(self, name) for name in FIELD_ORDER}


class NormalizedManifest(ManifestFields):
    """A manifest after canonicalization (see pipeline.normalization)."""
