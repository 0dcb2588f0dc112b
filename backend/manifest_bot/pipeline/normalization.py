"""Canonicalize extracted manifest fields.

Every rule is permissive: values that do not match a known pattern are kept
(whitespace-normalized) for human review in the sheet instead of being dropped.
Normalizing an already normalized record returns the same record.
"""
from __future__ import annotations

import re
from typing import Dict, List, Tuple

from ..models import DATE_FIELDS, FIELD_ORDER, ManifestFields, NormalizedManifest

_WS_RE = re.compile(r"\s+")

_NO_ESPECIALES_RE = re.compile(r"\bno[\s\-_./]*esp", re.IGNORECASE)
_ESPECIALES_RE = re.compile(r"esp", re.IGNORECASE)

_NUMBER_RE = re.compile(r"[0-9]+(?:\.[0-9]+)?")

_DATE_RE = re.compile(r"([0-9]{1,2})[/.\-]([0-9]{1,2})[/.\-]([0-9]{4}|[0-9]{2})")

# First match wins; m3 must be checked before the single-letter liter/ton forms.
_UNIT_RULES: List[Tuple[re.Pattern[str], str]] = [
    (re.compile(r"\bm(?:ts?|etros?)?\.?\s*(?:3|³)|\bmetros?\s+c[uú]bicos?\b", re.IGNORECASE), "m3"),
    (re.compile(r"\bk(?:g|gs|ilo|ilos|ilogramos?)\b", re.IGNORECASE), "kg"),
    (re.compile(r"\b(?:t|tn|tns|ton|tons|toneladas?)\b", re.IGNORECASE), "tn"),
    (re.compile(r"\b(?:l|lt|lts|litros?)\b", re.IGNORECASE), "L"),
]


def collapse_ws(value: str) -> str:
    return _WS_RE.sub(" ", value or "").strip()


def normalize_tipo_residuo(value: str) -> str:
    value = collapse_ws(value)
    if _NO_ESPECIALES_RE.search(value):
        return "No Especiales"
    if _ESPECIALES_RE.search(value):
        return "Especiales"
    return value


def normalize_cantidad(value: str) -> str:
    match = _NUMBER_RE.search(collapse_ws(value).replace(",", "."))
    return match.group(0) if match else ""


def normalize_unidad(value: str) -> str:
    value = collapse_ws(value)
    for pattern, canonical in _UNIT_RULES:
        if pattern.search(value):
            return canonical
    return value


def normalize_fecha(value: str) -> str:
    """``D/M/Y`` style dates become ``YYYY-MM-DD``; anything else is kept verbatim."""
    value = collapse_ws(value)
    match = _DATE_RE.fullmatch(value)
    if not match:
        return value
    day, month, year = match.groups()
    if len(year) == 2:
        year = "20" + year
    return f"{year}-{int(month):02d}-{int(day):02d}"


def normalize_manifest(fields: ManifestFields) -> NormalizedManifest:
    out: Dict[str, str] = {name: collapse_ws(getattr(fields, name)) for name in FIELD_ORDER}
    for name in DATE_FIELDS:
        out[name] = normalize_fecha(out[name])
    out["tipo_residuo"] = normalize_tipo_residuo(out["tipo_residuo"])
    out["cantidad"] = normalize_cantidad(out["cantidad"])
    out["unidad"] = normalize_unidad(out["unidad"])
    return NormalizedManifest(**out)
