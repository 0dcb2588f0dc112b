"""Decode the model's text answer into a ManifestFields record.

Models occasionally wrap the JSON in prose or markdown fences despite the
prompt, so a direct parse is followed by a scan for the first balanced
``{...}`` block.
"""
from __future__ import annotations

import json
from typing import Any, Dict, Optional

from ..exceptions import DecodeError
from ..models import ManifestFields

PREVIEW_CHARS = 120


def extract_json_object(text: str) -> Optional[str]:
    """Return the first brace-balanced ``{...}`` substring, or None.

    Braces inside JSON string literals (including escaped quotes) are ignored.
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return text[start : i + 1]
        # Unbalanced from this brace; try the next opening brace
        start = text.find("{", start + 1)
    return None


def _parse_object(text: str) -> Optional[Dict[str, Any]]:
    try:
        value = json.loads(text)
    except ValueError:
        return None
    return value if isinstance(value, dict) else None


def decode_manifest(text: str) -> ManifestFields:
    raw = (text or "").strip()
    data = _parse_object(raw)
    if data is None:
        candidate = extract_json_object(raw)
        data = _parse_object(candidate) if candidate else None
    if data is None:
        preview = raw[:PREVIEW_CHARS].replace("\n", " ")
        raise DecodeError(f"Model output is not a JSON object: {preview!r}")
    return ManifestFields.model_validate(data)
