"""LLM service: OpenAI vision chat completion returning the manifest JSON text.

Async implementation using httpx so the FastAPI event loop is not blocked
while waiting on the upstream API. Transient failures (429/503 and network
errors) are retried with exponential backoff through tenacity; every other
non-2xx response fails immediately.
"""
from __future__ import annotations

import base64
import logging
from typing import Any, Awaitable, Callable, Dict, Optional
import asyncio

import httpx

from ..config import PipelineConfig
from ..exceptions import ModelError, ModelRateLimitedError
from ..models import RawImage
from ..utils.retry import RetryPolicy, build_retrying

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = frozenset({429, 503})
BODY_PREVIEW_CHARS = 500


class _TransientModelError(ModelError):
    """Internal marker for a retryable attempt failure."""


def _is_retryable(exc: BaseException) -> bool:  # pragma: no cover - simple predicate
    return isinstance(exc, _TransientModelError)


# Default prompt (v1). Additional versions can be added to PROMPTS below.
MANIFEST_INSTRUCTIONS = (
    """### ROLE ###
Sos un motor de extracción de datos de alta precisión para manifiestos de
transporte de residuos (Argentina).

### CONTEXT ###
La imagen es la foto de un manifiesto, en parte impreso y en parte escrito a
mano. Puede estar inclinada, con sombras o con sellos encima del texto.

### OBJECTIVE ###
Extraé los campos del manifiesto y devolvé UN ÚNICO objeto JSON con EXACTAMENTE
estas 14 claves, todas con valores string:

{
  "fecha_programacion": "string",   // Fecha de programación
  "fecha_transporte": "string",     // Fecha de transporte / retiro
  "generador": "string",            // Razón social del generador
  "domicilio_generador": "string",
  "operador": "string",             // Razón social del operador / tratador
  "domicilio_operador": "string",
  "estado": "string",               // Estado físico (sólido, líquido, semisólido...)
  "tipo_transporte": "string",
  "cantidad": "string",             // Sólo el número
  "unidad": "string",               // kg | tn | m3 | L
  "manifiesto_n": "string",         // Número de manifiesto
  "tipo_residuo": "string",         // "Especiales" | "No Especiales"
  "composicion": "string",
  "categoria_desecho": "string"     // Código de categoría (ej. Y8, Y9...)
}

### RULES ###
- Fechas: preferí el formato YYYY-MM-DD. Si la fecha es ilegible, copiá lo que
  se lea.
- tipo_residuo: usá exactamente "Especiales" o "No Especiales".
- cantidad: número con punto decimal, sin unidad ni separador de miles.
- unidad: normalizá a kg, tn, m3 o L.
- Si un campo no existe o es ilegible, devolvé "" (string vacío). Nunca null.
- No inventes datos.

### OUTPUT ###
Respondé SOLAMENTE con el objeto JSON. Sin texto antes ni después y sin
bloques de código markdown (```json).
"""
)


# Registry of prompts by version label. Extendable without code churn elsewhere.
PROMPTS = {
    "v1": MANIFEST_INSTRUCTIONS,
}


def image_data_uri(image: RawImage) -> str:
    encoded = base64.b64encode(image.data).decode("ascii")
    return f"data:{image.content_type or 'image/jpeg'};base64,{encoded}"


class LLMService:
    def __init__(
        self,
        config: PipelineConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.config = config
        self.instructions = PROMPTS.get((config.prompt_version or "v1").strip(), MANIFEST_INSTRUCTIONS)
        self.policy = RetryPolicy(
            max_attempts=max(1, config.llm_max_attempts),
            base_delay=config.llm_retry_base_seconds,
            max_delay=config.llm_retry_max_seconds,
        )
        self._transport = transport
        self._sleep = sleep

    def _chat_url(self) -> str:
        return f"{self.config.openai_base_url.rstrip('/')}/chat/completions"

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.config.openai_api_key}",
            "Content-Type": "application/json",
        }
        if self.config.openai_org_id:
            headers["OpenAI-Organization"] = self.config.openai_org_id
        return headers

    def build_payload(self, image: RawImage) -> Dict[str, Any]:
        return {
            "model": self.config.openai_model,
            "temperature": 0,
            "max_tokens": self.config.max_output_tokens,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": self.instructions},
                        {
                            "type": "image_url",
                            "image_url": {"url": image_data_uri(image), "detail": "high"},
                        },
                    ],
                }
            ],
        }

    async def _post_once(self, client: httpx.AsyncClient, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Single attempt. Raises _TransientModelError for retryable outcomes."""
        try:
            resp = await client.post(self._chat_url(), headers=self._headers(), json=payload)
        except httpx.RequestError as exc:
            raise _TransientModelError(f"OpenAI request failed: {exc}") from exc

        if resp.status_code in RETRYABLE_STATUS:
            raise _TransientModelError(
                f"OpenAI transient HTTP {resp.status_code}",
                status=resp.status_code,
                body=resp.text[:BODY_PREVIEW_CHARS],
            )
        if not resp.is_success:
            raise ModelError(
                f"OpenAI HTTP {resp.status_code}: {resp.text[:BODY_PREVIEW_CHARS]}",
                status=resp.status_code,
                body=resp.text[:BODY_PREVIEW_CHARS],
            )
        try:
            return resp.json()
        except ValueError as exc:
            raise ModelError(
                "OpenAI returned a non-JSON envelope",
                status=resp.status_code,
                body=resp.text[:BODY_PREVIEW_CHARS],
            ) from exc

    async def invoke_async(self, image: RawImage) -> str:
        """Send the enhanced image and return the model's raw text answer."""
        if not self.config.openai_api_key:
            raise ModelError("Missing OPENAI_API_KEY")

        payload = self.build_payload(image)
        retrying = build_retrying(self.policy, _is_retryable, sleep=self._sleep)
        t = httpx.Timeout(self.config.llm_timeout_seconds, connect=5.0)
        async with httpx.AsyncClient(timeout=t, transport=self._transport) as client:
            try:
                data = await retrying(self._post_once, client, payload)
            except _TransientModelError as exc:
                logger.error("OpenAI still unavailable after %d attempts: %s", self.policy.max_attempts, exc)
                raise ModelRateLimitedError(
                    f"OpenAI unavailable after {self.policy.max_attempts} attempts: {exc}",
                    status=exc.status,
                    body=exc.body,
                ) from exc

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            logger.error("OpenAI unexpected response: %s", str(data)[:BODY_PREVIEW_CHARS])
            raise ModelError(f"OpenAI response missing message content: {exc}") from exc
        if not isinstance(content, str):
            raise ModelError("OpenAI response content is not text")

        usage = data.get("usage") or {}
        logger.info(
            "OpenAI extraction done (model=%s, prompt_tokens=%s, completion_tokens=%s)",
            data.get("model", self.config.openai_model),
            usage.get("prompt_tokens"),
            usage.get("completion_tokens"),
        )
        return content
