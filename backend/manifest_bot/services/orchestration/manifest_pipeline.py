from __future__ import annotations

import asyncio
import logging
from typing import Optional

from ...config import PipelineConfig
from ...exceptions import ModelRateLimitedError
from ...models import MediaReference, NormalizedManifest, RawImage
from ...pipeline.decoding import decode_manifest
from ...pipeline.normalization import normalize_manifest
from ..enhancer import ImageEnhancer
from ..llm import LLMService
from ..media import MediaFetcher

logger = logging.getLogger(__name__)

NO_MEDIA_MESSAGE = 'No recibí ninguna foto 📷. Mandala como *foto normal* (no "ver una vez").'
RATE_LIMITED_MESSAGE = "⏳ El servicio de lectura está saturado. Probá reenviar la foto en unos minutos."
GENERIC_ERROR_PREFIX = "❌ Error procesando el manifiesto"


class ManifestPipeline:
    """Owns one manifest extraction: fetch -> enhance -> model -> decode -> normalize.

    Stages fail fast; only the model call retries (inside LLMService).
    """

    def __init__(
        self,
        config: PipelineConfig,
        *,
        fetcher: Optional[MediaFetcher] = None,
        enhancer: Optional[ImageEnhancer] = None,
        llm: Optional[LLMService] = None,
    ) -> None:
        self.config = config
        self.fetcher = fetcher or MediaFetcher(config)
        self.enhancer = enhancer or ImageEnhancer(config)
        self.llm = llm or LLMService(config)

    async def extract(self, media: MediaReference) -> NormalizedManifest:
        raw = await self.fetcher.fetch(media)
        return await self.extract_from_image(raw)

    async def extract_from_image(self, raw: RawImage) -> NormalizedManifest:
        # Pillow work on a full-size photo is CPU bound; keep it off the event loop
        enhanced = await asyncio.to_thread(self.enhancer.enhance, raw)
        text = await self.llm.invoke_async(enhanced)
        fields = decode_manifest(text)
        record = normalize_manifest(fields)
        logger.info(
            "Manifest extracted: n=%s cantidad=%s unidad=%s tipo=%s",
            record.manifiesto_n or "-",
            record.cantidad or "-",
            record.unidad or "-",
            record.tipo_residuo or "-",
        )
        return record


def describe_failure(exc: BaseException, max_chars: int = 200) -> str:
    """Map a pipeline failure to the message sent back to the driver."""
    if isinstance(exc, ModelRateLimitedError):
        return RATE_LIMITED_MESSAGE
    detail = " ".join(str(exc).split()) or type(exc).__name__
    if len(detail) > max_chars:
        detail = detail[: max(0, max_chars - 1)] + "…"
    return f"{GENERIC_ERROR_PREFIX}: {detail}"


def confirmation_message(record: NormalizedManifest) -> str:
    numero = record.manifiesto_n or "s/n"
    cantidad = " ".join(p for p in (record.cantidad, record.unidad) if p) or "sin cantidad"
    return f"✅ Manifiesto {numero} registrado ({cantidad})."
