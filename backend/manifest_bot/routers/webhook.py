"""WhatsApp webhook (Twilio): thin HTTP layer around the manifest pipeline.

Twilio posts x-www-form-urlencoded bodies and expects TwiML back. The reply is
always HTTP 200 so Twilio does not retry and duplicate rows in the sheet.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Form, Response

from ..deps import get_pipeline, get_sheets
from ..models import MediaReference
from ..services.orchestration.manifest_pipeline import (
    NO_MEDIA_MESSAGE,
    ManifestPipeline,
    confirmation_message,
    describe_failure,
)
from ..services.sheets import SheetsService
from ..utils.twiml import twiml_message

router = APIRouter(tags=["webhook"])
logger = logging.getLogger(__name__)


def _parse_count(raw: str) -> int:
    try:
        return int(raw.strip() or "0")
    except ValueError:
        return 0


@router.post("/whatsapp-webhook")
async def whatsapp_webhook(
    sender: str = Form(default="", alias="From"),
    num_media: str = Form(default="0", alias="NumMedia"),
    media_url: str = Form(default="", alias="MediaUrl0"),
    media_content_type: str = Form(default="", alias="MediaContentType0"),
    pipeline: ManifestPipeline = Depends(get_pipeline),
    sheets: SheetsService = Depends(get_sheets),
) -> Response:
    logger.info("Inbound message from %s (NumMedia=%s)", sender or "unknown", num_media)

    if _parse_count(num_media) < 1 or not media_url:
        return twiml_message(NO_MEDIA_MESSAGE)

    logger.info("Processing media %s (%s)", media_url, media_content_type or "no content type")
    try:
        record = await pipeline.extract(MediaReference(url=media_url, content_type=media_content_type))
        await sheets.append_row_async(record.to_row())
    except Exception as exc:  # noqa: BLE001 every failure becomes a chat reply
        logger.exception("Manifest processing failed for %s", sender or "unknown")
        return twiml_message(describe_failure(exc, pipeline.config.error_detail_max_chars))

    return twiml_message(confirmation_message(record))
