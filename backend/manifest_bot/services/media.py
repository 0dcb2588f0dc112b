"""Media acquisition: download the inbound photo from the messaging provider.

Twilio media URLs require HTTP basic auth (account SID + auth token) and
redirect to a short-lived CDN location. Acquisition is never retried here; a
failed download aborts the pipeline run.
"""
from __future__ import annotations

import logging
from typing import Optional

import httpx

from ..config import PipelineConfig
from ..exceptions import AcquisitionError, TransportError
from ..models import MediaReference, RawImage

logger = logging.getLogger(__name__)


class MediaFetcher:
    def __init__(
        self,
        config: PipelineConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._transport = transport

    def _auth(self) -> Optional[httpx.BasicAuth]:
        if self._config.twilio_sid and self._config.twilio_auth_token:
            return httpx.BasicAuth(self._config.twilio_sid, self._config.twilio_auth_token)
        return None

    async def fetch(self, media: MediaReference) -> RawImage:
        auth = self._auth()
        if media.requires_auth and auth is None:
            raise AcquisitionError("Media source requires credentials (TWILIO_SID / TWILIO_AUTH_TOKEN)")

        t = httpx.Timeout(self._config.media_timeout_seconds, connect=5.0)
        try:
            async with httpx.AsyncClient(timeout=t, follow_redirects=True, transport=self._transport) as client:
                resp = await client.get(media.url, auth=auth if media.requires_auth else None)
        except httpx.RequestError as exc:
            raise TransportError(f"Media download failed: {exc}", url=media.url) from exc

        if not resp.is_success:
            raise TransportError(
                f"Media download returned HTTP {resp.status_code}",
                status=resp.status_code,
                url=media.url,
            )
        if not resp.content:
            raise AcquisitionError("Media download returned an empty body")

        content_type = (
            resp.headers.get("content-type", "").split(";")[0].strip()
            or media.content_type
            or "application/octet-stream"
        )
        logger.info("Fetched media: %d bytes (%s)", len(resp.content), content_type)
        return RawImage(data=resp.content, content_type=content_type)
