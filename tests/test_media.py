"""Tests for media acquisition from the messaging provider."""

import base64

import httpx
import pytest

from manifest_bot.config import PipelineConfig
from manifest_bot.exceptions import AcquisitionError, TransportError
from manifest_bot.models import MediaReference
from manifest_bot.services.media import MediaFetcher

MEDIA_URL = "https://api.twilio.com/2010-04-01/Accounts/AC123/Messages/MM1/Media/ME1"


async def test_fetch_uses_basic_auth_and_follows_redirect(pipeline_config) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.host == "api.twilio.com":
            return httpx.Response(307, headers={"location": "https://media.twiliocdn.com/abc.jpg"})
        return httpx.Response(200, content=b"\xff\xd8jpeg", headers={"content-type": "image/jpeg"})

    fetcher = MediaFetcher(pipeline_config, transport=httpx.MockTransport(handler))
    raw = await fetcher.fetch(MediaReference(url=MEDIA_URL))

    assert raw.data == b"\xff\xd8jpeg"
    assert raw.content_type == "image/jpeg"
    expected = "Basic " + base64.b64encode(b"AC123:secret-token").decode()
    assert seen[0].headers["authorization"] == expected
    assert len(seen) == 2


async def test_missing_credentials_when_required() -> None:
    fetcher = MediaFetcher(PipelineConfig(), transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    with pytest.raises(AcquisitionError):
        await fetcher.fetch(MediaReference(url=MEDIA_URL))


async def test_public_media_without_credentials() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert "authorization" not in request.headers
        return httpx.Response(200, content=b"png-bytes")

    fetcher = MediaFetcher(PipelineConfig(), transport=httpx.MockTransport(handler))
    raw = await fetcher.fetch(MediaReference(url="https://example.com/a.png", content_type="image/png", requires_auth=False))
    assert raw.content_type == "image/png"


@pytest.mark.parametrize("status", [401, 404, 500])
async def test_non_success_status(pipeline_config, status: int) -> None:
    fetcher = MediaFetcher(pipeline_config, transport=httpx.MockTransport(lambda r: httpx.Response(status)))
    with pytest.raises(TransportError) as exc_info:
        await fetcher.fetch(MediaReference(url=MEDIA_URL))
    assert exc_info.value.status == status
    assert exc_info.value.url == MEDIA_URL


async def test_connection_failure_is_not_retried(pipeline_config) -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        raise httpx.ConnectError("connection refused", request=request)

    fetcher = MediaFetcher(pipeline_config, transport=httpx.MockTransport(handler))
    with pytest.raises(TransportError) as exc_info:
        await fetcher.fetch(MediaReference(url=MEDIA_URL))
    assert exc_info.value.status is None
    assert calls == 1


async def test_empty_body(pipeline_config) -> None:
    fetcher = MediaFetcher(pipeline_config, transport=httpx.MockTransport(lambda r: httpx.Response(200, content=b"")))
    with pytest.raises(AcquisitionError):
        await fetcher.fetch(MediaReference(url=MEDIA_URL))


async def test_content_type_falls_back_to_hint(pipeline_config) -> None:
    fetcher = MediaFetcher(pipeline_config, transport=httpx.MockTransport(lambda r: httpx.Response(200, content=b"x")))
    raw = await fetcher.fetch(MediaReference(url=MEDIA_URL, content_type="image/webp"))
    assert raw.content_type == "image/webp"
