import json

import httpx
import pytest

from photogenius.core.exceptions import ExternalAPIError
from photogenius.engines.removal.providers import FalClient


def _client(handler):
    return FalClient(base_url="https://fal.test/", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_subscribe_posts_arguments_with_key():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"image": {"url": "https://example/result.png"}})

    result = await _client(handler).subscribe(
        "fal-ai/imageutils/rembg",
        {"image_url": "data:image/jpeg;base64,AA=="},
        key="secret"
    )

    assert result == {"image": {"url": "https://example/result.png"}}
    assert len(seen) == 1
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "https://fal.test/fal-ai/imageutils/rembg"
    assert request.headers["Authorization"] == "Key secret"
    assert json.loads(request.content) == {"image_url": "data:image/jpeg;base64,AA=="}


@pytest.mark.asyncio
async def test_error_status_raises():
    client = _client(lambda request: httpx.Response(401, json={"detail": "bad key"}))

    with pytest.raises(ExternalAPIError) as exc_info:
        await client.subscribe("fal-ai/imageutils/rembg", {"image_url": "x"}, key="wrong")

    assert exc_info.value.details["http_status"] == 401
    assert exc_info.value.details["service"] == "fal"


@pytest.mark.asyncio
async def test_non_json_body_raises():
    client = _client(lambda request: httpx.Response(200, text="<html>oops</html>"))

    with pytest.raises(ExternalAPIError):
        await client.subscribe("fal-ai/imageutils/rembg", {"image_url": "x"}, key="secret")


@pytest.mark.asyncio
async def test_transport_error_raises():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ExternalAPIError):
        await _client(handler).subscribe("fal-ai/imageutils/rembg", {"image_url": "x"}, key="secret")
