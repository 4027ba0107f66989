import httpx
from httpx import ASGITransport, AsyncClient
import pytest


@pytest.mark.asyncio
async def test_health_check(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_remove_background_relays_provider_result(client, fake_fal, image_data_url, result_url):
    fake_fal.body = {"image": {"url": result_url, "content_type": "image/png"}, "seed": 7}

    response = await client.post("/api/remove-background", json={"image": image_data_url})

    assert response.status_code == 200
    assert response.json() == {"image": {"url": result_url, "content_type": "image/png"}, "seed": 7}
    assert len(fake_fal.requests) == 1
    assert fake_fal.requests[0].url.path == "/fal-ai/imageutils/rembg"
    assert fake_fal.payloads[0] == {"image_url": image_data_url}


@pytest.mark.asyncio
async def test_empty_body_is_invalid_image_data(client, fake_fal):
    response = await client.post("/api/remove-background", json={})

    assert response.status_code == 422
    data = response.json()
    assert data["error"] == "Invalid image data"
    assert data["details"]
    assert fake_fal.requests == []


@pytest.mark.asyncio
@pytest.mark.parametrize("image", ["not-an-image", "", 42, None, ["data:image/png;base64,AAAA"]])
async def test_non_image_payload_rejected(client, fake_fal, image):
    response = await client.post("/api/remove-background", json={"image": image})

    assert response.status_code == 422
    assert response.json()["error"] == "Invalid image data"
    assert fake_fal.requests == []


@pytest.mark.asyncio
async def test_non_object_body_rejected(client, fake_fal):
    response = await client.post("/api/remove-background", json=["data:image/png;base64,AAAA"])

    assert response.status_code == 422
    assert fake_fal.requests == []


@pytest.mark.asyncio
async def test_missing_fal_key(unconfigured_client, fake_fal, image_data_url):
    response = await unconfigured_client.post("/api/remove-background", json={"image": image_data_url})

    assert response.status_code == 500
    assert response.json() == {"error": "FAL_KEY is not set"}
    assert fake_fal.requests == []


@pytest.mark.asyncio
async def test_missing_fal_key_wins_over_invalid_payload(unconfigured_client, fake_fal):
    response = await unconfigured_client.post("/api/remove-background", json={"image": "not-an-image"})

    assert response.status_code == 500
    assert response.json() == {"error": "FAL_KEY is not set"}
    assert fake_fal.requests == []


@pytest.mark.asyncio
async def test_provider_error_is_not_leaked(client, fake_fal, image_data_url):
    fake_fal.status_code = 503
    fake_fal.body = {"detail": "upstream exploded at node gpu-17"}

    response = await client.post("/api/remove-background", json={"image": image_data_url})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to remove background"}
    assert len(fake_fal.requests) == 1


@pytest.mark.asyncio
async def test_provider_network_failure(client, fake_fal, image_data_url):
    fake_fal.error = httpx.ConnectError("connection refused")

    response = await client.post("/api/remove-background", json={"image": image_data_url})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to remove background"}


@pytest.mark.asyncio
async def test_unparseable_body(client, fake_fal):
    response = await client.post(
        "/api/remove-background",
        content=b"{not json",
        headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to remove background"}
    assert fake_fal.requests == []


@pytest.mark.asyncio
async def test_metrics_endpoint(client):
    response = await client.get("/api/metrics")
    assert response.status_code == 200
    assert "photogenius_removal_requests" in response.text


@pytest.mark.asyncio
async def test_unhandled_error_returns_generic_body(app_factory):
    app = app_factory()

    @app.get("/api/explode")
    async def explode():
        raise RuntimeError("db password is hunter2")

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.get("/api/explode")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
    assert "hunter2" not in response.text
