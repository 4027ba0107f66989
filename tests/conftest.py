import io
import json
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
import pytest
from httpx import AsyncClient, ASGITransport
from PIL import Image

from photogenius.core.config import Settings
from photogenius.engines.capture.services import capture_image
from photogenius.engines.removal.providers import FalClient
from photogenius.main import create_app

RESULT_URL = "https://example/result.png"


class FakeFal:
    """Stands in for fal.run; records every request it receives."""

    def __init__(self):
        self.requests = []
        self.status_code = 200
        self.body = {"image": {"url": RESULT_URL, "width": 10, "height": 10}}
        self.error = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, json=self.body)

    @property
    def payloads(self):
        return [json.loads(r.content) for r in self.requests]

    def client(self) -> FalClient:
        return FalClient(base_url="https://fal.test", transport=httpx.MockTransport(self.handler))


def make_settings(**overrides) -> Settings:
    values = {"FAL_KEY": "test-key", "LOG_FORMAT_JSON": False, "LOG_LEVEL": "WARNING"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


@asynccontextmanager
async def app_client(app) -> AsyncGenerator[AsyncClient, None]:
    # Trigger lifespan events (startup/shutdown)
    async with app.router.lifespan_context(app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac


@pytest.fixture
def fake_fal() -> FakeFal:
    return FakeFal()


@pytest.fixture
async def client(fake_fal) -> AsyncGenerator[AsyncClient, None]:
    app = create_app(make_settings(), provider=fake_fal.client())
    async with app_client(app) as ac:
        yield ac


@pytest.fixture
async def unconfigured_client(fake_fal) -> AsyncGenerator[AsyncClient, None]:
    app = create_app(make_settings(FAL_KEY=None), provider=fake_fal.client())
    async with app_client(app) as ac:
        yield ac


@pytest.fixture
def png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (10, 10), (200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def image_data_url(png_bytes) -> str:
    return capture_image(png_bytes)


@pytest.fixture
def result_url() -> str:
    return RESULT_URL


@pytest.fixture
def app_factory(fake_fal):
    def factory(**overrides):
        return create_app(make_settings(**overrides), provider=fake_fal.client())
    return factory
