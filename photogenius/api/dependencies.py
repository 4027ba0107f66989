"""
FastAPI Dependencies

The gateway is built once by the application factory and stored on
``app.state``; routes receive it through ``get_gateway``.
"""

from typing import Optional

from fastapi import Request

from photogenius.core.config import Settings
from photogenius.engines.removal.providers import FalClient
from photogenius.engines.removal.services import BackgroundRemovalGateway, RemovalProvider


def build_gateway(settings: Settings, provider: Optional[RemovalProvider] = None) -> BackgroundRemovalGateway:
    """Wire the gateway from settings read at startup."""
    if provider is None:
        provider = FalClient(
            base_url=settings.FAL_BASE_URL,
            timeout=settings.FAL_TIMEOUT_SECONDS,
        )
    return BackgroundRemovalGateway(
        credential=settings.FAL_KEY,
        provider=provider,
        model_id=settings.FAL_MODEL_ID,
    )


def get_gateway(request: Request) -> BackgroundRemovalGateway:
    return request.app.state.gateway
