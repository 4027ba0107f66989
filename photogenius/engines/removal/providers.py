"""
fal.ai Provider Client

Thin async wrapper around fal's synchronous run endpoint:

    POST {base_url}/{application}
    Authorization: Key <credential>
    {"image_url": "data:image/jpeg;base64,..."}

One call per invocation. No retries and, unless configured, no local timeout.
"""

from time import perf_counter
from typing import Any, Dict, Optional

import httpx

from photogenius.core.exceptions import ExternalAPIError
from photogenius.core.logging import get_logger
from photogenius.core.metrics import provider_latency_seconds, record_provider_call

logger = get_logger(__name__)

SERVICE_NAME = "fal"


class FalClient:
    """Calls a fal application and returns its JSON result."""

    def __init__(
        self,
        base_url: str = "https://fal.run",
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _url(self, application: str) -> str:
        return f"{self.base_url}/{application.strip('/')}"

    async def subscribe(
        self,
        application: str,
        arguments: Dict[str, Any],
        key: str,
    ) -> Dict[str, Any]:
        """
        Run ``application`` with ``arguments`` and wait for the result.

        Raises:
            ExternalAPIError: on transport failure, non-2xx status or a
                response body that is not a JSON object.
        """
        headers = {
            "Authorization": f"Key {key}",
            "Content-Type": "application/json",
        }
        url = self._url(application)
        start = perf_counter()

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, json=arguments, headers=headers)
        except httpx.HTTPError as e:
            record_provider_call(status="error", http_status=0)
            raise ExternalAPIError(
                f"fal request failed: {e}",
                service=SERVICE_NAME
            ) from e
        finally:
            provider_latency_seconds.observe(perf_counter() - start)

        record_provider_call(
            status="success" if response.is_success else "error",
            http_status=response.status_code
        )

        if not response.is_success:
            raise ExternalAPIError(
                f"fal API error: {response.text[:500]}",
                service=SERVICE_NAME,
                http_status=response.status_code
            )

        try:
            result = response.json()
        except ValueError as e:
            raise ExternalAPIError(
                "fal API returned a non-JSON body",
                service=SERVICE_NAME,
                http_status=response.status_code
            ) from e

        if not isinstance(result, dict):
            raise ExternalAPIError(
                "fal API returned an unexpected payload",
                service=SERVICE_NAME,
                http_status=response.status_code
            )

        logger.debug("fal_call_completed", application=application, http_status=response.status_code)
        return result
