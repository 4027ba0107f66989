"""
Background Removal Gateway

Validates one image data URL and forwards it to the provider. Every outcome
is returned as a value (RemovalSuccess / RemovalFailure); the route layer
picks the status code. Provider errors are logged here and never leak to
the client.
"""

from typing import Any, Optional, Protocol, Dict

from pydantic import ValidationError

from photogenius.core.exceptions import ConfigurationError, ExternalAPIError, InvalidImageError
from photogenius.core.logging import get_logger
from photogenius.core.metrics import record_removal_outcome
from photogenius.engines.removal.schemas import (
    GatewayResult,
    RemovalErrorKind,
    RemovalFailure,
    RemovalSuccess,
    RemoveBackgroundRequestDTO,
)

logger = get_logger(__name__)

DEFAULT_MODEL_ID = "fal-ai/imageutils/rembg"

MISSING_KEY_MESSAGE = "FAL_KEY is not set"
INVALID_IMAGE_MESSAGE = "Invalid image data"
REMOVAL_FAILED_MESSAGE = "Failed to remove background"

# pydantic error type -> human readable reason
_VALIDATION_REASONS = {
    "missing": "Image field is required",
    "string_type": "Image data must be a string",
    "model_type": "Request body must be a JSON object",
    "model_attributes_type": "Request body must be a JSON object",
}
_DATA_URL_REASON = "Image data must be a valid Data URL"


class RemovalProvider(Protocol):
    async def subscribe(self, application: str, arguments: Dict[str, Any], key: str) -> Dict[str, Any]:
        ...


def _validation_reason(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return _DATA_URL_REASON
    return _VALIDATION_REASONS.get(errors[0]["type"], _DATA_URL_REASON)


class BackgroundRemovalGateway:
    """
    Gateway to the external background removal model.

    The credential is injected once at construction; a missing credential
    turns every call into a configuration failure without touching the
    provider.
    """

    def __init__(
        self,
        credential: Optional[str],
        provider: RemovalProvider,
        model_id: str = DEFAULT_MODEL_ID,
    ):
        self._credential = credential or None
        self.provider = provider
        self.model_id = model_id

    @property
    def is_configured(self) -> bool:
        return self._credential is not None

    def _check_credential(self) -> str:
        if self._credential is None:
            raise ConfigurationError(MISSING_KEY_MESSAGE)
        return self._credential

    def _validate(self, payload: Any) -> str:
        try:
            request = RemoveBackgroundRequestDTO.model_validate(payload)
        except ValidationError as e:
            raise InvalidImageError(INVALID_IMAGE_MESSAGE, reason=_validation_reason(e)) from e
        return request.image

    async def remove(self, payload: Any) -> GatewayResult:
        """
        Remove the background of the image carried by ``payload``.

        Args:
            payload: Decoded JSON body, expected ``{"image": "data:image/..."}``

        Returns:
            RemovalSuccess with the provider's response, or a RemovalFailure
        """
        try:
            key = self._check_credential()
            image = self._validate(payload)

            logger.info("image_data_received", preview=image[:100] + "...")
            logger.info("provider_call_started", model_id=self.model_id)

            result = await self.provider.subscribe(
                self.model_id,
                {"image_url": image},
                key=key,
            )

            logger.info("provider_call_succeeded", model_id=self.model_id)
            record_removal_outcome("success")
            return RemovalSuccess(result=result)

        except ConfigurationError as e:
            logger.error("provider_not_configured", error=e.message)
            record_removal_outcome(RemovalErrorKind.CONFIGURATION.value)
            return RemovalFailure(kind=RemovalErrorKind.CONFIGURATION, message=e.message)

        except InvalidImageError as e:
            logger.warning("invalid_image_data", reason=e.details["reason"])
            record_removal_outcome(RemovalErrorKind.VALIDATION.value)
            return RemovalFailure(
                kind=RemovalErrorKind.VALIDATION,
                message=e.message,
                details=e.details["reason"],
            )

        except ExternalAPIError as e:
            logger.error(
                "provider_call_failed",
                error=e.message,
                service=e.details.get("service"),
                http_status=e.details.get("http_status"),
            )
            record_removal_outcome(RemovalErrorKind.PROVIDER.value)
            return RemovalFailure(kind=RemovalErrorKind.PROVIDER, message=REMOVAL_FAILED_MESSAGE)

        except Exception as e:
            logger.exception("remove_background_failed", error=str(e), error_type=type(e).__name__)
            record_removal_outcome(RemovalErrorKind.INTERNAL.value)
            return RemovalFailure(kind=RemovalErrorKind.INTERNAL, message=REMOVAL_FAILED_MESSAGE)

    def parse_failure(self, error: Exception) -> RemovalFailure:
        """Failure for a request body that could not be decoded as JSON."""
        logger.error("request_body_unreadable", error=str(error), error_type=type(error).__name__)
        record_removal_outcome(RemovalErrorKind.INTERNAL.value)
        return RemovalFailure(kind=RemovalErrorKind.INTERNAL, message=REMOVAL_FAILED_MESSAGE)
