from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator

from photogenius.engines.capture.services import is_image_data_url


class RemovalErrorKind(str, Enum):
    CONFIGURATION = "configuration"
    VALIDATION = "validation"
    PROVIDER = "provider"
    INTERNAL = "internal"


class RemoveBackgroundRequestDTO(BaseModel):
    """Body of POST /api/remove-background."""
    model_config = ConfigDict(extra="ignore")

    image: StrictStr = Field(..., description="Image as a data URL (data:image/...;base64,...)")

    @field_validator("image")
    @classmethod
    def validate_image_data_url(cls, v: str) -> str:
        if not is_image_data_url(v):
            raise ValueError("Image data must be a valid Data URL")
        return v


class RemovalSuccess(BaseModel):
    """Provider response, relayed verbatim."""
    result: Dict[str, Any]


class RemovalFailure(BaseModel):
    """Typed gateway failure. Only ``message`` and ``details`` reach the client."""
    kind: RemovalErrorKind
    message: str
    details: Optional[str] = None

    def to_response_body(self) -> Dict[str, str]:
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


GatewayResult = Union[RemovalSuccess, RemovalFailure]
