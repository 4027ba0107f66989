"""
Remove Background Endpoint

POST /api/remove-background - validate a data URL image and relay it to the
background removal model. The provider's response is returned verbatim.

Status codes:
- 200 provider result
- 422 invalid image data
- 500 missing FAL_KEY, provider failure or unreadable body
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from photogenius.api.dependencies import get_gateway
from photogenius.core.logging import get_logger
from photogenius.engines.removal.schemas import RemovalErrorKind, RemovalSuccess
from photogenius.engines.removal.services import BackgroundRemovalGateway

logger = get_logger(__name__)
router = APIRouter()

STATUS_BY_KIND = {
    RemovalErrorKind.CONFIGURATION: 500,
    RemovalErrorKind.VALIDATION: 422,
    RemovalErrorKind.PROVIDER: 500,
    RemovalErrorKind.INTERNAL: 500,
}


@router.post("/remove-background")
async def remove_background(
    request: Request,
    gateway: BackgroundRemovalGateway = Depends(get_gateway)
):
    """
    Remove the background of an uploaded image.

    Body: ``{"image": "data:image/jpeg;base64,..."}``
    """
    try:
        payload = await request.json()
    except ValueError as e:
        result = gateway.parse_failure(e)
    else:
        result = await gateway.remove(payload)

    if isinstance(result, RemovalSuccess):
        return JSONResponse(status_code=200, content=result.result)

    return JSONResponse(
        status_code=STATUS_BY_KIND[result.kind],
        content=result.to_response_body()
    )
