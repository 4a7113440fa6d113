from fastapi import APIRouter, Depends, status
from fastapi.responses import RedirectResponse

from hashlink_app.dependencies import get_url_service
from hashlink_app.exceptions import ValidationError
from hashlink_app.services.url_service import URLService

router = APIRouter(tags=["redirect"])


@router.get("/s")
@router.get("/s/")
async def missing_token():
    raise ValidationError("No Token Provided")


@router.get("/s/{token}")
@router.get("/s/{token}/{rest:path}", include_in_schema=False)  # only the second segment counts
async def redirect_to_long_url(
    token: str,
    url_service: URLService = Depends(get_url_service)
):
    """
    Redirect to the original URL.

    Flow:
    1. Rate limiter check for this token
    2. Store lookup
    3. Usage event published in the background
    4. Redirect immediately
    """
    long_url = await url_service.resolve(token)
    return RedirectResponse(url=long_url, status_code=status.HTTP_302_FOUND)
