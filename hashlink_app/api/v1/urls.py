from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import PlainTextResponse

from hashlink_app.dependencies import get_url_service
from hashlink_app.services.url_service import URLService

router = APIRouter(tags=["urls"])


# Routed by first path segment: /p, /p/ and /p/anything all create
@router.api_route("/p", methods=["GET", "POST"], response_class=PlainTextResponse)
@router.api_route("/p/{rest:path}", methods=["GET", "POST"], response_class=PlainTextResponse,
                  include_in_schema=False)
async def create_short_url(
    request: Request,
    url: Optional[str] = None,
    url_service: URLService = Depends(get_url_service)
):
    """Shorten the `url` query parameter"""
    token = await url_service.create_mapping(url)
    short_url = url_service.short_url(token, request.url.hostname)
    return PlainTextResponse(
        f"Accepted.\nShort URL: {short_url}\nOriginal URL: {url}",
        status_code=status.HTTP_201_CREATED,
    )


@router.get("/l", response_class=PlainTextResponse)
@router.get("/l/{rest:path}", response_class=PlainTextResponse, include_in_schema=False)
async def list_short_urls(
    request: Request,
    url_service: URLService = Depends(get_url_service)
):
    """
    List every active mapping as `short URL -> original URL`.

    Meant for operators; restrict access upstream.
    """
    base = url_service.short_url_base(request.url.hostname)
    lines = [
        f"{base}/s/{entry.token} -> {entry.url}\n\n"
        async for entry in url_service.list_all()
    ]
    return PlainTextResponse("".join(lines), status_code=status.HTTP_200_OK)
