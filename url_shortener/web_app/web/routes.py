"""Plain-text, redirect and ping routes."""

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import PlainTextResponse, RedirectResponse, Response

from url_shortener.lib.exceptions import NotFoundShortError, ShortenerError
from ..errors import status_for_error

router = APIRouter()

# Mounted under the base URL's path, after every other router
redirect_router = APIRouter()


@router.post("/", response_class=PlainTextResponse, include_in_schema=False)
async def shorten_text(request: Request):
    """Shorten the URL sent as the raw request body."""
    service = request.app.state.service

    raw = await request.body()
    try:
        url = raw.decode("utf-8").strip()
    except UnicodeDecodeError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Body is not UTF-8 text")

    try:
        result = await service.shorten(url)
    except ShortenerError as e:
        raise HTTPException(status_code=status_for_error(e), detail=str(e))

    return PlainTextResponse(
        content=result.link,
        status_code=status.HTTP_409_CONFLICT if result.existed else status.HTTP_201_CREATED,
    )


@router.get("/ping", include_in_schema=False)
async def ping(request: Request):
    """200 if the durability backend is reachable, 500 otherwise."""
    service = request.app.state.service

    if await service.health_check():
        return Response(status_code=status.HTTP_200_OK)
    return Response(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


@redirect_router.get("/{short_code}", include_in_schema=False)
async def redirect_to_url(request: Request, short_code: str):
    """Redirect to the original URL."""
    service = request.app.state.service

    try:
        original_url = await service.resolve(short_code)
    except NotFoundShortError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Short code '{short_code}' not found",
        )
    except ShortenerError as e:
        raise HTTPException(status_code=status_for_error(e), detail=str(e))

    return RedirectResponse(url=original_url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
