"""API routes implementation."""

from typing import List

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import JSONResponse

from url_shortener.lib.exceptions import ShortenerError
from url_shortener.lib.service import BatchItem
from ..errors import status_for_error
from .schemas import (
    BatchRequestItem,
    BatchResponseItem,
    ErrorResponse,
    ShortenRequest,
    ShortenResponse,
)

router = APIRouter()


@router.post(
    "/shorten",
    status_code=status.HTTP_201_CREATED,
    response_model=ShortenResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        409: {"model": ShortenResponse, "description": "URL was already shortened"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
    summary="Create short URL",
    description="Shorten a URL. Shortening a URL again returns the same link with 409.",
)
async def shorten_url(request: Request, body: ShortenRequest):
    """Create a shortened URL."""
    service = request.app.state.service

    try:
        result = await service.shorten(body.url)
    except ShortenerError as e:
        raise HTTPException(status_code=status_for_error(e), detail=str(e))

    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT if result.existed else status.HTTP_201_CREATED,
        content=ShortenResponse(result=result.link).model_dump(),
    )


@router.post(
    "/shorten/batch",
    status_code=status.HTTP_201_CREATED,
    response_model=List[BatchResponseItem],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid URL or duplicate URL in batch"},
        409: {"model": List[BatchResponseItem], "description": "Some URLs were already shortened"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
    summary="Create short URLs in batch",
    description="Shorten many URLs at once. The response keeps the request order.",
)
async def shorten_batch(request: Request, body: List[BatchRequestItem]):
    """Create shortened URLs for a batch."""
    service = request.app.state.service

    items = [BatchItem(correlation_id=b.correlation_id, original_url=b.original_url) for b in body]
    try:
        result = await service.batch(items)
    except ShortenerError as e:
        raise HTTPException(status_code=status_for_error(e), detail=str(e))

    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT if result.had_existing else status.HTTP_201_CREATED,
        content=[
            BatchResponseItem(correlation_id=i.correlation_id, short_url=i.short_url).model_dump()
            for i in result.items
        ],
    )
