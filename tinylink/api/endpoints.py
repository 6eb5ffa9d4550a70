"""
FastAPI Endpoints for the Link Service

This module defines all REST API endpoints with minimal logic.
Endpoints only handle:
- Request validation (Pydantic models)
- Error handling and HTTP responses
- Delegating to service layer

Design Principles:
- Thin endpoints: all business logic lives in services
- The store is an injected dependency owned by the application lifespan
- Error handling: each service exception maps to one HTTP status
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse

from tinylink.api.schemas import CreateLinkRequest, DeleteResponse, LinkResponse
from tinylink.core.exceptions import (
    AllocationExhaustedError,
    CodeConflictError,
    CodeNotFoundError,
    InvalidCodeError,
    InvalidTargetError,
    StoreUnavailableError,
)
from tinylink.core.setting import Settings
from tinylink.db.interface import LinkStore
from tinylink.services.allocator import CodeAllocator
from tinylink.services.link_service import LinkService
from tinylink.services.resolver import RedirectResolver

logger = logging.getLogger(__name__)

router = APIRouter()


def get_store(request: Request) -> LinkStore:
    """Dependency returning the store opened at application startup."""
    return request.app.state.store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def store_unavailable(e: StoreUnavailableError) -> HTTPException:
    logger.error(f"Store failure: {e}", exc_info=e.original_error)
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Storage is temporarily unavailable, please retry"
    )


@router.post(
    "/api/links",
    response_model=LinkResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a short link",
    description="Takes a long URL and an optional custom code and returns the new link"
)
async def create_link(
    body: CreateLinkRequest,
    store: LinkStore = Depends(get_store),
    app_settings: Settings = Depends(get_settings)
) -> LinkResponse:
    """
    Create a new Link.

    Raises:
        HTTPException 400: If the URL or custom code is invalid
        HTTPException 409: If the custom code is taken
        HTTPException 500: If no free code could be generated
        HTTPException 503: If the database is unavailable
    """
    allocator = CodeAllocator(
        store,
        max_attempts=app_settings.MAX_ALLOCATION_ATTEMPTS,
        code_length=app_settings.SHORT_CODE_LENGTH
    )

    try:
        link = await allocator.allocate(body.original_url, body.custom_code)
    except (InvalidTargetError, InvalidCodeError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except CodeConflictError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )
    except AllocationExhaustedError as e:
        logger.error(str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )
    except StoreUnavailableError as e:
        raise store_unavailable(e)

    return LinkResponse.from_link(link, app_settings.BASE_URL)


@router.get(
    "/api/links",
    response_model=list[LinkResponse],
    summary="List links",
    description="Returns every link, newest first"
)
async def list_links(
    store: LinkStore = Depends(get_store),
    app_settings: Settings = Depends(get_settings)
) -> list[LinkResponse]:
    try:
        links = await LinkService(store).list_links()
    except StoreUnavailableError as e:
        raise store_unavailable(e)

    return [LinkResponse.from_link(link, app_settings.BASE_URL) for link in links]


@router.get(
    "/api/links/{code}",
    response_model=LinkResponse,
    summary="Get link statistics",
    description="Returns one link including its click count and last click time"
)
async def get_link(
    code: str,
    store: LinkStore = Depends(get_store),
    app_settings: Settings = Depends(get_settings)
) -> LinkResponse:
    try:
        link = await LinkService(store).get_link(code)
    except CodeNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    except StoreUnavailableError as e:
        raise store_unavailable(e)

    return LinkResponse.from_link(link, app_settings.BASE_URL)


@router.delete(
    "/api/links/{code}",
    response_model=DeleteResponse,
    summary="Delete a link",
    description="Deletes a link; deleting an unknown code succeeds"
)
async def delete_link(
    code: str,
    store: LinkStore = Depends(get_store)
) -> DeleteResponse:
    try:
        await LinkService(store).delete_link(code)
    except StoreUnavailableError as e:
        raise store_unavailable(e)

    return DeleteResponse()


@router.get(
    "/{code}",
    status_code=status.HTTP_302_FOUND,
    summary="Redirect to original URL",
    description="Counts the visit and redirects to the link's target URL"
)
async def redirect_to_url(
    code: str,
    store: LinkStore = Depends(get_store)
) -> RedirectResponse:
    """
    Redirect to the target URL for a given short code.

    Raises:
        HTTPException 404: If short code not found
        HTTPException 503: If the database is unavailable
    """
    try:
        target_url = await RedirectResolver(store).resolve(code)
    except CodeNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    except StoreUnavailableError as e:
        raise store_unavailable(e)

    return RedirectResponse(
        url=target_url,
        status_code=status.HTTP_302_FOUND
    )
