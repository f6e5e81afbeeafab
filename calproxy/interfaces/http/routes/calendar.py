"""Calendar resource routes.

Each handler maps its path to a resource key and upstream URL, then hands
both to the read-through fetcher. Identifiers are validated here, before the
fetcher is ever called.
"""

from fastapi import APIRouter, Request, Response

from ....application.fetcher import ReadThroughFetcher
from ....application.resources import CalendarResources, ResourceRequest
from ....constants import API_PREFIX, CACHE_STATUS_HEADER, JSON_MEDIA_TYPE

router = APIRouter(prefix=API_PREFIX)


async def _serve(request: Request, resource: ResourceRequest) -> Response:
    fetcher: ReadThroughFetcher = request.app.state.fetcher
    result = await fetcher.get(
        resource.key,
        resource.upstream_url,
        request_id=getattr(request.state, "request_id", None),
    )
    return Response(
        content=result.payload,
        media_type=JSON_MEDIA_TYPE,
        headers={CACHE_STATUS_HEADER: result.source.value},
    )


@router.get("/events", response_model=None)
async def list_events(request: Request) -> Response:
    """All calendar events, past events included."""
    resources: CalendarResources = request.app.state.resources
    return await _serve(request, resources.events())


@router.get("/genres", response_model=None)
async def list_genres(request: Request) -> Response:
    resources: CalendarResources = request.app.state.resources
    return await _serve(request, resources.genres())


@router.get("/event/{event_id:path}", response_model=None)
async def get_event(request: Request, event_id: str) -> Response:
    """A single event by numeric id.

    The ``path`` converter keeps ids such as ``1/2`` or an empty id on this
    route so they are rejected with 400 rather than falling through to 404.
    """
    resources: CalendarResources = request.app.state.resources
    return await _serve(request, resources.event(event_id))
