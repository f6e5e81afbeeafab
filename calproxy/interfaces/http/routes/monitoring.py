"""Cache monitoring endpoints."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from ....application.fetcher import ReadThroughFetcher

router = APIRouter()


@router.get("/cache/stats")
async def get_cache_stats(request: Request) -> JSONResponse:
    """Get read-through counters and the number of cached resources."""
    fetcher: ReadThroughFetcher = request.app.state.fetcher
    return JSONResponse(
        content={
            "response_cache": {
                **fetcher.statistics.get_stats(),
                "entries": len(fetcher.cache),
            }
        }
    )
