import time
from fastapi import APIRouter, Request

router = APIRouter()

_start_time = time.time()


@router.get("/health")
async def health_check(request: Request):
    places = getattr(request.app.state, "places", None)
    return {
        "status": "ok",
        "uptime_seconds": round(time.time() - _start_time),
        "version": request.app.version,
        "places_cache": places.cache_stats() if places is not None else None,
    }
