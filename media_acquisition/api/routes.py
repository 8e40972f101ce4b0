"""Capture API routes."""

from aiohttp import web

from media_acquisition.domain.entities import MediaOptions, MediaRequest

from .middleware import create_error_response, parse_json_body


def setup_capture_routes(app: web.Application, service) -> None:
    """Register capture routes."""
    app["service"] = service
    app.router.add_get("/api/v1/capture/availability", get_availability_handler)
    app.router.add_get("/api/v1/capture/backend", get_backend_handler)
    app.router.add_post("/api/v1/capture/acquire", acquire_handler)


async def get_availability_handler(request: web.Request) -> web.Response:
    """GET /api/v1/capture/availability - Last known audio/video availability."""
    service = request.app["service"]
    return web.json_response(service.current_availability().as_dict())


async def get_backend_handler(request: web.Request) -> web.Response:
    """GET /api/v1/capture/backend - Active backend and its capabilities."""
    service = request.app["service"]
    return web.json_response(service.describe_backend())


async def acquire_handler(request: web.Request) -> web.Response:
    """POST /api/v1/capture/acquire - Acquire, describe and release the requested kinds.

    Body: {"kinds": ["audio", "video"], "options": {"resolution": "720"}}
    """
    service = request.app["service"]
    body, error = await parse_json_body(request, required=False)
    if error:
        return error

    kinds = body.get("kinds")
    if kinds is not None and not isinstance(kinds, list):
        return create_error_response("VALIDATION_ERROR", "kinds must be a list", status=400)
    options = body.get("options") or {}
    if not isinstance(options, dict):
        return create_error_response("VALIDATION_ERROR", "options must be an object", status=400)

    media_request = MediaRequest.create(kinds=kinds, options=MediaOptions.from_mapping(options))
    tracks = await service.acquire(media_request)
    try:
        summaries = [track.summary() for track in tracks]
    finally:
        released = service.release(tracks)

    return web.json_response({
        "success": True,
        "tracks": summaries,
        "released_streams": released,
        "availability": service.current_availability().as_dict(),
    })
