"""
API Middleware - Error formatting for the capture REST API.

Every error leaves the server as:
{
    "error": {"code": "...", "message": "...", ...},
    "status": 400
}
"""

import traceback
from typing import Callable

from aiohttp import web

from media_acquisition.core.logging_utils import get_module_logger
from media_acquisition.domain.errors import (
    AcquisitionError,
    BackendUnavailable,
    CapabilityUnsupported,
    ConstraintNotSatisfiable,
    DeviceNotFound,
    PermissionDenied,
)


logger = get_module_logger("APIMiddleware")

# Classified failure -> HTTP status; anything unlisted is a 500
ERROR_STATUS = {
    PermissionDenied: 403,
    DeviceNotFound: 404,
    ConstraintNotSatisfiable: 422,
    CapabilityUnsupported: 422,
    BackendUnavailable: 503,
}


def status_for(error: AcquisitionError) -> int:
    for error_type, status in ERROR_STATUS.items():
        if isinstance(error, error_type):
            return status
    return 500


def create_error_response(code: str, message: str, status: int = 400, details: dict = None) -> web.Response:
    """Create standardized error response."""
    error = {"error": {"code": code, "message": message}, "status": status}
    if details:
        error["error"]["details"] = details
    return web.json_response(error, status=status)


def acquisition_error_response(error: AcquisitionError) -> web.Response:
    status = status_for(error)
    return web.json_response({"error": error.to_payload(), "status": status}, status=status)


@web.middleware
async def error_handling_middleware(request: web.Request, handler: Callable) -> web.Response:
    """Catch and format all errors as JSON responses."""
    try:
        return await handler(request)
    except web.HTTPException as e:
        return create_error_response(
            e.reason.upper().replace(" ", "_") if e.reason else "HTTP_ERROR",
            e.text or str(e),
            status=e.status,
        )
    except AcquisitionError as e:
        logger.warning("Acquisition failed: %s", e.message)
        return acquisition_error_response(e)
    except ValueError as e:
        logger.warning("Validation error: %s", e)
        return create_error_response("VALIDATION_ERROR", str(e), status=400)
    except Exception as e:
        tb = traceback.format_exc()
        logger.error("Unexpected error: %s\n%s", e, tb)
        return create_error_response(
            "INTERNAL_ERROR",
            "An unexpected error occurred",
            status=500,
            details={"type": type(e).__name__, "message": str(e)},
        )


async def parse_json_body(request: web.Request, required: bool = True):
    """Parse JSON body with error handling. Returns (body, error_response)."""
    if not request.can_read_body:
        if required:
            return None, create_error_response("EMPTY_BODY", "Request body must contain data", status=400)
        return {}, None
    try:
        body = await request.json()
    except Exception:
        return None, create_error_response("INVALID_BODY", "Request body must be valid JSON", status=400)
    if not isinstance(body, dict):
        return None, create_error_response("INVALID_BODY", "Request body must be a JSON object", status=400)
    return body, None
