"""Render domain exceptions as structured JSON error responses."""

import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from ..exceptions import GrimoireException

logger = logging.getLogger(__name__)


async def grimoire_exception_handler(request: Request, exc: GrimoireException) -> JSONResponse:
    """
    Convert a GrimoireException into its JSON body and status code.

    Expected client-facing outcomes (validation, not found, conflict) are
    logged at WARNING; anything else at ERROR.
    """
    level = logging.WARNING if exc.status_code < 500 else logging.ERROR
    logger.log(
        level,
        f"{exc.kind.value}: {exc.error_code.value}",
        extra={
            "error_code": exc.error_code.value,
            "kind": exc.kind.value,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details,
            "status_code": exc.status_code,
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )
