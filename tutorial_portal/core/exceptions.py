from __future__ import annotations

from typing import Any

import structlog
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = structlog.get_logger()

_TRANSPORT_LOCATIONS = ("body", "path", "query", "header")


def format_validation_errors(errors: list[dict[str, Any]]) -> list[dict[str, str]]:
    """Flatten pydantic error dicts into ``{field, message}`` pairs without echoing input."""
    formatted: list[dict[str, str]] = []
    for error in errors:
        location = [str(part) for part in error.get("loc", ()) if part not in _TRANSPORT_LOCATIONS]
        formatted.append(
            {
                "field": ".".join(location) or "body",
                "message": str(error.get("msg", "invalid value")),
            }
        )
    return formatted


def summarize_validation_errors(errors: list[dict[str, str]]) -> str:
    return "; ".join(f"{item['field']}: {item['message']}" for item in errors)


async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request bodies and parameters as 400 with field-level messages."""
    errors = format_validation_errors(list(exc.errors()))
    await logger.awarning(
        "request_validation_failed",
        path=request.url.path,
        method=request.method,
        errors=errors,
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": summarize_validation_errors(errors), "errors": errors},
    )
