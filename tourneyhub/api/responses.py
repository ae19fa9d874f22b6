"""
Response envelope helpers
"""

from typing import Any, Optional

from fastapi.responses import JSONResponse

from tourneyhub.core.errors import LedgerError


def ok(data: Any = None, message: Optional[str] = None, **extra) -> dict:
    """Build a ``{success: true, message?, data?}`` body"""
    body = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    return body


def error_response(exc: LedgerError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def page_count(total: int, limit: int) -> int:
    return (total + limit - 1) // limit if limit else 0
