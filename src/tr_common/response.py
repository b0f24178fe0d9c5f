"""API envelope for pricing endpoints.

Every body is {"code", "message", "data", "timestamp", "request_id"}:
code 0 with data on success, an AppError code with data=null on failure.
request_id is the one RequestLogMiddleware put on request.state, so the
body, the X-Request-ID header and the access log line all agree.
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field
from starlette.requests import Request


def new_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


def request_id_of(request: Request | None) -> str:
    """Request id assigned by the middleware, or a fresh one outside a request."""
    if request is None:
        return new_request_id()
    return getattr(request.state, "request_id", None) or new_request_id()


class ApiResponse(BaseModel):
    code: int = 0
    message: str = "success"
    data: Any = None
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    request_id: str = Field(default_factory=new_request_id)


def success_response(data: Any = None, request: Request | None = None) -> ApiResponse:
    if isinstance(data, BaseModel):
        data = data.model_dump()
    return ApiResponse(data=data, request_id=request_id_of(request))


def error_response(code: int, message: str, request: Request | None = None) -> ApiResponse:
    return ApiResponse(code=code, message=message, data=None, request_id=request_id_of(request))
