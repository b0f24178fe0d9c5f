"""Access log + request id propagation.

A caller-supplied X-Request-ID (e.g. from the web client or an edge proxy)
is reused when it looks like an id; otherwise a fresh req_<hex> is minted.
The id lands on request.state for the response envelope and is echoed back
in the X-Request-ID header. 5xx responses log at WARNING, the rest at INFO:

    INFO  [GET] /api/v1/events/EVT-1/price-suggestion → 200 (4ms) req_a1b2c3d4e5f6
"""

import logging
import re
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.tr_common.response import new_request_id

logger = logging.getLogger("tr.request")

REQUEST_ID_HEADER = "X-Request-ID"
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9_.:-]{1,64}$")


def resolve_request_id(inbound: str | None) -> str:
    if inbound and _VALID_REQUEST_ID.match(inbound):
        return inbound
    return new_request_id()


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        logger.log(
            logging.WARNING if response.status_code >= 500 else logging.INFO,
            "[%s] %s → %d (%.0fms) %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request_id,
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
