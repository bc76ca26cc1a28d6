"""Request context middleware.

REQUEST IDs
-----------
Requests are handled concurrently, so their log lines interleave.  Two
students submitting quizzes at the same moment produce something like:

  INFO  Quiz submitted score=3/3
  INFO  Quiz submitted score=1/3
  ERROR Unlock check failed

and nothing says which request failed.  Every request therefore gets an ID:
the client's X-Request-ID when it sends one (so a frontend or gateway can
correlate its own logs), a fresh UUID4 otherwise.  The ID is echoed in the
X-Request-ID response header, so a user reporting a problem can quote it.

CONTEXT VARIABLES
-----------------
The ID is stored in ``request_id_var`` (app/core/logging.py).  Async
handlers for many requests run on the same thread, so a thread-local would
be shared between them; each asyncio task gets its own copy of a
ContextVar.  The log handler's RequestContextFilter reads it for every
record, including records from services that know nothing about HTTP.

SUMMARY LINE
------------
When the response is ready the middleware writes one INFO line per request
with method, path, status, duration and, once require_user has validated
the bearer token, the caller's user_id.  Request counts and latency
histograms are MetricsMiddleware's job; this line is for finding one
request, not for aggregates.
"""

from __future__ import annotations

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.core.logging import request_id_var

logger = logging.getLogger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assigns X-Request-ID, times the request and logs its completion.

    A client-supplied X-Request-ID is echoed; otherwise a UUID4 is generated.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        req_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request_id_var.set(req_id)

        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000, 1)
        # set by require_user once the bearer token has been validated
        user_id = getattr(request.state, "user_id", None)

        logger.info(
            "%s %s → %d (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            extra={
                "request_id": req_id,
                "method": request.method,
                "path": request.url.path,
                "user_id": user_id,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        response.headers["X-Request-ID"] = req_id
        return response
