"""GET /metrics: Prometheus text exposition of the default registry.

Prometheus scrapes this path on a fixed interval.  The body is the plain
text exposition format, one sample per line:

  # TYPE http_requests_total counter
  http_requests_total{method="GET",endpoint="/v1/student/dashboard",status_code="200"} 812.0
  unlock_checks_total{outcome="awaiting_approval"} 37.0
  phase_advances_total{trigger="auto"} 54.0

Two families live in the registry (app/core/metrics.py): HTTP traffic,
filled by MetricsMiddleware, and learning-flow counters (video credit,
submissions, reviews, unlock checks, phase advances) incremented by the
services.  Counters are process-local and only ever grow; rates and
totals across replicas are computed in PromQL.

The route is left out of the OpenAPI schema and out of the HTTP counters,
so scraping does not inflate the traffic it reports.  It is not
authenticated: expose it only on a network the scraper shares, never
through the public ingress.
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter(tags=["observability"])


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
