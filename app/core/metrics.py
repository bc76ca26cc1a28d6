"""Prometheus metric inventory for course-progress-service.

Every metric the service exports is declared here; the modules that own
the behaviour import the object and increment or observe it.

HTTP metrics are filled by MetricsMiddleware.  The endpoint label is the
route template ("/v1/student/weeks/{week_id}"), never the concrete path,
so week and submission UUIDs do not multiply the label space.

Domain counters follow the learning flow:

  video_credit_awards_total      a ProgressRecord crossed the watch threshold
  submissions_total{type}        a quiz or assignment Submission was created
  submission_reviews_total       an admin review was recorded
  unlock_checks_total{outcome}   one POST /check-unlock evaluation
  phase_advances_total{trigger}  current_phase moved forward (auto|approval)
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Learning flow
# ---------------------------------------------------------------------------

VIDEO_CREDIT_AWARDS = Counter(
    "video_credit_awards_total",
    "Weeks whose video credit was awarded to a student",
)

SUBMISSIONS_CREATED = Counter(
    "submissions_total",
    "Submissions created by students",
    ["type"],  # quiz|assignment
)

SUBMISSION_REVIEWS = Counter(
    "submission_reviews_total",
    "Admin reviews recorded",
    ["type", "status"],
)

UNLOCK_CHECKS = Counter(
    "unlock_checks_total",
    "Unlock evaluations by outcome",
    ["outcome"],  # not_eligible|awaiting_approval|advanced|course_complete
)

PHASE_ADVANCES = Counter(
    "phase_advances_total",
    "Times a student's current phase moved forward",
    ["trigger"],  # auto|approval
)
