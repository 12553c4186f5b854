"""Prometheus metrics for monitoring fund movements, milestones and push delivery"""

from prometheus_client import Counter, Histogram

# Fund metrics
transfer_counter = Counter(
    "fundflow_transfers_total",
    "Fund transfers journaled",
    ["transfer_type", "outcome"],  # manual | automatic, created | reverted | rejected
)

income_distribution_counter = Counter(
    "fundflow_income_distributions_total",
    "Incomes distributed into funds",
    ["outcome"],  # distributed | reversed
)

# Milestone metrics
milestone_counter = Counter(
    "fundflow_milestones_total",
    "Milestones detected and claimed",
    ["entity_type", "milestone"],
)

milestone_notification_counter = Counter(
    "fundflow_milestone_notifications_total",
    "Milestone notification delivery attempts",
    ["entity_type", "outcome"],  # sent | failed | no_target
)

# Push metrics
push_latency_histogram = Histogram(
    "push_latency_seconds",
    "Push provider response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

push_failure_counter = Counter(
    "push_failures_total",
    "Failed push provider calls",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_transfer(transfer_type: str, outcome: str) -> None:
    transfer_counter.labels(transfer_type=transfer_type, outcome=outcome).inc()


def record_notification(entity_type: str, outcome: str) -> None:
    milestone_notification_counter.labels(entity_type=entity_type, outcome=outcome).inc()
