"""Prometheus metrics for monitoring analysis outcomes, plan selection and store submissions"""

from decimal import Decimal
from prometheus_client import Counter, Histogram

# Analysis metrics
analysis_counter = Counter(
    "loan_approval_analysis_total",
    "Analyses started by outcome",
    ["outcome"],  # decisioned | aborted | cancelled
)

approved_amount_histogram = Histogram(
    "loan_approval_approved_amount",
    "Approved amounts in currency units",
    buckets=[100, 500, 1000, 2500, 5000, 10000, 25000],
)

# Selection metrics
tenor_selection_counter = Counter(
    "loan_approval_tenor_selection_total",
    "Installment tenors selected",
    ["tenor"],
)

# Submission metrics
submission_counter = Counter(
    "loan_approval_submission_total",
    "Approval submissions to the application store",
    ["outcome"],  # confirmed | failed | rejected
)

store_latency_histogram = Histogram(
    "application_store_latency_seconds",
    "Application store update response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_decision(approved_amount: Decimal) -> None:
    """Record a completed analysis and the amount it approved"""
    analysis_counter.labels(outcome="decisioned").inc()
    approved_amount_histogram.observe(float(approved_amount))


def record_submission(outcome: str) -> None:
    submission_counter.labels(outcome=outcome).inc()
