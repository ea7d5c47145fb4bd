"""Prometheus metrics for monitoring eligibility outcomes, offers, and PDF/mail collaborators"""

from decimal import Decimal

from prometheus_client import Counter, Histogram

# Eligibility metrics
eligibility_counter = Counter(
    "credit_wizard_eligibility_total",
    "Eligibility decisions made",
    ["outcome"],  # approved | declined
)

offer_bucket_counter = Counter(
    "credit_wizard_offer_bucket_total",
    "Credit offers issued by bucket",
    ["bucket"],  # $0, $0-$10k, $10k-$50k, $50k+
)

# PDF renderer metrics
export_latency_histogram = Histogram(
    "credit_wizard_export_latency_seconds",
    "PDF renderer response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

export_failure_counter = Counter(
    "credit_wizard_export_failures_total",
    "Failed PDF renders",
)

# Mail metrics
delivery_counter = Counter(
    "credit_wizard_delivery_total",
    "Assessment emails by outcome",
    ["outcome"],  # sent | failed
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_eligibility(approved: bool) -> None:
    """Record eligibility outcome for approval-rate monitoring"""
    eligibility_counter.labels(outcome="approved" if approved else "declined").inc()


def record_offer(offer: Decimal) -> None:
    """Bucket offers for distribution analysis"""
    if offer == 0:
        bucket = "$0"
    elif offer <= 10_000:
        bucket = "$0-$10k"
    elif offer <= 50_000:
        bucket = "$10k-$50k"
    else:
        bucket = "$50k+"

    offer_bucket_counter.labels(bucket=bucket).inc()
