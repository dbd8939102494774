"""Prometheus metrics for fund movements and HTTP traffic"""

from prometheus_client import Counter, Histogram

# Operation log metrics
operation_counter = Counter(
    "autosave_operations_total",
    "Operations appended to the ledger log",
    ["type", "status"],  # deposit | loan_payment | emergency_withdraw ; completed | failed | pending
)

emergency_withdraw_histogram = Histogram(
    "autosave_emergency_withdraw_cents",
    "Amounts returned to the home account by emergency withdrawals",
    buckets=[100_000, 500_000, 1_000_000, 2_500_000, 5_000_000, 10_000_000, 50_000_000],
)

withdrawal_plans_counter = Counter(
    "autosave_withdrawal_plans_total",
    "Emergency withdrawal plans issued",
)

# Bank API metrics
bank_fetch_failures_counter = Counter(
    "bank_fetch_failures_total",
    "Failed bank API calls",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_operation(operation_type: str, status: str, amount_cents: int) -> None:
    """Count an operation; completed emergency withdrawals also feed the amount histogram"""
    operation_counter.labels(type=operation_type, status=status).inc()

    if operation_type == "emergency_withdraw" and status == "completed":
        emergency_withdraw_histogram.observe(amount_cents)
