"""Prometheus metrics for the AIStore operator client."""

from prometheus_client import Counter, Histogram

# API call metrics
api_call_total = Counter(
    "ais_operator_client_api_call_total",
    "Total number of Kubernetes API calls",
    ["kind", "operation", "result"],
)

api_call_duration_seconds = Histogram(
    "ais_operator_client_api_call_duration_seconds",
    "Duration of Kubernetes API calls in seconds",
    ["kind", "operation"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
)

# Writes avoided by the idempotent mutation layer
mutation_skipped_total = Counter(
    "ais_operator_client_mutation_skipped_total",
    "Total number of mutations skipped because the store already matched",
    ["operation", "reason"],
)

# Pod readiness waiter metrics
pod_wait_total = Counter(
    "ais_operator_client_pod_wait_total",
    "Total number of pod readiness waits by outcome",
    ["outcome"],
)

pod_wait_duration_seconds = Histogram(
    "ais_operator_client_pod_wait_duration_seconds",
    "Duration of pod readiness waits in seconds",
    buckets=[1.0, 5.0, 15.0, 30.0, 60.0, 120.0, 300.0],
)
