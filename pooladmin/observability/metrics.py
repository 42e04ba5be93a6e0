"""Prometheus metrics for the data-access and audit layers.

AUDIT_WRITES with outcome="unconfirmed" is the only signal of audit gaps:
failed audit writes are logged and dropped, never retried.
"""

from prometheus_client import Counter, Histogram

# Entity store metrics
STORE_OPERATIONS = Counter(
    "pooladmin_store_operations_total",
    "Total number of entity store operations",
    labelnames=["entity", "operation", "status"],
)

STORE_LATENCY = Histogram(
    "pooladmin_store_operation_latency_seconds",
    "Entity store round-trip latency in seconds",
    labelnames=["entity", "operation"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# Audit metrics
AUDIT_WRITES = Counter(
    "pooladmin_audit_writes_total",
    "Total number of audit write attempts",
    labelnames=["table_name", "action", "outcome"],
)

# Identity metrics
ACTOR_RESOLUTIONS = Counter(
    "pooladmin_actor_resolutions_total",
    "Total number of actor resolution attempts",
    labelnames=["outcome"],
)
