# treasury_observability/metrics.py
"""
Prometheus metrics for the treasury simulator.

❗️This module does NOT start a standalone HTTP server.
Expose metrics from the FastAPI app by mounting the ASGI exporter:

    from prometheus_client import make_asgi_app
    app.mount("/metrics", make_asgi_app())

If you ever need a sidecar server (e.g., for the CLI demo), set
METRICS_HTTP_SERVER=1 and call maybe_start_http_server().
"""
from __future__ import annotations

import os
import threading
from typing import Any, Dict, Tuple, Type

from prometheus_client import Counter, Gauge, Histogram, start_http_server

# ----------------------------
# Optional standalone server
# ----------------------------
_METRICS_PORT = int(os.getenv("METRICS_PORT", "8001"))
_server_started = False
_server_lock = threading.Lock()


def maybe_start_http_server() -> bool:
    """
    Start a sidecar metrics HTTP server exactly once, but only if
    METRICS_HTTP_SERVER=1 is set in the environment. Returns True if running.
    """
    global _server_started
    if _server_started:
        return True
    if os.getenv("METRICS_HTTP_SERVER") != "1":
        return False
    with _server_lock:
        if not _server_started:
            start_http_server(_METRICS_PORT)
            _server_started = True
    return True


# ----------------------------
# Registration helper (avoid duplicate collectors)
# ----------------------------
_METRICS: Dict[Tuple[Type[Any], str], Any] = {}


def get_metric(cls: Type[Any], name: str, *args, **kwargs):
    key = (cls, name)
    if key in _METRICS:
        return _METRICS[key]
    metric = cls(name, *args, **kwargs)
    _METRICS[key] = metric
    return metric


# ----------------------------
# Sweep execution
# ----------------------------

sweeps_total = get_metric(
    Counter,
    "treasury_sweeps_total",
    "Number of sweeps executed",
    ["path"],
)

sweep_blocked_total = get_metric(
    Counter,
    "treasury_sweep_blocked_total",
    "Sweep attempts refused by a gate",
    ["reason"],
)

sweep_amount_usd = get_metric(
    Histogram,
    "treasury_sweep_amount_usd",
    "Amount moved per executed sweep in USD",
    buckets=(1_000, 5_000, 10_000, 25_000, 50_000, 100_000, 250_000, 1_000_000),
)

# Histogram measuring sweep execution latency
sweep_latency_seconds = get_metric(
    Histogram,
    "treasury_sweep_latency_seconds",
    "Latency of sweep execution in seconds",
    buckets=(0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1),
)

# ----------------------------
# Ledger
# ----------------------------

ledger_balance_usd = get_metric(
    Gauge,
    "treasury_ledger_balance_usd",
    "Current simulated balance per account in USD",
    ["account"],
)

# ----------------------------
# Audit
# ----------------------------

audit_events_total = get_metric(
    Counter,
    "treasury_audit_events_total",
    "Audit events appended",
    ["kind"],
)

audit_log_size = get_metric(
    Gauge,
    "treasury_audit_log_size",
    "Events currently held in the session audit log",
)

audit_export_rows_total = get_metric(
    Counter,
    "treasury_audit_export_rows_total",
    "Event rows rendered into CSV exports",
)
