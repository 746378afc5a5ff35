"""Runtime configuration for the Kubernetes client layer."""

from __future__ import annotations

import os

from kubernetes import client, config

# Per-request timeout passed to every API call (seconds)
REQUEST_TIMEOUT_SECONDS = float(os.getenv("AIS_K8S_REQUEST_TIMEOUT_SECONDS", "30.0"))

# Interval between pod readiness checks (seconds)
POD_POLL_INTERVAL_SECONDS = float(os.getenv("AIS_POD_POLL_INTERVAL_SECONDS", "3.0"))

# Client-side throttle for Kubernetes API calls; 0 disables it
K8S_RATE_LIMIT_PER_SECOND = float(os.getenv("K8S_RATE_LIMIT_PER_SECOND", "10.0"))


def load_kube_config() -> client.ApiClient:
    """Load cluster credentials and build an API client.

    The in-cluster service account is tried first, then the local kubeconfig.

    Returns:
        Configured ApiClient instance
    """
    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()

    return client.ApiClient()
