"""Structured logging configuration for the AIStore operator client."""

import json
import logging
import sys
from typing import Any

from .constants import CONTROLLER_NAME


def setup_structured_logging(level: int = logging.INFO) -> None:
    """Configure structured JSON logging."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def log_client_event(
    logger: logging.Logger,
    operation: str,
    kind: str,
    name: str,
    namespace: str,
    result: str,
    level: int = logging.INFO,
    **kwargs: Any,
) -> None:
    """Log a structured event for a single store operation."""
    if not logger.isEnabledFor(level):
        return
    log_data = {
        "controller": CONTROLLER_NAME,
        "operation": operation,
        "resource": kind,
        "name": name,
        "namespace": namespace,
        "result": result,
    }
    log_data.update(kwargs)
    logger.log(level, json.dumps(log_data, default=str))
