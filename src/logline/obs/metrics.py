from __future__ import annotations
import socket
import logging

from prometheus_client import Counter, start_http_server

logger = logging.getLogger(__name__)

LINES_VIEWED = Counter(
    "logline_lines_viewed_total",
    "Input lines rendered by the viewer",
    ["kind"],  # json|text
)

def _is_port_in_use(port: int, host: str = '0.0.0.0') -> bool:
    """Check if a port is already in use on the specified host."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        try:
            s.bind((host, port))
            return False
        except OSError:
            return True

def start_metrics_server(port: int) -> bool:
    """
    Start the Prometheus metrics HTTP server for a long-running viewer.

    Returns False when the port is already taken (another viewer in the same
    pipeline already exposes the counters).
    """
    if _is_port_in_use(port, '0.0.0.0'):
        logger.warning({"event": "metrics_port_in_use", "port": port})
        return False
    start_http_server(port)
    logger.info({"event": "metrics_server_started", "port": port})
    return True
