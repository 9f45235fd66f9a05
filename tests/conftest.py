import json

import pytest

# The example calls a service would make over its lifetime
DEMO_EVENTS = [
    ("info", "Server application starting.", {
        "service": "web-server",
        "version": "1.0.0",
        "environment": "development",
    }),
    ("info", "Incoming request received.", {
        "method": "GET",
        "path": "/api/v1/users",
        "client_ip": "127.0.0.1",
        "request_id": "k3j9x2",
    }),
    ("warn", "Database connection is slow.", {
        "duration_ms": 250,
        "database": "user_db",
    }),
    ("info", "User registration successful.", {
        "user_id": "user-1234",
        "source": "web-form",
    }),
    ("error", "Failed to write to file.", {
        "file_path": "/var/log/app.log",
        "error": "Permission denied",
        "user": "app-user",
    }),
    ("info", "Server gracefully shutting down.", {
        "reason": "idle_timeout",
    }),
]

@pytest.fixture
def demo_events():
    return [(level, message, dict(details)) for level, message, details in DEMO_EVENTS]

@pytest.fixture
def read_records(capsys):
    """Return the JSON records written to stdout so far, one per line."""
    def _read():
        out = capsys.readouterr().out
        return [json.loads(line) for line in out.splitlines()]
    return _read
