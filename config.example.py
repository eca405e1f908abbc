# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
The stored bearer token lives under TASKFLOW_DATA_DIR, which must stay gitignored.

This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "TASKFLOW_APP_NAME": "App display name (default: taskflow).",
    "TASKFLOW_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Backend
    "TASKFLOW_API_BASE_URL": "REST backend base URL (default: http://localhost:5000/api).",
    "TASKFLOW_HTTP_CONNECT_TIMEOUT_SECONDS": "Connect timeout (default: 5).",
    "TASKFLOW_HTTP_READ_TIMEOUT_SECONDS": "Read timeout (default: 15, never below the connect timeout).",
    # Paths (gitignored)
    "TASKFLOW_DATA_DIR": "Local data directory for logs and the token (default: .local/taskflow).",
    "TASKFLOW_TOKEN_PATH": "Bearer token file (default: <data_dir>/token.json).",
    # Switches
    "TASKFLOW_PERSIST_TOKEN": "Keep the login across runs (true/false, default: true).",
}
