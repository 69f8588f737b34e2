# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "DAYLINE_APP_NAME": "App display name (default: dayline).",
    "DAYLINE_LOG_LEVEL": "Console logging level (default: WARNING). The log file always gets DEBUG.",
    # Switches
    "DAYLINE_PERSIST": "Persist tasks to SQLite (true/false, default: true).",
    "DAYLINE_CONSOLE_ENABLED": "Run the interactive console (true/false, default: true).",
    # Paths (gitignored)
    "DAYLINE_DATA_DIR": "Local data directory (default: .local/dayline).",
    "DAYLINE_STORE_PATH": "Key/value SQLite path (default: <data_dir>/dayline.sqlite3).",
    # Rendering
    "DAYLINE_TIMELINE_WIDTH": "Width of the text timeline in columns (default: 48, min 8).",
}
