#!/usr/bin/env python3
"""
Backend server launcher script.

This script sets up the Python path and starts the uvicorn server so that
the top-level packages (planning, production_data) import correctly.

Environment:
    SHIFTPLAN_HOST    bind address (default 127.0.0.1)
    SHIFTPLAN_PORT    port (default 8000)
    SHIFTPLAN_RELOAD  auto-reload on code changes (default true)
"""

import sys
import os

# Add the backend directory to Python path
backend_dir = os.path.dirname(os.path.abspath(__file__))
if backend_dir not in sys.path:
    sys.path.insert(0, backend_dir)


def main() -> None:
    import uvicorn

    reload = os.getenv("SHIFTPLAN_RELOAD", "true").lower() in ("true", "1", "yes")
    uvicorn.run(
        "api:app",
        host=os.getenv("SHIFTPLAN_HOST", "127.0.0.1"),
        port=int(os.getenv("SHIFTPLAN_PORT", "8000")),
        reload=reload,
        reload_dirs=[backend_dir] if reload else None,
    )


if __name__ == "__main__":
    main()
