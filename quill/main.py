"""
Quill - Main entry point.

Serves the API with uvicorn:

    python -m quill.main
"""

from __future__ import annotations

import uvicorn

from quill.config import get_settings


def main():
    settings = get_settings()
    uvicorn.run(
        "quill.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug and not settings.is_production,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
