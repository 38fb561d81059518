"""Tara Call API Server - Main Entry Point."""

import uvicorn

from tara_call.api import create_app
from tara_call.config import get_settings


def main():
    """Run the Tara call API server."""
    settings = get_settings()

    app = create_app()

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
