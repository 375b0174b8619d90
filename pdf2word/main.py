"""
Process entry point.

Starts uvicorn with the host/port from :class:`pdf2word.core.config.Settings`
(``PORT`` defaults to 3000). Uvicorn handles SIGINT/SIGTERM and runs the
application's shutdown hook, which stops admitting conversions and cancels
pending retention timers.
"""

import logging

import uvicorn

from pdf2word.core.config import get_settings


def run() -> None:
    """Serve the ASGI application."""
    settings = get_settings()
    uvicorn.run(
        "pdf2word.api.app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,  # Enable auto-reload in debug mode
        log_level=logging.getLevelName(
            logging.DEBUG if settings.debug else logging.INFO
        ).lower(),
    )


if __name__ == "__main__":
    run()
