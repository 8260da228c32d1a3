"""
Entry point for the Unixora auth service.
Run this file to start the API server.
"""

import logging

import uvicorn
from unixora.main import app
from unixora.config import get_settings
from unixora.core.logging import configure_logging

if __name__ == "__main__":
    settings = get_settings()
    configure_logging(settings.log_level)
    logger = logging.getLogger("unixora")
    logger.info(f"Server will be available at http://{settings.host}:{settings.port}")
    logger.info(f"API documentation at http://{settings.host}:{settings.port}/docs")

    uvicorn.run(app, host=settings.host, port=settings.port)
