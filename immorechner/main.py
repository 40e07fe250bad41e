"""
Main FastAPI application entry point.
"""

import logging

from fastapi import FastAPI

from immorechner.config import get_settings
from immorechner.api import router as api_router

settings = get_settings()


def configure_logging(level: str) -> None:
    """Configure root logging for running the server."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Real estate investment calculator for German rental properties",
    version="0.1.0",
    debug=settings.debug,
)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy", "version": "0.1.0"}


if __name__ == "__main__":
    import uvicorn

    configure_logging(settings.log_level)
    uvicorn.run(app, host=settings.host, port=settings.port)
