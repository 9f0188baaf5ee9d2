"""
Main entry point for the Client Q&A Bot application.

This module serves as the primary entry point for the FastAPI application,
providing the ASGI application instance for deployment.
"""

from clientqa.app import app

# Export the app instance for ASGI servers
__all__ = ["app"]
