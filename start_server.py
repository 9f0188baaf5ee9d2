#!/usr/bin/env python3
"""
Startup script for the Client Q&A Bot FastAPI application.
"""

import os
import uvicorn
from dotenv import load_dotenv

# Load .env file before settings are read
load_dotenv()

if __name__ == "__main__":
    from clientqa.config.settings import settings

    src_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), "src")

    uvicorn.run(
        "clientqa.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        reload_dirs=[src_dir] if settings.debug else None,
    )
