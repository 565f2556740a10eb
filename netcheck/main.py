"""
Entrypoint module for uvicorn.

Run as:

    uvicorn netcheck.main:app --reload
"""

import logging

from netcheck.api import app  # noqa: F401  FastAPI app
from netcheck.config import settings

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
