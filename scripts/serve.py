#!/usr/bin/env python3
"""Serve the HTTP API."""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import uvicorn

from diabetes_intel.api import create_app
from diabetes_intel.config.log_setup import configure_logging
from diabetes_intel.config.settings import settings


if __name__ == "__main__":
    configure_logging()
    uvicorn.run(create_app(), host=settings.api_host, port=settings.api_port)
