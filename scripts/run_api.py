#!/usr/bin/env python
"""
Entry point for serving the ViRA API.

Usage:
    python scripts/run_api.py [--host 0.0.0.0] [--port 8000]
"""
import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import uvicorn

from vira.api.app import create_app
from vira.core.logging import setup_logging
from vira.settings import settings


def main():
    parser = argparse.ArgumentParser(description="Serve the ViRA API")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args()

    logger = setup_logging()
    logger.info("Starting ViRA API on %s:%d (model=%s)", args.host, args.port, settings.ai_model)

    uvicorn.run(create_app(), host=args.host, port=args.port, log_config=None)


if __name__ == "__main__":
    main()
