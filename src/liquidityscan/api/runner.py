"""FastAPI server runner.

Run: python -m liquidityscan.api.runner [--config config.yaml] [--host 0.0.0.0] [--port 8000]
"""

import argparse
import os

import structlog
import uvicorn

from liquidityscan.config import load_config
from liquidityscan.logging.setup import setup_logging

logger = structlog.get_logger()


def main(argv: list[str] | None = None) -> None:
    """Run the FastAPI server."""
    parser = argparse.ArgumentParser(description="LiquidityScan API server")
    parser.add_argument("--config", default=None, help="Path to config.yaml")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args(argv)

    if args.config:
        # The app module loads its config at import time from this variable.
        os.environ["LIQSCAN_CONFIG"] = args.config

    cfg = load_config(args.config)
    setup_logging(level=cfg.logging.level, log_format=cfg.logging.format)

    from liquidityscan.api.app import app

    logger.info("Starting FastAPI server", host=args.host, port=args.port, environment=cfg.environment)

    try:
        uvicorn.run(
            app,
            host=args.host,
            port=args.port,
            log_config=None,  # Use our structlog setup
        )
    except Exception as e:
        logger.error("Failed to start server", error=str(e))
        raise


if __name__ == "__main__":
    main()
