# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

#!/usr/bin/env python3
"""
Main entry point for the Reservation Coverage Analyzer.

Loads configuration and starts the FastAPI server on the configured port
(default: 8080).

Usage:
    python run_server.py

Or with uvicorn directly:
    uvicorn reservation_server.main:app --host 0.0.0.0 --port 8080
"""

import logging
import sys

import uvicorn

from reservation_server.config import ConfigurationError, Settings, settings


def configure_logging(log_level: str) -> None:
    """
    Configure logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )

    # Set uvicorn and Azure SDK loggers to the same level
    logging.getLogger("uvicorn").setLevel(numeric_level)
    logging.getLogger("uvicorn.access").setLevel(numeric_level)
    logging.getLogger("uvicorn.error").setLevel(numeric_level)
    # azure-core logs every HTTP request at INFO
    logging.getLogger("azure").setLevel(max(numeric_level, logging.WARNING))


def print_startup_banner(config: Settings) -> None:
    """
    Print startup banner with configuration information.

    Args:
        config: Application settings
    """
    from reservation_server import __version__

    subscription = config.azure_subscription_id or "(not set)"
    auth = "service principal" if config.uses_client_secret else "DefaultAzureCredential"
    banner = f"""
==================================================================
  Reservation Coverage Analyzer v{__version__}
------------------------------------------------------------------
  Host:          {config.host}
  Port:          {config.port}
  Environment:   {config.environment}
  Log Level:     {config.log_level}
  Subscription:  {subscription}
  Auth:          {auth}
  Feed timeout:  {config.feed_timeout_seconds}s
------------------------------------------------------------------
  Health:    http://{config.host}:{config.port}/health
  Analysis:  http://{config.host}:{config.port}/api/get-reservation-analysis
==================================================================
"""
    print(banner)


def main() -> None:
    """
    Main entry point for the analysis server.

    Loads configuration, configures logging, and starts the server.
    """
    try:
        config = settings()
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    configure_logging(config.log_level)

    logger = logging.getLogger(__name__)

    print_startup_banner(config)

    logger.info("Starting Reservation Coverage Analyzer...")
    logger.info(f"Server will listen on {config.host}:{config.port}")

    if not config.azure_subscription_id:
        logger.warning(
            "AZURE_SUBSCRIPTION_ID is not set. "
            "Server will start but every analysis request will fail."
        )

    try:
        uvicorn.run(
            "reservation_server.main:app",
            host=config.host,
            port=config.port,
            reload=config.debug,
            log_level=config.log_level.lower(),
            access_log=True,
        )
    except KeyboardInterrupt:
        logger.info("Server shutdown requested")
    except Exception as e:
        logger.error(f"Server failed to start: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
