"""
Main Debug Adapter entry point
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from logpoints.adapter.server import DebugAdapterServer
from logpoints.config import AdapterConfig
from logpoints.config.adapter_config import DEFAULT_AGENT_PORT
from logpoints.config.adapter_config import DEFAULT_SCM_DOMAIN
from logpoints.connections import create_connection
from logpoints.errors import ConfigurationError
from logpoints.remote.kudu import KuduLogPointsClient

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


async def start_server(config: AdapterConfig) -> None:
    """
    Start the debug adapter server with the configured connection type
    """
    logger.info("Starting debug adapter with %s connection", config.transport)

    connection = create_connection(config.transport, host=config.host, port=config.port)
    if connection is None:
        return

    server = DebugAdapterServer(connection, KuduLogPointsClient.from_config(config))
    await server.start()


def configure_logging(config: AdapterConfig) -> None:
    """Log to stderr (stdout may carry the protocol) and optionally a file."""
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        handlers.append(logging.FileHandler(config.log_file, encoding="utf-8"))

    logging.basicConfig(level=config.log_level, format=LOG_FORMAT, handlers=handlers, force=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Log points debug adapter for hosted web apps")

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Listen for a DAP client on this TCP port instead of using stdio",
    )
    parser.add_argument(
        "--host",
        type=str,
        default="localhost",
        help="Host to bind to with --port (default: localhost)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (default: INFO)",
    )
    parser.add_argument("--log-file", type=str, default=None, help="Also write the log to a file")
    parser.add_argument(
        "--scm-domain",
        type=str,
        default=DEFAULT_SCM_DOMAIN,
        help=f"Domain of the sites' SCM endpoints (default: {DEFAULT_SCM_DOMAIN})",
    )
    parser.add_argument(
        "--agent-port",
        type=int,
        default=DEFAULT_AGENT_PORT,
        help=f"Port of the in-container debugger agent (default: {DEFAULT_AGENT_PORT})",
    )
    parser.add_argument(
        "--remote-timeout",
        type=float,
        default=30.0,
        help="Timeout in seconds for each remote call (default: 30)",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """
    Main entry point for the debug adapter
    """
    args = build_parser().parse_args(argv)
    config = AdapterConfig.from_args(args)

    configure_logging(config)

    try:
        config.validate()
    except ConfigurationError as e:
        logger.error("Invalid configuration: %s", e)
        sys.exit(2)

    try:
        asyncio.run(start_server(config))
    except KeyboardInterrupt:
        logger.info("Debug adapter stopped by user")
    except Exception:
        logger.exception("Error in debug adapter")
        sys.exit(1)


if __name__ == "__main__":
    main()
