"""Main entry point for the carrots update server.

Loads the configuration, applies it to logging and serves the web
application on a uvloop event loop until interrupted.
"""

import argparse
import asyncio
import sys
from pathlib import Path

import uvloop
from aiohttp import web

from carrots import __version__
from carrots.config import SettingsManager
from carrots.exceptions import ConfigurationError
from carrots.logger import get_logger, update_logger_from_config
from carrots.types import ServerConfig
from carrots.web import create_app

logger = get_logger(__name__)

EXIT_CONFIG_ERROR = 2


def create_parser() -> argparse.ArgumentParser:
    """Create the command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="carrots",
        description="Update and download server for GitHub releases",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Serve releases of a public repository
  ACCOUNT=owner REPOSITORY=app %(prog)s

  # Private repository on a custom port
  ACCOUNT=owner REPOSITORY=app TOKEN=ghp_... %(prog)s --port 8080
""",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument("--host", help="address to bind (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, help="port to bind (default: 3000)")
    parser.add_argument(
        "--config-dir",
        type=Path,
        help="directory holding settings.conf (default: ~/.config/carrots)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="console log level",
    )
    return parser


def load_config(args: argparse.Namespace) -> ServerConfig:
    """Load the configuration and apply command-line overrides.

    Raises:
        ConfigurationError: If the configuration is missing or invalid

    """
    config = SettingsManager(config_dir=args.config_dir).load()
    if args.host:
        config["host"] = args.host
    if args.port is not None:
        if args.port <= 0:
            raise ConfigurationError(
                f"expected a positive integer, got {args.port}", target="port"
            )
        config["port"] = args.port
    if args.log_level:
        config["console_log_level"] = args.log_level
    return config


async def serve(config: ServerConfig) -> None:
    """Serve the application until cancelled."""
    runner = web.AppRunner(
        create_app(config), access_log=get_logger("carrots.access")
    )
    await runner.setup()
    try:
        site = web.TCPSite(runner, config["host"], config["port"])
        await site.start()
        logger.info(
            "Serving %s/%s on http://%s:%d",
            config["account"],
            config["repository"],
            config["host"],
            config["port"],
        )
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()
        logger.debug("Server stopped")


def main() -> None:
    """Run the update server.

    Exits with status 2 on configuration errors and 1 on unexpected
    errors.
    """
    args = create_parser().parse_args()
    try:
        config = load_config(args)
    except ConfigurationError as e:
        logger.error("%s", e)
        sys.exit(EXIT_CONFIG_ERROR)

    update_logger_from_config(config)

    try:
        uvloop.run(serve(config))
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception:
        logger.exception("Unexpected error")
        sys.exit(1)


if __name__ == "__main__":
    main()
