import os
import sys
import asyncio
import argparse
import logging
from dotenv import load_dotenv

from figma_assets.config import Config
from figma_assets.server import FigmaToolService, create_server
from figma_assets.utils import setup_logging


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Figma asset extraction MCP server (stdio)')
    parser.add_argument('token', nargs='?', help='Figma access token (defaults to FIGMA_TOKEN)')
    parser.add_argument('--log-level', help='Logging level (defaults to LOG_LEVEL or INFO)')
    parser.add_argument('--log-file', help='Also write logs to this file')
    parser.add_argument('--check-token', action='store_true', help='Validate the token against the API and exit')
    return parser.parse_args(argv)


async def check_token(service: FigmaToolService) -> bool:
    try:
        return await service.client.validate_token()
    finally:
        await service.client.aclose()


def main(argv=None):
    """Load configuration, then serve the Figma tools over stdio"""

    # Load environment variables
    env_loaded = False
    if os.path.exists('.env'):
        load_dotenv('.env')
        env_loaded = True

    args = parse_args(argv)
    config = Config(figma_token=args.token)

    # Setup logging
    setup_logging(args.log_level or config.log_level, args.log_file or config.log_file)
    logger = logging.getLogger(__name__)

    if env_loaded:
        logger.info("Environment variables loaded from .env")

    if not config.validate():
        logger.error("Invalid configuration; a Figma access token is passed as an argument or via FIGMA_TOKEN")
        return 1

    service = FigmaToolService.from_config(config)

    if args.check_token:
        return 0 if asyncio.run(check_token(service)) else 1

    server = create_server(service)
    logger.info("🚀 Figma assets MCP server started (stdio)")
    try:
        server.run()
    except KeyboardInterrupt:
        logger.info("Server stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
