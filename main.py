# =============================================================================
# main.py  -  Entry Point for the Opine MCP Server
# =============================================================================
#
# HOW TO RUN:
#   uv run python main.py          (or the installed `opine-mcp-server`)
#
# WHAT HAPPENS:
#   1. Loads .env into the environment (OPINE_API_KEY, ...)
#   2. Builds the config; exits with status 1 if the API key is missing
#   3. Configures logging on STDERR (stdout belongs to MCP)
#   4. Creates the OpineClient, the ToolDispatcher and the FastMCP server
#   5. Serves MCP over stdio until the client disconnects
# =============================================================================

import logging
import sys

from dotenv import load_dotenv

from core.config import load_config
from core.errors import ConfigError
from core.opine_client import OpineClient
from tools.dispatcher import ToolDispatcher
from tools.mcp_server import build_server


def main() -> None:
    load_dotenv()

    try:
        config = load_config()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s [MCP] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    dispatcher = ToolDispatcher(OpineClient.from_config(config))
    server = build_server(dispatcher)

    logging.info("Opine MCP server running on stdio (api: %s)", config.base_url)
    server.run()


# =============================================================================
# Script entry point
# =============================================================================
if __name__ == "__main__":
    main()
