"""tanksearch MCP server entrypoint using FastMCP.

Exposes search index tools built on `ApiClient`.
Run with:
  - tanksearch-mcp
  - or: python -m tanksearch.mcp.server (ensure PYTHONPATH includes ./src)
"""
from __future__ import annotations

import logging
from typing import Optional

from fastmcp import FastMCP

from tanksearch.account import ApiClient
from tanksearch.config import Settings, load_settings
from tanksearch.logging_config import setup_logging
from tanksearch.mcp.tools import register_index_tools

logger = logging.getLogger(__name__)


class AppState:
    """Application state shared by MCP tools."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.api: Optional[ApiClient] = None

    def init_clients(self) -> None:
        """Initialize the API client from configuration, if a URL is set."""
        if self.settings.api.url:
            self.api = ApiClient.from_settings(self.settings)
        else:
            logger.warning("TANKSEARCH_API__URL is not set; index tools will fail until configured")
            self.api = None


# Global state and server instance
_state: Optional[AppState] = None
mcp = FastMCP("tanksearch MCP Server")


# ----- Tools -----

@mcp.tool
def health() -> str:
    """Simple health check tool."""
    return "ok"


# ----- Entrypoint -----

def main() -> None:
    """Initialize state and run the MCP server."""
    global _state
    settings = load_settings()
    setup_logging(settings.app.log_level)
    _state = AppState(settings)
    _state.init_clients()
    register_index_tools(mcp, get_state=lambda: _state)
    # Choose transport based on configuration: stdio (default), http, or sse
    transport = settings.app.transport
    if transport in ("http", "sse"):
        mcp.run(transport=transport, host=settings.app.host, port=settings.app.port)
    else:
        mcp.run()


if __name__ == "__main__":  # pragma: no cover
    main()
