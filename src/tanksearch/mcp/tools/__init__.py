"""Tool registration modules for the tanksearch MCP server."""

from .indexes import register_index_tools

__all__ = ["register_index_tools"]
