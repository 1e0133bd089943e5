"""Google Tasks MCP Server.

Exposes Google Tasks to MCP clients as tools (search, list, create,
update, delete, clear) and as ``gtasks:///<taskId>`` resources.
"""

from gtasks_mcp.__version__ import __version__

__all__ = ["__version__"]
