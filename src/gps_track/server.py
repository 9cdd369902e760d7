"""MCP server for gps-track.

Registers all tools and runs via stdio transport.
"""

import json

from mcp.server.fastmcp import FastMCP

from .state import state
from .tools.track import register_track_tools
from .tools.georeferencing import register_georeferencing_tools
from .tools.status import register_status_tools

mcp = FastMCP(
    "gps-track",
    instructions="Load, georeference and save GPS tracks and waypoints stored as GPX",
)

# Register all tool groups
register_track_tools(mcp)
register_georeferencing_tools(mcp)
register_status_tools(mcp)


@mcp.resource("state://session")
def session_state() -> str:
    """Current track and georeferencing summary as JSON."""
    return json.dumps(state.summary(), indent=2)


def main():
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
