"""
MCP application instance.

Creates and exports the single FastMCP application object used by the
backend. All MCP tools (health, posts, users, topics) register themselves
on this instance via the @mcp.tool decorator when `crisper.tools` is
imported.

Authentication is added as a FastMCP middleware in
`crisper.app.auth_middleware`; it only applies to HTTP requests, so the
in-process client used by the agent bridge is trusted.
"""

from fastmcp import FastMCP

from crisper.app.auth_middleware import JwtBearerAuthMiddleware
from crisper.app.config import settings

# The shared FastMCP application instance.
# Tool modules import this object and use @mcp.tool to register their functions.
mcp = FastMCP("crisper-db-tools")

if settings.MCP_REQUIRE_AUTH:
    mcp.add_middleware(JwtBearerAuthMiddleware())
