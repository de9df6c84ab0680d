"""
Health-check tools for the MCP server.

  - health:  returns an "ok" status and the service name.
  - db_ping: verifies the database connection is alive.
"""

from sqlalchemy import text

from crisper.app.db import get_engine
from crisper.app.mcp_app import mcp


@mcp.tool
def health() -> dict:
    """
    Return a simple health-check response.

    Returns:
        dict: A dictionary with "ok" set to True and the service name.
    """
    return {"ok": True, "service": "crisper-db-tools"}


@mcp.tool
async def db_ping() -> dict:
    """
    Check that the database connection is working by running a trivial query.

    Returns:
        dict: {"ok": True} if the database responded correctly.
    """
    async with get_engine().connect() as conn:
        value = await conn.scalar(text("SELECT 1"))
    return {"ok": value == 1}
