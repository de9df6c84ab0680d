"""
MCP client factory.

Provides a helper that creates a FastMCP Client bound to the backend's own
MCP server. The agent bridge uses it to discover the available tools and
to execute tool calls without going through HTTP.
"""

from fastmcp import Client, FastMCP


def make_client(server: FastMCP) -> Client:
    """
    Create and return a new in-process FastMCP Client.

    Args:
        server: The FastMCP application whose tools should be reachable.

    Returns:
        Client: A configured FastMCP client ready to be used as an async context manager.
    """
    return Client(server)


def tool_definitions(tools) -> list:
    """
    Convert MCP tool listings into the provider-neutral definitions the
    ToolAgent expects (name, description, input_schema).
    """
    return [
        {
            "name": t.name,
            "description": t.description or f"Execute {t.name}",
            # If the tool has no input parameters, provide an empty schema
            "input_schema": (
                t.inputSchema
                if (t.inputSchema and t.inputSchema.get("properties"))
                else {
                    "type": "object",
                    "properties": {},
                    "required": [],
                }
            ),
        }
        for t in tools
    ]
