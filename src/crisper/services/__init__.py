"""
Data operations shared by the HTTP routes, the MCP tools and the agent bridge.

Every function opens its own connection on the shared engine; writes run
inside a single transaction.
"""
