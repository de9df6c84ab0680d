from mcp import McpError
from mcp.types import ErrorData

from fastmcp.exceptions import ToolError
from fastmcp.server.dependencies import get_http_headers, get_http_request
from fastmcp.server.middleware import Middleware, MiddlewareContext

from crisper.app.errors import UnauthorizedError
from crisper.app.security import bearer_token, decode_token


class JwtBearerAuthMiddleware(Middleware):
    """Require a valid user JWT on MCP calls that arrive over HTTP."""

    def _over_http(self) -> bool:
        try:
            get_http_request()
        except RuntimeError:
            return False
        return True

    def _is_authorized(self) -> bool:
        headers = get_http_headers(include_all=True) or {}
        auth = headers.get("authorization") or headers.get("Authorization")
        try:
            decode_token(bearer_token(auth))
        except UnauthorizedError:
            return False
        return True

    async def __call__(self, context: MiddlewareContext, call_next):
        # In-process clients (the agent bridge) have no HTTP request
        if self._over_http() and not self._is_authorized():
            return self._deny(
                context,
                "Unauthorized: missing or invalid Authorization Bearer token",
            )

        return await call_next(context)

    def _deny(self, context: MiddlewareContext, message: str):
        method = getattr(context, "method", "") or ""
        if method == "tools/call":
            raise ToolError(message)

        # list_tools / initialize / ping / etc.
        raise McpError(ErrorData(code=-32001, message=message))
