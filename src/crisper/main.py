"""
Entry point for the Crisper backend.

Builds a FastAPI application that serves:
  - the REST API under /api (users, posts, replies, likes, topics, agent),
  - uploaded images under /s3,
  - the MCP tool server (streamable HTTP) under /mcp.

On startup the database tables are created and the MCP session manager is
started; on shutdown the database engine is disposed.
"""

import logging
from contextlib import asynccontextmanager
from importlib import resources

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from crisper import __version__
from crisper.agent.llm import ToolAgent
from crisper.app import storage
from crisper.app.config import settings
from crisper.app.db import close_engine, init_db
from crisper.app.errors import register_error_handlers
from crisper.app.mcp_app import mcp
from crisper.routes import agent, health, likes, posts, replies, topics, users

# Import tool modules so their @mcp.tool decorators run at startup.
# The "noqa: F401" comments tell linters these imports are intentional
# even though the modules are not used directly in this file.
import crisper.tools.health  # noqa: F401
import crisper.tools.posts   # noqa: F401
import crisper.tools.topics  # noqa: F401
import crisper.tools.users   # noqa: F401

logger = logging.getLogger(__name__)

DEFAULT_AVATAR = resources.files("crisper") / "assets" / "default_avatar.png"


def create_app() -> FastAPI:
    """
    Build the ASGI application: routers, static files, error handlers and
    the mounted MCP server.
    """
    # A new MCP ASGI app per FastAPI app: its session manager runs once
    mcp_http = mcp.http_app(path="/")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await init_db()
        async with mcp_http.lifespan(app):
            logger.info("Crisper backend ready")
            yield
        await close_engine()

    app = FastAPI(
        title="Crisper API Documentation",
        description="A smart, handy place to share posts",
        version=__version__,
        license_info={"name": "MIT LICENSE"},
        docs_url="/api/docs",
        openapi_url="/api/openapi.json",
        redoc_url=None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    for module in (health, users, posts, replies, likes, topics, agent):
        app.include_router(module.router)

    app.state.agent = ToolAgent(
        settings.OLLAMA_BRIDGE,
        settings.OLLAMA_MODEL,
        api_key=settings.OLLAMA_API_KEY,
    )

    @app.get("/s3/avatars/default.png", include_in_schema=False)
    async def default_avatar():
        return FileResponse(str(DEFAULT_AVATAR), media_type="image/png")

    app.mount("/s3", StaticFiles(directory=str(storage.ensure_dirs())), name="s3")
    app.mount("/mcp", mcp_http)

    return app


def main() -> None:
    """
    Configure logging and start the Uvicorn server.
    """
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    uvicorn.run(create_app(), host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        pass
