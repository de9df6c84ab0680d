"""
Application configuration module.

Loads environment variables (from a .env file or the system environment)
and validates them with pydantic-settings. The resulting `settings`
singleton is used by the rest of the backend: database location, upload
directory, JWT signing parameters, the local model server used by the
agent bridge and the HTTP listener.
"""

from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load environment variables from .env
load_dotenv()


class Settings(BaseSettings):
    """
    Validated application settings loaded from environment variables.

    Attributes:
        DATABASE_URL:        SQLAlchemy async URL of the relational store.
        DATA_DIR:            Directory holding uploaded avatars and post images.
        JWT_SECRET:          Secret used to sign and verify bearer tokens.
        JWT_ALGORITHM:       JWT signing algorithm.
        JWT_EXPIRES_MINUTES: Lifetime of an issued token.
        OLLAMA_BRIDGE:       Base URL of the local Ollama server.
        OLLAMA_MODEL:        Model name the agent bridge talks to.
        OLLAMA_API_KEY:      Placeholder key for the OpenAI-compatible endpoint.
        AGENT_MAX_ROUNDS:    Maximum number of model rounds per agent request.
        MCP_REQUIRE_AUTH:    Require a user bearer token on the /mcp endpoint.
        HOST / PORT:         Address the HTTP server binds to.
        LOG_LEVEL:           Root logging level.
    """
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/crisper.db"
    DATA_DIR: str = "./data"

    JWT_SECRET: str = "crisper-dev-secret"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_MINUTES: int = 60 * 24 * 7

    OLLAMA_BRIDGE: str = "http://localhost:11434"
    OLLAMA_MODEL: str = "llama3.1"
    OLLAMA_API_KEY: str = "ollama"
    AGENT_MAX_ROUNDS: int = 5

    MCP_REQUIRE_AUTH: bool = True

    HOST: str = "0.0.0.0"
    PORT: int = 3000
    LOG_LEVEL: str = "INFO"

    class Config:
        extra = "ignore"        # Ignore extra env vars not listed above


# Singleton instance used throughout the application
settings = Settings()
