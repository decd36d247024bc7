"""
Configuration module for the thumbnail service.

Uses pydantic-settings for environment-based configuration with sensible defaults.
"""

import os
import pathlib
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


# Detect if we're running in a Docker container
_IS_DOCKER = pathlib.Path("/.dockerenv").exists() or os.getenv("DOCKER_CONTAINER", "").lower() == "true"

# Default paths based on environment
if _IS_DOCKER:
    _DEFAULT_MONGODB_URL = "mongodb://mongo:27017"
    _DEFAULT_SQLITE_PATH = "/data/assistants.sqlite"
else:
    # Local development: use relative paths
    _SERVICE_DIR = pathlib.Path(__file__).parent.parent
    _DEFAULT_DATA_DIR = _SERVICE_DIR / "data"
    _DEFAULT_MONGODB_URL = "mongodb://localhost:27017"
    _DEFAULT_SQLITE_PATH = str(_DEFAULT_DATA_DIR / "assistants.sqlite")


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    Example: STORE=sqlite SQLITE_PATH=/tmp/assistants.sqlite
    """

    model_config = SettingsConfigDict(env_prefix="", extra="ignore")

    # Storage configuration
    STORE: str = Field(
        default="mongo",
        description="Storage backend: 'mongo' or 'sqlite'"
    )
    MONGODB_URL: str = Field(
        default=_DEFAULT_MONGODB_URL,
        description="MongoDB connection URL"
    )
    MONGODB_DB_NAME: str = Field(
        default="chat-ui",
        description="Database holding the assistants collection"
    )
    ASSISTANTS_COLLECTION: str = Field(
        default="assistants",
        description="Collection of assistant documents"
    )
    AVATAR_BUCKET: str = Field(
        default="assistants",
        description="GridFS bucket holding assistant avatars (filename = assistant id)"
    )
    MONGODB_TIMEOUT_MS: int = Field(
        default=5000,
        description="Server selection timeout for MongoDB in milliseconds"
    )
    SQLITE_PATH: str = Field(
        default=_DEFAULT_SQLITE_PATH,
        description="Path to SQLite database file"
    )

    # Fonts (both weights share FONT_FAMILY)
    FONT_FAMILY: str = Field(
        default="Inter",
        description="Font family name used in the rendered card"
    )
    FONT_REGULAR_PATH: str | None = Field(
        default=None,
        description="TrueType file for the regular (500) weight"
    )
    FONT_BOLD_PATH: str | None = Field(
        default=None,
        description="TrueType file for the bold (700) weight"
    )

    # Design tokens
    PUBLIC_APP_COLOR: str = Field(
        default="blue",
        description="Palette name used as the primary colour"
    )
    PUBLIC_APP_NAME: str = Field(
        default="HuggingChat",
        description="App name printed in the card footer"
    )

    # Avatar constraints
    AVATAR_MAX_MB: int = Field(
        default=10,
        description="Avatars larger than this are ignored"
    )
    AVATAR_MAX_SIDE: int = Field(
        default=512,
        description="Avatars are downscaled to fit this many pixels per side"
    )

    # Request handling
    RENDER_TIMEOUT_S: float = Field(
        default=15.0,
        description="Upper bound for producing one thumbnail, in seconds"
    )

    # Service metadata
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Root log level"
    )
    SERVICE_NAME: str = Field(
        default="assistant-thumbnail",
        description="Service name for logging and health checks"
    )
    SERVICE_VERSION: str = Field(
        default="1.0.0",
        description="Service version"
    )


# Singleton settings instance
settings = Settings()
