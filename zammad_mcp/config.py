"""
Configuration for the Zammad MCP server.

Values come from the process environment. A `.env` file in the working
directory is read too so local runs don't need exported variables.
"""

from typing import Literal, Optional

from pydantic import Field
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from zammad_mcp.errors import ConfigError

REQUIRED = ("zammad_url", "zammad_token")


class Settings(BaseSettings):
    """Application settings"""

    # Zammad
    zammad_url: str = Field(min_length=1)
    zammad_token: str = Field(min_length=1)
    zammad_username: str = ""
    zammad_password: str = ""
    zammad_oauth_token: str = ""
    zammad_timeout: float = Field(default=30.0, gt=0)

    # MCP transport
    mcp_transport: Literal["stdio", "http"] = "stdio"
    mcp_host: str = "0.0.0.0"
    mcp_port: int = 8001

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
    )


def load_settings(env_file: Optional[str] = None, **overrides) -> Settings:
    """
    Build Settings from the environment.

    Args:
        env_file: Optional path of a dotenv file to read (default: `.env`)
        **overrides: Explicit values (e.g. from the command line) that win
            over the environment. None values are ignored.

    Raises:
        ConfigError: If ZAMMAD_URL / ZAMMAD_TOKEN are missing or a value
            cannot be parsed.
    """
    values = {k: v for k, v in overrides.items() if v is not None}
    if env_file is not None:
        values["_env_file"] = env_file

    try:
        return Settings(**values)
    except PydanticValidationError as e:
        missing = [
            str(error["loc"][0]).upper()
            for error in e.errors()
            if error["loc"] and error["loc"][0] in REQUIRED
            and error["type"] in ("missing", "string_too_short")
        ]
        if missing:
            raise ConfigError(
                f"{' and '.join(missing)} environment variable(s) must be set"
            ) from e
        raise ConfigError(f"Invalid configuration: {e}") from e
