"""Runtime settings for the simulator.

Settings are read from environment variables. A ``.env`` file in the working
directory is loaded first (python-dotenv) so API keys can live outside the
shell environment.

Environment Variables:
    DES_USERNAME - Login name shown by whoami, ls -l and the prompt
    DES_HOSTNAME - Host name used by uname -a and the prompt
    DES_HOME - Home directory (defaults to /home/<username>)
    GEMINI_API_KEY - API key for the AI fallback gateway
    DES_GEMINI_MODEL - Model used by the AI fallback gateway
    DES_GEMINI_BASE_URL - Base URL of the Gemini REST API
    DES_GATEWAY_TIMEOUT - Gateway request timeout in seconds (unset = none)
    DES_LOG_LEVEL - Root logging level
"""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class Settings(BaseModel):
    """Simulator configuration.

    Args:
        username: Login name of the simulated user.
        hostname: Host name of the simulated machine.
        home: Home directory of the simulated user.
        gemini_api_key: API key for the AI fallback gateway.
        gemini_model: Model name for the AI fallback gateway.
        gemini_base_url: Base URL of the Gemini REST API.
        gateway_timeout: Gateway timeout in seconds, None for no timeout.
        log_level: Root logging level name.
    """

    username: str = Field(default="user", description="Login name of the simulated user")
    hostname: str = Field(default="desktop", description="Host name of the simulated machine")
    home: Optional[str] = Field(default=None, description="Home directory of the simulated user")
    gemini_api_key: Optional[str] = Field(
        default=None, description="API key for the AI fallback gateway"
    )
    gemini_model: str = Field(
        default="gemini-2.5-flash", description="Model for the AI fallback gateway"
    )
    gemini_base_url: str = Field(
        default=DEFAULT_GEMINI_BASE_URL, description="Base URL of the Gemini REST API"
    )
    gateway_timeout: Optional[float] = Field(
        default=None, gt=0, description="Gateway timeout in seconds (None = no timeout)"
    )
    log_level: str = Field(default="INFO", description="Root logging level")

    @model_validator(mode="after")
    def fill_home(self) -> "Settings":
        """Derive the home directory from the username when not given."""
        if not self.home:
            self.home = f"/home/{self.username}"
        return self

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "Settings":
        """Build settings from environment variables.

        Args:
            load_env_file: Whether to load a ``.env`` file first.

        Returns:
            A Settings instance. Unset variables fall back to defaults.
        """
        if load_env_file:
            load_dotenv()

        env_map = {
            "username": "DES_USERNAME",
            "hostname": "DES_HOSTNAME",
            "home": "DES_HOME",
            "gemini_api_key": "GEMINI_API_KEY",
            "gemini_model": "DES_GEMINI_MODEL",
            "gemini_base_url": "DES_GEMINI_BASE_URL",
            "gateway_timeout": "DES_GATEWAY_TIMEOUT",
            "log_level": "DES_LOG_LEVEL",
        }
        data = {
            field: os.environ[var] for field, var in env_map.items() if os.environ.get(var)
        }
        return cls(**data)
