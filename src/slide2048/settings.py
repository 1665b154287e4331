# settings.py
# Game constants and runtime configuration shared by the API, the CLI and the advisor.

import logging
import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field

BOARD_ROWS = 4
BOARD_COLS = 4
WIN_TILE = 2048
INITIAL_TILE = 2
SPAWN_VALUES = (2, 4)  # Drawn with equal weight

RATE_LIMIT = "100/minute"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class AdvisorSettings(BaseModel):
    """Connection and sampling settings for the move advisor."""
    api_key: Optional[str] = Field(
        default=None,
        description="Fallback credential used when a request does not carry its own."
    )
    model: str = Field(default="gpt-3.5-turbo", description="Chat model asked for suggestions.")
    temperature: float = Field(default=0.7, ge=0, le=2)
    max_tokens: int = Field(default=200, gt=0)
    timeout: float = Field(default=15.0, gt=0, description="Seconds before a suggestion is abandoned.")
    max_retries: int = Field(default=2, ge=0)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AdvisorSettings":
        """
        Builds settings from environment variables, keeping defaults for anything unset.
        Args:
            environ (Mapping[str, str], optional): Source mapping. Defaults to os.environ.
        Returns:
            AdvisorSettings: The resolved settings.
        """
        env = os.environ if environ is None else environ
        values = {}
        if env.get("OPENAI_API_KEY"):
            values["api_key"] = env["OPENAI_API_KEY"]
        if env.get("SLIDE2048_ADVISOR_MODEL"):
            values["model"] = env["SLIDE2048_ADVISOR_MODEL"]
        if env.get("SLIDE2048_ADVISOR_TIMEOUT"):
            values["timeout"] = env["SLIDE2048_ADVISOR_TIMEOUT"]
        if env.get("SLIDE2048_ADVISOR_MAX_RETRIES"):
            values["max_retries"] = env["SLIDE2048_ADVISOR_MAX_RETRIES"]
        return cls(**values)


def configure_logging(level: Optional[str] = None) -> None:
    """Configures root logging; the level falls back to SLIDE2048_LOG_LEVEL, then INFO."""
    level_name = (level or os.environ.get("SLIDE2048_LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)
