import logging
import sys

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    # Vendor credentials (treated as opaque strings by the providers)
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    openai_api_base_url: str = "https://api.openai.com"

    # Instruction sent ahead of every prompt
    system_prompt: str = "You are a helpful assistant."

    # Seconds without bytes before a stream is considered stalled
    provider_timeout: int = 60

    debug: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()


def setup_logging(debug: Optional[bool] = None):
    """Configure application logging."""
    if debug is None:
        debug = settings.debug
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # Set third-party loggers to WARNING to reduce noise
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
