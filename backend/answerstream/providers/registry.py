import logging
from typing import Dict, Optional, Type

from answerstream.config import Settings, settings as default_settings
from answerstream.providers.base import BaseProvider
from answerstream.providers.openai import OpenAIProvider
from answerstream.utils.exceptions import RequestSetupError

logger = logging.getLogger(__name__)


# Mapping of provider types to their classes
PROVIDER_CLASSES: Dict[str, Type[BaseProvider]] = {
    "openai": OpenAIProvider,
}


def create_provider(
    provider_type: str,
    token: str,
    model: str,
    api_base_url: Optional[str] = None,
    **kwargs,
) -> BaseProvider:
    """Instantiate the provider registered under ``provider_type``."""
    provider_class = PROVIDER_CLASSES.get(provider_type)
    if not provider_class:
        raise RequestSetupError(f"Unknown provider type '{provider_type}'")

    provider = provider_class(token, model, api_base_url, **kwargs)
    if not provider.is_configured():
        logger.warning(f"Provider '{provider_type}' created without a token or model")
    return provider


def create_default_provider(config: Optional[Settings] = None) -> BaseProvider:
    """Build the OpenAI provider from application settings"""
    config = config or default_settings
    return create_provider(
        "openai",
        token=config.openai_api_key or "",
        model=config.openai_model,
        api_base_url=config.openai_api_base_url,
        system_prompt=config.system_prompt,
        timeout=config.provider_timeout,
    )
