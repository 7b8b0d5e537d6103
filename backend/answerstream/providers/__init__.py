from answerstream.providers.base import BaseProvider
from answerstream.providers.openai import OpenAIProvider
from answerstream.providers.registry import create_default_provider, create_provider

__all__ = ["BaseProvider", "OpenAIProvider", "create_default_provider", "create_provider"]
