from .base import ChatCompletionProvider, ProviderNotConfigured
from .factory import get_chat_provider

__all__ = ["ChatCompletionProvider", "ProviderNotConfigured", "get_chat_provider"]
