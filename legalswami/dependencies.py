"""
Centralized dependency injection for FastAPI.

This module is the composition root: it builds the credential pool, the
upstream client, the model dispatcher and the chat layer exactly once per
process, using @lru_cache() for singleton management.

All dependencies can be overridden in tests using app.dependency_overrides.
"""

from functools import lru_cache

from legalswami.config import get_settings
from legalswami.credentials.pool import CredentialPool
from legalswami.credentials.sources import default_sources
from legalswami.providers.base import CompletionClient
from legalswami.providers.groq import GroqCompletionClient
from legalswami.routing.dispatcher import ModelDispatcher
from legalswami.services.chat_service import ChatService
from legalswami.storage.memory import ChatStore


@lru_cache()
def get_credential_pool() -> CredentialPool:
    """
    Get singleton CredentialPool instance.

    Credentials are resolved from every configured source on first use.
    """
    settings = get_settings()
    return CredentialPool.from_sources(
        default_sources(settings),
        settings.api_key_encryption_secret.get_secret_value(),
    )


@lru_cache()
def get_completion_client() -> CompletionClient:
    """
    Get singleton upstream completion client.
    """
    settings = get_settings()
    return GroqCompletionClient(
        api_url=settings.groq_api_url,
        timeout_s=settings.upstream_timeout_s,
        temperature=settings.temperature,
        max_tokens=settings.max_tokens,
    )


@lru_cache()
def get_model_dispatcher() -> ModelDispatcher:
    """
    Get singleton ModelDispatcher instance.

    Returns:
        ModelDispatcher: Shared dispatcher; its cursor is process-wide
    """
    return ModelDispatcher.from_settings(get_settings(), get_completion_client(), get_credential_pool())


@lru_cache()
def get_chat_store() -> ChatStore:
    """
    Get singleton ChatStore instance.
    """
    return ChatStore()


@lru_cache()
def get_chat_service() -> ChatService:
    """
    Get singleton ChatService instance.
    """
    return ChatService(get_chat_store(), get_model_dispatcher())
