"""
FastAPI Dependencies

All object creation happens here, not per request.
Routes receive the store, gateway and services through Depends().

RULE: the store backend is chosen once, from configuration.
"""

import logging
from functools import lru_cache

from fastapi import Depends

from app.core.config import settings
from llm.gateway import CompletionGateway, CompletionOptions
from memory.base import ConversationStore
from memory.redis_store import RedisConversationStore
from memory.session_store import InMemoryConversationStore
from orchestration.chat import ChatOrchestrator
from orchestration.generation import GenerationService


logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_conversation_store() -> ConversationStore:
    """
    Create and cache the conversation store singleton.

    Returns:
        RedisConversationStore when the resolved backend is 'redis',
        otherwise InMemoryConversationStore.
    """
    backend = settings.resolved_store_backend()
    if backend == "redis":
        logger.info("Using Redis conversation store")
        return RedisConversationStore.from_url(
            settings.redis_url,
            history_cap=settings.history_cap,
            socket_timeout=settings.redis_socket_timeout,
        )
    logger.info("Using in-memory conversation store")
    return InMemoryConversationStore(history_cap=settings.history_cap)


@lru_cache(maxsize=1)
def get_completion_gateway() -> CompletionGateway:
    """Create and cache the completion gateway singleton."""
    return CompletionGateway(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        default_options=CompletionOptions(
            model=settings.model,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
            top_p=settings.top_p,
        ),
    )


def get_chat_orchestrator(
    store: ConversationStore = Depends(get_conversation_store),
    gateway: CompletionGateway = Depends(get_completion_gateway),
) -> ChatOrchestrator:
    return ChatOrchestrator(store=store, gateway=gateway, config=settings)


def get_generation_service(
    gateway: CompletionGateway = Depends(get_completion_gateway),
) -> GenerationService:
    return GenerationService(gateway)
