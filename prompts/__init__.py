from prompts.builder import (
    build_system_prompt,
    build_user_content,
    build_chat_messages,
    system_prompt_for,
    single_shot_messages,
)
from prompts.guards import is_message_safe, is_attribution_question, attribution_reply

__all__ = [
    "build_system_prompt",
    "build_user_content",
    "build_chat_messages",
    "system_prompt_for",
    "single_shot_messages",
    "is_message_safe",
    "is_attribution_question",
    "attribution_reply",
]
