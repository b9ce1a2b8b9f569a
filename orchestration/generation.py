"""
Single-Shot Generation

One completion per request from a fixed two-message template. No history
is read or written.

Quiz and flashcards ask the model for JSON; parsing is best-effort and
falls back to the raw text.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from app.core.errors import ValidationError
from llm.gateway import CompletionGateway, CompletionOptions
from llm.structured import extract_json
from prompts import builder


logger = logging.getLogger(__name__)

# Output cap for generated study material
GENERATION_MAX_TOKENS = 600


@dataclass(frozen=True)
class StructuredResult:
    """Parsed value, or None with the raw text kept."""
    parsed: Optional[Any]
    raw: str

    @property
    def ok(self) -> bool:
        return self.parsed is not None


def require(value: Optional[str], field: str) -> str:
    """Return the value, or raise ValidationError naming the field."""
    if value is None or not str(value).strip():
        raise ValidationError(field)
    return value


class GenerationService:
    """
    Template-driven study tools.

    Each method validates its inputs, builds the feature's prompt and
    returns the model output.
    """

    def __init__(self, gateway: CompletionGateway):
        self._gateway = gateway

    def _options(self, max_tokens: Optional[int] = None) -> CompletionOptions:
        return self._gateway.default_options.with_overrides(max_tokens=max_tokens)

    async def _run(self, feature: str, user_content: str, max_tokens: Optional[int] = None) -> str:
        messages = builder.single_shot_messages(feature, user_content)
        result = await self._gateway.complete(messages, self._options(max_tokens))
        logger.info(f"Generated {feature} ({len(result.reply_text)} chars)")
        return result.reply_text

    async def _run_structured(self, feature: str, user_content: str) -> StructuredResult:
        text = await self._run(feature, user_content, GENERATION_MAX_TOKENS)
        parsed = extract_json(text)
        if parsed is None:
            logger.warning(f"{feature} output was not valid JSON; returning raw text")
        return StructuredResult(parsed=parsed, raw=text)

    async def quiz(self, topic: Optional[str], count: int = 5, difficulty: str = "medium") -> StructuredResult:
        topic = require(topic, "topic")
        return await self._run_structured("quiz", builder.quiz_prompt(topic, count, difficulty))

    async def flashcards(self, topic: Optional[str], count: int = 10) -> StructuredResult:
        topic = require(topic, "topic")
        return await self._run_structured("flashcards", builder.flashcards_prompt(topic, count))

    async def summarize(self, text: Optional[str], length: str = "short") -> str:
        text = require(text, "text")
        return await self._run("summary", builder.summarize_prompt(text, length))

    async def translate(
        self,
        text: Optional[str],
        target_language: Optional[str],
        source_language: Optional[str] = None,
    ) -> str:
        text = require(text, "text")
        target_language = require(target_language, "targetLanguage")
        return await self._run("translate", builder.translate_prompt(text, target_language, source_language))

    async def grade_essay(self, essay: Optional[str], question: Optional[str] = None, level: str = "high school") -> str:
        essay = require(essay, "essay")
        return await self._run("essay", builder.essay_grading_prompt(essay, question, level))

    async def format_reference(self, source: Optional[str], style: str = "APA") -> str:
        source = require(source, "source")
        return await self._run("reference", builder.reference_prompt(source, style))

    async def hint(self, problem: Optional[str], subject: str = "General") -> str:
        problem = require(problem, "problem")
        return await self._run("hint", builder.hint_prompt(problem, subject))

    async def recommend_resources(self, topic: Optional[str], level: str = "beginner") -> str:
        topic = require(topic, "topic")
        return await self._run("resources", builder.resources_prompt(topic, level))

    async def summarize_document(self, text: str, max_chars: int) -> str:
        """Summarize extracted document text, truncated to max_chars."""
        return await self._run(
            "document",
            builder.document_summary_prompt(text[:max_chars]),
            GENERATION_MAX_TOKENS,
        )
