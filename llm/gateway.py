"""
Completion Gateway

Thin wrapper around the OpenAI-compatible chat completions API.
Exposes plain Python types only - no SDK objects leak out.

DESIGN RULES:
- Exactly one outbound call per invocation (SDK retries disabled)
- Non-success responses raise UpstreamError with the upstream body verbatim
- No prompt logging
"""

import logging
import time
from dataclasses import dataclass, field, replace
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx
import openai
from openai import AsyncOpenAI

from app.core.errors import UpstreamError
from memory.types import Message


logger = logging.getLogger(__name__)

NO_RESPONSE = "No response"


@dataclass(frozen=True)
class CompletionOptions:
    """Sampling options sent with every completion request."""
    model: str = "gpt-4o-mini"
    temperature: float = 0.2
    max_tokens: int = 800
    top_p: float = 1.0

    def with_overrides(self, **overrides: Any) -> "CompletionOptions":
        """Copy with the given non-None fields replaced."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def to_request(self) -> Dict[str, Any]:
        return {
            "model": self.model,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "top_p": self.top_p,
        }


@dataclass(frozen=True)
class CompletionResult:
    """Buffered completion reply."""
    reply_text: str
    raw_response: Dict[str, Any] = field(default_factory=dict)


def _to_upstream_error(e: openai.APIError) -> UpstreamError:
    if isinstance(e, openai.APIStatusError):
        return UpstreamError(e.response.text, upstream_status=e.status_code)
    return UpstreamError(str(e))


class CompletionStream:
    """
    Text chunks of one streamed completion.

    Iterate to receive chunks in order; aclose() releases the upstream
    connection, ending the request early if it is still running.
    """

    def __init__(self, upstream: openai.AsyncStream):
        self._upstream = upstream
        self._closed = False

    def __aiter__(self) -> AsyncIterator[str]:
        return self._chunks()

    async def _chunks(self) -> AsyncIterator[str]:
        try:
            async for event in self._upstream:
                for choice in event.choices or ():
                    text = choice.delta.content if choice.delta else None
                    if text:
                        yield text
        except openai.APIError as e:
            raise _to_upstream_error(e) from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"stream interrupted: {e}") from e

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._upstream.close()


class CompletionGateway:
    """
    Completion API client with buffered and streamed modes.

    One instance is shared by the whole app; it owns the HTTP connection pool.
    """

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        default_options: Optional[CompletionOptions] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            api_key: Completion API key
            base_url: API root (defaults to the SDK's OpenAI endpoint)
            default_options: Options used when a call passes none
            http_client: Custom transport, e.g. for tests
        """
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            max_retries=0,
            http_client=http_client,
        )
        self._default_options = default_options or CompletionOptions()

    @property
    def default_options(self) -> CompletionOptions:
        return self._default_options

    def _payload(self, messages: List[Message], options: Optional[CompletionOptions]) -> Dict[str, Any]:
        opts = options or self._default_options
        return {"messages": [m.to_dict() for m in messages], **opts.to_request()}

    async def complete(
        self,
        messages: List[Message],
        options: Optional[CompletionOptions] = None,
    ) -> CompletionResult:
        """
        Request a whole completion.

        Args:
            messages: Ordered conversation to send
            options: Sampling options (gateway defaults if omitted)

        Returns:
            CompletionResult with the first choice's text and the raw reply

        Raises:
            UpstreamError: Non-success status or network failure
        """
        payload = self._payload(messages, options)
        start_time = time.time()
        try:
            response = await self._client.chat.completions.create(**payload)
        except openai.APIError as e:
            logger.warning(f"Completion failed after {int((time.time() - start_time) * 1000)}ms: {e}")
            raise _to_upstream_error(e) from e

        latency_ms = int((time.time() - start_time) * 1000)
        logger.info(f"Completion ok: model={payload['model']} messages={len(messages)} latency_ms={latency_ms}")

        reply = NO_RESPONSE
        if response.choices and response.choices[0].message and response.choices[0].message.content:
            reply = response.choices[0].message.content
        return CompletionResult(reply_text=reply, raw_response=response.model_dump())

    async def complete_streaming(
        self,
        messages: List[Message],
        options: Optional[CompletionOptions] = None,
    ) -> CompletionStream:
        """
        Open a streamed completion.

        The upstream status is checked before this returns, so a rejected
        request raises here rather than mid-stream.

        Raises:
            UpstreamError: Non-success status or network failure
        """
        payload = self._payload(messages, options)
        try:
            upstream = await self._client.chat.completions.create(stream=True, **payload)
        except openai.APIError as e:
            logger.warning(f"Streamed completion rejected: {e}")
            raise _to_upstream_error(e) from e
        logger.info(f"Streamed completion opened: model={payload['model']} messages={len(messages)}")
        return CompletionStream(upstream)

    async def aclose(self) -> None:
        await self._client.close()
