"""Resilient Anthropic Client: wraps AsyncAnthropic with retry, backoff, and error mapping.

Invariants:
    - Rate limits (429): exponential backoff with jitter, respects Retry-After header
    - Transient errors (5xx, connection, 529 overloaded): max_retries with backoff
    - Timeouts and client errors (4xx except 429): immediate failure, no retry
    - All failures mapped to LanguageModelError (core/errors.py)
    - generate_text() returns plain text + web-search sources, never SDK objects
"""

import asyncio
import logging
import random

import anthropic
from anthropic import (
    APIConnectionError,
    APIError,
    APIStatusError,
    APITimeoutError,
    InternalServerError,
    RateLimitError,
)

from samaj_diary.core.errors import ErrorContext, LanguageModelError
from samaj_diary.core.repository_protocols import GeneratedText

logger = logging.getLogger(__name__)

# OverloadedError (HTTP 529) is detected by status code, not by class.
_OVERLOADED_STATUS = 529

_WEB_SEARCH_TOOL = {
    "type": "web_search_20250305",
    "name": "web_search",
    "max_uses": 3,
}


def _is_overloaded(e: APIError) -> bool:
    """Check if error is Anthropic 529 Overloaded."""
    return isinstance(e, APIStatusError) and e.status_code == _OVERLOADED_STATUS


def _field(obj, name: str):
    """Read `name` from an SDK block or a plain dict."""
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def extract_text(response) -> str:
    return "\n".join(
        _field(b, "text") for b in response.content
        if _field(b, "type") == "text" and _field(b, "text")
    )


def extract_sources(responses) -> list[dict]:
    """Titles/links from web_search_tool_result blocks, de-duplicated by URL."""
    seen: set[str] = set()
    sources: list[dict] = []
    for response in responses:
        for block in response.content:
            if _field(block, "type") != "web_search_tool_result":
                continue
            results = _field(block, "content")
            if not isinstance(results, list):
                continue  # search error payload
            for item in results:
                url = _field(item, "url")
                if not url or url in seen:
                    continue
                seen.add(url)
                sources.append({"title": _field(item, "title") or url, "url": url})
    return sources


class ResilientAnthropicClient:
    """Wraps Anthropic client with retry logic, timeouts, and error mapping."""

    WEB_SEARCH_BETA = "web-search-2025-03-05"
    _MAX_PAUSE_TURNS = 3

    def __init__(
        self,
        api_key: str,
        model: str,
        max_retries: int = 3,
        base_delay_ms: int = 1000,
        max_delay_ms: int = 30_000,
        timeout_seconds: int = 60,
    ):
        self.client = anthropic.AsyncAnthropic(
            api_key=api_key,
            timeout=timeout_seconds,
        )
        self.model = model
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms

    async def aclose(self) -> None:
        await self.client.close()

    async def generate_text(
        self,
        prompt: str,
        *,
        max_tokens: int = 500,
        web_search: bool = False,
        context: ErrorContext | None = None,
    ) -> GeneratedText:
        """Single-turn prompt. With web_search, follows pause_turn continuations."""
        messages: list[dict] = [{"role": "user", "content": prompt}]
        tools = [_WEB_SEARCH_TOOL] if web_search else []
        betas = [self.WEB_SEARCH_BETA] if web_search else None

        responses = []
        for _ in range(self._MAX_PAUSE_TURNS):
            response = await self.create_message(
                max_tokens=max_tokens, messages=messages,
                tools=tools, betas=betas, context=context,
            )
            responses.append(response)
            if response.stop_reason != "pause_turn":
                break
            messages.append({
                "role": "assistant",
                "content": [b.model_dump(exclude_none=True) for b in response.content],
            })
            messages.append({"role": "user", "content": "Continue."})

        text = extract_text(responses[-1]) or "\n".join(
            extract_text(r) for r in responses
        )
        return GeneratedText(text=text, sources=extract_sources(responses))

    async def create_message(
        self,
        *,
        max_tokens: int,
        messages: list,
        tools: list | None = None,
        betas: list[str] | None = None,
        context: ErrorContext | None = None,
    ):
        """Create message with automatic retry on transient failures."""
        for attempt in range(self.max_retries + 1):
            try:
                response = await self._call_api(
                    max_tokens=max_tokens, messages=messages,
                    tools=tools, betas=betas,
                )
                self._log_success(response, attempt)
                return response

            except RateLimitError as e:
                await self._handle_rate_limit(e, attempt, context)

            except APITimeoutError:
                raise LanguageModelError(
                    "API timeout", "timeout", context=context,
                )

            except (APIConnectionError, InternalServerError) as e:
                await self._handle_transient_error(e, attempt, context)

            except APIError as e:
                if _is_overloaded(e):
                    await self._handle_transient_error(e, attempt, context)
                    continue
                raise LanguageModelError(
                    str(e), "client_error", context=context,
                )

            except Exception as e:
                logger.error(
                    f"Unexpected Anthropic error: {e}", exc_info=True,
                )
                raise LanguageModelError(
                    str(e), "unknown", context=context,
                )

    async def _call_api(self, *, max_tokens, messages, tools, betas):
        """Route to beta or standard endpoint."""
        kwargs = {"model": self.model, "max_tokens": max_tokens, "messages": messages}
        if tools:
            kwargs["tools"] = tools
        if betas:
            return await self.client.beta.messages.create(**kwargs, betas=betas)
        return await self.client.messages.create(**kwargs)

    def _log_success(self, response, attempt: int) -> None:
        usage = response.usage
        logger.info(
            "Anthropic API success",
            extra={
                "attempt": attempt + 1,
                "input_tokens": usage.input_tokens,
                "output_tokens": usage.output_tokens,
            },
        )

    async def _handle_rate_limit(
        self, e: RateLimitError, attempt: int, context: ErrorContext | None,
    ) -> None:
        """Handle rate limit error with retry or raise."""
        retry_after_ms = self._extract_retry_after(e)
        if attempt >= self.max_retries:
            raise LanguageModelError(
                "Rate limit exceeded after retries",
                "rate_limit",
                retry_after_ms=retry_after_ms,
                context=context,
            )
        delay = retry_after_ms or self._backoff(attempt)
        logger.warning(
            f"Rate limit hit, retry after {delay}ms (attempt {attempt + 1})",
        )
        await asyncio.sleep(delay / 1000)

    async def _handle_transient_error(
        self, e: Exception, attempt: int, context: ErrorContext | None,
    ) -> None:
        """Handle transient errors with retry or raise."""
        if attempt >= self.max_retries:
            raise LanguageModelError(
                f"Transient failure after {self.max_retries} retries: {e}",
                "connection_error",
                context=context,
            )
        delay = self._backoff(attempt)
        logger.warning(f"Transient error, retry after {delay}ms: {e}")
        await asyncio.sleep(delay / 1000)

    def _backoff(self, attempt: int) -> int:
        """Exponential backoff with ±25% jitter."""
        delay = min(self.max_delay_ms, (2 ** attempt) * self.base_delay_ms)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311

    def _extract_retry_after(self, error: RateLimitError) -> int | None:
        """Extract Retry-After header (returns milliseconds)."""
        response = getattr(error, "response", None)
        if response is None:
            return None
        val = response.headers.get("retry-after")
        if val and val.isdigit():
            return int(val) * 1000
        return None
