"""Daily Content Service: date-keyed quote and almanac with model regeneration.

Lookup order per kind: process memory, then the store's dailyContent
document, then one regeneration call.

Invariants:
    - An entry dated today (content timezone) never triggers a model call
    - A stale or missing entry triggers exactly one call and is overwritten
      with today's date, in memory and in the store
    - Fallback text (model failure or empty output) is returned but never cached
    - A per-kind asyncio.Lock serializes refreshes within this process
    - Store failures degrade to memory-only caching; they never fail the request
"""

import asyncio
import logging
import random
from collections.abc import Callable
from datetime import date, datetime, timezone

from samaj_diary.config import Settings
from samaj_diary.core.daily_content import (
    QUOTE_PROMPT,
    CachedText,
    build_name_cleanup_prompt,
    build_panchang_prompt,
    clean_generated_text,
    is_fresh,
    parse_almanac,
    today_in_timezone,
)
from samaj_diary.core.domain_types import ContentKind
from samaj_diary.core.errors import DocumentStoreError, LanguageModelError
from samaj_diary.core.language_strings import PANCHANG_UNAVAILABLE, pick_fallback_quote
from samaj_diary.core.repository_protocols import TextGenerator
from samaj_diary.services.repository import DirectoryRepository

logger = logging.getLogger(__name__)


class DailyContentService:
    """Serves today's quote and almanac, regenerating at most once per day."""

    def __init__(
        self,
        repository: DirectoryRepository,
        generator: TextGenerator,
        settings: Settings,
        clock: Callable[[], datetime] | None = None,
        rng: random.Random | None = None,
    ):
        self.repository = repository
        self.generator = generator
        self.settings = settings
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._rng = rng
        self._memory: dict[ContentKind, CachedText] = {}
        self._locks = {kind: asyncio.Lock() for kind in ContentKind}

    def today(self) -> str:
        return today_in_timezone(self.settings.content_timezone, self._clock())

    async def get_daily_content(self) -> dict:
        quote, panchang = await asyncio.gather(
            self.get(ContentKind.QUOTE), self.get(ContentKind.PANCHANG),
        )
        return {
            "date": self.today(),
            "quote": quote.text,
            "panchang": panchang.text,
            "panchang_details": parse_almanac(panchang.text),
            "sources": panchang.sources,
        }

    async def get(self, kind: ContentKind) -> CachedText:
        today = self.today()
        if is_fresh(self._memory.get(kind), today):
            return self._memory[kind]

        async with self._locks[kind]:
            if is_fresh(self._memory.get(kind), today):
                return self._memory[kind]
            stored = await self._read_stored(kind)
            if is_fresh(stored, today):
                self._memory[kind] = stored
                return stored
            return await self._regenerate(kind, today)

    async def sync(self) -> dict:
        """Force regeneration of both kinds (admin action)."""
        today = self.today()
        results = {}
        for kind in ContentKind:
            async with self._locks[kind]:
                results[kind] = await self._regenerate(kind, today)
        return {
            "date": today,
            "quote": results[ContentKind.QUOTE].text,
            "panchang": results[ContentKind.PANCHANG].text,
            "sources": results[ContentKind.PANCHANG].sources,
        }

    async def clean_names(self, raw_text: str) -> str:
        """Model-assisted spelling cleanup; the raw text comes back on failure."""
        try:
            result = await self.generator.generate_text(
                build_name_cleanup_prompt(raw_text),
                max_tokens=max(self.settings.content_max_tokens, 2000),
            )
        except LanguageModelError as e:
            logger.warning(f"Name cleanup failed, returning input: {e.message}")
            return raw_text
        return result.text.strip() or raw_text

    async def _read_stored(self, kind: ContentKind) -> CachedText | None:
        try:
            return (await self.repository.get_daily_content()).get(kind)
        except DocumentStoreError as e:
            logger.warning(
                f"Daily content read failed: {e.message}",
                extra={"content_kind": kind.value},
            )
            return None

    async def _regenerate(self, kind: ContentKind, today: str) -> CachedText:
        prompt, web_search = self._prompt_for(kind, date.fromisoformat(today))
        try:
            generated = await self.generator.generate_text(
                prompt,
                max_tokens=self.settings.content_max_tokens,
                web_search=web_search,
            )
        except LanguageModelError as e:
            logger.warning(
                f"Daily {kind.value} generation failed: {e.message}",
                extra={"content_kind": kind.value},
            )
            return self._fallback(kind, today)

        text = clean_generated_text(generated.text)
        if not text:
            logger.warning(
                f"Daily {kind.value} generation returned empty text",
                extra={"content_kind": kind.value},
            )
            return self._fallback(kind, today)

        entry = CachedText(date=today, text=text, sources=generated.sources)
        self._memory[kind] = entry
        try:
            await self.repository.save_daily_content(kind, entry)
        except DocumentStoreError as e:
            logger.warning(
                f"Daily content write failed, kept in memory: {e.message}",
                extra={"content_kind": kind.value},
            )
        logger.info(
            f"Daily {kind.value} regenerated for {today}",
            extra={"content_kind": kind.value},
        )
        return entry

    def _prompt_for(self, kind: ContentKind, day: date) -> tuple[str, bool]:
        if kind == ContentKind.QUOTE:
            return QUOTE_PROMPT, False
        return build_panchang_prompt(day), True

    def _fallback(self, kind: ContentKind, today: str) -> CachedText:
        if kind == ContentKind.QUOTE:
            return CachedText(date=today, text=pick_fallback_quote(self._rng))
        return CachedText(date=today, text=PANCHANG_UNAVAILABLE)
