"""DailyContentService tests: date-keyed caching, regeneration and fallbacks.

Tests cover:
    - Fresh stored entries are served without a model call
    - Stale entries trigger exactly one call per kind and are overwritten
    - A second request the same day is served from memory
    - Model failure returns fallback text that is never cached
    - Store failures degrade to memory-only caching
"""

import random

from samaj_diary.core.daily_content import CachedText
from samaj_diary.core.domain_types import ContentKind
from samaj_diary.core.errors import LanguageModelError
from samaj_diary.core.language_strings import FALLBACK_QUOTES, PANCHANG_UNAVAILABLE
from samaj_diary.core.repository_protocols import GeneratedText
from samaj_diary.infrastructure.anthropic_client import ResilientAnthropicClient
from samaj_diary.services.daily_content import DailyContentService

from tests.services.fakes import FIXED_NOW
from tests.services.mock_anthropic import install

TODAY = "2026-03-15"


def _stored(store, quote_date, panchang_date):
    store.seed("config", "dailyContent", {
        "quote": {"date": quote_date, "text": "पुराना सुविचार"},
        "panchang": {"date": panchang_date, "text": "पुराना पंचांग"},
    })


async def test_today_uses_content_timezone(content_service):
    assert content_service.today() == TODAY


async def test_fresh_store_entries_skip_the_model(content_service, store, generator):
    _stored(store, TODAY, TODAY)

    result = await content_service.get_daily_content()

    assert result["quote"] == "पुराना सुविचार"
    assert result["panchang"] == "पुराना पंचांग"
    assert generator.calls == []


async def test_stale_entries_regenerate_once_each(content_service, store, generator):
    _stored(store, "2026-03-14", "2026-03-14")
    generator.replies = [
        "नया सुविचार",
        GeneratedText(text="तिथि- सप्तमी", sources=[{"title": "t", "url": "https://u"}]),
    ]

    first = await content_service.get_daily_content()
    second = await content_service.get_daily_content()

    assert first == second
    assert first["quote"] == "नया सुविचार"
    assert first["sources"] == [{"title": "t", "url": "https://u"}]
    assert len(generator.calls) == 2
    assert [c["web_search"] for c in generator.calls] == [False, True]
    saved = store.data["config"]["dailyContent"]
    assert saved["quote"] == {"date": TODAY, "text": "नया सुविचार", "sources": []}
    assert saved["panchang"]["date"] == TODAY


async def test_only_the_stale_kind_regenerates(content_service, store, generator):
    _stored(store, TODAY, "2026-03-01")
    generator.replies = ["वार- रविवार"]

    result = await content_service.get_daily_content()

    assert result["quote"] == "पुराना सुविचार"
    assert result["panchang"] == "वार- रविवार"
    assert len(generator.calls) == 1


async def test_model_failure_falls_back_without_caching(store, generator, settings, repository):
    generator.replies = [
        LanguageModelError("down", "connection_error"),
        LanguageModelError("down", "connection_error"),
    ]
    service = DailyContentService(
        repository, generator, settings,
        clock=lambda: FIXED_NOW, rng=random.Random(7),
    )

    result = await service.get_daily_content()

    assert result["quote"] in FALLBACK_QUOTES
    assert result["panchang"] == PANCHANG_UNAVAILABLE
    assert "config" not in store.data

    generator.replies = ["सुविचार", "तिथि- नवमी"]
    again = await service.get_daily_content()
    assert again["quote"] == "सुविचार"


async def test_unexpected_client_error_still_falls_back(store, settings, repository):
    client = ResilientAnthropicClient(api_key="sk-ant-test", model="claude-test")
    install(client, [TypeError("bad block"), KeyError("content")])
    service = DailyContentService(
        repository, client, settings, clock=lambda: FIXED_NOW,
    )

    result = await service.get_daily_content()

    assert result["quote"] in FALLBACK_QUOTES
    assert result["panchang"] == PANCHANG_UNAVAILABLE
    assert "config" not in store.data


async def test_empty_generation_uses_fallback(content_service, generator):
    generator.replies = ["  **  "]
    entry = await content_service.get(ContentKind.QUOTE)
    assert entry.text in FALLBACK_QUOTES


async def test_store_failure_keeps_memory_cache(content_service, store, generator):
    store.fail = True
    generator.replies = ["सुविचार"]

    first = await content_service.get(ContentKind.QUOTE)
    second = await content_service.get(ContentKind.QUOTE)

    assert first == second == CachedText(date=TODAY, text="सुविचार", sources=[])
    assert len(generator.calls) == 1


async def test_sync_forces_regeneration(content_service, store, generator):
    _stored(store, TODAY, TODAY)
    generator.replies = ["नया", "तिथि- दशमी"]

    result = await content_service.sync()

    assert result["quote"] == "नया"
    assert store.data["config"]["dailyContent"]["quote"]["text"] == "नया"


async def test_clean_names_uses_larger_budget(content_service, generator):
    generator.replies = ["रमेश, खेरवाड़ा"]

    assert await content_service.clean_names("ramesh, kherwara") == "रमेश, खेरवाड़ा"
    assert generator.calls[0]["max_tokens"] >= 2000
