"""Language Strings tests: every message key has Hindi text; fallbacks are static."""

import random

from samaj_diary.core.language_strings import (
    FALLBACK_QUOTES,
    PANCHANG_UNAVAILABLE,
    Message,
    get_message,
    pick_fallback_quote,
)


def test_every_message_key_has_text():
    for key in Message:
        assert get_message(key).strip()


def test_fallback_quote_comes_from_pool():
    rng = random.Random(3)
    for _ in range(10):
        assert pick_fallback_quote(rng) in FALLBACK_QUOTES


def test_panchang_fallback_matches_message():
    assert PANCHANG_UNAVAILABLE == get_message(Message.CONTENT_UNAVAILABLE)
