from __future__ import annotations

import pytest

from backend.app.services.text_normalizer import (
    LIVE_RUNTIME_LABEL,
    PLACEHOLDER,
    CountLocale,
    clean_text,
    format_count,
    format_runtime,
    parse_view_count,
)

_CLEAN_TEXT_SAMPLES: tuple[str, ...] = (
    "&amp;ol\\u00e1",
    "Tom &quot;Jerry&quot; &lt;3",
    "Melhores gols ⚽🔥 #2024 | parte 1",
    "  espaços\n\tdemais  ",
    "Parte 1/2: (ao vivo) - 100% 'top'!?",
    "snake_case.value, a;b",
    "Cora\\u00e7\\u00e3o &AMP; alma",
    "",
)


def test_clean_text_handles_missing_values() -> None:
    assert clean_text(None) == ""
    assert clean_text("") == ""
    assert clean_text("   ") == ""


def test_clean_text_decodes_literal_unicode_escapes_and_entities() -> None:
    assert clean_text("&amp;ol\\u00e1") == "&olá"
    assert clean_text("Cora\\u00e7\\u00e3o &AMP; alma") == "Coração & alma"
    assert clean_text("it&apos;s") == "it's"


def test_clean_text_strips_disallowed_characters() -> None:
    assert clean_text("Melhores gols ⚽🔥 #2024 | parte 1") == "Melhores gols 2024 parte 1"
    # "<" is decoded from the entity and then dropped like any other symbol.
    assert clean_text("Tom &quot;Jerry&quot; &lt;3") == 'Tom "Jerry" 3'


def test_clean_text_keeps_allowed_punctuation() -> None:
    assert clean_text("Parte 1/2: (ao vivo) - 100% 'top'!?") == "Parte 1/2: (ao vivo) - 100% 'top'!?"
    assert clean_text("snake_case.value, a;b") == "snake_case.value, a;b"


def test_clean_text_collapses_whitespace() -> None:
    assert clean_text("  espaços\n\tdemais  ") == "espaços demais"


@pytest.mark.parametrize("raw", _CLEAN_TEXT_SAMPLES)
def test_clean_text_is_idempotent(raw: str) -> None:
    once = clean_text(raw)
    assert clean_text(once) == once


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("1:5", "1:05"),
        ("65:30", "65:30"),
        ("0:07", "0:07"),
        ("  3:07 ", "3:07"),
        ("1:2:3", "1:02:03"),
        ("10:00:00", "10:00:00"),
        ("abc", "abc"),
        ("12:xx", "12:xx"),
    ],
)
def test_format_runtime(raw: str, expected: str) -> None:
    assert format_runtime(raw) == expected


def test_format_runtime_live_and_missing() -> None:
    assert format_runtime("LIVE") == LIVE_RUNTIME_LABEL
    assert format_runtime("Live now") == LIVE_RUNTIME_LABEL
    assert format_runtime(None) == PLACEHOLDER
    assert format_runtime("") == PLACEHOLDER


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("1,2 mi", 1_200_000),
        ("950", 950),
        ("1.234.567 visualizações", 1_234_567),
        ("2,5 bi de visualizações", 2_500_000_000),
        ("1,5 milhão de visualizações", 1_500_000),
        ("12K", 12_000),
        ("no digits here", None),
        (",", None),
        (None, None),
    ],
)
def test_parse_view_count(raw: str | None, expected: int | None) -> None:
    assert parse_view_count(raw) == expected


def test_parse_view_count_passes_numbers_through() -> None:
    assert parse_view_count(1234) == 1234
    assert parse_view_count(12.5) == 12.5


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (950, "950"),
        (999, "999"),
        (1_000, "1.0 mil"),
        (15_000, "15 mil"),
        (1_200_000, "1.2 mi"),
        (1_250_000, "1.3 mi"),
        ("1,25 mi", "1.3 mi"),
        (12_500, "13 mil"),
        (2_250_000, "2.3 mi"),
        (1_150_000, "1.1 mi"),
        ("1.234.567 visualizações", "1.2 mi"),
        (2_500_000_000, "2.5 bi"),
        (10_000_000_000_000, "10000 bi"),
    ],
)
def test_format_count(raw: str | int, expected: str) -> None:
    assert format_count(raw) == expected


def test_format_count_placeholder_for_unusable_values() -> None:
    assert format_count(None) == PLACEHOLDER
    assert format_count(0) == PLACEHOLDER
    assert format_count("sem visualizações") == PLACEHOLDER
    assert format_count(float("inf")) == PLACEHOLDER


def test_format_count_accepts_alternate_locale_table() -> None:
    english = CountLocale(
        magnitudes=(
            (("billion",), 1_000_000_000),
            (("million",), 1_000_000),
            (("thousand", "k"), 1_000),
        ),
        compact_units=("K", "M", "B"),
        thousands_separator=",",
    )

    assert parse_view_count("3 million views", locale=english) == 3_000_000
    assert format_count("3 million views", locale=english) == "3.0 M"
    assert format_count("42 views", locale=english) == "42"
