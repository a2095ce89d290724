from __future__ import annotations

import math
import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

PLACEHOLDER = "—"
LIVE_RUNTIME_LABEL = "Ao vivo agora"

_UNICODE_ESCAPE_PATTERN = re.compile(r"\\u([0-9A-Fa-f]{4})")
_HTML_ENTITIES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile("&amp;", re.IGNORECASE), "&"),
    (re.compile("&quot;", re.IGNORECASE), '"'),
    (re.compile("&lt;", re.IGNORECASE), "<"),
    (re.compile("&gt;", re.IGNORECASE), ">"),
    (re.compile("&apos;", re.IGNORECASE), "'"),
)
# \w also admits "_", which is on the allow-list anyway.
_DISALLOWED_CHARACTERS = re.compile(r"""[^\w\s\-.,!?'":;%&()/]""")
_WHITESPACE_RUN = re.compile(r"\s+")
_COUNT_DIGITS = re.compile(r"[\d,.]+")
_NON_DIGITS = re.compile(r"[^0-9]")


@dataclass(frozen=True)
class CountLocale:
    """
    Locale table for view-count parsing and compact rendering.

    `magnitudes` is checked in order and the first entry with any matching
    marker wins. `compact_units` lists the suffixes for 10^3, 10^6, 10^9.
    """

    magnitudes: tuple[tuple[tuple[str, ...], int], ...]
    compact_units: tuple[str, ...]
    thousands_separator: str


PT_BR_COUNT_LOCALE = CountLocale(
    magnitudes=(
        (("bilhão", " bi"), 1_000_000_000),
        (("milhão", " mi"), 1_000_000),
        (("mil", "k"), 1_000),
    ),
    compact_units=("mil", "mi", "bi"),
    thousands_separator=".",
)


def clean_text(raw: str | None) -> str:
    if not raw:
        return ""
    text = _UNICODE_ESCAPE_PATTERN.sub(lambda match: chr(int(match.group(1), 16)), raw)
    for pattern, replacement in _HTML_ENTITIES:
        text = pattern.sub(replacement, text)
    text = _DISALLOWED_CHARACTERS.sub("", text)
    return _WHITESPACE_RUN.sub(" ", text).strip()


def format_runtime(raw: str | None) -> str:
    if not raw:
        return PLACEHOLDER
    trimmed = raw.strip()
    if "live" in trimmed.lower():
        return LIVE_RUNTIME_LABEL

    segments: list[int] = []
    for part in trimmed.split(":"):
        segment = _parse_runtime_segment(part)
        if segment is None:
            return trimmed
        segments.append(segment)

    return ":".join(
        str(segment) if index == 0 else f"{segment:02d}"
        for index, segment in enumerate(segments)
    )


def parse_view_count(
    raw: str | int | float | None,
    *,
    locale: CountLocale = PT_BR_COUNT_LOCALE,
) -> int | float | None:
    """
    Parse a locale-formatted view count ("1,2 mi de visualizações") into a number.

    Separators follow the pt-BR convention: "." groups thousands and "," is
    the decimal point. Numeric input is returned untouched.
    """
    if raw is None:
        return None
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int | float):
        return raw

    normalized = _WHITESPACE_RUN.sub(" ", raw).lower()
    match = _COUNT_DIGITS.search(normalized)
    if match is None:
        return None

    numeric = _parse_float(match.group(0).replace(".", "").replace(",", "."))
    if numeric is None:
        numeric = _parse_float(_NON_DIGITS.sub("", match.group(0)))
    if numeric is None:
        return None

    for markers, multiplier in locale.magnitudes:
        if any(marker in normalized for marker in markers):
            numeric *= multiplier
            break
    if not math.isfinite(numeric):
        return numeric
    return math.floor(numeric + 0.5)


def format_count(
    raw: str | int | float | None,
    *,
    locale: CountLocale = PT_BR_COUNT_LOCALE,
) -> str:
    numeric = parse_view_count(raw, locale=locale)
    if not numeric or not math.isfinite(numeric):
        return PLACEHOLDER
    if numeric < 1000:
        return _group_thousands(numeric, separator=locale.thousands_separator)

    units = locale.compact_units
    unit_index = min(math.floor(math.log10(numeric) / 3), len(units))
    scaled = numeric / 1000**unit_index
    decimals = 1 if scaled < 10 else 0
    # Halves round up on the exact binary value, so 1.25 -> 1.3 but 1.15 (1.1499...) -> 1.1.
    rounded = Decimal(scaled).quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)
    return f"{rounded} {units[unit_index - 1]}"


def _parse_runtime_segment(raw: str) -> int | None:
    value = _parse_float(raw)
    if value is None or not value.is_integer():
        return None
    return int(value)


def _parse_float(raw: str) -> float | None:
    candidate = raw.strip()
    if not candidate:
        return None
    try:
        value = float(candidate)
    except ValueError:
        return None
    if math.isnan(value):
        return None
    return value


def _group_thousands(numeric: int | float, *, separator: str) -> str:
    if isinstance(numeric, float) and not numeric.is_integer():
        return str(numeric)
    return f"{int(numeric):,}".replace(",", separator)
