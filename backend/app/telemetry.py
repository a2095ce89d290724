from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from time import perf_counter
from typing import Any, Literal, Protocol

import structlog

# Search terms and scraped page content never leave the process through telemetry.
_SENSITIVE_ATTRIBUTE_TOKENS: frozenset[str] = frozenset(
    {
        "authorization",
        "body",
        "cookie",
        "html",
        "payload",
        "query",
        "title",
        "user_agent",
    }
)
_MAX_STRING_LENGTH = 160

TelemetryValue = bool | int | float | str | None


class TelemetrySink(Protocol):
    def emit(self, *, event_name: str, attributes: Mapping[str, Any]) -> None:
        ...


class NoOpTelemetrySink:
    def emit(self, *, event_name: str, attributes: Mapping[str, Any]) -> None:
        _ = (event_name, attributes)


class StructuredLogTelemetrySink:
    def __init__(self) -> None:
        self._logger = structlog.get_logger("clipfinder.telemetry")

    def emit(self, *, event_name: str, attributes: Mapping[str, Any]) -> None:
        self._logger.info("telemetry", telemetry_event=event_name, **dict(attributes))


@dataclass
class TelemetrySpan:
    """Attributes collected while a timed operation runs, emitted when it ends."""

    started_at: float
    attributes: dict[str, Any] = field(default_factory=lambda: {})

    def set(self, **attributes: Any) -> None:
        self.attributes.update(attributes)

    def elapsed_ms(self) -> int:
        return int((perf_counter() - self.started_at) * 1000)


@dataclass(frozen=True)
class TelemetryClient:
    enabled: bool
    sink: TelemetrySink

    @classmethod
    def disabled(cls) -> TelemetryClient:
        return cls(enabled=False, sink=NoOpTelemetrySink())

    def emit(self, event_name: str, **attributes: Any) -> None:
        if not self.enabled:
            return
        self.sink.emit(event_name=event_name, attributes=_sanitize_attributes(attributes))

    @contextmanager
    def span(self, event_prefix: str, **attributes: Any) -> Iterator[TelemetrySpan]:
        """
        Emit `<prefix>.start`, then `<prefix>.finish` or `<prefix>.error`.

        Both closing events carry `duration_ms` plus whatever the caller added
        through `TelemetrySpan.set`. Exceptions are re-raised untouched.
        """
        span = TelemetrySpan(started_at=perf_counter(), attributes=dict(attributes))
        self.emit(f"{event_prefix}.start", **attributes)
        try:
            yield span
        except Exception as exc:
            self.emit(
                f"{event_prefix}.error",
                duration_ms=span.elapsed_ms(),
                error_type=type(exc).__name__,
                **span.attributes,
            )
            raise
        self.emit(f"{event_prefix}.finish", duration_ms=span.elapsed_ms(), **span.attributes)


def build_telemetry_client(*, enabled: bool, sink: Literal["none", "log"]) -> TelemetryClient:
    if not enabled or sink == "none":
        return TelemetryClient.disabled()
    if sink == "log":
        return TelemetryClient(enabled=True, sink=StructuredLogTelemetrySink())

    logging.getLogger("clipfinder.telemetry").warning(
        "unsupported telemetry sink requested; disabling telemetry sink=%s",
        sink,
    )
    return TelemetryClient.disabled()


def _sanitize_attributes(attributes: Mapping[str, Any]) -> dict[str, TelemetryValue]:
    sanitized: dict[str, TelemetryValue] = {}
    for raw_key, raw_value in attributes.items():
        key = str(raw_key).strip().lower()
        if not key:
            continue
        if any(token in key for token in _SENSITIVE_ATTRIBUTE_TOKENS):
            sanitized[key] = "[redacted]"
            continue
        sanitized[key] = _sanitize_value(raw_value)
    return sanitized


def _sanitize_value(value: Any) -> TelemetryValue:
    if value is None or isinstance(value, bool | int | float):
        return value
    if isinstance(value, str):
        compact = " ".join(value.split())
        if len(compact) <= _MAX_STRING_LENGTH:
            return compact
        return f"{compact[:_MAX_STRING_LENGTH]}..."
    return type(value).__name__
