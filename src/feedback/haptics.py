"""Haptic pulse patterns handed to the client device."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

HAPTIC_LIGHT = "light"
HAPTIC_HEAVY = "heavy"


@dataclass(frozen=True)
class HapticPulse:
    style: str
    delay_ms: int = 0

    def to_payload(self) -> dict[str, Any]:
        return {"style": self.style, "delay_ms": self.delay_ms}


HAPTIC_START_PATTERN: tuple[HapticPulse, ...] = (
    HapticPulse(HAPTIC_LIGHT),
    HapticPulse(HAPTIC_LIGHT, delay_ms=70),
)
HAPTIC_END_PATTERN: tuple[HapticPulse, ...] = (HapticPulse(HAPTIC_HEAVY),)


class HapticSink(Protocol):
    """Anything able to render a pulse pattern, usually the connected client."""
    def vibrate(self, name: str, pattern: tuple[HapticPulse, ...]) -> None:
        ...
