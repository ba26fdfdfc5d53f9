"""Data models for petmood."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from enum import IntEnum
from typing import List, Optional, Sequence, Tuple


class Weekday(IntEnum):
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @property
    def is_weekday(self) -> bool:
        return self <= Weekday.FRIDAY

    @classmethod
    def from_date(cls, value: date | datetime) -> "Weekday":
        return cls(value.weekday())

    @classmethod
    def parse(cls, value: str) -> "Weekday":
        key = value.strip().upper()
        for member in cls:
            if member.name == key or member.name[:3] == key:
                return member
        raise ValueError(f"Unknown weekday: {value}")


@dataclass(frozen=True)
class AudioFeatures:
    """Feature snapshot taken when a recording session ends."""

    rms_loudness: float
    peak_amplitude: float
    duration_seconds: float


SLIDER_NAMES = ("mood", "stress", "stamina", "sleep", "focus", "anxiety")
INVERTED_SLIDERS = frozenset({"stress"})
DEFAULT_SLIDER_VALUES = (80.0, 40.0, 50.0, 70.0, 60.0, 90.0)


def clamp_slider(value: float) -> float:
    return max(0.0, min(100.0, float(value)))


@dataclass(frozen=True)
class SliderScores:
    """The six subjective sliders, stored un-inverted.

    Values are clamped when built through ``from_values``; the scorer trusts
    whatever it is handed.
    """

    mood: float
    stress: float
    stamina: float
    sleep: float
    focus: float
    anxiety: float

    @classmethod
    def from_values(cls, values: Sequence[float]) -> "SliderScores":
        if len(values) != len(SLIDER_NAMES):
            raise ValueError(
                f"Expected {len(SLIDER_NAMES)} slider values, got {len(values)}."
            )
        return cls(*(clamp_slider(v) for v in values))

    @classmethod
    def default(cls) -> "SliderScores":
        return cls(*DEFAULT_SLIDER_VALUES)

    def values(self) -> List[float]:
        return [getattr(self, name) for name in SLIDER_NAMES]

    def display_values(self) -> List[float]:
        """Values as a renderer should show them (stress shown as 100 - value)."""
        return [
            100.0 - getattr(self, name) if name in INVERTED_SLIDERS else getattr(self, name)
            for name in SLIDER_NAMES
        ]


@dataclass(frozen=True)
class ScoreContext:
    weekday: Weekday
    address_text: str = ""
    previous_score: int = 50


@dataclass(frozen=True)
class FaceBox:
    """Axis-aligned rectangle in source pixels, origin top-left."""

    x: float
    y: float
    width: float
    height: float

    @classmethod
    def full(cls, width: int, height: int) -> "FaceBox":
        return cls(0, 0, width, height)

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    def intersection(self, other: "FaceBox") -> Optional["FaceBox"]:
        left = max(self.x, other.x)
        top = max(self.y, other.y)
        right = min(self.right, other.right)
        bottom = min(self.bottom, other.bottom)
        if right <= left or bottom <= top:
            return None
        return FaceBox(left, top, right - left, bottom - top)

    def integral(self) -> "FaceBox":
        """Smallest pixel-aligned box containing this one."""
        left = math.floor(self.x)
        top = math.floor(self.y)
        right = math.ceil(self.right)
        bottom = math.ceil(self.bottom)
        return FaceBox(left, top, right - left, bottom - top)

    def as_pil_box(self) -> Tuple[int, int, int, int]:
        return (int(self.x), int(self.y), int(self.right), int(self.bottom))


@dataclass(frozen=True)
class NormalizedBox:
    """Face detector output: [0, 1] coordinates, origin bottom-left."""

    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class ReminderSchedule:
    next_morning_fire: datetime
    next_midnight_fire: datetime
