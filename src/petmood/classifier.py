"""Meow classification from coarse loudness, peak and length."""

from __future__ import annotations

import random
from typing import Callable, Sequence, Tuple

from .models import AudioFeatures

QUIET_CALL = ("Such a tiny voice, meow", "Calling you softly, meow")
NEEDY = ("I'm hungry, meow", "Pet me please, meow")
ENERGETIC = ("Full of energy, meow!", "Calling you loudly, meow!")
PLAYFUL = ("Play with me, meow", "So excited, meow!")
SLEEPY = ("Sleepy, meow...", "Feeling relaxed, meow")
NEUTRAL = ("Feeling just right, meow", "Nice and calm, meow")
PERSISTENT = ("Calling for a long time, meow", "Won't stop asking, meow")
BRIEF = ("Just a little meow", "Only a whim, meow")

FALLBACK_PHRASE = "Meow?"

QUIET_MAX = 0.02
NEEDY_MAX = 0.05
PLAYFUL_MIN_PEAK = 300
SLEEPY_MAX_PEAK = 150
PERSISTENT_MIN_SECONDS = 2.0

Picker = Callable[[Sequence[str]], str]


def candidates(loudness: float, peak: float, duration_seconds: float) -> Tuple[str, ...]:
    """Pool the phrases picked by each of the three threshold groups."""
    if loudness < QUIET_MAX:
        pool = list(QUIET_CALL)
    elif loudness < NEEDY_MAX:
        pool = list(NEEDY)
    else:
        pool = list(ENERGETIC)

    if peak > PLAYFUL_MIN_PEAK:
        pool += PLAYFUL
    elif peak < SLEEPY_MAX_PEAK:
        pool += SLEEPY
    else:
        pool += NEUTRAL

    if duration_seconds > PERSISTENT_MIN_SECONDS:
        pool += PERSISTENT
    else:
        pool += BRIEF

    return tuple(pool)


def classify(
    loudness: float,
    peak: float,
    duration_seconds: float,
    picker: Picker = random.choice,
) -> str:
    pool = candidates(loudness, peak, duration_seconds)
    if not pool:
        return FALLBACK_PHRASE
    return picker(pool)


def classify_features(features: AudioFeatures, picker: Picker = random.choice) -> str:
    return classify(
        features.rms_loudness,
        features.peak_amplitude,
        features.duration_seconds,
        picker=picker,
    )
