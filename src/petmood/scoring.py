"""Daily wellbeing score from sliders and context."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional

from .config import LocationAdjustment, ScoringConfig
from .models import ScoreContext, SliderScores, Weekday
from .session_io import PreferenceStore

logger = logging.getLogger("petmood")

DEFAULT_SCORING = ScoringConfig()


def location_adjustment(address_text: str, table: Iterable[LocationAdjustment]) -> float:
    # Case-sensitive substring match; first entry wins.
    for entry in table:
        if entry.match and entry.match in (address_text or ""):
            return float(entry.adjustment)
    return 0.0


def score(
    sliders: SliderScores,
    context: ScoreContext,
    scoring: ScoringConfig = DEFAULT_SCORING,
) -> int:
    values = sliders.values()
    base = sum(values) / len(values)
    weekday_adj = (
        scoring.weekday_adjustment
        if context.weekday.is_weekday
        else scoring.weekend_adjustment
    )
    location_adj = location_adjustment(context.address_text, scoring.location_adjustments)
    yesterday_adj = (context.previous_score - 50) * scoring.yesterday_weight
    total = base + weekday_adj + location_adj + yesterday_adj
    return max(0, min(100, int(total)))


def encouragement(value: int) -> str:
    if value < 40:
        return "Take a rest today and see the vet, meow!!"
    if value < 60:
        return "Don't push it, a little at a time, meow?"
    if value < 80:
        return "Good pace, keep it up, meow"
    return "Feeling great! Buying cat food, meow"


class DailyScoreKeeper:
    """Computes the score at most once per calendar day.

    The previous score is frozen on the first computation of a day so a forced
    same-day recomputation gives the same answer for the same sliders. The new
    value becomes "yesterday" only after the computation finishes.
    """

    LAST_DATE_KEY = "last_calculation_date"
    TODAY_KEY = "today_score"
    YESTERDAY_KEY = "yesterday_score"
    FROZEN_KEY = "previous_score_for_day"

    def __init__(self, store: PreferenceStore, scoring: ScoringConfig = DEFAULT_SCORING) -> None:
        self.store = store
        self.scoring = scoring

    def already_computed(self, now: datetime) -> bool:
        return self.store.get_str(self.LAST_DATE_KEY) == now.date().isoformat()

    def today_score(self) -> Optional[int]:
        return self.store.get_int(self.TODAY_KEY)

    def compute(
        self,
        now: datetime,
        sliders: SliderScores,
        address_text: str = "",
        force: bool = False,
    ) -> int:
        today = now.date().isoformat()
        if self.already_computed(now) and not force:
            cached = self.today_score()
            if cached is not None:
                return cached

        if self.store.get_str(self.LAST_DATE_KEY) != today:
            previous = self.store.get_int(self.YESTERDAY_KEY, 50)
            self.store.set(self.FROZEN_KEY, previous)
        else:
            previous = self.store.get_int(self.FROZEN_KEY, 50)

        context = ScoreContext(
            weekday=Weekday.from_date(now),
            address_text=address_text,
            previous_score=int(previous),
        )
        value = score(sliders, context, self.scoring)
        logger.info(
            "Score for %s: %s (previous %s, %s)",
            today,
            value,
            previous,
            context.weekday.name.title(),
        )

        self.store.set(self.TODAY_KEY, value)
        self.store.set(self.LAST_DATE_KEY, today)
        self.store.set(self.YESTERDAY_KEY, value)
        self.store.save()
        return value

    def clear_today(self) -> None:
        self.store.set(self.TODAY_KEY, 0)
        self.store.save()
