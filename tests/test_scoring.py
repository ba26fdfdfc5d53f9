import itertools
from datetime import datetime

import pytest

from petmood.config import LocationAdjustment, ScoringConfig
from petmood.models import ScoreContext, SliderScores, Weekday
from petmood.scoring import DailyScoreKeeper, encouragement, location_adjustment, score
from petmood.session_io import PreferenceStore


def test_weekday_example():
    sliders = SliderScores.from_values([80, 40, 50, 70, 60, 90])
    context = ScoreContext(weekday=Weekday.WEDNESDAY, address_text="", previous_score=50)
    assert score(sliders, context) == 60


def test_weekend_example_with_high_previous():
    sliders = SliderScores.from_values([0, 0, 0, 0, 0, 0])
    context = ScoreContext(weekday=Weekday.SUNDAY, address_text="", previous_score=100)
    assert score(sliders, context) == 25


def test_score_is_always_clamped():
    for fill, weekday, previous, address in itertools.product(
        (0, 100), (Weekday.MONDAY, Weekday.SATURDAY), (0, 100), ("", "Tokyo", "Osaka")
    ):
        sliders = SliderScores.from_values([fill] * 6)
        value = score(sliders, ScoreContext(weekday, address, previous))
        assert 0 <= value <= 100
    assert score(SliderScores.from_values([0] * 6), ScoreContext(Weekday.MONDAY, "", 0)) == 0
    assert score(SliderScores.from_values([100] * 6), ScoreContext(Weekday.SUNDAY, "", 100)) == 100


def test_total_truncates_toward_zero():
    sliders = SliderScores.from_values([61] * 6)
    assert score(sliders, ScoreContext(Weekday.WEDNESDAY, "", 52)) == 56


def test_location_first_match_wins_and_is_case_sensitive():
    table = ScoringConfig().location_adjustments
    assert location_adjustment("Tokyo and Osaka", table) == -3
    assert location_adjustment("Osaka-fu", table) == 2
    assert location_adjustment("tokyo", table) == 0
    custom = [LocationAdjustment("Kyoto", 1), LocationAdjustment("Kyo", 9)]
    assert location_adjustment("Kyoto-shi", custom) == 1


def test_location_applies_to_score():
    sliders = SliderScores.from_values([80, 40, 50, 70, 60, 90])
    assert score(sliders, ScoreContext(Weekday.WEDNESDAY, "Shibuya, Tokyo", 50)) == 57
    assert score(sliders, ScoreContext(Weekday.WEDNESDAY, "Osaka", 50)) == 62


def test_slider_input_boundary():
    sliders = SliderScores.from_values([120, -5, 50, 50, 50, 50])
    assert sliders.mood == 100
    assert sliders.stress == 0
    assert sliders.display_values()[1] == 100
    with pytest.raises(ValueError):
        SliderScores.from_values([50] * 5)


def test_encouragement_bands():
    assert "rest" in encouragement(39)
    assert "push" in encouragement(40)
    assert "Good pace" in encouragement(79)
    assert "great" in encouragement(80)


def test_daily_keeper_is_date_gated(tmp_path):
    store = PreferenceStore(str(tmp_path / "prefs.json"))
    keeper = DailyScoreKeeper(store)
    wednesday = datetime(2026, 10, 14, 9, 0)

    assert keeper.compute(wednesday, SliderScores.default()) == 60
    assert store.get_int("yesterday_score") == 60

    # Same day: cached unless forced, and a forced run keeps the frozen previous.
    assert keeper.compute(wednesday, SliderScores.from_values([70] * 6)) == 60
    assert keeper.compute(wednesday, SliderScores.from_values([70] * 6), force=True) == 65
    assert keeper.compute(wednesday, SliderScores.from_values([70] * 6), force=True) == 65

    thursday = datetime(2026, 10, 15, 9, 0)
    assert keeper.compute(thursday, SliderScores.default()) == 66
    assert PreferenceStore(str(tmp_path / "prefs.json")).get_int("today_score") == 66
