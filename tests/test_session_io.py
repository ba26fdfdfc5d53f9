import json

import pytest
from PIL import Image

from petmood.models import SliderScores
from petmood.photos import PhotoHistory
from petmood.session_io import (
    PreferenceStore,
    TreatLedger,
    load_sliders,
    save_photo_history,
    save_sliders,
)


def test_preferences_roundtrip(tmp_path):
    path = tmp_path / "prefs.json"
    store = PreferenceStore(str(path))
    store.set("yesterday_score", 61)
    store.set("profile.address", "Osaka")
    save_sliders(store, SliderScores.from_values([10, 20, 30, 40, 50, 60]))
    store.save()

    loaded = PreferenceStore(str(path))
    assert loaded.get_int("yesterday_score") == 61
    assert loaded.get_str("profile.address") == "Osaka"
    assert load_sliders(loaded).values() == [10, 20, 30, 40, 50, 60]


def test_missing_values_use_defaults(tmp_path):
    store = PreferenceStore(str(tmp_path / "missing.json"))
    assert store.get_int("yesterday_score", 50) == 50
    assert load_sliders(store) == SliderScores.default()


def test_bad_values_fall_back(tmp_path):
    path = tmp_path / "prefs.json"
    path.write_text(json.dumps({"yesterday_score": "abc", "slider.mood": 150}), encoding="utf-8")
    store = PreferenceStore(str(path))
    assert store.get_int("yesterday_score", 50) == 50
    assert load_sliders(store).mood == 100


def test_only_flat_values_allowed():
    store = PreferenceStore()
    with pytest.raises(TypeError):
        store.set("scores", [1, 2, 3])


def test_save_photo_history(tmp_path):
    history = PhotoHistory()
    history.add(Image.new("RGB", (20, 10)), user_caption="hi")
    path = tmp_path / "history.json"

    save_photo_history(str(path), history)

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload[0]["user_caption"] == "hi"
    assert payload[0]["stage"] == "user_captioned"
    assert payload[0]["size"] == [20, 10]


def test_treat_ledger_defaults_and_floors_at_zero(tmp_path):
    store = PreferenceStore(str(tmp_path / "prefs.json"))
    ledger = TreatLedger(store)
    assert ledger.count == 7

    assert ledger.add(31) == 38
    assert ledger.use(40) is True
    assert ledger.count == 0
    assert ledger.use() is False

    store.save()
    assert TreatLedger(PreferenceStore(str(tmp_path / "prefs.json")), starting=7).count == 0
