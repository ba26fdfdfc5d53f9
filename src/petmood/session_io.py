"""Flat key-value preferences and photo history persistence."""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Iterable, Optional, Union

from .models import SLIDER_NAMES, SliderScores

logger = logging.getLogger("petmood")

Value = Union[str, int, float]


class PreferenceStore:
    """JSON file of flat keys, standing in for the host's preference storage."""

    def __init__(self, path: Optional[str] = None) -> None:
        self.path = path
        self._data: Dict[str, Value] = {}
        if path and os.path.exists(path):
            with open(path, "r", encoding="utf-8") as handle:
                loaded = json.load(handle) or {}
            if not isinstance(loaded, dict):
                raise ValueError(f"Preference file is not an object: {path}")
            self._data = {
                str(k): v for k, v in loaded.items() if isinstance(v, (str, int, float))
            }

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def get_str(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self._data.get(key)
        return default if value is None else str(value)

    def get_int(self, key: str, default: Optional[int] = None) -> Optional[int]:
        value = self._data.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning("Preference %s is not an int: %r", key, value)
            return default

    def get_float(self, key: str, default: Optional[float] = None) -> Optional[float]:
        value = self._data.get(key)
        if value is None:
            return default
        try:
            return float(value)
        except (TypeError, ValueError):
            logger.warning("Preference %s is not a float: %r", key, value)
            return default

    def set(self, key: str, value: Value) -> None:
        if not isinstance(value, (str, int, float)):
            raise TypeError(f"Unsupported preference value for {key}: {type(value)!r}")
        self._data[key] = value

    def save(self) -> None:
        if not self.path:
            return
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as handle:
            json.dump(self._data, handle, indent=2, ensure_ascii=False)

    def keys(self) -> Iterable[str]:
        return self._data.keys()


class TreatLedger:
    """Persisted treat count; one treat opens the caption input once."""

    KEY = "treats.count"

    def __init__(self, store: PreferenceStore, starting: int = 7) -> None:
        self.store = store
        if store.get_int(self.KEY) is None:
            store.set(self.KEY, max(0, int(starting)))

    @property
    def count(self) -> int:
        return max(0, self.store.get_int(self.KEY, 0) or 0)

    def add(self, amount: int) -> int:
        if amount < 0:
            raise ValueError("Treat amount must be >= 0.")
        self.store.set(self.KEY, self.count + amount)
        return self.count

    def use(self, amount: int = 1) -> bool:
        """Spend ``amount`` treats; False when none are left."""
        if self.count == 0:
            return False
        self.store.set(self.KEY, max(self.count - amount, 0))
        return True


def load_sliders(store: PreferenceStore) -> SliderScores:
    defaults = SliderScores.default().values()
    values = [
        store.get_float(f"slider.{name}", default)
        for name, default in zip(SLIDER_NAMES, defaults)
    ]
    return SliderScores.from_values(values)


def save_sliders(store: PreferenceStore, sliders: SliderScores) -> None:
    for name, value in zip(SLIDER_NAMES, sliders.values()):
        store.set(f"slider.{name}", value)


def save_photo_history(path: str, history) -> None:
    payload = [
        {
            "captured_at": record.captured_at.isoformat(),
            "user_caption": record.user_caption,
            "assistant_caption": record.assistant_caption,
            "stage": record.stage.value,
            "size": list(record.image.size),
        }
        for record in history
    ]
    with open(path, "w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2, ensure_ascii=False)
