"""Storage and naming utilities."""

from __future__ import annotations

import os
from datetime import datetime


def timestamp_slug(dt: datetime | None = None) -> str:
    now = dt or datetime.now()
    return now.strftime("%Y-%m-%d")


def build_photo_basename(label: str, dt: datetime | None = None) -> str:
    now = dt or datetime.now()
    slug = label.strip().replace(" ", "-") if label else "Photo"
    return f"{timestamp_slug(now)}--{now.strftime('%H%M%S')}--{slug}"


def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def ensure_structure(base_dir: str) -> dict:
    root = base_dir or os.getcwd()
    paths = {
        "root": root,
        "photos": os.path.join(root, "Photos"),
        "composites": os.path.join(root, "Composites"),
        "wallpapers": os.path.join(root, "Wallpapers"),
        "logs": os.path.join(root, "Logs"),
    }
    for path in paths.values():
        ensure_dir(path)
    paths["preferences"] = os.path.join(root, "preferences.json")
    paths["history"] = os.path.join(root, "history.json")
    return paths
