"""Face-centred wallpaper crop and square icon."""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from PIL import Image

from .models import FaceBox, NormalizedBox

logger = logging.getLogger("petmood")

DEFAULT_ICON_SIZE = 80


def face_box_from_normalized(box: NormalizedBox, width: int, height: int) -> FaceBox:
    """Convert a bottom-left normalized box to top-left source pixels."""
    return FaceBox(
        x=box.x * width,
        y=(1 - box.y - box.height) * height,
        width=box.width * width,
        height=box.height * height,
    ).integral()


def wallpaper_size(width: int, height: int, target_aspect: float) -> Tuple[float, float]:
    crop_w = float(width)
    crop_h = width / target_aspect
    if crop_h > height:
        crop_h = float(height)
        crop_w = height * target_aspect
    return crop_w, crop_h


def wallpaper_rect(
    width: int,
    height: int,
    face: Optional[FaceBox],
    target_aspect: float,
) -> FaceBox:
    if target_aspect <= 0:
        raise ValueError("target_aspect must be > 0.")
    bounds = FaceBox.full(width, height)
    center_x, center_y = (face or bounds).center
    crop_w, crop_h = wallpaper_size(width, height, target_aspect)
    rect = FaceBox(center_x - crop_w / 2, center_y - crop_h / 2, crop_w, crop_h)
    clipped = rect.intersection(bounds)
    if clipped is None:
        logger.info("Face box outside image; using full bounds")
        return bounds
    return clipped.integral()


def frame(
    image: Image.Image,
    face: Optional[FaceBox],
    target_aspect: float,
    icon_size: int = DEFAULT_ICON_SIZE,
) -> Tuple[Image.Image, Image.Image]:
    """Return ``(wallpaper, icon)``.

    The icon is the whole original image squashed into a square, not a crop
    of the wallpaper.
    """
    width, height = image.size
    if width == 0 or height == 0:
        return image.copy(), image.copy()
    if face is None:
        logger.info("No face box; framing on full image")
    rect = wallpaper_rect(width, height, face, target_aspect)
    wallpaper = image.crop(rect.as_pil_box())
    icon = image.resize((icon_size, icon_size), Image.Resampling.LANCZOS)
    return wallpaper, icon
