"""Optional local face detector (OpenCV Haar cascades)."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import numpy as np
from PIL import Image

from .models import NormalizedBox

logger = logging.getLogger("petmood")

CAT_CASCADE = "haarcascade_frontalcatface.xml"


class FaceDetector(Protocol):
    def detect(self, image: Image.Image) -> Optional[NormalizedBox]: ...


class OpenCVFaceDetector:
    """Returns the largest detection as a bottom-left normalized box.

    That matches what the platform face detection service reports, so the
    result goes through ``framing.face_box_from_normalized`` like any other.
    """

    def __init__(self, cascade_name: str = CAT_CASCADE, min_size: int = 32) -> None:
        try:
            import cv2
        except Exception as exc:  # pragma: no cover - optional dependency
            raise RuntimeError(
                "opencv-python is required for face detection (pip install petmood[vision])."
            ) from exc
        self._cv2 = cv2
        self._classifier = cv2.CascadeClassifier(cv2.data.haarcascades + cascade_name)
        if self._classifier.empty():
            raise RuntimeError(f"Could not load cascade {cascade_name}.")
        self.min_size = min_size

    def detect(self, image: Image.Image) -> Optional[NormalizedBox]:
        width, height = image.size
        if width == 0 or height == 0:
            return None
        gray = np.asarray(image.convert("L"))
        try:
            faces = self._classifier.detectMultiScale(
                gray, scaleFactor=1.1, minNeighbors=3, minSize=(self.min_size, self.min_size)
            )
        except self._cv2.error as exc:
            logger.warning("Face detection failed: %s", exc)
            return None
        if len(faces) == 0:
            logger.info("No face detected")
            return None
        x, y, w, h = max(faces, key=lambda f: int(f[2]) * int(f[3]))
        return NormalizedBox(
            x=float(x) / width,
            y=1.0 - (float(y) + float(h)) / height,
            width=float(w) / width,
            height=float(h) / height,
        )
