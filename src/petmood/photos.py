"""Photo history and the two-phase caption composition."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterator, List, Optional

from PIL import Image

from .compositor import compose
from .config import CompositorConfig

logger = logging.getLogger("petmood")


class CompositeStage(Enum):
    RAW = "raw"
    USER_CAPTIONED = "user_captioned"
    FULLY_COMPOSITED = "fully_composited"


def apply_user_phase(
    base: Image.Image, user_text: str, config: Optional[CompositorConfig] = None
) -> Image.Image:
    return compose(base, None, user_text, draw_user_text=True, config=config)


def apply_assistant_phase(
    source: Image.Image, assistant_text: str, config: Optional[CompositorConfig] = None
) -> Image.Image:
    return compose(source, assistant_text, None, draw_user_text=False, config=config)


@dataclass
class PhotoRecord:
    image: Image.Image
    captured_at: datetime = field(default_factory=datetime.now)
    user_caption: Optional[str] = None
    assistant_caption: Optional[str] = None
    composite_image: Optional[Image.Image] = None
    user_composite: Optional[Image.Image] = field(default=None, repr=False)
    stage: CompositeStage = CompositeStage.RAW

    def display_image(self) -> Image.Image:
        return self.composite_image if self.composite_image is not None else self.image


def _refresh(record: PhotoRecord, config: Optional[CompositorConfig]) -> None:
    # The assistant phase always layers on the user-phase output when one exists.
    source = record.user_composite if record.user_composite is not None else record.image
    if record.assistant_caption:
        record.composite_image = apply_assistant_phase(source, record.assistant_caption, config)
        record.stage = CompositeStage.FULLY_COMPOSITED
    elif record.user_composite is not None:
        record.composite_image = record.user_composite
        record.stage = CompositeStage.USER_CAPTIONED
    else:
        record.composite_image = None
        record.stage = CompositeStage.RAW


def set_user_caption(
    record: PhotoRecord, text: Optional[str], config: Optional[CompositorConfig] = None
) -> PhotoRecord:
    record.user_caption = text or None
    if record.user_caption:
        record.user_composite = apply_user_phase(record.image, record.user_caption, config)
    else:
        record.user_composite = None
    _refresh(record, config)
    return record


def set_assistant_caption(
    record: PhotoRecord, text: Optional[str], config: Optional[CompositorConfig] = None
) -> PhotoRecord:
    record.assistant_caption = text or None
    _refresh(record, config)
    return record


class PhotoHistory:
    """Insertion-ordered photo records, mutated only by the owning thread."""

    def __init__(self, config: Optional[CompositorConfig] = None) -> None:
        self.config = config
        self._records: List[PhotoRecord] = []
        self._owner = threading.get_ident()

    def _check_owner(self) -> None:
        if threading.get_ident() != self._owner:
            raise RuntimeError("PhotoHistory may only be modified by its owning thread.")

    def add(
        self,
        image: Image.Image,
        user_caption: Optional[str] = None,
        assistant_caption: Optional[str] = None,
        captured_at: Optional[datetime] = None,
    ) -> Optional[PhotoRecord]:
        self._check_owner()
        if (user_caption or assistant_caption) and any(
            r.user_caption == (user_caption or None)
            and r.assistant_caption == (assistant_caption or None)
            for r in self._records
        ):
            logger.info("Photo with identical captions already in history; skipped")
            return None
        record = PhotoRecord(image=image, captured_at=captured_at or datetime.now())
        set_user_caption(record, user_caption, self.config)
        if assistant_caption:
            set_assistant_caption(record, assistant_caption, self.config)
        self._records.append(record)
        logger.info("Photo added to history (%s)", record.stage.value)
        return record

    def update_user_caption(self, record: PhotoRecord, text: Optional[str]) -> PhotoRecord:
        self._check_owner()
        return set_user_caption(record, text, self.config)

    def update_assistant_caption(self, record: PhotoRecord, text: Optional[str]) -> PhotoRecord:
        self._check_owner()
        return set_assistant_caption(record, text, self.config)

    def latest(self) -> Optional[PhotoRecord]:
        return self._records[-1] if self._records else None

    def __iter__(self) -> Iterator[PhotoRecord]:
        return iter(list(self._records))

    def __len__(self) -> int:
        return len(self._records)
