"""Daily cycle: foregrounding, morning report and midnight reset."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, Optional

from .captions import CaptionClient
from .config import Config
from .handoff import Mailbox
from .scheduler import (
    LoggingNotificationSink,
    NotificationSink,
    ReminderScheduler,
    build_morning_request,
)
from .scoring import DailyScoreKeeper
from .session_io import PreferenceStore, TreatLedger, load_sliders

logger = logging.getLogger("petmood")


class DailyCycle:
    """Glue between the scorer, the preference store and the reminders.

    All methods run on the owning thread; the reminder loop posts its fires to
    ``mailbox`` and the owner applies them with ``mailbox.drain()``.
    """

    def __init__(
        self,
        config: Config,
        store: PreferenceStore,
        sink: Optional[NotificationSink] = None,
        mailbox: Optional[Mailbox] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.config = config
        self.store = store
        self.sink = sink or LoggingNotificationSink()
        self.mailbox = mailbox or Mailbox()
        self._clock = clock
        self.keeper = DailyScoreKeeper(store, config.scoring)
        self.treats = TreatLedger(store, starting=config.starting_treats)
        self.today_score = 0
        self.assistant_reply = ""
        self.input_visible = False
        self.weather = config.captions.weather_fallback
        self.scheduler = ReminderScheduler(
            on_morning=self.on_morning,
            on_midnight=self.on_midnight,
            hour=config.reminders.morning_hour,
            minute=config.reminders.morning_minute,
            clock=clock,
            mailbox=self.mailbox,
        )

    def _schedule_morning(self, score: int) -> None:
        request = build_morning_request(score, self.config.pet_name, self.config.reminders)
        self.sink.schedule_daily(request)

    def on_foreground(self, now: Optional[datetime] = None) -> int:
        now = now or self._clock()
        # Timers that came due while suspended run before anything is re-armed.
        if self.scheduler.run_pending(now):
            self.mailbox.drain()
        self.sink.set_badge(0)
        address = self.store.get_str("profile.address", "") or ""
        self.today_score = self.keeper.compute(now, load_sliders(self.store), address)
        self._schedule_morning(self.today_score)
        self.scheduler.rearm(now)
        return self.today_score

    def on_morning(self, now: datetime) -> None:
        logger.info("Morning report fired at %s", now.isoformat(timespec="minutes"))
        self._schedule_morning(self.today_score)

    def on_midnight(self, now: datetime) -> None:
        logger.info("Midnight reset at %s", now.isoformat(timespec="minutes"))
        self.keeper.clear_today()
        self.today_score = 0
        self.assistant_reply = ""
        self.sink.set_badge(1)

    def give_treat(self) -> bool:
        """Spend one treat to open the caption input."""
        if not self.treats.use(1):
            logger.info("No treats left; caption input stays closed")
            return False
        self.store.save()
        self.input_visible = True
        return True

    def submit_caption(
        self, prompt: str, client: CaptionClient
    ) -> Optional[threading.Thread]:
        """Send ``prompt`` for a reply; only allowed while the input is open."""
        if not self.input_visible:
            logger.info("Caption input is closed; give a treat first")
            return None
        self.input_visible = False
        return client.generate_reply_async(prompt, self.mailbox, self.set_assistant_reply)

    def set_assistant_reply(self, reply: str) -> None:
        self.assistant_reply = reply
        self.input_visible = False

    def refresh_weather(self, client: CaptionClient) -> threading.Thread:
        address = self.store.get_str("profile.address", "") or ""

        def _worker() -> None:
            self.mailbox.post(self._set_weather, client.weather_for(address))

        thread = threading.Thread(target=_worker, name="petmood-weather", daemon=True)
        thread.start()
        return thread

    def _set_weather(self, weather: str) -> None:
        self.weather = weather

    def greeting(self, now: Optional[datetime] = None) -> str:
        now = now or self._clock()
        return f"Today is {now:%A}, and the weather is {self.weather}, meow."

    def start(self) -> None:
        self.scheduler.start()

    def stop(self) -> None:
        self.scheduler.stop()
