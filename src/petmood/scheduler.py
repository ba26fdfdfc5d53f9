"""Morning report and midnight reset timers."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional, Protocol

from .config import ReminderConfig
from .handoff import Mailbox
from .models import ReminderSchedule

logger = logging.getLogger("petmood")

MORNING_IDENTIFIER = "morningScoreNotification"


def next_daily_fire(now: datetime, hour: int, minute: int = 0) -> datetime:
    """Next instant strictly after ``now`` at the given wall-clock time."""
    candidate = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if candidate <= now:
        candidate += timedelta(days=1)
    return candidate


def next_midnight(now: datetime) -> datetime:
    return next_daily_fire(now, 0, 0)


def compute_schedule(now: datetime, hour: int = 5, minute: int = 0) -> ReminderSchedule:
    return ReminderSchedule(
        next_morning_fire=next_daily_fire(now, hour, minute),
        next_midnight_fire=next_midnight(now),
    )


@dataclass
class NotificationRequest:
    identifier: str
    hour: int
    minute: int
    title: str
    body: str


class NotificationSink(Protocol):
    def schedule_daily(self, request: NotificationRequest) -> None: ...

    def set_badge(self, count: int) -> None: ...


class LoggingNotificationSink:
    """Records requests and logs them; the host platform does real delivery."""

    def __init__(self) -> None:
        self.requests: dict[str, NotificationRequest] = {}
        self.badge = 0

    def schedule_daily(self, request: NotificationRequest) -> None:
        self.requests[request.identifier] = request
        logger.info(
            "Notification %s scheduled daily at %02d:%02d: %s",
            request.identifier,
            request.hour,
            request.minute,
            request.title,
        )

    def set_badge(self, count: int) -> None:
        self.badge = count
        logger.info("Badge set to %s", count)


def build_morning_request(
    score: int, pet_name: str, reminders: ReminderConfig
) -> NotificationRequest:
    return NotificationRequest(
        identifier=MORNING_IDENTIFIER,
        hour=reminders.morning_hour,
        minute=reminders.morning_minute,
        title=reminders.title,
        body=reminders.body.format(pet_name=pet_name, score=score),
    )


class ReminderScheduler:
    """Single loop driving both timers from the wall clock.

    Every pass re-reads the clock and compares against the armed instants, so
    a process that was suspended past a fire time catches up on wake. Fired
    callbacks go through ``mailbox`` when one is given.
    """

    def __init__(
        self,
        on_morning: Callable[[datetime], None],
        on_midnight: Callable[[datetime], None],
        hour: int = 5,
        minute: int = 0,
        clock: Callable[[], datetime] = datetime.now,
        mailbox: Optional[Mailbox] = None,
        max_wait_seconds: float = 30.0,
    ) -> None:
        self.on_morning = on_morning
        self.on_midnight = on_midnight
        self.hour = hour
        self.minute = minute
        self._clock = clock
        self._mailbox = mailbox
        self._max_wait = max_wait_seconds
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self._schedule = compute_schedule(clock(), hour, minute)

    @property
    def schedule(self) -> ReminderSchedule:
        with self._lock:
            return self._schedule

    def rearm(self, now: Optional[datetime] = None) -> ReminderSchedule:
        """Recompute both instants from the clock, e.g. on foregrounding."""
        with self._lock:
            self._schedule = compute_schedule(now or self._clock(), self.hour, self.minute)
            return self._schedule

    def _dispatch(self, callback: Callable[[datetime], None], now: datetime) -> None:
        if self._mailbox is not None:
            self._mailbox.post(callback, now)
            return
        try:
            callback(now)
        except Exception:
            logger.exception("Scheduled callback failed")

    def run_pending(self, now: Optional[datetime] = None) -> list[str]:
        now = now or self._clock()
        fired: list[str] = []
        with self._lock:
            schedule = self._schedule
            morning_due = now >= schedule.next_morning_fire
            midnight_due = now >= schedule.next_midnight_fire
            self._schedule = ReminderSchedule(
                next_morning_fire=(
                    next_daily_fire(now, self.hour, self.minute)
                    if morning_due
                    else schedule.next_morning_fire
                ),
                next_midnight_fire=(
                    next_midnight(now) if midnight_due else schedule.next_midnight_fire
                ),
            )
        if midnight_due:
            fired.append("midnight")
            self._dispatch(self.on_midnight, now)
        if morning_due:
            fired.append("morning")
            self._dispatch(self.on_morning, now)
        return fired

    def seconds_until_next(self, now: Optional[datetime] = None) -> float:
        now = now or self._clock()
        schedule = self.schedule
        nearest = min(schedule.next_morning_fire, schedule.next_midnight_fire)
        return max(0.0, (nearest - now).total_seconds())

    def _loop(self) -> None:
        logger.info("Reminder loop started")
        while not self._stop.is_set():
            self.run_pending()
            wait = min(self.seconds_until_next(), self._max_wait)
            self._stop.wait(wait)
        logger.info("Reminder loop stopped")

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self.rearm()
        self._thread = threading.Thread(target=self._loop, name="petmood-reminders", daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 2.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
        self._thread = None
