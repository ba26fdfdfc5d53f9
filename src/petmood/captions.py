"""Client for the remote caption-generation endpoint."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

import requests

from .config import CaptionConfig
from .handoff import Mailbox

logger = logging.getLogger("petmood")


class CaptionClient:
    """POSTs ``{"prompt": ...}`` and reads ``{"reply": ...}``.

    Transport and parse failures never escape: after the configured number of
    attempts the fixed fallback reply is returned instead.
    """

    def __init__(
        self,
        config: Optional[CaptionConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config or CaptionConfig()
        self._sleep = sleep
        self._post = session.post if session is not None else None

    def build_prompt(self, prompt: str) -> str:
        character = self.config.character_prompt.strip()
        if not character:
            return f"User: {prompt}"
        return f"{character}\nUser: {prompt}"

    def _request_once(self, full_prompt: str) -> Optional[str]:
        post = self._post or requests.post
        resp = post(
            self.config.endpoint_url,
            json={"prompt": full_prompt},
            timeout=self.config.timeout_seconds,
        )
        if resp.status_code != 200:
            logger.warning("Caption service HTTP %s: %s", resp.status_code, (resp.text or "")[:200])
            return None
        data = resp.json()
        reply = data.get("reply") if isinstance(data, dict) else None
        if not isinstance(reply, str):
            logger.warning("Caption service returned no reply field")
            return None
        return reply

    def generate_reply(self, prompt: str) -> str:
        if not prompt or not prompt.strip():
            return ""
        full_prompt = self.build_prompt(prompt.strip())
        attempts = max(1, self.config.attempts)
        for attempt in range(1, attempts + 1):
            try:
                reply = self._request_once(full_prompt)
            except requests.exceptions.RequestException as exc:
                logger.info("Caption request failed (%d/%d): %s", attempt, attempts, exc)
                reply = None
            except ValueError as exc:
                logger.info("Caption response not JSON (%d/%d): %s", attempt, attempts, exc)
                reply = None
            if reply is not None:
                logger.info("Caption reply received on attempt %d", attempt)
                return reply
            if attempt < attempts:
                self._sleep(self.config.backoff_seconds)
        logger.warning("Caption service unavailable after %d attempts", attempts)
        return self.config.fallback_reply

    def weather_for(self, location: str) -> str:
        """One-line weather description for ``location``.

        Single attempt, no character prompt; any failure yields
        ``weather_fallback``.
        """
        prompt = self.config.weather_prompt.format(location=location)
        try:
            reply = self._request_once(prompt)
        except (requests.exceptions.RequestException, ValueError) as exc:
            logger.info("Weather request failed: %s", exc)
            reply = None
        if reply is None:
            return self.config.weather_fallback
        return reply

    def generate_reply_async(
        self,
        prompt: str,
        mailbox: Mailbox,
        on_reply: Callable[[str], None],
    ) -> threading.Thread:
        """Fetch on a worker thread and post ``on_reply(reply)`` to ``mailbox``."""

        def _worker() -> None:
            mailbox.post(on_reply, self.generate_reply(prompt))

        thread = threading.Thread(target=_worker, name="petmood-caption", daemon=True)
        thread.start()
        return thread
