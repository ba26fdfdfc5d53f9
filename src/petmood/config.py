"""Configuration handling."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional
import yaml


@dataclass
class AudioConfig:
    sample_rate_hz: int = 44100
    blocksize: int = 1024
    channels: int = 1
    device_name: Optional[str] = None


@dataclass
class LocationAdjustment:
    match: str
    adjustment: float


def _default_locations() -> List[LocationAdjustment]:
    return [
        LocationAdjustment(match="Tokyo", adjustment=-3),
        LocationAdjustment(match="Osaka", adjustment=2),
    ]


@dataclass
class ScoringConfig:
    weekday_adjustment: float = -5
    weekend_adjustment: float = 5
    yesterday_weight: float = 0.4
    location_adjustments: List[LocationAdjustment] = field(
        default_factory=_default_locations
    )


@dataclass
class ReminderConfig:
    morning_hour: int = 5
    morning_minute: int = 0
    title: str = "Today's mood forecast"
    body: str = (
        "{pet_name}'s mood today is probably around {score} points, meow.\n"
        "I'll check in again tomorrow morning."
    )


@dataclass
class CaptionConfig:
    endpoint_url: str = "http://localhost:8787"
    attempts: int = 3
    backoff_seconds: float = 1.0
    timeout_seconds: float = 15.0
    fallback_reply: str = "Can't reach the server, meow."
    character_prompt: str = (
        "Answer like a cat talking to a young child. At most 45 characters.\n"
        "For hard questions answer 'a cat wouldn't know, meow'.\n"
        "Always end sentences with 'meow'.\n"
        "Always be encouraging."
    )
    weather_prompt: str = "Tell me today's weather in {location} in one short phrase, meow."
    weather_fallback: str = "unknown"


@dataclass
class CompositorConfig:
    padding: int = 16
    bold_font_path: Optional[str] = None
    regular_font_path: Optional[str] = None


@dataclass
class FramingConfig:
    screen_width: int = 1170
    screen_height: int = 2532
    icon_size: int = 80

    @property
    def aspect(self) -> float:
        return self.screen_width / self.screen_height


@dataclass
class Config:
    base_dir: str = ""
    pet_name: str = "Kitty"
    starting_treats: int = 7
    audio: AudioConfig = field(default_factory=AudioConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    reminders: ReminderConfig = field(default_factory=ReminderConfig)
    captions: CaptionConfig = field(default_factory=CaptionConfig)
    compositor: CompositorConfig = field(default_factory=CompositorConfig)
    framing: FramingConfig = field(default_factory=FramingConfig)


def load_config(path: str) -> Config:
    with open(path, "r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    scoring_data = dict(data.get("scoring", {}))
    locations = scoring_data.pop("location_adjustments", None)
    scoring = ScoringConfig(**scoring_data)
    if locations is not None:
        scoring.location_adjustments = [
            LocationAdjustment(match=str(item["match"]), adjustment=float(item["adjustment"]))
            for item in locations
        ]

    return Config(
        base_dir=data.get("base_dir", ""),
        pet_name=data.get("pet_name", "Kitty"),
        starting_treats=int(data.get("starting_treats", 7)),
        audio=AudioConfig(**data.get("audio", {})),
        scoring=scoring,
        reminders=ReminderConfig(**data.get("reminders", {})),
        captions=CaptionConfig(**data.get("captions", {})),
        compositor=CompositorConfig(**data.get("compositor", {})),
        framing=FramingConfig(**data.get("framing", {})),
    )


def save_config(path: str, config: Config) -> None:
    data = {
        "base_dir": config.base_dir,
        "pet_name": config.pet_name,
        "starting_treats": config.starting_treats,
        "audio": {
            "sample_rate_hz": config.audio.sample_rate_hz,
            "blocksize": config.audio.blocksize,
            "channels": config.audio.channels,
            "device_name": config.audio.device_name,
        },
        "scoring": {
            "weekday_adjustment": config.scoring.weekday_adjustment,
            "weekend_adjustment": config.scoring.weekend_adjustment,
            "yesterday_weight": config.scoring.yesterday_weight,
            "location_adjustments": [
                {"match": item.match, "adjustment": item.adjustment}
                for item in config.scoring.location_adjustments
            ],
        },
        "reminders": {
            "morning_hour": config.reminders.morning_hour,
            "morning_minute": config.reminders.morning_minute,
            "title": config.reminders.title,
            "body": config.reminders.body,
        },
        "captions": {
            "endpoint_url": config.captions.endpoint_url,
            "attempts": config.captions.attempts,
            "backoff_seconds": config.captions.backoff_seconds,
            "timeout_seconds": config.captions.timeout_seconds,
            "fallback_reply": config.captions.fallback_reply,
            "character_prompt": config.captions.character_prompt,
            "weather_prompt": config.captions.weather_prompt,
            "weather_fallback": config.captions.weather_fallback,
        },
        "compositor": {
            "padding": config.compositor.padding,
            "bold_font_path": config.compositor.bold_font_path,
            "regular_font_path": config.compositor.regular_font_path,
        },
        "framing": {
            "screen_width": config.framing.screen_width,
            "screen_height": config.framing.screen_height,
            "icon_size": config.framing.icon_size,
        },
    }
    with open(path, "w", encoding="utf-8") as handle:
        yaml.safe_dump(data, handle, sort_keys=False, allow_unicode=True)
