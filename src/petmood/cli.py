"""CLI entry point."""

from __future__ import annotations

import argparse
import os
import time
from datetime import datetime

from PIL import Image

from .captions import CaptionClient
from .classifier import classify_features
from .compositor import compose
from .config import Config, load_config, save_config
from .framing import face_box_from_normalized, frame
from .logging_utils import setup_logging
from .models import ScoreContext, SliderScores, Weekday
from .recorder import Recorder, analyze_file, list_input_devices
from .scheduler import compute_schedule
from .scoring import encouragement, score
from .storage import build_photo_basename, ensure_structure


def _load(config_path: str) -> Config:
    if config_path and os.path.exists(config_path):
        return load_config(config_path)
    return Config()


def _prepare(cfg: Config, base_dir: str | None) -> dict:
    paths = ensure_structure(base_dir or cfg.base_dir or os.getcwd())
    setup_logging(paths["logs"])
    return paths


def main() -> int:
    parser = argparse.ArgumentParser(prog="petmood")
    parser.add_argument("--config", default="petmood_config.yml", help="Config.")
    parser.add_argument("--base-dir", help="Base output directory.")
    sub = parser.add_subparsers(dest="command")

    devices_cmd = sub.add_parser("devices")
    devices_cmd.add_argument("--match", help="Filter device names by substring.")

    listen_cmd = sub.add_parser("listen")
    listen_cmd.add_argument(
        "--duration", type=float, help="Seconds. Omit to stop with Ctrl+C."
    )
    listen_cmd.add_argument("--device", help="Preferred device name substring.")

    analyze_cmd = sub.add_parser("analyze")
    analyze_cmd.add_argument("audio_path", help="Path to a WAV file.")

    score_cmd = sub.add_parser("score")
    score_cmd.add_argument(
        "sliders", type=float, nargs=6, help="mood stress stamina sleep focus anxiety"
    )
    score_cmd.add_argument("--weekday", help="Mon..Sun. Defaults to today.")
    score_cmd.add_argument("--address", default="", help="Address text.")
    score_cmd.add_argument("--previous", type=int, default=50, help="Yesterday's score.")

    compose_cmd = sub.add_parser("compose")
    compose_cmd.add_argument("image_path", help="Base photo.")
    compose_cmd.add_argument("--assistant", help="Assistant caption.")
    compose_cmd.add_argument("--user", help="User caption.")
    compose_cmd.add_argument("--out", help="Output PNG path.")

    frame_cmd = sub.add_parser("frame")
    frame_cmd.add_argument("image_path", help="Photo to frame.")
    frame_cmd.add_argument(
        "--detect", action="store_true", help="Detect a face with OpenCV."
    )
    frame_cmd.add_argument("--out-dir", help="Directory for wallpaper and icon.")

    weather_cmd = sub.add_parser("weather")
    weather_cmd.add_argument("address", help="Location to ask about.")

    sub.add_parser("schedule")
    sub.add_parser("init-config")

    args = parser.parse_args()
    cfg = _load(args.config)

    if args.command == "devices":
        devices = list_input_devices()
        if args.match:
            devices = [
                d for d in devices if args.match.lower() in d.get("name", "").lower()
            ]
        for device in devices:
            name = device.get("name", "Unknown")
            index = device.get("index", "?")
            channels = device.get("max_input_channels", 0)
            print(f"[{index}] {name} (inputs: {channels})")
        return 0

    if args.command == "listen":
        _prepare(cfg, args.base_dir)
        recorder = Recorder(
            sample_rate_hz=cfg.audio.sample_rate_hz,
            channels=cfg.audio.channels,
            blocksize=cfg.audio.blocksize,
            device_name=args.device or cfg.audio.device_name,
        )
        if not recorder.start():
            print("Microphone unavailable.")
            return 1
        try:
            if args.duration is not None:
                time.sleep(args.duration)
            else:
                while True:
                    time.sleep(0.1)
        except KeyboardInterrupt:
            pass
        recorder.stop()
        features = recorder.snapshots.get()
        print(classify_features(features))
        return 0

    if args.command == "analyze":
        features = analyze_file(args.audio_path, blocksize=cfg.audio.blocksize)
        print(
            f"rms={features.rms_loudness:.4f} peak={features.peak_amplitude:.4f} "
            f"duration={features.duration_seconds:.2f}s"
        )
        print(classify_features(features))
        return 0

    if args.command == "score":
        weekday = Weekday.parse(args.weekday) if args.weekday else Weekday.from_date(datetime.now())
        value = score(
            SliderScores.from_values(args.sliders),
            ScoreContext(weekday=weekday, address_text=args.address, previous_score=args.previous),
            cfg.scoring,
        )
        print(value)
        print(encouragement(value))
        return 0

    if args.command == "compose":
        paths = _prepare(cfg, args.base_dir)
        with Image.open(args.image_path) as handle:
            base = handle.convert("RGBA")
        result = compose(
            base,
            assistant_text=args.assistant,
            user_text=args.user,
            draw_user_text=bool(args.user),
            config=cfg.compositor,
        )
        out = args.out or os.path.join(
            paths["composites"], f"{build_photo_basename('composite')}.png"
        )
        result.save(out)
        print(f"Wrote {out}")
        return 0

    if args.command == "frame":
        paths = _prepare(cfg, args.base_dir)
        with Image.open(args.image_path) as handle:
            image = handle.convert("RGB")
        face = None
        if args.detect:
            from .face_detect import OpenCVFaceDetector

            box = OpenCVFaceDetector().detect(image)
            if box is not None:
                face = face_box_from_normalized(box, image.width, image.height)
        wallpaper, icon = frame(
            image, face, cfg.framing.aspect, icon_size=cfg.framing.icon_size
        )
        out_dir = args.out_dir or paths["wallpapers"]
        basename = build_photo_basename("wallpaper")
        wallpaper_path = os.path.join(out_dir, f"{basename}.png")
        icon_path = os.path.join(out_dir, f"{basename}.icon.png")
        wallpaper.save(wallpaper_path)
        icon.save(icon_path)
        print(f"Wrote {wallpaper_path}")
        print(f"Wrote {icon_path}")
        return 0

    if args.command == "schedule":
        schedule = compute_schedule(
            datetime.now(), cfg.reminders.morning_hour, cfg.reminders.morning_minute
        )
        print(f"Morning report: {schedule.next_morning_fire.isoformat(timespec='minutes')}")
        print(f"Midnight reset: {schedule.next_midnight_fire.isoformat(timespec='minutes')}")
        return 0

    if args.command == "weather":
        _prepare(cfg, args.base_dir)
        print(CaptionClient(cfg.captions).weather_for(args.address))
        return 0

    if args.command == "init-config":
        save_config(args.config, cfg)
        print(f"Wrote {args.config}")
        return 0

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
