import argparse
import time

from petmood.classifier import candidates, classify_features
from petmood.recorder import Recorder, list_input_devices, select_preferred_device


def _describe_device(info: dict) -> None:
    print(f"Input device: {info.get('name', '')}")
    print(f"Index: {info.get('index', '')}")
    print(f"Max input channels: {info.get('max_input_channels', 0)}")
    print(f"Default sample rate: {info.get('default_samplerate', '')}")


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--device", help="Device name substring.")
    parser.add_argument("--seconds", type=float, default=6.0, help="Test duration.")
    parser.add_argument("--rate", type=int, default=44100, help="Sample rate.")
    parser.add_argument("--blocksize", type=int, default=1024, help="Frames per buffer.")
    args = parser.parse_args()

    _describe_device(select_preferred_device(list_input_devices(), prefer_name=args.device))

    recorder = Recorder(
        sample_rate_hz=args.rate,
        blocksize=args.blocksize,
        device_name=args.device,
    )
    if not recorder.start():
        print("Microphone unavailable.")
        return 1
    print("Streaming... press Ctrl+C to stop early.")

    end = time.time() + args.seconds
    try:
        while time.time() < end:
            features = recorder.peek()
            if features is not None and features.peak_amplitude > 0:
                print(
                    f"RMS {features.rms_loudness:.4f} | Peak {features.peak_amplitude:.4f}"
                    f" | {features.duration_seconds:.1f}s"
                )
            else:
                print("No samples yet...")
            time.sleep(0.5)
    except KeyboardInterrupt:
        pass
    features = recorder.stop()

    print(f"Candidates: {', '.join(candidates(features.rms_loudness, features.peak_amplitude, features.duration_seconds))}")
    print(f"Result: {classify_features(features)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
