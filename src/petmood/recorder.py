"""Microphone capture and per-buffer loudness features."""

from __future__ import annotations

import logging
import queue
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, List, Dict, Any, Callable

import numpy as np

from .models import AudioFeatures

logger = logging.getLogger("petmood")


class AudioPermissionError(RuntimeError):
    """Raised when the capture device cannot be opened."""


class AudioFeatureExtractor:
    """Keeps the RMS and peak of the most recent buffer.

    Each buffer overwrites the previous values; nothing is accumulated across
    buffers. ``consume`` runs on the capture thread, ``finalize`` on the
    consumer, and the lock keeps the (rms, peak) pair consistent.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._rms = 0.0
        self._peak = 0.0
        self._buffers = 0

    def consume(self, buffer: Any) -> None:
        data = np.asarray(buffer, dtype=np.float32)
        if data.ndim > 1:
            data = data[:, 0]
        if data.size == 0:
            return
        rms = float(np.sqrt(np.mean(np.square(data))))
        peak = float(np.max(np.abs(data)))
        with self._lock:
            self._rms = rms
            self._peak = peak
            self._buffers += 1

    @property
    def buffers_seen(self) -> int:
        with self._lock:
            return self._buffers

    def finalize(self, duration_seconds: float) -> AudioFeatures:
        with self._lock:
            return AudioFeatures(
                rms_loudness=self._rms,
                peak_amplitude=self._peak,
                duration_seconds=max(0.0, float(duration_seconds)),
            )

    def reset(self) -> None:
        with self._lock:
            self._rms = 0.0
            self._peak = 0.0
            self._buffers = 0


@dataclass
class AudioSession:
    started_at: datetime
    is_active: bool = True


def list_input_devices() -> List[Dict[str, Any]]:
    try:
        import sounddevice as sd
    except Exception as exc:  # pragma: no cover - environment-dependent
        raise RuntimeError("sounddevice is required for device detection.") from exc

    devices = sd.query_devices()
    return [d for d in devices if d.get("max_input_channels", 0) > 0]


def select_preferred_device(
    candidates: List[Dict[str, Any]],
    prefer_name: Optional[str] = None,
) -> Dict[str, Any]:
    if not candidates:
        raise AudioPermissionError("No input devices found.")
    if prefer_name:
        preferred = [
            d for d in candidates if prefer_name.lower() in d.get("name", "").lower()
        ]
        if preferred:
            return preferred[0]
    return candidates[0]


def _open_input_stream(
    sample_rate_hz: int,
    channels: int,
    blocksize: int,
    device_name: Optional[str],
    callback: Callable[..., None],
):
    try:
        import sounddevice as sd
    except Exception as exc:  # pragma: no cover - environment-dependent
        raise RuntimeError("sounddevice is required for recording.") from exc

    device = select_preferred_device(list_input_devices(), prefer_name=device_name)
    try:
        stream = sd.InputStream(
            samplerate=sample_rate_hz,
            channels=channels,
            dtype="float32",
            blocksize=blocksize,
            device=device.get("index"),
            callback=callback,
        )
    except sd.PortAudioError as exc:
        raise AudioPermissionError(str(exc)) from exc
    try:
        stream.start()
    except sd.PortAudioError as exc:
        stream.close()
        raise AudioPermissionError(str(exc)) from exc
    return stream


class Recorder:
    """One bounded recording session at a time.

    ``stop`` publishes the finished snapshot on ``snapshots`` so a consumer
    thread can pick it up without sharing the extractor.
    """

    def __init__(
        self,
        sample_rate_hz: int = 44100,
        channels: int = 1,
        blocksize: int = 1024,
        device_name: Optional[str] = None,
        clock: Callable[[], float] = time.monotonic,
        stream_factory: Optional[Callable[..., Any]] = None,
    ) -> None:
        self.sample_rate_hz = sample_rate_hz
        self.channels = channels
        self.blocksize = blocksize
        self.device_name = device_name
        self._clock = clock
        self._stream_factory = stream_factory or _open_input_stream
        self._extractor = AudioFeatureExtractor()
        self._stream = None
        self._started_tick = 0.0
        self.session: Optional[AudioSession] = None
        self.snapshots: "queue.Queue[AudioFeatures]" = queue.Queue()

    @property
    def is_active(self) -> bool:
        return self.session is not None and self.session.is_active

    def _callback(self, indata, _frames, _time, status) -> None:
        if status:
            logger.debug("Capture status: %s", status)
        self._extractor.consume(indata)

    def start(self) -> bool:
        if self.is_active:
            logger.info("Recording already active; restarting session")
            self._close(publish=False)

        self._extractor.reset()
        try:
            self._stream = self._stream_factory(
                self.sample_rate_hz,
                self.channels,
                self.blocksize,
                self.device_name,
                self._callback,
            )
        except AudioPermissionError as exc:
            logger.warning("Microphone unavailable, not recording: %s", exc)
            self._stream = None
            return False

        self._started_tick = self._clock()
        self.session = AudioSession(started_at=datetime.now())
        logger.info("Recording started")
        return True

    def stop(self) -> Optional[AudioFeatures]:
        if not self.is_active:
            return None
        return self._close(publish=True)

    def peek(self) -> Optional[AudioFeatures]:
        """Snapshot of the latest buffer without ending the session."""
        if not self.is_active:
            return None
        return self._extractor.finalize(self._clock() - self._started_tick)

    def toggle(self) -> Optional[AudioFeatures]:
        if self.is_active:
            return self.stop()
        self.start()
        return None

    def _close(self, publish: bool) -> AudioFeatures:
        stream = self._stream
        self._stream = None
        if stream is not None:
            try:
                stream.stop()
            finally:
                stream.close()
        duration = self._clock() - self._started_tick
        features = self._extractor.finalize(duration)
        if self.session is not None:
            self.session.is_active = False
        self.session = None
        if publish:
            self.snapshots.put(features)
            logger.info(
                "Recording stopped: rms=%.4f peak=%.4f duration=%.2fs",
                features.rms_loudness,
                features.peak_amplitude,
                features.duration_seconds,
            )
        return features


def analyze_file(path: str, blocksize: int = 1024) -> AudioFeatures:
    """Run a WAV file through the extractor block by block."""
    try:
        import soundfile as sf
    except Exception as exc:  # pragma: no cover - environment-dependent
        raise RuntimeError("soundfile is required for file analysis.") from exc

    extractor = AudioFeatureExtractor()
    info = sf.info(path)
    for block in sf.blocks(path, blocksize=blocksize, dtype="float32", always_2d=True):
        extractor.consume(block)
    duration = info.frames / info.samplerate if info.samplerate else 0.0
    return extractor.finalize(duration)
