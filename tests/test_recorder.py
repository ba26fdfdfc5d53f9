import sys
import types

import numpy as np
import pytest
import soundfile as sf

from petmood.recorder import (
    AudioFeatureExtractor,
    AudioPermissionError,
    Recorder,
    _open_input_stream,
    analyze_file,
)


class FakeStream:
    def __init__(self):
        self.stopped = False
        self.closed = False

    def stop(self):
        self.stopped = True

    def close(self):
        self.closed = True


class FakeDevice:
    def __init__(self):
        self.callback = None
        self.streams = []

    def __call__(self, rate, channels, blocksize, device_name, callback):
        self.callback = callback
        stream = FakeStream()
        self.streams.append(stream)
        return stream

    def deliver(self, samples):
        block = np.asarray(samples, dtype=np.float32).reshape(-1, 1)
        self.callback(block, len(block), None, None)


def make_clock(*ticks):
    values = iter(ticks)
    return lambda: next(values)


def test_extractor_reports_buffer_rms_and_peak():
    extractor = AudioFeatureExtractor()
    extractor.consume(np.array([0.5, -0.5, 0.5, -0.5], dtype=np.float32))
    features = extractor.finalize(1.5)
    assert features.rms_loudness == pytest.approx(0.5)
    assert features.peak_amplitude == pytest.approx(0.5)
    assert features.duration_seconds == 1.5


def test_extractor_keeps_only_last_buffer():
    extractor = AudioFeatureExtractor()
    extractor.consume(np.full(256, 0.9, dtype=np.float32))
    extractor.consume(np.full(256, 0.01, dtype=np.float32))
    features = extractor.finalize(2.0)
    assert features.rms_loudness == pytest.approx(0.01)
    assert features.peak_amplitude == pytest.approx(0.01)


def test_extractor_uses_first_channel_and_ignores_empty():
    extractor = AudioFeatureExtractor()
    extractor.consume(np.array([[0.2, 0.9], [-0.2, 0.9]], dtype=np.float32))
    extractor.consume(np.array([], dtype=np.float32))
    features = extractor.finalize(0.1)
    assert features.peak_amplitude == pytest.approx(0.2)
    assert extractor.buffers_seen == 1


def test_recorder_publishes_snapshot_on_stop():
    device = FakeDevice()
    recorder = Recorder(clock=make_clock(10.0, 13.0), stream_factory=device)

    assert recorder.start() is True
    assert recorder.is_active
    device.deliver([0.3, -0.3, 0.3, -0.3])
    features = recorder.stop()

    assert not recorder.is_active
    assert device.streams[0].closed
    assert features.duration_seconds == pytest.approx(3.0)
    assert features.rms_loudness == pytest.approx(0.3)
    assert recorder.snapshots.get_nowait() == features


def test_recorder_restart_discards_previous_session():
    device = FakeDevice()
    recorder = Recorder(clock=make_clock(0.0, 1.0, 1.0, 2.5), stream_factory=device)

    recorder.start()
    device.deliver([0.8] * 8)
    recorder.start()
    device.deliver([0.1] * 8)
    features = recorder.stop()

    assert device.streams[0].closed
    assert recorder.snapshots.qsize() == 1
    assert features.peak_amplitude == pytest.approx(0.1)
    assert features.duration_seconds == pytest.approx(1.5)


def test_recorder_without_permission_does_not_start():
    def deny(*_args):
        raise AudioPermissionError("denied")

    recorder = Recorder(stream_factory=deny)
    assert recorder.start() is False
    assert not recorder.is_active
    assert recorder.stop() is None


def test_analyze_file_reads_last_block(tmp_path):
    data = np.concatenate(
        [np.full(7168, 0.1, dtype=np.float32), np.full(832, 0.3, dtype=np.float32)]
    )
    path = tmp_path / "meow.wav"
    sf.write(str(path), data, 8000)

    features = analyze_file(str(path), blocksize=1024)

    assert features.rms_loudness == pytest.approx(0.3, abs=1e-3)
    assert features.duration_seconds == pytest.approx(1.0)


def test_peek_reads_without_stopping():
    device = FakeDevice()
    recorder = Recorder(clock=make_clock(0.0, 0.5, 1.0), stream_factory=device)

    assert recorder.peek() is None
    recorder.start()
    device.deliver([0.2, -0.4])
    live = recorder.peek()

    assert recorder.is_active
    assert live.peak_amplitude == pytest.approx(0.4)
    assert live.duration_seconds == pytest.approx(0.5)
    assert recorder.snapshots.empty()


def test_failed_stream_start_closes_stream(monkeypatch):
    class PortAudioError(Exception):
        pass

    opened = []

    class DeniedStream:
        def __init__(self, **kwargs):
            self.closed = False
            opened.append(self)

        def start(self):
            raise PortAudioError("permission denied")

        def close(self):
            self.closed = True

    fake_sd = types.SimpleNamespace(
        PortAudioError=PortAudioError,
        InputStream=DeniedStream,
        query_devices=lambda: [{"name": "Mic", "index": 0, "max_input_channels": 1}],
    )
    monkeypatch.setitem(sys.modules, "sounddevice", fake_sd)

    with pytest.raises(AudioPermissionError):
        _open_input_stream(44100, 1, 1024, None, lambda *args: None)
    assert len(opened) == 1
    assert opened[0].closed

    recorder = Recorder()
    assert recorder.start() is False
    assert opened[1].closed
