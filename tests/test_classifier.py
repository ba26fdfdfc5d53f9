from petmood import classifier
from petmood.classifier import candidates, classify, classify_features
from petmood.models import AudioFeatures


def test_quiet_playful_persistent_pool():
    expected = set(classifier.QUIET_CALL) | set(classifier.PLAYFUL) | set(classifier.PERSISTENT)
    assert set(candidates(0.01, 400, 3.0)) == expected
    for _ in range(100):
        assert classify(0.01, 400, 3.0) in expected


def test_band_edges():
    assert set(classifier.NEEDY) <= set(candidates(0.02, 200, 1.0))
    assert set(classifier.ENERGETIC) <= set(candidates(0.05, 200, 1.0))
    assert set(classifier.NEUTRAL) <= set(candidates(0.05, 300, 1.0))
    assert set(classifier.NEUTRAL) <= set(candidates(0.05, 150, 1.0))
    assert set(classifier.SLEEPY) <= set(candidates(0.05, 149.9, 1.0))
    assert set(classifier.BRIEF) <= set(candidates(0.05, 200, 2.0))
    assert set(classifier.PERSISTENT) <= set(candidates(0.05, 200, 2.01))


def test_pool_has_one_pair_per_group():
    pool = candidates(0.03, 100, 0.5)
    assert len(pool) == 6
    assert pool == classifier.NEEDY + classifier.SLEEPY + classifier.BRIEF


def test_injected_picker_is_used():
    features = AudioFeatures(rms_loudness=0.2, peak_amplitude=0.4, duration_seconds=0.3)
    assert classify_features(features, picker=lambda pool: pool[0]) == classifier.ENERGETIC[0]
    assert classify_features(features, picker=lambda pool: pool[-1]) == classifier.BRIEF[-1]
