import pytest
from PIL import Image

pytest.importorskip("cv2")

from petmood.face_detect import OpenCVFaceDetector  # noqa: E402


def test_blank_image_has_no_face():
    detector = OpenCVFaceDetector()
    assert detector.detect(Image.new("RGB", (200, 200), (128, 128, 128))) is None


def test_empty_image_has_no_face():
    detector = OpenCVFaceDetector()
    assert detector.detect(Image.new("RGB", (0, 0))) is None
