import numpy as np
import pytest

from filtercam.config import merge_config
from filtercam.keypoints import ANCHOR_LANDMARKS
from filtercam.types import FaceKeypoints


def make_face(left=(100.0, 200.0), right=(140.0, 200.0), n=468):
    pts = np.zeros((n, 2), dtype=np.float64)
    if n > ANCHOR_LANDMARKS["right_eye_outer"]:
        pts[ANCHOR_LANDMARKS["left_eye_outer"]] = left
        pts[ANCHOR_LANDMARKS["right_eye_outer"]] = right
    return FaceKeypoints(points=pts)


class FakeVideo:
    def __init__(self, ready=True):
        self.ready = ready
        self.frame = np.zeros((480, 640, 3), dtype=np.uint8)

    def current_frame(self):
        return self.frame


@pytest.fixture
def cfg():
    return merge_config({"runtime": {"frame_interval_ms": 1}, "loading": {"interval_ms": 5}})
