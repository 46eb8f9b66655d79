import asyncio
import threading
import time

import pytest

from filtercam import facemesh
from filtercam.errors import DetectorInitError


class SlowMesh:
    """Stands in for FaceMeshDetector; construction blocks its worker thread."""

    built = []

    def __init__(self, cfg, delay=0.1):
        time.sleep(delay)
        self.cfg = cfg
        self.closed = threading.Event()
        SlowMesh.built.append(self)

    def close(self):
        self.closed.set()


@pytest.fixture
def slow_mesh(monkeypatch):
    SlowMesh.built = []
    monkeypatch.setattr(facemesh, "FaceMeshDetector", SlowMesh)
    return SlowMesh


def test_create_detector_returns_built_detector(slow_mesh):
    detector = asyncio.run(facemesh.create_detector({"detector": {"max_faces": 2}}))
    assert detector is slow_mesh.built[0]
    assert detector.cfg.max_faces == 2
    assert not detector.closed.is_set()


def test_create_detector_closes_detector_built_after_cancellation(slow_mesh):
    async def scenario():
        task = asyncio.get_running_loop().create_task(facemesh.create_detector({}))
        await asyncio.sleep(0.02)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        # Let the worker thread finish and the close callback run
        await asyncio.sleep(0.3)

    asyncio.run(scenario())
    assert len(slow_mesh.built) == 1
    assert slow_mesh.built[0].closed.is_set()


def test_create_detector_wraps_construction_errors(monkeypatch):
    def broken(cfg):
        raise RuntimeError("no model file")

    monkeypatch.setattr(facemesh, "FaceMeshDetector", broken)
    with pytest.raises(DetectorInitError, match="no model file"):
        asyncio.run(facemesh.create_detector({}))
