import json

import yaml

from conftest import make_face
from filtercam.overlay import compute_placements
from filtercam.types import FilterDefinition, LoopStats
from filtercam.writers import PlacementWriter, build_record

ALL = FilterDefinition("all", "All", "all.png", "all")


def test_writer_outputs_index_and_summary(tmp_path):
    writer = PlacementWriter(tmp_path / "out", {"video": {"width": 640, "height": 480}})
    faces = [make_face(), make_face(n=10)]
    writer.add(build_record(1, ALL, compute_placements(faces, ALL), len(faces)))
    writer.add(build_record(2, None, [], 0))
    summary = writer.finalize(LoopStats(ticks=5, skipped=3, detections=2))

    index = json.loads((tmp_path / "out" / "placements.json").read_text(encoding="utf-8"))
    assert [r["cycle"] for r in index] == [1, 2]
    assert [p["layer"] for p in index[0]["placements"]] == ["head", "eyes", "frame"]
    assert index[1]["filter"] is None

    on_disk = yaml.safe_load((tmp_path / "out" / "summary.yaml").read_text(encoding="utf-8"))
    assert on_disk == summary
    assert summary["counts"] == {"cycles": 2, "faces": 2, "placements": 3}
    assert summary["layers"] == {"head": 1, "eyes": 1, "frame": 1}
    assert summary["filters"] == {"all": 1}
    assert summary["loop"]["ticks"] == 5
