"""Placement log writer.

Collects per-cycle overlay placements during a run and writes them out as a
JSON index plus a short YAML summary.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml

from .types import FilterDefinition, LoopStats, OverlayPlacement

logger = logging.getLogger(__name__)


def build_record(
    cycle: int,
    active: Optional[FilterDefinition],
    placements: Iterable[OverlayPlacement],
    faces: int,
    extra: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    rec: Dict[str, Any] = {
        "cycle": cycle,
        "filter": active.identifier if active else None,
        "category": active.category if active else None,
        "faces": faces,
        "placements": [asdict(p) for p in placements],
    }
    if extra:
        rec.update(extra)
    return rec


class PlacementWriter:
    def __init__(self, output_dir: str | Path, cfg: Optional[Dict[str, Any]] = None):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.cfg = cfg or {}
        self.records: List[Dict[str, Any]] = []

    def add(self, record: Dict[str, Any]) -> None:
        self.records.append(record)

    def _write_json(self, path: Path, data: List[Dict[str, Any]]):
        with path.open("w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

    def finalize(self, stats: Optional[LoopStats] = None) -> Dict[str, Any]:
        out_dir = self.output_dir
        out_dir.mkdir(parents=True, exist_ok=True)

        index_path = out_dir / "placements.json"
        summary_path = out_dir / "summary.yaml"
        self._write_json(index_path, self.records)

        layers: Counter = Counter()
        filters: Counter = Counter()
        for rec in self.records:
            if rec.get("filter"):
                filters[rec["filter"]] += 1
            for p in rec.get("placements", []):
                layers[p["layer"]] += 1

        summary: Dict[str, Any] = {
            "counts": {
                "cycles": len(self.records),
                "faces": sum(int(r.get("faces", 0)) for r in self.records),
                "placements": sum(layers.values()),
            },
            "layers": dict(layers),
            "filters": dict(filters),
            "video": (self.cfg or {}).get("video", {}),
        }
        if stats is not None:
            summary["loop"] = asdict(stats)
        with summary_path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(summary, f, sort_keys=False, allow_unicode=True)

        logger.info("Wrote %d placement records to %s", len(self.records), index_path)
        return summary


__all__ = [
    "build_record",
    "PlacementWriter",
]
