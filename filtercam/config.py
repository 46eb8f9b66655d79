from __future__ import annotations

import copy
import logging
import os
import random
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping

import numpy as np
import yaml

logger = logging.getLogger(__name__)


DEFAULTS: Dict[str, Any] = {
    "video": {
        "capture_index": 0,
        # Overlay geometry is computed in this pixel space
        "width": 640,
        "height": 480,
    },
    "carousel": {
        "repetitions": 20,
        "item_width": 70,
        "item_margin": 10,
        "debounce_ms": 150,
    },
    "detector": {
        "max_faces": 10,
        "refine_landmarks": False,
        "min_detection_confidence": 0.5,
        "min_tracking_confidence": 0.5,
    },
    "loading": {
        "interval_ms": 200,
        "max_step": 20.0,
    },
    # Extra filter definitions registered at startup:
    # [{value, label, image, category}, ...]
    "filters": [],
    "runtime": {
        "seed": 1337,
        "frame_interval_ms": 16,
        "log_level": "INFO",
    },
    "paths": {
        "output_dir": None,
    },
}


def setup_logging(level: str | int = "INFO") -> None:
    """Configure root logging; `level` may be a name (str) or a number."""
    if isinstance(level, str):
        lvl = logging.getLevelName(level.upper())
        if not isinstance(lvl, int):
            lvl = logging.INFO
    else:
        lvl = int(level)
    logging.basicConfig(
        level=lvl,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def seed_everything(seed: int) -> None:
    os.environ["PYTHONHASHSEED"] = str(seed)
    random.seed(seed)
    np.random.seed(seed)


def _deep_merge(base: MutableMapping[str, Any], override: Mapping[str, Any]) -> MutableMapping[str, Any]:
    for k, v in override.items():
        if k in base and isinstance(base[k], MutableMapping) and isinstance(v, Mapping):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def load_yaml(path: str | Path | None) -> Dict[str, Any]:
    if not path:
        return {}
    p = Path(path)
    if not p.exists():
        logger.warning("YAML config not found: %s", p)
        return {}
    with p.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError("Top-level of YAML must be a mapping/dict")
    if not isinstance(data.get("filters", []), list):
        raise ValueError("'filters' must be a list of filter mappings")
    return data


def merge_config(yaml_cfg: Mapping[str, Any] | None = None, cli_overrides: Mapping[str, Any] | None = None) -> Dict[str, Any]:
    cfg: Dict[str, Any] = copy.deepcopy(DEFAULTS)
    if yaml_cfg:
        _deep_merge(cfg, copy.deepcopy(dict(yaml_cfg)))
    if cli_overrides:
        _deep_merge(cfg, copy.deepcopy(dict(cli_overrides)))

    # Progress jitter draws from `random`; seed it for reproducible runs
    runtime = cfg.get("runtime", {})
    seed = int(runtime.get("seed", 1337))
    seed_everything(seed)
    return cfg


def load_and_merge(yaml_path: str | Path | None, cli_overrides: Mapping[str, Any] | None = None) -> Dict[str, Any]:
    yaml_cfg = load_yaml(yaml_path)
    return merge_config(yaml_cfg, cli_overrides)
