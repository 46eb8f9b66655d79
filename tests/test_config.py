import random

import pytest

from filtercam.config import DEFAULTS, load_and_merge, load_yaml, merge_config


def test_defaults_cover_runtime_knobs():
    cfg = merge_config()
    assert cfg["video"]["width"] == 640 and cfg["video"]["height"] == 480
    assert cfg["carousel"]["repetitions"] == 20
    assert cfg["carousel"]["debounce_ms"] == 150
    assert cfg["filters"] == []


def test_yaml_and_cli_overrides_merge_deeply(tmp_path):
    path = tmp_path / "cfg.yaml"
    path.write_text(
        "carousel:\n  repetitions: 4\n"
        "filters:\n  - {value: crown, label: Crown, image: crown.png, category: head}\n",
        encoding="utf-8",
    )
    cfg = load_and_merge(path, {"carousel": {"debounce_ms": 90}})
    assert cfg["carousel"] == {"repetitions": 4, "item_width": 70, "item_margin": 10, "debounce_ms": 90}
    assert cfg["filters"][0]["value"] == "crown"


def test_merge_does_not_mutate_defaults():
    merge_config({"video": {"width": 1280}})
    assert DEFAULTS["video"]["width"] == 640


def test_merge_seeds_random():
    merge_config({"runtime": {"seed": 5}})
    a = random.random()
    merge_config({"runtime": {"seed": 5}})
    assert random.random() == a


def test_missing_yaml_returns_empty(tmp_path):
    assert load_yaml(tmp_path / "absent.yaml") == {}
    assert load_yaml(None) == {}


def test_invalid_yaml_shapes_raise(tmp_path):
    top = tmp_path / "list.yaml"
    top.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_yaml(top)
    filters = tmp_path / "filters.yaml"
    filters.write_text("filters: {value: x}\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_yaml(filters)
