from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_CONFIG: Dict[str, Any] = {
    "runtime": {
        "output_dir": "results",
        "log_level": "INFO",
        "save_video": True,
        "save_metrics": True,
        "save_events": True,
    },
    "detector": {
        "model": "yolov8n.pt",
        "device": None,
        "conf_thres": 0.25,
    },
    "tracking": {
        "iou_threshold": 0.3,
        "matching": "greedy",
        "seed": None,
        "id_prefix": "obj",
    },
    "filter": {
        "classes": [],
        "use_relevant_defaults": False,
    },
    "overlay": {
        "enabled": True,
        "show_trails": True,
        "show_hud": True,
    },
    "export": {
        "fps": 30.0,
        "category": "Value-added",
        "therblig": "Transport",
    },
    "performance": {
        "fps_smoothing": 0.9,
    },
}


def load_yaml(path: str | Path) -> Dict[str, Any]:
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config not found: {config_path.resolve()}")
    with config_path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = merge(out[key], value)
        else:
            out[key] = value
    return out


def load_config(path: Optional[str | Path] = None) -> Dict[str, Any]:
    """Defaults overlaid with the YAML file at `path` (if given)."""
    if path is None:
        return deepcopy(DEFAULT_CONFIG)
    return merge(DEFAULT_CONFIG, load_yaml(path))


def get(cfg: Dict[str, Any], key: str, default: Any = None) -> Any:
    """
    Dot-access helper:
      get(cfg, "tracking.iou_threshold", 0.3)
    """
    cur: Any = cfg
    for part in key.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return default
        cur = cur[part]
    return cur
