"""
Editor configuration - paths, fonts, guides and export settings.

Defaults live in DEFAULT_CONFIG. A JSON file (data/editor_config.json, or the
path in THUMB_EDITOR_CONFIG) is deep-merged over them. The data directory can
be moved with THUMB_EDITOR_DATA_DIR. Both variables may come from a .env file.
"""

import copy
import json
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent.parent

DEFAULT_CONFIG = {
    "fonts": {
        "dir": "fonts",
        "display": [
            "Anton-Regular.ttf",
            "impact.ttf",
            "Impact.ttf",
            "ariblk.ttf",
            "DejaVuSans-Bold.ttf",
        ],
    },
    "guides": {
        "grid": True,
        "thirds": False,
        "safe_zone": True,
    },
    "export": {
        "output_path": "output/thumbnail.png",
    },
    "images": {
        "fetch_timeout": 15,
    },
}


def data_dir() -> Path:
    return Path(os.getenv("THUMB_EDITOR_DATA_DIR", str(BASE_DIR / "data")))


def config_path() -> Path:
    custom = os.getenv("THUMB_EDITOR_CONFIG")
    return Path(custom) if custom else data_dir() / "editor_config.json"


def deep_merge(base: dict, update: dict) -> None:
    """Deep merge update into base dict, modifying base in place."""
    for key, value in update.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            deep_merge(base[key], value)
        else:
            base[key] = value


def load_editor_config(path: Path = None) -> dict:
    """Defaults merged with the JSON config file, if one exists."""
    config = copy.deepcopy(DEFAULT_CONFIG)
    path = Path(path) if path else config_path()
    if path.exists():
        with open(path, "r", encoding="utf-8-sig") as f:
            user_cfg = json.load(f)
        if not isinstance(user_cfg, dict):
            raise ValueError(f"Config root must be an object: {path}")
        deep_merge(config, user_cfg)
    return config


def save_editor_config(updates: dict, path: Path = None) -> dict:
    """Merge updates into the config file and return the full config."""
    path = Path(path) if path else config_path()
    stored = {}
    if path.exists():
        with open(path, "r", encoding="utf-8-sig") as f:
            stored = json.load(f)
    deep_merge(stored, updates)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(stored, f, ensure_ascii=False, indent=2)
    return load_editor_config(path)


def resolve_data_path(relative: str) -> Path:
    """Config paths are relative to the data directory unless absolute."""
    p = Path(relative)
    return p if p.is_absolute() else data_dir() / p


def fonts_dir(config: dict = None) -> Path:
    config = config or load_editor_config()
    return resolve_data_path(config["fonts"]["dir"])


def output_path(config: dict = None) -> Path:
    config = config or load_editor_config()
    return resolve_data_path(config["export"]["output_path"])
