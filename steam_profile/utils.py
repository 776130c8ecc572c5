from __future__ import annotations

import json
import os
import platform
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_CFG = Path(__file__).parent / "config_default.yaml"


def stamp() -> str:
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def write_json(path: Path, data: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)


def write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="ascii")


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Defaults from config_default.yaml, overlaid with a user YAML if given."""
    cfg = yaml.safe_load(DEFAULT_CFG.read_text(encoding="utf-8")) or {}
    if path is not None and path.exists():
        cfg.update(yaml.safe_load(path.read_text(encoding="utf-8")) or {})
    return cfg


def open_folder(path: Path) -> None:
    try:
        if platform.system() == "Windows":
            os.startfile(str(path))  # type: ignore[attr-defined]
        elif platform.system() == "Darwin":
            subprocess.run(["open", str(path)], check=False)
        else:
            subprocess.run(["xdg-open", str(path)], check=False)
    except OSError:
        pass
