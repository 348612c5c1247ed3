"""Run-folder protocol for generated box designs."""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)


@dataclass
class RunPaths:
    run_id: str
    run_dir: Path
    artifacts_dir: Path
    params_path: Path
    manifest_path: Path
    summary_path: Path


def slugify(value: str) -> str:
    value = value.strip().lower()
    value = re.sub(r"[^a-z0-9]+", "-", value)
    value = re.sub(r"-+", "-", value)
    return value.strip("-") or "run"


def create_run_id(design_name: str) -> str:
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    return f"{stamp}_{slugify(design_name)}"


def prepare_run_dir(runs_root: str, design_name: str) -> RunPaths:
    runs_path = Path(runs_root)
    runs_path.mkdir(parents=True, exist_ok=True)

    run_id = create_run_id(design_name)
    run_dir = runs_path / run_id
    # Two runs of one design within the same second get a numeric suffix
    suffix = 1
    while run_dir.exists():
        suffix += 1
        run_dir = runs_path / f"{run_id}_{suffix}"
    run_id = run_dir.name
    artifacts_dir = run_dir / "artifacts"
    artifacts_dir.mkdir(parents=True, exist_ok=True)

    return RunPaths(
        run_id=run_id,
        run_dir=run_dir,
        artifacts_dir=artifacts_dir,
        params_path=run_dir / "params.json",
        manifest_path=run_dir / "manifest.json",
        summary_path=run_dir / "summary.md",
    )


def write_json(path: Path, payload: Dict[str, Any]) -> None:
    write_text(path, json.dumps(payload, indent=2) + "\n")


def write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def update_latest_pointer(runs_root: str, run_dir: Path) -> bool:
    """Point ``<runs_root>/latest`` at *run_dir* with a relative symlink.

    Returns False, leaving no pointer, where the filesystem refuses symlinks.
    """
    latest = Path(runs_root) / "latest"
    if latest.is_symlink() or latest.is_file():
        latest.unlink()
    try:
        latest.symlink_to(os.path.relpath(run_dir, runs_root))
    except OSError as exc:
        logger.warning("Could not link %s to run %s: %s", latest, run_dir.name, exc)
        return False
    return True
