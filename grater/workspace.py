from __future__ import annotations

"""
Workspace layout and the artifacts passed between grater commands.

``find`` writes the ranked module list, ``run`` reads it and writes both
result files, ``report`` reads the detailed results. Each command may run
as a separate invocation.
"""

import json
from pathlib import Path
from typing import List, Optional, Sequence

from loguru import logger
from pydantic import BaseModel

from .config import (
    CACHE_FILENAME,
    DETAILED_RESULTS_FILENAME,
    LOG_DIRNAME,
    MODULES_FILENAME,
    RESULTS_FILENAME,
    WORKSPACE_DIR,
)
from .errors import WorkspaceError


def ensure_workspace(path: Optional[Path] = None) -> Path:
    ws = Path(path) if path is not None else WORKSPACE_DIR
    try:
        ws.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise WorkspaceError(f"failed to create directory {ws}: {e}") from e
    return ws.resolve()


def modules_path(ws: Path) -> Path:
    return ws / MODULES_FILENAME


def cache_path(ws: Path) -> Path:
    return ws / CACHE_FILENAME


def results_path(ws: Path) -> Path:
    return ws / RESULTS_FILENAME


def detailed_results_path(ws: Path) -> Path:
    return ws / DETAILED_RESULTS_FILENAME


def log_dir(ws: Path) -> Path:
    return ws / LOG_DIRNAME


def _write_text(path: Path, content: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise WorkspaceError(f"failed to write to {path}: {e}") from e


def write_modules(path: Path, modules: Sequence[str]) -> None:
    content = "\n".join(modules)
    if modules:
        content += "\n"
    _write_text(path, content)
    logger.info("Saved {} modules to {}", len(modules), path)


def read_modules(path: Path) -> List[str]:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise WorkspaceError(f"could not read module list at {path}; run 'grater find' first: {e}") from e
    return [line.strip() for line in text.splitlines() if line.strip()]


def write_models(path: Path, items: Sequence[BaseModel]) -> None:
    data = [item.model_dump(mode="json") for item in items]
    _write_text(path, json.dumps(data, indent=2) + "\n")
