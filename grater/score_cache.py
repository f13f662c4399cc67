from __future__ import annotations

"""
Score stores used by the ranking engine.

A store maps root project paths to trust scores and survives across runs.
The ranking engine only talks to the small ``ScoreStore`` surface
(``get`` / ``set`` / ``flush``), so tests can hand it an in-memory store
while the CLI uses the JSON file under the workspace.

Stores are not thread-safe on their own; the ranking state serializes
every access behind its lock.
"""

import json
from pathlib import Path
from typing import Dict, Mapping, Optional, Protocol

from loguru import logger


class ScoreStore(Protocol):
    def get(self, path: str) -> Optional[float]: ...

    def set(self, path: str, score: float) -> None: ...

    def flush(self) -> None: ...


class InMemoryScoreStore:
    def __init__(self, initial: Optional[Mapping[str, float]] = None) -> None:
        self.scores: Dict[str, float] = dict(initial or {})

    def get(self, path: str) -> Optional[float]:
        return self.scores.get(path)

    def set(self, path: str, score: float) -> None:
        self.scores[path] = score

    def flush(self) -> None:
        pass


class JsonScoreStore(InMemoryScoreStore):
    """
    Flat JSON object ``{path: score}`` on disk.

    Loaded once on construction; an unreadable or malformed file starts an
    empty cache. ``flush`` rewrites the whole file (last writer wins).
    """

    def __init__(self, path: Path) -> None:
        super().__init__(_load_scores(path))
        self.path = path

    def flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(self.scores, indent=2, sort_keys=True), encoding="utf-8")
        tmp.replace(self.path)
        logger.info("Score cache written with {} entries to {}", len(self.scores), self.path)


def _load_scores(path: Path) -> Dict[str, float]:
    if not path.exists():
        return {}
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable score cache {}: {}", path, e)
        return {}
    if not isinstance(raw, dict):
        logger.warning("Ignoring score cache {}: expected a JSON object", path)
        return {}

    scores: Dict[str, float] = {}
    for key, val in raw.items():
        if isinstance(val, (int, float)) and not isinstance(val, bool):
            scores[str(key)] = float(val)
    logger.info("Loaded {} cached scores from {}", len(scores), path)
    return scores
