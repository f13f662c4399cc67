# grater/ranking.py
from __future__ import annotations

import threading
import time
from typing import Callable, List, Optional, Sequence, Tuple

import httpx
from loguru import logger

from . import config
from .errors import ScoreFetchError
from .importers import fetch_importers, resolve_library
from .pipeline_types import RankedModule
from .score_cache import ScoreStore
from .scorecard import fetch_scorecard_score, scorecard_client
from .task_pool import BoundedTaskPool

ScoreFetcher = Callable[[httpx.Client, str], float]


class RankingState:
    """
    Shared state of one ranking pass: the score store and the result list.

    Workers only reach the store and the accumulator through these methods,
    each of which holds the lock for the whole read or write. No method
    does network I/O. ``snapshot`` is meant to be called after the pool
    has drained.
    """

    def __init__(self, store: ScoreStore) -> None:
        self._store = store
        self._lock = threading.Lock()
        self._scored: List[RankedModule] = []

    def cached_score(self, path: str) -> Optional[float]:
        with self._lock:
            score = self._store.get(path)
        if score is None or score == config.UNKNOWN_SCORE:
            return None
        return score

    def remember(self, path: str, score: float) -> None:
        if score <= config.UNKNOWN_SCORE:
            return
        with self._lock:
            self._store.set(path, score)

    def record(self, module: RankedModule) -> int:
        with self._lock:
            self._scored.append(module)
            return len(self._scored)

    def snapshot(self) -> List[RankedModule]:
        with self._lock:
            return list(self._scored)

    def flush(self) -> None:
        """Persist the store; failures are logged, never raised."""
        with self._lock:
            try:
                self._store.flush()
            except Exception as e:
                logger.warning("Failed to persist score cache: {}", e)


def sort_ranked(scored: Sequence[RankedModule]) -> List[RankedModule]:
    """
    Score descending; equal scores keep discovery order.
    """
    return sorted(scored, key=lambda m: (-m.score, m.index))


def apply_limit(ranked: Sequence[RankedModule], limit: int) -> List[RankedModule]:
    if limit <= 0:
        return list(ranked)
    return list(ranked[:limit])


def _score_one(
    state: RankingState,
    client: httpx.Client,
    job: Tuple[int, str],
    fetch: ScoreFetcher,
    delay_sec: float,
) -> None:
    index, path = job
    score = state.cached_score(path)
    if score is None:
        try:
            score = fetch(client, path)
        except ScoreFetchError as e:
            logger.warning("Score fetch failed for {}: {}", path, e)
            score = config.UNKNOWN_SCORE
        else:
            state.remember(path, score)
        if delay_sec > 0:
            time.sleep(delay_sec)

    n = state.record(RankedModule(path=path, score=score, index=index))
    logger.info("  [{}] [{:3.2f}] {}", n, score, path)


def rank_candidates(
    candidates: Sequence[str],
    store: ScoreStore,
    limit: int = 0,
    workers: int = config.SCORE_WORKERS,
    delay_sec: float = config.SCORE_DELAY_SEC,
    client_factory: Callable[[], httpx.Client] = scorecard_client,
    fetch: ScoreFetcher = fetch_scorecard_score,
) -> List[RankedModule]:
    """
    Score every candidate under a bounded worker pool and rank them.

    Cached non-zero scores are reused; anything else costs one scoring
    call. Failed calls count as 0.0 and stay out of the store so the next
    pass retries them. The store is flushed once, after all workers have
    drained. ``limit <= 0`` keeps the full ranking.
    """
    state = RankingState(store)

    pool: BoundedTaskPool[Tuple[int, str], httpx.Client] = BoundedTaskPool(
        width=workers,
        worker_setup=client_factory,
        handler=lambda client, job: _score_one(state, client, job, fetch, delay_sec),
        worker_teardown=lambda client: client.close(),
    )
    pool.drain(enumerate(candidates))
    state.flush()

    ranked = apply_limit(sort_ranked(state.snapshot()), limit)
    logger.info("Ranked {} of {} candidates", len(ranked), len(candidates))
    return ranked


def load_modules(
    repo: Optional[str],
    store: ScoreStore,
    limit: int = 0,
) -> List[str]:
    """
    Discovery pass: importers of ``repo`` (or the local origin), ranked.
    """
    library = resolve_library(repo)
    logger.info("Fetching importers for: {}", library)
    roots = fetch_importers(library)
    logger.info("Found {} unique projects.", len(roots))
    return [m.path for m in rank_candidates(roots, store, limit=limit)]
