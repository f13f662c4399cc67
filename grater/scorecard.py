from __future__ import annotations

import math

import httpx

from .config import (
    HTTP_CONNECT_TIMEOUT,
    HTTP_TIMEOUT,
    HTTP_USER_AGENT,
    RECOGNIZED_HOST,
    SCORECARD_URL,
)
from .errors import ScoreFetchError


def scorecard_client() -> httpx.Client:
    """
    One client per ranking worker; keep-alive is off so workers never
    queue behind each other on a pooled connection.
    """
    return httpx.Client(
        headers={"User-Agent": HTTP_USER_AGENT},
        timeout=httpx.Timeout(HTTP_TIMEOUT, connect=HTTP_CONNECT_TIMEOUT),
        limits=httpx.Limits(max_connections=2, max_keepalive_connections=0),
    )


def scorecard_url(path: str) -> str:
    parts = path.split("/")
    if len(parts) < 3 or parts[0] != RECOGNIZED_HOST or not parts[1] or not parts[2]:
        raise ScoreFetchError(f"not a {RECOGNIZED_HOST} project: {path}")
    return SCORECARD_URL.format(owner=parts[1], repo=parts[2])


def fetch_scorecard_score(client: httpx.Client, path: str) -> float:
    """
    Look up the trust score for one root project.

    Raises ScoreFetchError on timeout, transport errors, non-200 responses
    and payloads without a finite numeric ``score``.
    """
    url = scorecard_url(path)
    try:
        r = client.get(url)
    except httpx.TimeoutException as e:
        raise ScoreFetchError(f"timeout fetching score for {path}") from e
    except (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError) as e:
        raise ScoreFetchError(f"request failed for {path}: {e}") from e

    if r.status_code != 200:
        raise ScoreFetchError(f"HTTP {r.status_code} for {path}")

    try:
        payload = r.json()
        score = payload["score"]
    except (ValueError, KeyError, TypeError) as e:
        raise ScoreFetchError(f"malformed score payload for {path}") from e

    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise ScoreFetchError(f"non-numeric score for {path}: {score!r}")
    if not math.isfinite(score):
        raise ScoreFetchError(f"non-finite score for {path}: {score!r}")
    return float(score)

