from __future__ import annotations

import subprocess
from typing import List, Optional

import httpx
from bs4 import BeautifulSoup
from loguru import logger

from .config import (
    HTTP_CONNECT_TIMEOUT,
    HTTP_MAX_BYTES,
    HTTP_MAX_REDIRECTS,
    HTTP_TIMEOUT,
    HTTP_USER_AGENT,
    IMPORTED_BY_SELECTOR,
    IMPORTED_BY_URL,
    RECOGNIZED_HOST,
)
from .errors import DiscoveryError
from .utils.urls import clean_repo_url, dedup_roots


def _http_client() -> httpx.Client:
    return httpx.Client(
        headers={"User-Agent": HTTP_USER_AGENT},
        follow_redirects=True,
        timeout=httpx.Timeout(HTTP_TIMEOUT, connect=HTTP_CONNECT_TIMEOUT),
        max_redirects=HTTP_MAX_REDIRECTS,
    )


def _fetch_html(client: httpx.Client, url: str) -> str:
    logger.info("Fetching importers page: {}", url)
    try:
        r = client.get(url)
    except httpx.HTTPError as e:
        raise DiscoveryError(f"failed to fetch {url}: {e}") from e
    if r.status_code != 200:
        raise DiscoveryError(f"HTTP {r.status_code} for {url}")
    if len(r.content) > HTTP_MAX_BYTES:
        raise DiscoveryError(f"Page too large ({len(r.content)} bytes) for {url}")
    return r.text


def parse_imported_by(html: str) -> List[str]:
    """
    Pull consumer import paths out of an imported-by listing.

    Returns lower-cased root projects on the recognized host, de-duplicated
    in page order.
    """
    try:
        soup = BeautifulSoup(html, "lxml")
        anchors = soup.select(IMPORTED_BY_SELECTOR)
    except Exception as e:
        raise DiscoveryError(f"failed to parse importers page: {e}") from e

    if not anchors:
        logger.warning("No importer links found on page")
        return []

    prefix = RECOGNIZED_HOST + "/"
    raw = []
    for a in anchors:
        path = a.get_text(strip=True)
        if path.lower().startswith(prefix):
            raw.append(path)

    roots = dedup_roots(raw)
    logger.info("Parsed {} importer links into {} unique projects", len(anchors), len(roots))
    return roots


def fetch_importers(library: str, client: Optional[httpx.Client] = None) -> List[str]:
    """
    Fetch the imported-by page for ``library`` and return its root projects.

    Raises DiscoveryError when the page is unreachable or unparsable.
    An empty list just means nobody imports the library.
    """
    url = IMPORTED_BY_URL.format(library=library)
    if client is not None:
        html = _fetch_html(client, url)
    else:
        with _http_client() as own:
            html = _fetch_html(own, url)
    return parse_imported_by(html)


def detect_repo() -> str:
    """
    Fall back to the current checkout's origin remote.
    """
    try:
        proc = subprocess.run(
            ["git", "remote", "get-url", "origin"],
            capture_output=True,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as e:
        raise DiscoveryError(f"repo not provided and git origin unavailable: {e}") from e
    return proc.stdout.strip()


def resolve_library(repo: Optional[str]) -> str:
    if not repo:
        repo = detect_repo()
    library = clean_repo_url(repo)
    if not library:
        raise DiscoveryError("could not determine the library to search importers for")
    return library
