# grater/utils/urls.py
from __future__ import annotations

from typing import Iterable, List

from .. import config

__all__ = ["clean_repo_url", "root_module", "dedup_roots"]


def clean_repo_url(url: str) -> str:
    """
    Turn a git remote URL into a bare module identifier.

    These all become ``github.com/owner/repo``:
    - https://github.com/owner/repo.git
    - http://github.com/owner/repo
    - git@github.com:owner/repo.git
    """
    if not url:
        return ""
    u = str(url).strip()
    if u.endswith(".git"):
        u = u[: -len(".git")]
    for prefix in ("https://", "http://"):
        if u.startswith(prefix):
            u = u[len(prefix):]
    if u.startswith("git@"):
        u = u.replace(":", "/", 1)
        u = u[len("git@"):]
    return u


def root_module(path: str) -> str:
    """
    Strip an import path down to its root project.

    Only paths on the recognized host are cut to ``host/owner/repo``;
    anything else comes back unchanged.
    """
    parts = path.split("/")
    if len(parts) > 3 and parts[0] == config.RECOGNIZED_HOST:
        return "/".join(parts[:3])
    return path


def dedup_roots(paths: Iterable[str]) -> List[str]:
    """
    - Lower-case and collapse each path to its root project.
    - Preserve first-seen order.
    """
    seen = set()
    out: List[str] = []
    for p in paths:
        if not p:
            continue
        root = root_module(p.strip().lower())
        if root in seen:
            continue
        seen.add(root)
        out.append(root)
    return out
