"""Typed containers shared across pipeline modules."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass
class RankedModule:
    """Consumer project with its trust score and discovery position."""

    path: str
    score: float
    index: int = 0


class ModuleStatus(str, Enum):
    PASS = "PASS"
    REGRESSION = "REGRESSION"
    FIXED = "FIXED"
    BROKEN = "BROKEN"
    SKIPPED = "SKIPPED"
    ERROR = "ERROR"


class Verdict(str, Enum):
    SAFE = "SAFE"
    UNSAFE = "UNSAFE"
    INCONCLUSIVE = "INCONCLUSIVE"
    BROKEN = "BROKEN"
