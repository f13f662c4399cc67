from __future__ import annotations

import os
from pathlib import Path
from typing import List

from pydantic import BaseModel, Field


# ---------------------------
# Paths
# ---------------------------

WORKSPACE_DIR = Path(os.getenv("GRATER_WORKSPACE", ".grater"))

MODULES_FILENAME = "modules.txt"
CACHE_FILENAME = "cache.json"
RESULTS_FILENAME = "results.json"
DETAILED_RESULTS_FILENAME = "detailed_results.json"
LOG_DIRNAME = "logs"

# docker build context for the test runner image, relative to the project root
DOCKER_CONTEXT_DIRNAME = "docker"
DOCKERFILE_NAME = "dockerfile"


# ---------------------------
# Discovery (importer source)
# ---------------------------

IMPORTED_BY_URL = "https://pkg.go.dev/{library}?tab=importedby"
IMPORTED_BY_SELECTOR = ".ImportedBy-details a"

# Only projects on this host can be scored and root-stripped
RECOGNIZED_HOST = "github.com"


# ---------------------------
# Scoring API
# ---------------------------

SCORECARD_URL = "https://api.securityscorecards.dev/projects/github.com/{owner}/{repo}"

DEFAULT_SCORE_WORKERS = 5
SCORE_WORKERS = int(os.getenv("GRATER_SCORE_WORKERS", str(DEFAULT_SCORE_WORKERS)))

# per-worker pause after each live scoring call
SCORE_DELAY_SEC = float(os.getenv("GRATER_SCORE_DELAY_SEC", "0.05"))

UNKNOWN_SCORE = 0.0


# ---------------------------
# HTTP hardening
# ---------------------------

HTTP_TIMEOUT = float(os.getenv("GRATER_HTTP_TIMEOUT", "10.0"))
HTTP_CONNECT_TIMEOUT = 5.0
HTTP_MAX_REDIRECTS = 3
HTTP_MAX_BYTES = 5_000_000  # imported-by pages can list thousands of packages

HTTP_USER_AGENT = "grater/0.1 (+https://github.com/grater-dev/grater)"


# ---------------------------
# Test executor
# ---------------------------

DEFAULT_IMAGE = os.getenv("GRATER_IMAGE", "grater-runner")
DEFAULT_BASE_REF = "main"
DEFAULT_HEAD_REF = "HEAD"

PLACEHOLDER_MODULES: List[str] = ["moduleA", "moduleB", "moduleC"]


# ---------------------------
# Pydantic models shared around the app
# ---------------------------

class RefOutcome(BaseModel):
    """
    Outcome of one consumer test run against a single library ref.
    """

    ref: str = ""
    passed: bool = False
    error: str = ""
    skipped: bool = False


class DualTestResult(BaseModel):
    """
    Paired base/head outcome for one consumer module.
    This matches the JSON document emitted by the test runner container.
    """

    module: str
    base: RefOutcome = Field(default_factory=RefOutcome)
    head: RefOutcome = Field(default_factory=RefOutcome)


class ModuleStatusRecord(BaseModel):
    """
    Simplified entry written to results.json.
    """

    module: str
    status: str


class ReportSummary(BaseModel):
    """
    Aggregated report over one batch of dual results.
    Field names are stable; the JSON renderer dumps this model as-is.
    """

    total_modules: int = 0
    base_ref: str = ""
    head_ref: str = ""
    status: str = ""
    regressions: List[DualTestResult] = Field(default_factory=list)
    fixed: List[DualTestResult] = Field(default_factory=list)
    broken: List[DualTestResult] = Field(default_factory=list)
    skipped: List[DualTestResult] = Field(default_factory=list)
    passed: List[DualTestResult] = Field(default_factory=list)
    errors: List[DualTestResult] = Field(default_factory=list)
