from __future__ import annotations

"""
Docker-backed test executor.

One container run tests a consumer module against both library refs and
prints a single JSON document on stdout::

    {"module": "...",
     "base": {"ref": "...", "passed": true, "error": "", "skipped": false},
     "head": {"ref": "...", "passed": false, "error": "...", "skipped": false}}

Timeouts live inside the container; a ref that runs out of time comes back
with ``skipped: true``.
"""

import subprocess
from pathlib import Path
from typing import List, Protocol

from loguru import logger
from pydantic import ValidationError

from .config import DEFAULT_IMAGE, DOCKER_CONTEXT_DIRNAME, DOCKERFILE_NAME, DualTestResult
from .errors import ExecutorInvocationError

# keep logged container output readable
_OUTPUT_SNIPPET_CHARS = 2000


class ModuleExecutor(Protocol):
    def run(self, module: str, repo: str, base_ref: str, head_ref: str) -> DualTestResult: ...


def _snippet(text: str) -> str:
    text = (text or "").strip()
    if len(text) > _OUTPUT_SNIPPET_CHARS:
        return text[-_OUTPUT_SNIPPET_CHARS:]
    return text


def parse_dual_result(output: str, base_ref: str, head_ref: str) -> DualTestResult:
    """
    Decode the runner's JSON document and fill in any missing ref labels.
    """
    payload = (output or "").strip()
    if not payload:
        raise ExecutorInvocationError("empty output from test runner")
    try:
        result = DualTestResult.model_validate_json(payload)
    except ValidationError as e:
        raise ExecutorInvocationError(f"invalid JSON from test runner: {_snippet(payload)}") from e

    if not result.base.ref:
        result.base.ref = base_ref
    if not result.head.ref:
        result.head.ref = head_ref
    return result


class DockerExecutor:
    def __init__(self, image: str = DEFAULT_IMAGE, docker: str = "docker") -> None:
        self.image = image
        self.docker = docker

    def build_command(self, module: str, repo: str, base_ref: str, head_ref: str) -> List[str]:
        return [
            self.docker, "run", "--rm",
            "-e", f"MODULE={module}",
            "-e", f"REPO={repo}",
            "-e", f"BASE_REF={base_ref}",
            "-e", f"HEAD_REF={head_ref}",
            self.image,
        ]

    def run(self, module: str, repo: str, base_ref: str, head_ref: str) -> DualTestResult:
        cmd = self.build_command(module, repo, base_ref, head_ref)
        logger.debug("Running: {}", " ".join(cmd))
        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except OSError as e:
            raise ExecutorInvocationError(f"could not start {self.docker}: {e}") from e

        if proc.returncode != 0:
            raise ExecutorInvocationError(
                f"container failed (exit {proc.returncode}): {_snippet(proc.stderr or proc.stdout)}"
            )
        if proc.stderr:
            logger.debug("Runner stderr for {}: {}", module, _snippet(proc.stderr))
        return parse_dual_result(proc.stdout, base_ref, head_ref)

    def build_image(self, project_root: Path) -> None:
        """
        ``docker build`` the runner image from ``<project_root>/docker``.
        Output streams straight to the console.
        """
        context = project_root / DOCKER_CONTEXT_DIRNAME
        dockerfile = context / DOCKERFILE_NAME
        cmd = [self.docker, "build", "-t", self.image, "-f", str(dockerfile), str(context)]
        logger.info("Building docker image {}...", self.image)
        try:
            subprocess.run(cmd, check=True)
        except (OSError, subprocess.CalledProcessError) as e:
            raise ExecutorInvocationError(f"docker build failed: {e}") from e
