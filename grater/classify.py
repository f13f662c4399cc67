from __future__ import annotations

from .config import DualTestResult, RefOutcome
from .pipeline_types import ModuleStatus


def _errored(outcome: RefOutcome) -> bool:
    return not outcome.passed and bool(outcome.error)


def classify(result: DualTestResult) -> ModuleStatus:
    """
    Map one dual result to a status. The checks run in a fixed order:

    1. a skipped ref on either side -> SKIPPED
    2. a failing ref that carries error text -> ERROR, even when the
       pass/fail pair alone would read as a regression or a fix
    3. otherwise the (base.passed, head.passed) pair decides
    """
    base, head = result.base, result.head

    if base.skipped or head.skipped:
        return ModuleStatus.SKIPPED

    if _errored(base) or _errored(head):
        return ModuleStatus.ERROR

    if base.passed and head.passed:
        return ModuleStatus.PASS
    if base.passed:
        return ModuleStatus.REGRESSION
    if head.passed:
        return ModuleStatus.FIXED
    return ModuleStatus.BROKEN
