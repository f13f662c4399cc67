from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence, Tuple

from loguru import logger

from .classify import classify
from .config import DualTestResult, ModuleStatusRecord, RefOutcome
from .errors import ExecutorInvocationError
from .executor import ModuleExecutor
from .pipeline_types import ModuleStatus
from .workspace import detailed_results_path, results_path, write_models


@dataclass
class RunResults:
    statuses: List[ModuleStatusRecord] = field(default_factory=list)
    detailed: List[DualTestResult] = field(default_factory=list)


def _describe(outcome: RefOutcome) -> str:
    if outcome.skipped:
        return f"SKIPPED - {outcome.error}"
    if outcome.passed:
        return "PASS"
    return f"FAIL - {outcome.error}"


def invocation_failure(module: str, base_ref: str, head_ref: str, message: str) -> DualTestResult:
    """
    Stand-in dual result for a module whose runner never produced one.
    Both sides fail with the error text, which classifies as ERROR.
    """
    return DualTestResult(
        module=module,
        base=RefOutcome(ref=base_ref, passed=False, error=message),
        head=RefOutcome(ref=head_ref, passed=False, error=message),
    )


def run_modules(
    modules: Sequence[str],
    executor: ModuleExecutor,
    repo: str,
    base_ref: str,
    head_ref: str,
) -> RunResults:
    """
    Test each module against both refs, one module at a time, in order.

    A module whose runner fails is recorded as ERROR and the pass moves on.
    """
    results = RunResults()
    total = len(modules)

    for i, module in enumerate(modules, start=1):
        logger.info("Testing module [{}/{}]: {}", i, total, module)

        try:
            dual = executor.run(module, repo, base_ref, head_ref)
        except ExecutorInvocationError as e:
            logger.warning("Test run failed for {}: {}", module, e)
            results.statuses.append(ModuleStatusRecord(module=module, status=ModuleStatus.ERROR.value))
            results.detailed.append(invocation_failure(module, base_ref, head_ref, str(e)))
            continue

        status = classify(dual)
        logger.info("   Base ({}): {}", dual.base.ref, _describe(dual.base))
        logger.info("   Head ({}): {}", dual.head.ref, _describe(dual.head))
        logger.info("   Status: {}", status.value)

        results.statuses.append(ModuleStatusRecord(module=module, status=status.value))
        results.detailed.append(dual)

    return results


def save_results(results: RunResults, ws: Path) -> Tuple[Path, Path]:
    """
    Write results.json (module + status) and detailed_results.json.
    """
    simple = results_path(ws)
    detailed = detailed_results_path(ws)
    write_models(simple, results.statuses)
    write_models(detailed, results.detailed)
    logger.info("Results saved to {} and {}", simple, detailed)
    return simple, detailed
