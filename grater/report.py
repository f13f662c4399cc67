from __future__ import annotations

"""
Report pass: load detailed dual results, bucket them, pick a verdict, render.

Verdict priority, highest first:

- any REGRESSION                       -> UNSAFE
- any ERROR                            -> INCONCLUSIVE
- every module BROKEN                  -> BROKEN
- otherwise                            -> SAFE

An empty batch verifies nothing and is INCONCLUSIVE.
"""

import json
from pathlib import Path
from typing import Dict, List, Sequence

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from .classify import classify
from .config import DualTestResult, ReportSummary
from .errors import ReportParseError
from .pipeline_types import ModuleStatus, Verdict

RULE = "═" * 80

_BUCKETS: Dict[ModuleStatus, str] = {
    ModuleStatus.REGRESSION: "regressions",
    ModuleStatus.FIXED: "fixed",
    ModuleStatus.BROKEN: "broken",
    ModuleStatus.SKIPPED: "skipped",
    ModuleStatus.PASS: "passed",
    ModuleStatus.ERROR: "errors",
}

_VERDICT_LINES: Dict[str, str] = {
    Verdict.SAFE.value: "✅ SAFE - No regressions detected",
    Verdict.UNSAFE.value: "❌ UNSAFE - Regressions found!",
    Verdict.INCONCLUSIVE.value: "⚠️  INCONCLUSIVE - Some tests had errors",
    Verdict.BROKEN.value: "🔧 BROKEN - All modules are failing",
}

_results_adapter = TypeAdapter(List[DualTestResult])


# ---------------------------
# Loading
# ---------------------------

def parse_results(raw: str) -> List[DualTestResult]:
    """
    Accept a JSON list of dual results, or a single result object from
    older runs.
    """
    try:
        data = json.loads(raw)
    except ValueError as e:
        raise ReportParseError(f"failed to parse results: {e}") from e

    try:
        if isinstance(data, dict):
            return [DualTestResult.model_validate(data)]
        return _results_adapter.validate_python(data)
    except ValidationError as e:
        raise ReportParseError(f"failed to parse results: {e}") from e


def load_results(path: Path) -> List[DualTestResult]:
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ReportParseError(f"could not read results at {path}. Run 'grater run' first: {e}") from e
    results = parse_results(raw)
    logger.info("Loaded {} results from {}", len(results), path)
    return results


# ---------------------------
# Aggregation
# ---------------------------

def overall_verdict(summary: ReportSummary) -> Verdict:
    if summary.total_modules == 0:
        return Verdict.INCONCLUSIVE
    if summary.regressions:
        return Verdict.UNSAFE
    if summary.errors:
        return Verdict.INCONCLUSIVE
    if len(summary.broken) == summary.total_modules:
        return Verdict.BROKEN
    return Verdict.SAFE


def analyze_results(results: Sequence[DualTestResult]) -> ReportSummary:
    summary = ReportSummary(total_modules=len(results))
    if results:
        summary.base_ref = results[0].base.ref
        summary.head_ref = results[0].head.ref

    for r in results:
        getattr(summary, _BUCKETS[classify(r)]).append(r)

    summary.status = overall_verdict(summary).value
    return summary


def exit_code(summary: ReportSummary) -> int:
    return 1 if summary.status == Verdict.UNSAFE.value else 0


# ---------------------------
# Rendering
# ---------------------------

def render_json(summary: ReportSummary) -> str:
    return summary.model_dump_json(indent=2)


def _section(lines: List[str], title: str, results: Sequence[DualTestResult], details) -> None:
    if not results:
        return
    lines.append(title)
    for r in results:
        lines.append(f"   • {r.module}")
        if details is not None:
            lines.extend(details(r))
    lines.append("")


def _regression_details(r: DualTestResult) -> List[str]:
    return [f"     Error: {r.head.error}"] if r.head.error else []


def _fixed_details(r: DualTestResult) -> List[str]:
    return [f"     Base error: {r.base.error}"] if r.base.error else []


def _broken_details(r: DualTestResult) -> List[str]:
    out = []
    if r.base.error:
        out.append(f"     Base error: {r.base.error}")
    if r.head.error:
        out.append(f"     Head error: {r.head.error}")
    return out


def _skipped_details(r: DualTestResult) -> List[str]:
    out = []
    if r.base.skipped:
        out.append(f"     Base: {r.base.error}")
    if r.head.skipped:
        out.append(f"     Head: {r.head.error}")
    return out


def _error_details(r: DualTestResult) -> List[str]:
    out = []
    if not r.base.passed and r.base.error:
        out.append(f"     Base: {r.base.error}")
    if not r.head.passed and r.head.error:
        out.append(f"     Head: {r.head.error}")
    return out


def render_human(summary: ReportSummary, verbose: bool = False) -> str:
    """
    Categorized text report. Per-module error detail and the PASSING
    section only show up with ``verbose``.
    """
    def pick(fn):
        return fn if verbose else None

    lines: List[str] = [
        "",
        RULE,
        "📊 GRATER TEST REPORT",
        RULE,
        f"Base ref:  {summary.base_ref}",
        f"Head ref:  {summary.head_ref}",
        f"Modules tested: {summary.total_modules}",
        "",
        f"Overall Status: {_VERDICT_LINES.get(summary.status, summary.status)}",
        "",
    ]

    _section(lines, "🔴 REGRESSIONS (base passed, head failed):", summary.regressions, pick(_regression_details))
    _section(lines, "🟢 FIXED (base failed, head passed):", summary.fixed, pick(_fixed_details))
    _section(lines, "🔧 STILL BROKEN (both refs fail):", summary.broken, pick(_broken_details))
    _section(lines, "⏸️  SKIPPED (timeout):", summary.skipped, pick(_skipped_details))
    _section(lines, "⚠️  ERRORS (test execution failed):", summary.errors, pick(_error_details))
    if verbose:
        _section(lines, "✅ PASSING (both refs work):", summary.passed, None)

    lines.append(RULE)
    lines.append(
        f"Summary: {summary.total_modules} total"
        f" | ✅ {len(summary.passed)} passed"
        f" | 🔴 {len(summary.regressions)} regressions"
        f" | 🟢 {len(summary.fixed)} fixed"
        f" | 🔧 {len(summary.broken)} broken"
        f" | ⏸️  {len(summary.skipped)} skipped"
        f" | ⚠️  {len(summary.errors)} errors"
    )
    lines.append(RULE)

    if summary.status == Verdict.UNSAFE.value:
        lines.append("")
        lines.append("❌ REGRESSIONS DETECTED - Check the report above")

    return "\n".join(lines)
