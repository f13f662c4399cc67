import json

from grater.config import DualTestResult, RefOutcome
from grater.errors import ExecutorInvocationError
from grater.orchestrator import run_modules, save_results
from grater.report import analyze_results, load_results


class FakeExecutor:
    """Replays canned dual results; modules in ``failing`` blow up."""

    def __init__(self, outcomes, failing=()):
        self.outcomes = outcomes
        self.failing = set(failing)
        self.calls = []

    def run(self, module, repo, base_ref, head_ref):
        self.calls.append((module, repo, base_ref, head_ref))
        if module in self.failing:
            raise ExecutorInvocationError("container failed (exit 125): no such image")
        base_passed, head_passed, head_error = self.outcomes[module]
        return DualTestResult(
            module=module,
            base=RefOutcome(ref=base_ref, passed=base_passed),
            head=RefOutcome(ref=head_ref, passed=head_passed, error=head_error),
        )


def test_run_modules_sequential_in_ranked_order():
    executor = FakeExecutor(
        {
            "github.com/a/one": (True, True, ""),
            "github.com/a/two": (True, False, ""),
            "github.com/a/three": (True, False, "panic: nil map"),
        },
        failing={"github.com/a/broken-infra"},
    )
    modules = ["github.com/a/one", "github.com/a/broken-infra", "github.com/a/two", "github.com/a/three"]

    results = run_modules(modules, executor, "github.com/lib/core", "main", "feature")

    assert [c[0] for c in executor.calls] == modules
    assert all(c[1:] == ("github.com/lib/core", "main", "feature") for c in executor.calls)
    assert [(s.module, s.status) for s in results.statuses] == [
        ("github.com/a/one", "PASS"),
        ("github.com/a/broken-infra", "ERROR"),
        ("github.com/a/two", "REGRESSION"),
        ("github.com/a/three", "ERROR"),
    ]


def test_invocation_failure_is_recorded_as_error_detail():
    executor = FakeExecutor({}, failing={"github.com/a/x"})
    results = run_modules(["github.com/a/x"], executor, "repo", "main", "HEAD")

    detail = results.detailed[0]
    assert detail.module == "github.com/a/x"
    assert detail.base.ref == "main" and detail.head.ref == "HEAD"
    assert "no such image" in detail.head.error
    assert analyze_results(results.detailed).errors[0].module == "github.com/a/x"


def test_save_results_writes_both_artifacts(tmp_path):
    executor = FakeExecutor({"github.com/a/one": (False, True, "")})
    results = run_modules(["github.com/a/one"], executor, "repo", "main", "HEAD")

    simple, detailed = save_results(results, tmp_path)

    assert json.loads(simple.read_text()) == [{"module": "github.com/a/one", "status": "FIXED"}]
    loaded = load_results(detailed)
    assert loaded[0].base.ref == "main"
    assert loaded[0].head.passed is True


def test_no_modules_writes_empty_lists(tmp_path):
    results = run_modules([], FakeExecutor({}), "repo", "main", "HEAD")
    simple, detailed = save_results(results, tmp_path)
    assert json.loads(simple.read_text()) == []
    assert json.loads(detailed.read_text()) == []
