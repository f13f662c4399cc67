from grater.utils.urls import clean_repo_url, dedup_roots, root_module


def test_dedup_roots_keeps_first_seen_order():
    raw = ["github.com/a/b", "github.com/a/b", "github.com/c/d"]
    assert dedup_roots(raw) == ["github.com/a/b", "github.com/c/d"]


def test_dedup_roots_collapses_subpackages_case_insensitively():
    raw = [
        "github.com/Owner/Repo/pkg/util",
        "github.com/x/y",
        "GITHUB.COM/owner/repo",
        "github.com/owner/repo/cmd",
    ]
    assert dedup_roots(raw) == ["github.com/owner/repo", "github.com/x/y"]


def test_root_module_leaves_other_hosts_alone():
    assert root_module("github.com/a/b/c/d") == "github.com/a/b"
    assert root_module("github.com/a/b") == "github.com/a/b"
    assert root_module("gitlab.com/a/b/c") == "gitlab.com/a/b/c"
    assert root_module("example.org/x") == "example.org/x"


def test_clean_repo_url_variants():
    assert clean_repo_url("https://github.com/owner/repo.git") == "github.com/owner/repo"
    assert clean_repo_url("http://github.com/owner/repo") == "github.com/owner/repo"
    assert clean_repo_url("git@github.com:owner/repo.git") == "github.com/owner/repo"
    assert clean_repo_url("  github.com/owner/repo\n") == "github.com/owner/repo"
    assert clean_repo_url("") == ""
