# grater/cli.py
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger

from . import config
from .errors import GraterError
from .executor import DockerExecutor
from .orchestrator import run_modules, save_results
from .ranking import load_modules
from .report import analyze_results, exit_code, load_results, render_human, render_json
from .score_cache import JsonScoreStore
from .workspace import (
    cache_path,
    detailed_results_path,
    ensure_workspace,
    log_dir,
    modules_path,
    read_modules,
    write_modules,
)

EXIT_FAILURE = 2


def configure_logging(ws: Path, debug: bool = False) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if debug else "INFO", format="{message}")
    logger.add(
        log_dir(ws) / "grater.log",
        level="DEBUG",
        rotation="5 MB",
        retention=5,
        encoding="utf-8",
    )


# ---------------------------
# Commands
# ---------------------------

def cmd_find(args: argparse.Namespace, ws: Path) -> int:
    store = JsonScoreStore(cache_path(ws))
    modules = load_modules(args.repo, store, limit=args.limit)
    write_modules(modules_path(ws), modules)
    print(f"Successfully saved {len(modules)} modules to {modules_path(ws)}")
    return 0


def cmd_prepare(args: argparse.Namespace, ws: Path) -> int:
    path = modules_path(ws)
    if path.exists():
        logger.info("Keeping existing module list at {}", path)
    else:
        write_modules(path, config.PLACEHOLDER_MODULES)
    print(f"✅ .grater workspace ready at {ws}")
    print(f"✅ modules list at {path}")
    return 0


def cmd_run(args: argparse.Namespace, ws: Path) -> int:
    modules = read_modules(modules_path(ws))
    executor = DockerExecutor(image=args.image)
    if not args.no_build:
        executor.build_image(Path(args.project_root))

    results = run_modules(modules, executor, args.repo, args.base, args.head)
    simple, detailed = save_results(results, ws)
    print(f"\n✅ Results saved to {simple} and {detailed}")
    return 0


def cmd_report(args: argparse.Namespace, ws: Path) -> int:
    summary = analyze_results(load_results(detailed_results_path(ws)))
    if args.format == "json":
        print(render_json(summary))
    else:
        print(render_human(summary, verbose=args.verbose))
    return exit_code(summary)


# ---------------------------
# CLI entrypoint
# ---------------------------

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="grater",
        description="Re-run downstream consumers' tests against two library refs and report regressions.",
    )
    ap.add_argument("--workspace", type=Path, default=config.WORKSPACE_DIR,
                    help="Directory holding grater artifacts (default: .grater)")
    ap.add_argument("--debug", action="store_true", help="Verbose logging on stderr")
    sub = ap.add_subparsers(dest="command", required=True)

    find = sub.add_parser("find", help="Find and rank modules that import the library")
    find.add_argument("-l", "--limit", type=int, default=0,
                      help="Keep only the top N modules (0 = all)")
    find.add_argument("-r", "--repo", default="",
                      help="Library to search importers for (default: git origin)")
    find.set_defaults(func=cmd_find)

    prepare = sub.add_parser("prepare", help="Create the workspace and a placeholder module list")
    prepare.set_defaults(func=cmd_prepare)

    run = sub.add_parser("run", help="Run downstream tests on base and head and detect regressions")
    run.add_argument("--repo", required=True, help="Repo under test")
    run.add_argument("--base", default=config.DEFAULT_BASE_REF, help="Base git ref")
    run.add_argument("--head", default=config.DEFAULT_HEAD_REF, help="Head git ref")
    run.add_argument("--image", default=config.DEFAULT_IMAGE, help="Docker image name")
    run.add_argument("--no-build", action="store_true", help="Skip building the runner image")
    run.add_argument("--project-root", default=".", help="Directory containing docker/dockerfile")
    run.set_defaults(func=cmd_run)

    report = sub.add_parser("report", help="Analyze test results and report regressions")
    report.add_argument("--format", choices=["simple", "json"], default="simple",
                        help="Output format (simple or json)")
    report.add_argument("-v", "--verbose", action="store_true", help="Show detailed error messages")
    report.set_defaults(func=cmd_report)

    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        ws = ensure_workspace(args.workspace)
        configure_logging(ws, debug=args.debug)
        return args.func(args, ws)
    except GraterError as e:
        logger.error("{}", e)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
