#!/usr/bin/env python3
# Copyright 2026 AppMeta Contributors
# SPDX-License-Identifier: Apache-2.0

"""Run the CI checks of AppMeta locally.

Without arguments all steps run in order. Pass step keys (``format``, ``lint``,
``types``, ``tests``, ``build``) to run a subset, and ``--fail-fast`` to stop
at the first failing step.
"""

import argparse
import pathlib
import subprocess
import sys
import time

from yachalk import chalk

# ###############
# Public Interface
# ###############

STEPS: dict[str, tuple[str, list[str]]] = {
    "format": ("Format check", ["uv", "run", "ruff", "format", "--check", "src/", "tests/", "tools/"]),
    "lint": ("Lint", ["uv", "run", "ruff", "check", "src/", "tests/", "tools/"]),
    "types": ("Type check", ["uv", "run", "ty", "check", "src/"]),
    "tests": ("Tests", ["uv", "run", "pytest", "--cov=appmeta", "--cov-report=term-missing"]),
    "build": ("Build", ["uv", "build"]),
}


def main(argv: list[str] | None = None) -> int:
    """Run the selected CI steps and report results."""
    args = _parse_args(argv)
    results: list[tuple[str, bool, float]] = []

    for key in args.steps or list(STEPS):
        name, cmd = STEPS[key]
        _print_header(name)
        start = time.monotonic()
        proc = subprocess.run(cmd, cwd=_repo_root())
        passed = proc.returncode == 0
        results.append((name, passed, time.monotonic() - start))
        if not passed and args.fail_fast:
            break

    _print_header("  Summary")
    for name, passed, elapsed in results:
        color = chalk.green if passed else chalk.red
        print(color(f"  {'PASS' if passed else 'FAIL'}  {name} ({elapsed:.1f}s)"))
    skipped = len(args.steps or STEPS) - len(results)
    if skipped:
        print(chalk.yellow(f"  SKIP  {skipped} step(s) after failure"))

    print()
    return 0 if all(passed for _, passed, _ in results) and not skipped else 1


# ################
# Implementation
# ################


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the AppMeta CI checks.")
    parser.add_argument("steps", nargs="*", choices=list(STEPS), metavar="STEP", help="steps to run (default: all)")
    parser.add_argument("--fail-fast", action="store_true", help="stop after the first failing step")
    return parser.parse_args(argv)


def _print_header(title: str) -> None:
    sep = chalk.blue("=" * 60)
    print(f"\n{sep}")
    print(chalk.blue(title))
    print(sep)


def _repo_root() -> str:
    return str(pathlib.Path(__file__).parent.parent)


if __name__ == "__main__":
    sys.exit(main())
