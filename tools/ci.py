#!/usr/bin/env python3
# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""Run the CI checks locally: format, lint, type check, tests, sample generation and build.

Usage::

    tools/ci.py                 # every step
    tools/ci.py lint tests      # only the named steps
"""

import argparse
import subprocess
import sys
import tempfile
import time
from pathlib import Path

from yachalk import chalk

# ###############
# Public Interface
# ###############

REPO_ROOT = Path(__file__).resolve().parent.parent

SAMPLE_DOCS = REPO_ROOT / "tests" / "data" / "docs"

STEPS: dict[str, tuple[str, list[str]]] = {
    "format": ("Format check", ["uv", "run", "ruff", "format", "--check", "src/", "tests/"]),
    "lint": ("Lint", ["uv", "run", "ruff", "check", "src/", "tests/"]),
    "types": ("Type check", ["uv", "run", "ty", "check", "src/"]),
    "tests": ("Tests", ["uv", "run", "pytest", "--cov=specbind", "--cov-report=term-missing"]),
    "sample": ("Generate sample clients", []),
    "build": ("Build", ["uv", "build"]),
}


def main() -> int:
    """Run the selected CI steps and print a summary."""
    parser = argparse.ArgumentParser(description="Run specbind CI checks locally.")
    parser.add_argument("steps", nargs="*", metavar="STEP", help=f"Steps to run (default: all of {', '.join(STEPS)})")
    args = parser.parse_args()
    unknown = [step for step in args.steps if step not in STEPS]
    if unknown:
        parser.error(f"unknown step(s): {', '.join(unknown)}")
    selected = args.steps or list(STEPS)

    results: list[tuple[str, bool, float]] = []
    for key in selected:
        title, cmd = STEPS[key]
        _banner(title)
        start = time.monotonic()
        passed = _sample_generation() if key == "sample" else _run(cmd)
        results.append((title, passed, time.monotonic() - start))

    _banner("  Summary")
    for title, passed, elapsed in results:
        status = "PASS" if passed else "FAIL"
        color = chalk.green if passed else chalk.red
        print(color(f"  {status}  {title} ({elapsed:.1f}s)"))
    print()
    return 0 if all(passed for _, passed, _ in results) else 1


# ################
# Implementation
# ################


def _banner(title: str) -> None:
    sep = chalk.blue("=" * 60)
    print(f"\n{sep}")
    print(chalk.blue(title))
    print(sep)


def _run(cmd: list[str], cwd: Path = REPO_ROOT) -> bool:
    return subprocess.run(cmd, cwd=cwd).returncode == 0


def _sample_generation() -> bool:
    """Run ``specbind check`` and ``specbind generate`` on the sample corpus in a scratch workspace."""
    with tempfile.TemporaryDirectory(prefix="specbind-ci-") as scratch:
        workspace = Path(scratch)
        (workspace / "specbind.yaml").write_text(
            f"source-directory: {SAMPLE_DOCS.as_posix()}\noutput-directory: generated\nstrict: true\n",
            encoding="utf-8",
        )
        specbind = ["uv", "run", "--project", str(REPO_ROOT), "specbind"]
        return _run([*specbind, "check", str(workspace)]) and _run([*specbind, "generate", str(workspace)])


if __name__ == "__main__":
    sys.exit(main())
