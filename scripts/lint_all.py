#!/usr/bin/env python3
"""Format, lint and test the Cartwise code base.

Runs isort, black and pytest over the package, the scripts and the tests.
Run it from anywhere; commands execute in the project root.

Usage:
    python scripts/lint_all.py [--check] [--skip-tests] [--skip-e2e]

Options:
    --check: Report formatting problems without rewriting files
    --skip-tests: Skip running pytest
    --skip-e2e: Run pytest without the end-to-end API tests
"""

import argparse
import subprocess
import sys
from pathlib import Path
from typing import List

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent

SOURCE_DIRS = ["cartwise", "scripts", "tests"]
E2E_TESTS = "tests/test_e2e.py"
BANNER = "=" * 60


def run_command(cmd: List[str], description: str) -> bool:
    """Run a command from the project root.

    Args:
        cmd: Command to run as list of strings
        description: Human-readable description of the step

    Returns:
        True if the command exited with status 0
    """
    print(f"\n{BANNER}\n{description}: {' '.join(cmd)}\n{BANNER}\n")

    try:
        result = subprocess.run(cmd, cwd=PROJECT_ROOT, check=False)
    except FileNotFoundError as e:
        print(f"\n✗ {description}: {e}")
        print("  Install the dev extras: pip install -e '.[dev,test]'\n")
        return False

    passed = result.returncode == 0
    status = "passed" if passed else f"failed (exit code: {result.returncode})"
    print(f"\n{'✓' if passed else '✗'} {description} {status}\n")
    return passed


def run_formatter(tool: str, check_flags: List[str], check_only: bool) -> bool:
    """Check a formatter's verdict and, unless ``check_only``, apply it."""
    if run_command([tool, *SOURCE_DIRS, *check_flags], f"{tool} check"):
        return True
    if check_only:
        return False
    print(f"Applying {tool} to the source tree...")
    return run_command([tool, *SOURCE_DIRS], f"{tool} fix")


def main() -> int:
    """Main entry point for linting script.

    Returns:
        Exit code: 0 if all checks passed, 1 otherwise
    """
    parser = argparse.ArgumentParser(
        description="Run formatting checks and the test suite",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Report formatting problems without rewriting files",
    )
    parser.add_argument(
        "--skip-tests",
        action="store_true",
        help="Skip running pytest",
    )
    parser.add_argument(
        "--skip-e2e",
        action="store_true",
        help="Run pytest without the end-to-end API tests",
    )
    args = parser.parse_args()

    print(f"\n{BANNER}\nCartwise Code Quality Checks\n{BANNER}")

    results = [
        run_formatter("isort", ["--check-only", "--diff"], args.check),
        run_formatter("black", ["--check"], args.check),
    ]

    if not args.skip_tests:
        pytest_cmd = ["pytest", "tests/", "-v"]
        if args.skip_e2e:
            pytest_cmd.extend(["--ignore", E2E_TESTS])
        results.append(run_command(pytest_cmd, "pytest"))

    print(f"\n{BANNER}")
    if all(results):
        print(f"✓ All checks passed!\n{BANNER}\n")
        return 0
    print(f"✗ Some checks failed. Please fix the issues above.\n{BANNER}\n")
    return 1


if __name__ == "__main__":
    sys.exit(main())
