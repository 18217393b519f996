"""
Command line entry point: run the live end-to-end suites.

Usage:
    python -m e2e_harness                     # both projects, local mode
    python -m e2e_harness --project api       # booking API scenarios only
    python -m e2e_harness --tag smoke --ci    # smoke scenarios, CI mode

Worker count, retries, timeouts and the junit report path come from the
execution policy; any unrecognised argument is handed to pytest as is.
"""

import argparse
import os
import subprocess
import sys
from typing import Dict, List, Optional, Sequence

from .config import get_settings
from .logging_config import get_logger, setup_logging
from .orchestration.policy import (
    DEFAULT_PROJECT_ORDER,
    PROJECT_TEST_DIRS,
    ExecutionPolicy,
    Project,
)

logger = get_logger(__name__)

# pytest exit code when nothing matched the selection
NO_TESTS_COLLECTED = 5


def selected_projects(project: str) -> List[Project]:
    if project == "all":
        return list(DEFAULT_PROJECT_ORDER)
    return [Project(project)]


def marker_expression(projects: Sequence[Project], tags: Sequence[str]) -> str:
    """Build the pytest -m expression selecting live scenarios."""
    expression = "e2e"
    if len(projects) == 1:
        expression += f" and {projects[0].value}"
    if tags:
        expression += " and (" + " or ".join(tags) + ")"
    return expression


def build_pytest_args(
    policy: ExecutionPolicy,
    projects: Sequence[Project],
    tags: Sequence[str] = (),
    extra: Sequence[str] = (),
) -> List[str]:
    """
    Translate an execution policy into pytest arguments.

    Args:
        policy: Policy of this run
        projects: Projects to run, in schedule order
        tags: Run only scenarios carrying one of these tags
        extra: Arguments passed through to pytest

    Returns:
        Argument list for ``python -m pytest``
    """
    args = [str(PROJECT_TEST_DIRS[project]) for project in projects]
    args += ["-m", marker_expression(projects, tags)]
    args += ["-n", str(policy.workers)]
    if policy.retries:
        args += ["--reruns", str(policy.retries)]
    args += ["--timeout", str(int(policy.scenario_timeout))]
    if policy.junit_path:
        args += [f"--junitxml={policy.junit_path}"]
    args += list(extra)
    return args


def build_environment(is_ci: bool) -> Dict[str, str]:
    env = dict(os.environ)
    if is_ci:
        env["CI"] = "true"
    return env


def parse_args(argv: Optional[Sequence[str]] = None):
    parser = argparse.ArgumentParser(
        prog="e2e_harness",
        description="Run storefront UI and booking API end-to-end scenarios",
    )
    parser.add_argument(
        "--project",
        choices=["all"] + [project.value for project in Project],
        default="all",
        help="Project to run (default: all, API first)",
    )
    parser.add_argument(
        "--tag",
        action="append",
        default=[],
        help="Run only scenarios with this tag, e.g. smoke; may be repeated",
    )
    parser.add_argument(
        "--ci",
        action="store_true",
        help="Force unattended mode (also enabled by CI=true)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        help="Override the computed worker count",
    )
    return parser.parse_known_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args, passthrough = parse_args(argv)
    settings = get_settings()
    setup_logging(log_level=settings.LOG_LEVEL, use_json=settings.LOG_JSON)

    overrides = {}
    if args.ci:
        overrides["is_ci"] = True
    if args.workers is not None:
        overrides["workers"] = max(1, args.workers)
    policy = ExecutionPolicy.from_settings(settings, **overrides)

    projects = selected_projects(args.project)
    pytest_args = build_pytest_args(policy, projects, args.tag, passthrough)

    logger.info(
        "Running end-to-end suite",
        extra={
            "extra_fields": {
                "projects": [project.value for project in projects],
                "tags": args.tag,
                "ci": policy.is_ci,
                "workers": policy.workers,
                "retries": policy.retries,
            }
        },
    )

    completed = subprocess.run(
        [sys.executable, "-m", "pytest", *pytest_args],
        env=build_environment(policy.is_ci),
    )
    if completed.returncode == NO_TESTS_COLLECTED:
        logger.warning("No scenarios matched the selection")
        return 0
    return completed.returncode


if __name__ == "__main__":
    sys.exit(main())
