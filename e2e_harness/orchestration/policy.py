"""
Execution policy: worker concurrency, retries, time budgets and project
partitioning.

All decisions here are pure functions of the execution mode and the number
of available parallel-execution units. Nothing in this module coordinates
scenarios beyond bounding how many run at once.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePath
from typing import Callable, Iterable, List, Optional, Sequence, TypeVar, Union

from ..config import HarnessSettings
from ..pages.base import PageTimeouts
from .artifacts import ArtifactPolicy

T = TypeVar("T")

LOCAL_RETRIES = 0
CI_RETRIES = 2

DEFAULT_SCENARIO_TIMEOUT = 30.0
DEFAULT_ACTION_TIMEOUT_MS = 10_000
DEFAULT_NAVIGATION_TIMEOUT_MS = 30_000


class Project(str, Enum):
    """Independent scenario groups that can be selected and scheduled separately."""

    UI = "ui"
    API = "api"


# API scenarios run first.
DEFAULT_PROJECT_ORDER: Sequence[Project] = (Project.API, Project.UI)

PROJECT_TEST_DIRS = {
    Project.UI: PurePath("tests", "e2e", "ui"),
    Project.API: PurePath("tests", "e2e", "api"),
}


def available_units() -> int:
    """Number of parallel-execution units on this machine."""
    return os.cpu_count() or 1


def compute_worker_count(is_ci: bool, unit_count: int) -> int:
    """
    Decide how many scenarios may run at once.

    Local runs use half of the units (rounded down, at least one);
    unattended runs use every unit.

    Args:
        is_ci: Unattended mode flag
        unit_count: Available parallel-execution units

    Returns:
        Worker count, never below 1
    """
    units = max(1, unit_count)
    if is_ci:
        return units
    return max(1, units // 2)


def retry_count(is_ci: bool) -> int:
    """Automatic retries granted to a failed scenario."""
    return CI_RETRIES if is_ci else LOCAL_RETRIES


def project_for_path(path: Union[str, PurePath]) -> Optional[Project]:
    """
    Map a scenario file to its project from its location.

    A file belongs to a project when its path contains ``e2e/<project>``.
    """
    parts = PurePath(path).parts
    for index, part in enumerate(parts[:-1]):
        if part != "e2e":
            continue
        for project in Project:
            if parts[index + 1] == project.value:
                return project
    return None


def schedule(
    items: Iterable[T],
    key: Optional[Callable[[T], Optional[Project]]] = None,
    order: Sequence[Project] = DEFAULT_PROJECT_ORDER,
) -> List[T]:
    """
    Order items by project, keeping the original order inside each project.

    Items without a project run last. Without a key, items are projects.
    """
    rank = {project: index for index, project in enumerate(order)}
    project_of = key or (lambda item: item)
    return sorted(items, key=lambda item: rank.get(project_of(item), len(rank)))


@dataclass(frozen=True)
class ExecutionPolicy:
    """
    Everything the orchestrator needs to know to run a suite.

    Attributes:
        is_ci: Unattended mode flag
        workers: Scenarios allowed to run at once
        retries: Extra attempts granted to a failed scenario
        artifacts: Trace/screenshot/video capture rules
        scenario_timeout: Total time budget of one attempt in seconds
        action_timeout_ms: Max wait for in-page interactions
        navigation_timeout_ms: Max wait for full page navigations
        junit_path: Machine-readable result file, written in unattended mode
    """

    is_ci: bool
    workers: int
    retries: int
    artifacts: ArtifactPolicy = field(default_factory=ArtifactPolicy)
    scenario_timeout: float = DEFAULT_SCENARIO_TIMEOUT
    action_timeout_ms: int = DEFAULT_ACTION_TIMEOUT_MS
    navigation_timeout_ms: int = DEFAULT_NAVIGATION_TIMEOUT_MS
    junit_path: Optional[str] = None

    @property
    def max_attempts(self) -> int:
        return self.retries + 1

    @property
    def page_timeouts(self) -> PageTimeouts:
        return PageTimeouts(
            action_ms=self.action_timeout_ms,
            navigation_ms=self.navigation_timeout_ms,
        )

    def is_last_attempt(self, attempt: int) -> bool:
        return attempt >= self.retries

    @classmethod
    def for_mode(
        cls,
        is_ci: bool,
        unit_count: Optional[int] = None,
        **overrides,
    ) -> "ExecutionPolicy":
        """
        Build the policy for a mode.

        Args:
            is_ci: Unattended mode flag
            unit_count: Available units, detected when omitted
            **overrides: Field values replacing the computed ones
        """
        units = available_units() if unit_count is None else unit_count
        values = {
            "is_ci": is_ci,
            "workers": compute_worker_count(is_ci, units),
            "retries": retry_count(is_ci),
            "junit_path": "test-results/junit.xml" if is_ci else None,
        }
        values.update(overrides)
        return cls(**values)

    @classmethod
    def from_settings(
        cls,
        settings: HarnessSettings,
        unit_count: Optional[int] = None,
        **overrides,
    ) -> "ExecutionPolicy":
        values = {
            "scenario_timeout": settings.SCENARIO_TIMEOUT,
            "action_timeout_ms": settings.ACTION_TIMEOUT_MS,
            "navigation_timeout_ms": settings.NAVIGATION_TIMEOUT_MS,
        }
        values.update(overrides)
        is_ci = values.pop("is_ci", settings.CI)
        return cls.for_mode(is_ci, unit_count, **values)
