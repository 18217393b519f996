"""
Scenario and suite runners.

A scenario is an async callable receiving a ScenarioContext. Every attempt
of every scenario gets a freshly built context from a context factory, so no
mutable state crosses scenario boundaries. The suite runner bounds how many
scenarios run at once; within a scenario, operations run strictly in order.
"""

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import (
    Any,
    AsyncContextManager,
    Awaitable,
    Callable,
    Dict,
    FrozenSet,
    List,
    Optional,
    Sequence,
)

from ..booker_client import RestfulBookerClient
from ..exceptions import ScenarioTimeout
from ..logging_config import clear_scenario_id, get_logger, set_scenario_id
from ..models import NonCriticalOutcome
from ..pages.storefront import Storefront
from .artifacts import (
    Artifact,
    ArtifactLayout,
    ArtifactRecorder,
    AttemptCapture,
    NullArtifactRecorder,
    discard,
)
from .cleanup import BookingCleanup
from .policy import ExecutionPolicy, Project, schedule

logger = get_logger(__name__)


@dataclass
class ScenarioContext:
    """
    Execution context of one scenario attempt.

    Attributes:
        name: Scenario name
        attempt: Attempt number, 0 for the original run
        project: Project the scenario belongs to
        artifacts: Recorder for traces, screenshots and videos
        cleanup: Registry of bookings to delete at teardown
        booker: Booking client, for API scenarios
        storefront: Page objects, for UI scenarios
        resources: Any further per-attempt objects
    """

    name: str
    attempt: int
    project: Project
    artifacts: ArtifactRecorder = field(default_factory=NullArtifactRecorder)
    cleanup: Optional[BookingCleanup] = None
    booker: Optional[RestfulBookerClient] = None
    storefront: Optional[Storefront] = None
    resources: Dict[str, Any] = field(default_factory=dict)


Scenario = Callable[[ScenarioContext], Awaitable[None]]


@dataclass(frozen=True)
class ScenarioDefinition:
    """A named scenario and the project and tags it is grouped under."""

    name: str
    run: Scenario
    project: Project
    tags: FrozenSet[str] = frozenset()


ContextFactory = Callable[[ScenarioDefinition, int], AsyncContextManager[ScenarioContext]]


class ScenarioOutcome(str, Enum):
    PASSED = "passed"
    FLAKY = "flaky"  # passed after at least one failed attempt
    FAILED = "failed"


@dataclass(frozen=True)
class AttemptResult:
    attempt: int
    passed: bool
    duration_ms: float
    error: Optional[BaseException] = None


@dataclass
class ScenarioResult:
    """Final outcome of a scenario with its retained artifacts."""

    name: str
    project: Project
    outcome: ScenarioOutcome
    attempts: List[AttemptResult]
    artifacts: List[Artifact] = field(default_factory=list)
    cleanup: List[NonCriticalOutcome] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.outcome is not ScenarioOutcome.FAILED

    @property
    def error(self) -> Optional[BaseException]:
        return self.attempts[-1].error if self.attempts else None


@dataclass
class SuiteReport:
    results: List[ScenarioResult]

    @property
    def ok(self) -> bool:
        return all(result.passed for result in self.results)

    def by_outcome(self, outcome: ScenarioOutcome) -> List[ScenarioResult]:
        return [result for result in self.results if result.outcome is outcome]

    def summary(self) -> Dict[str, int]:
        summary = {outcome.value: len(self.by_outcome(outcome)) for outcome in ScenarioOutcome}
        summary["total"] = len(self.results)
        return summary


class ScenarioRunner:
    """
    Runs one scenario under the execution policy.

    Each attempt gets a fresh context and the policy's time budget. A failed
    attempt is retried up to policy.retries times; a passing attempt ends the
    scenario. Owned bookings are released after every attempt.
    """

    def __init__(
        self,
        policy: ExecutionPolicy,
        context_factory: ContextFactory,
        artifacts_dir: Path,
    ) -> None:
        self.policy = policy
        self.context_factory = context_factory
        self.layout = ArtifactLayout(Path(artifacts_dir))

    async def run(self, scenario: ScenarioDefinition) -> ScenarioResult:
        set_scenario_id(scenario.name)
        try:
            return await self._run(scenario)
        finally:
            clear_scenario_id()

    async def _run(self, scenario: ScenarioDefinition) -> ScenarioResult:
        attempts: List[AttemptResult] = []
        artifacts: List[Artifact] = []
        cleanup: List[NonCriticalOutcome] = []

        for attempt in range(self.policy.max_attempts):
            result = await self._run_attempt(scenario, attempt, artifacts, cleanup)
            attempts.append(result)
            if result.passed:
                break
            if not self.policy.is_last_attempt(attempt):
                logger.warning(
                    "Scenario attempt failed, retrying",
                    extra={
                        "extra_fields": {
                            "scenario": scenario.name,
                            "attempt": attempt,
                            "error_type": type(result.error).__name__,
                            "error_message": str(result.error),
                        }
                    },
                )

        ultimately_failed = not attempts[-1].passed
        retained = self.policy.artifacts.retained(artifacts, ultimately_failed)
        discard(artifact for artifact in artifacts if artifact not in retained)

        if ultimately_failed:
            outcome = ScenarioOutcome.FAILED
        elif len(attempts) > 1:
            outcome = ScenarioOutcome.FLAKY
        else:
            outcome = ScenarioOutcome.PASSED

        log = logger.error if ultimately_failed else logger.info
        log(
            f"Scenario {outcome.value}",
            extra={
                "extra_fields": {
                    "scenario": scenario.name,
                    "project": scenario.project.value,
                    "attempts": len(attempts),
                    "artifacts": [str(artifact.path) for artifact in retained],
                }
            },
        )

        return ScenarioResult(
            name=scenario.name,
            project=scenario.project,
            outcome=outcome,
            attempts=attempts,
            artifacts=retained,
            cleanup=cleanup,
        )

    async def _run_attempt(
        self,
        scenario: ScenarioDefinition,
        attempt: int,
        artifacts: List[Artifact],
        cleanup: List[NonCriticalOutcome],
    ) -> AttemptResult:
        start_time = time.perf_counter()
        error: Optional[BaseException] = None

        try:
            async with self.context_factory(scenario, attempt) as context:
                capture = AttemptCapture(
                    policy=self.policy.artifacts,
                    recorder=context.artifacts,
                    layout=self.layout,
                    scenario=scenario.name,
                    attempt=attempt,
                    is_last_attempt=self.policy.is_last_attempt(attempt),
                )
                await capture.begin()

                try:
                    await asyncio.wait_for(
                        scenario.run(context), timeout=self.policy.scenario_timeout
                    )
                except asyncio.TimeoutError:
                    error = ScenarioTimeout(scenario.name, self.policy.scenario_timeout)
                except Exception as exc:
                    error = exc

                artifacts.extend(await capture.finish(failed=error is not None))

                if context.cleanup is not None:
                    cleanup.extend(await context.cleanup.release_all())
        except Exception as exc:
            # context setup or teardown failed
            if error is None:
                error = exc

        return AttemptResult(
            attempt=attempt,
            passed=error is None,
            duration_ms=(time.perf_counter() - start_time) * 1000,
            error=error,
        )


class SuiteRunner:
    """
    Runs many scenarios across a bounded pool of workers.

    Scenarios are started in project order (API first) and at most
    policy.workers run at the same time. One scenario's failure never
    affects another.
    """

    def __init__(self, policy: ExecutionPolicy, runner: ScenarioRunner) -> None:
        self.policy = policy
        self.runner = runner

    async def run(
        self,
        scenarios: Sequence[ScenarioDefinition],
        projects: Optional[Sequence[Project]] = None,
        tags: Optional[Sequence[str]] = None,
        by_project: bool = False,
    ) -> SuiteReport:
        """
        Run the selected scenarios.

        Args:
            scenarios: Candidate scenarios
            projects: Projects to run, all when omitted
            tags: Run only scenarios carrying one of these tags
            by_project: Finish each project before starting the next

        Returns:
            Report with one result per selected scenario
        """
        selected = [
            scenario
            for scenario in scenarios
            if (projects is None or scenario.project in projects)
            and (not tags or scenario.tags.intersection(tags))
        ]
        ordered = schedule(selected, key=lambda scenario: scenario.project)

        logger.info(
            "Starting suite",
            extra={
                "extra_fields": {
                    "scenarios": len(ordered),
                    "workers": self.policy.workers,
                    "retries": self.policy.retries,
                }
            },
        )

        if by_project:
            results: List[ScenarioResult] = []
            for project in schedule({scenario.project for scenario in ordered}):
                group = [scenario for scenario in ordered if scenario.project is project]
                results.extend(await self._run_pool(group))
        else:
            results = await self._run_pool(ordered)

        report = SuiteReport(results)
        logger.info("Suite finished", extra={"extra_fields": report.summary()})
        return report

    async def _run_pool(self, scenarios: List[ScenarioDefinition]) -> List[ScenarioResult]:
        semaphore = asyncio.Semaphore(self.policy.workers)

        async def worker(scenario: ScenarioDefinition) -> ScenarioResult:
            async with semaphore:
                return await self.runner.run(scenario)

        return list(await asyncio.gather(*(worker(scenario) for scenario in scenarios)))
