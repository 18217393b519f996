"""
Pytest integration of the harness.

Registers markers, tags scenario files with their project from their
location, orders API scenarios before UI ones, and provides per-test
fixtures. Every test gets its own booking client, token, cleanup registry
and browser context; none of them is shared across tests.
"""

from pathlib import Path
from typing import Any, AsyncIterator, Iterator, List

import pytest
import pytest_asyncio
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from .booker_client import RestfulBookerClient
from .config import HarnessSettings, get_settings
from .logging_config import clear_scenario_id, get_logger, set_scenario_id
from .models import AuthToken
from .orchestration.artifacts import ArtifactLayout, AttemptCapture, discard_videos
from .orchestration.cleanup import BookingCleanup
from .orchestration.contexts import BrowserContextFactory
from .orchestration.policy import ExecutionPolicy, project_for_path, schedule
from .pages.storefront import Storefront

logger = get_logger(__name__)

MARKERS = {
    "e2e": "scenario driving a live system under test",
    "ui": "storefront UI scenario",
    "api": "booking API scenario",
    "smoke": "critical-path scenario run on every change",
    "regression": "extended scenario run nightly and before release",
}

PHASES = ("setup", "call", "teardown")


def pytest_configure(config: Any) -> None:
    """
    Register harness markers.

    Args:
        config: Pytest configuration object
    """
    for name, description in MARKERS.items():
        config.addinivalue_line("markers", f"{name}: {description}")


@pytest.hookimpl(tryfirst=True)
def pytest_collection_modifyitems(session: Any, config: Any, items: List[Any]) -> None:
    """Mark scenarios with their project and run API scenarios first."""
    for item in items:
        project = project_for_path(item.path)
        if project is not None:
            item.add_marker(pytest.mark.e2e)
            item.add_marker(getattr(pytest.mark, project.value))

    items[:] = schedule(items, key=lambda item: project_for_path(item.path))


@pytest.hookimpl(tryfirst=True)
def pytest_runtest_setup(item: Any) -> None:
    """Forget the reports of a previous attempt when the item is rerun."""
    for when in PHASES:
        if hasattr(item, f"rep_{when}"):
            delattr(item, f"rep_{when}")


@pytest.hookimpl(hookwrapper=True, tryfirst=True)
def pytest_runtest_makereport(item: Any, call: Any) -> Iterator[None]:
    """Keep each phase's report on the item for fixture teardown."""
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)


def attempt_failed(node: Any) -> bool:
    """Whether the current attempt failed in its setup or its body."""
    for when in ("setup", "call"):
        report = getattr(node, f"rep_{when}", None)
        if report is not None and report.failed:
            return True
    return False


@pytest.fixture(scope="session")
def harness_settings() -> HarnessSettings:
    return get_settings()


@pytest.fixture(scope="session")
def execution_policy(harness_settings: HarnessSettings) -> ExecutionPolicy:
    return ExecutionPolicy.from_settings(harness_settings)


@pytest.fixture(autouse=True)
def scenario_id(request: Any) -> Iterator[str]:
    """Tag log lines emitted during the test with its node id."""
    value = set_scenario_id(request.node.nodeid)
    yield value
    clear_scenario_id()


@pytest_asyncio.fixture
async def booker_client(
    harness_settings: HarnessSettings,
) -> AsyncIterator[RestfulBookerClient]:
    """Fresh booking client; the test is skipped when the API is unreachable."""
    async with RestfulBookerClient(
        harness_settings.API_BASE_URL, harness_settings.REQUEST_TIMEOUT
    ) as client:
        if not await client.health_check():
            pytest.skip(f"Booking API not reachable at {harness_settings.API_BASE_URL}")
        yield client


@pytest_asyncio.fixture
async def auth_token(
    booker_client: RestfulBookerClient,
    harness_settings: HarnessSettings,
) -> AuthToken:
    return await booker_client.authenticate(
        harness_settings.BOOKER_USER, harness_settings.BOOKER_PASS
    )


@pytest_asyncio.fixture
async def booking_cleanup(
    booker_client: RestfulBookerClient,
    auth_token: AuthToken,
) -> AsyncIterator[BookingCleanup]:
    """Registry of bookings the test owns; all are deleted at teardown."""
    cleanup = BookingCleanup(booker_client, token=auth_token)
    yield cleanup
    await cleanup.release_all()


@pytest_asyncio.fixture
async def storefront(
    request: Any,
    harness_settings: HarnessSettings,
    execution_policy: ExecutionPolicy,
) -> AsyncIterator[Storefront]:
    """
    Page objects over a new browser context.

    Artifacts follow the execution policy; the attempt number comes from
    pytest-rerunfailures when retries are enabled.
    """
    attempt = getattr(request.node, "execution_count", 1) - 1
    layout = ArtifactLayout(Path(harness_settings.ARTIFACTS_DIR))
    name = request.node.nodeid

    async with async_playwright() as playwright:
        try:
            browser = await playwright.chromium.launch(headless=harness_settings.HEADLESS)
        except PlaywrightError as error:
            logger.warning(
                "Browser launch failed",
                extra={"extra_fields": {"error_message": str(error)}},
            )
            pytest.skip(f"Browser unavailable: {error}")

        try:
            factory = BrowserContextFactory(
                browser, harness_settings.UI_BASE_URL, execution_policy, layout.root
            )
            async with factory.open(name, attempt) as context:
                capture = AttemptCapture(
                    policy=execution_policy.artifacts,
                    recorder=context.artifacts,
                    layout=layout,
                    scenario=name,
                    attempt=attempt,
                    is_last_attempt=execution_policy.is_last_attempt(attempt),
                )
                await capture.begin()
                yield context.storefront
                failed = attempt_failed(request.node)
                await capture.finish(failed=failed)

            # a passing attempt means the scenario did not ultimately fail
            if not failed and not execution_policy.artifacts.keep_video(False):
                discard_videos(layout.scenario_dir(name))
        finally:
            await browser.close()
