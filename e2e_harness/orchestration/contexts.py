"""
Context factories building a fresh execution context per scenario attempt.

Targets and credentials arrive as constructor arguments; nothing here reads
the environment.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Dict, Optional

import httpx
from playwright.async_api import Browser

from ..booker_client import RestfulBookerClient
from ..logging_config import get_logger
from ..models import AuthCredentials
from ..pages.storefront import Storefront
from .artifacts import ArtifactLayout, NullArtifactRecorder, PlaywrightArtifactRecorder
from .cleanup import BookingCleanup
from .policy import ExecutionPolicy, Project
from .runner import ScenarioContext, ScenarioDefinition

logger = get_logger(__name__)

DEFAULT_VIEWPORT: Dict[str, int] = {"width": 1280, "height": 720}


class ApiContextFactory:
    """Builds a booking client and a cleanup registry for each attempt."""

    def __init__(
        self,
        base_url: str,
        credentials: AuthCredentials,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize API context factory.

        Args:
            base_url: Base URL of the booking API
            credentials: Pair used to obtain cleanup tokens
            timeout: Request timeout in seconds
            transport: Optional httpx transport, e.g. a mock in tests
        """
        self.base_url = base_url
        self.credentials = credentials
        self.timeout = timeout
        self.transport = transport

    def __call__(self, scenario: ScenarioDefinition, attempt: int):
        return self._open(scenario, attempt)

    @asynccontextmanager
    async def _open(
        self, scenario: ScenarioDefinition, attempt: int
    ) -> AsyncIterator[ScenarioContext]:
        async with httpx.AsyncClient(
            timeout=self.timeout, transport=self.transport
        ) as http_client:
            booker = RestfulBookerClient(self.base_url, self.timeout, http_client)

            async def token_provider():
                return await booker.authenticate(
                    self.credentials.username, self.credentials.password
                )

            yield ScenarioContext(
                name=scenario.name,
                attempt=attempt,
                project=scenario.project,
                artifacts=NullArtifactRecorder(),
                cleanup=BookingCleanup(booker, token_provider=token_provider),
                booker=booker,
            )


class BrowserContextFactory:
    """Opens a new browser context and page for each attempt."""

    def __init__(
        self,
        browser: Browser,
        base_url: str,
        policy: ExecutionPolicy,
        artifacts_dir: Path,
        viewport: Optional[Dict[str, int]] = None,
    ) -> None:
        self.browser = browser
        self.base_url = base_url
        self.policy = policy
        self.layout = ArtifactLayout(Path(artifacts_dir))
        self.viewport = viewport or DEFAULT_VIEWPORT

    def __call__(self, scenario: ScenarioDefinition, attempt: int):
        return self.open(scenario.name, attempt, scenario)

    @asynccontextmanager
    async def open(
        self,
        name: str,
        attempt: int,
        scenario: Optional[ScenarioDefinition] = None,
    ) -> AsyncIterator[ScenarioContext]:
        """
        Open an isolated browser context for one attempt of a scenario.

        Args:
            name: Scenario name, used for the artifact directory
            attempt: Attempt number, 0 for the original run
            scenario: Definition supplying the project, when run by ScenarioRunner
        """
        record_video_dir = None
        if self.policy.artifacts.record_video():
            record_video_dir = str(self.layout.attempt_dir(name, attempt))

        context = await self.browser.new_context(
            base_url=self.base_url,
            viewport=self.viewport,
            record_video_dir=record_video_dir,
        )
        context.set_default_timeout(self.policy.action_timeout_ms)
        context.set_default_navigation_timeout(self.policy.navigation_timeout_ms)

        try:
            page = await context.new_page()
            yield ScenarioContext(
                name=name,
                attempt=attempt,
                project=scenario.project if scenario else Project.UI,
                artifacts=PlaywrightArtifactRecorder(context, page),
                storefront=Storefront(page, self.policy.page_timeouts),
            )
        finally:
            await context.close()
            logger.debug(
                "Closed browser context",
                extra={"extra_fields": {"scenario": name, "attempt": attempt}},
            )
