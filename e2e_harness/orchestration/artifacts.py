"""
Artifact capture and retention.

Traces are recorded only on the first retry of a failing scenario. A
screenshot is taken only when an attempt fails with no retry left. Videos are
recorded for every attempt but kept only for scenarios that ultimately fail.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Protocol

from playwright.async_api import BrowserContext, Page

from ..logging_config import get_logger

logger = get_logger(__name__)


class TraceMode(str, Enum):
    OFF = "off"
    ON = "on"
    ON_FIRST_RETRY = "on-first-retry"
    RETAIN_ON_FAILURE = "retain-on-failure"


class ScreenshotMode(str, Enum):
    OFF = "off"
    ON = "on"
    ONLY_ON_FAILURE = "only-on-failure"


class VideoMode(str, Enum):
    OFF = "off"
    ON = "on"
    RETAIN_ON_FAILURE = "retain-on-failure"


class ArtifactKind(str, Enum):
    TRACE = "trace"
    SCREENSHOT = "screenshot"
    VIDEO = "video"


@dataclass(frozen=True)
class Artifact:
    """One diagnostic file produced by a scenario attempt."""

    kind: ArtifactKind
    path: Path
    attempt: int


@dataclass(frozen=True)
class ArtifactPolicy:
    """
    Rules deciding which artifacts are captured and which survive a run.

    Attempts are numbered from 0 (the original run); attempt 1 is the
    first retry.
    """

    trace: TraceMode = TraceMode.ON_FIRST_RETRY
    screenshot: ScreenshotMode = ScreenshotMode.ONLY_ON_FAILURE
    video: VideoMode = VideoMode.RETAIN_ON_FAILURE

    def capture_trace(self, attempt: int) -> bool:
        if self.trace is TraceMode.ON_FIRST_RETRY:
            return attempt == 1
        return self.trace in (TraceMode.ON, TraceMode.RETAIN_ON_FAILURE)

    def keep_trace(self, failed: bool) -> bool:
        if self.trace is TraceMode.RETAIN_ON_FAILURE:
            return failed
        return True

    def capture_screenshot(self, failed: bool, is_last_attempt: bool) -> bool:
        if self.screenshot is ScreenshotMode.ON:
            return True
        if self.screenshot is ScreenshotMode.ONLY_ON_FAILURE:
            return failed and is_last_attempt
        return False

    def record_video(self) -> bool:
        return self.video is not VideoMode.OFF

    def keep_video(self, ultimately_failed: bool) -> bool:
        if self.video is VideoMode.RETAIN_ON_FAILURE:
            return ultimately_failed
        return self.video is VideoMode.ON

    def retained(
        self, artifacts: Iterable[Artifact], ultimately_failed: bool
    ) -> List[Artifact]:
        """Artifacts that survive once the scenario's final outcome is known."""
        keep_videos = self.keep_video(ultimately_failed)
        return [
            artifact
            for artifact in artifacts
            if artifact.kind is not ArtifactKind.VIDEO or keep_videos
        ]


_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")


@dataclass(frozen=True)
class ArtifactLayout:
    """Directory layout: <root>/<scenario>/attempt-<n>/<file>."""

    root: Path

    @staticmethod
    def slug(scenario: str) -> str:
        return _UNSAFE_CHARS.sub("-", scenario).strip("-")[:120] or "scenario"

    def scenario_dir(self, scenario: str) -> Path:
        return self.root / self.slug(scenario)

    def attempt_dir(self, scenario: str, attempt: int) -> Path:
        return self.scenario_dir(scenario) / f"attempt-{attempt}"

    def trace_path(self, scenario: str, attempt: int) -> Path:
        return self.attempt_dir(scenario, attempt) / "trace.zip"

    def screenshot_path(self, scenario: str, attempt: int) -> Path:
        return self.attempt_dir(scenario, attempt) / "failure.png"


class ArtifactRecorder(Protocol):
    """Capability capturing diagnostics from one execution context."""

    async def start_trace(self, title: str) -> None: ...

    async def stop_trace(self, path: Optional[Path]) -> Optional[Path]: ...

    async def screenshot(self, path: Path) -> Optional[Path]: ...

    async def video_path(self) -> Optional[Path]: ...


class NullArtifactRecorder:
    """Recorder for contexts with nothing to capture, such as API scenarios."""

    async def start_trace(self, title: str) -> None:
        return None

    async def stop_trace(self, path: Optional[Path]) -> Optional[Path]:
        return None

    async def screenshot(self, path: Path) -> Optional[Path]:
        return None

    async def video_path(self) -> Optional[Path]:
        return None


class PlaywrightArtifactRecorder:
    """Recorder backed by a Playwright browser context and its page."""

    def __init__(self, context: BrowserContext, page: Page) -> None:
        self.context = context
        self.page = page

    async def start_trace(self, title: str) -> None:
        await self.context.tracing.start(
            title=title, screenshots=True, snapshots=True, sources=True
        )

    async def stop_trace(self, path: Optional[Path]) -> Optional[Path]:
        if path is None:
            await self.context.tracing.stop()
            return None
        path.parent.mkdir(parents=True, exist_ok=True)
        await self.context.tracing.stop(path=str(path))
        return path

    async def screenshot(self, path: Path) -> Optional[Path]:
        path.parent.mkdir(parents=True, exist_ok=True)
        await self.page.screenshot(path=str(path), full_page=True)
        return path

    async def video_path(self) -> Optional[Path]:
        if self.page.video is None:
            return None
        return Path(await self.page.video.path())


@dataclass
class AttemptCapture:
    """
    Applies an ArtifactPolicy around one attempt of one scenario.

    begin() before the scenario body, finish() after it while the execution
    context is still open. Capture failures are logged and never replace the
    scenario's own outcome.
    """

    policy: ArtifactPolicy
    recorder: ArtifactRecorder
    layout: ArtifactLayout
    scenario: str
    attempt: int
    is_last_attempt: bool
    tracing: bool = field(default=False, init=False)

    async def begin(self) -> None:
        if not self.policy.capture_trace(self.attempt):
            return
        try:
            await self.recorder.start_trace(f"{self.scenario} (attempt {self.attempt})")
            self.tracing = True
        except Exception as error:
            self._log_capture_error(ArtifactKind.TRACE, error)

    async def finish(self, failed: bool) -> List[Artifact]:
        captured: List[Artifact] = []

        if self.policy.capture_screenshot(failed, self.is_last_attempt):
            path = self.layout.screenshot_path(self.scenario, self.attempt)
            try:
                saved = await self.recorder.screenshot(path)
                if saved is not None:
                    captured.append(Artifact(ArtifactKind.SCREENSHOT, saved, self.attempt))
            except Exception as error:
                self._log_capture_error(ArtifactKind.SCREENSHOT, error)

        if self.tracing:
            path = (
                self.layout.trace_path(self.scenario, self.attempt)
                if self.policy.keep_trace(failed)
                else None
            )
            try:
                saved = await self.recorder.stop_trace(path)
                if saved is not None:
                    captured.append(Artifact(ArtifactKind.TRACE, saved, self.attempt))
            except Exception as error:
                self._log_capture_error(ArtifactKind.TRACE, error)
            self.tracing = False

        if self.policy.record_video():
            try:
                video = await self.recorder.video_path()
                if video is not None:
                    captured.append(Artifact(ArtifactKind.VIDEO, video, self.attempt))
            except Exception as error:
                self._log_capture_error(ArtifactKind.VIDEO, error)

        return captured

    def _log_capture_error(self, kind: ArtifactKind, error: Exception) -> None:
        logger.warning(
            "Artifact capture failed",
            extra={
                "extra_fields": {
                    "scenario": self.scenario,
                    "attempt": self.attempt,
                    "artifact": kind.value,
                    "error_type": type(error).__name__,
                    "error_message": str(error),
                }
            },
        )


def discard(artifacts: Iterable[Artifact]) -> None:
    """Delete artifact files; files already gone are ignored."""
    for artifact in artifacts:
        artifact.path.unlink(missing_ok=True)
        logger.debug(
            "Discarded artifact",
            extra={"extra_fields": {"kind": artifact.kind.value, "path": str(artifact.path)}},
        )


def discard_videos(scenario_dir: Path) -> None:
    """Delete every recorded video of a scenario across its attempts."""
    if not scenario_dir.exists():
        return
    for video in scenario_dir.glob("attempt-*/*.webm"):
        video.unlink(missing_ok=True)
