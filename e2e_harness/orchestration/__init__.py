"""Worker allocation, retry and artifact policy, and scenario sequencing."""

from .artifacts import (
    Artifact,
    ArtifactKind,
    ArtifactLayout,
    ArtifactPolicy,
    AttemptCapture,
    NullArtifactRecorder,
    PlaywrightArtifactRecorder,
    ScreenshotMode,
    TraceMode,
    VideoMode,
)
from .cleanup import BookingCleanup
from .contexts import ApiContextFactory, BrowserContextFactory
from .policy import (
    ExecutionPolicy,
    Project,
    compute_worker_count,
    project_for_path,
    retry_count,
    schedule,
)
from .runner import (
    ScenarioContext,
    ScenarioDefinition,
    ScenarioOutcome,
    ScenarioResult,
    ScenarioRunner,
    SuiteReport,
    SuiteRunner,
)

__all__ = [
    "ApiContextFactory",
    "Artifact",
    "ArtifactKind",
    "ArtifactLayout",
    "ArtifactPolicy",
    "AttemptCapture",
    "BookingCleanup",
    "BrowserContextFactory",
    "ExecutionPolicy",
    "NullArtifactRecorder",
    "PlaywrightArtifactRecorder",
    "Project",
    "ScenarioContext",
    "ScenarioDefinition",
    "ScenarioOutcome",
    "ScenarioResult",
    "ScenarioRunner",
    "ScreenshotMode",
    "SuiteReport",
    "SuiteRunner",
    "TraceMode",
    "VideoMode",
    "compute_worker_count",
    "project_for_path",
    "retry_count",
    "schedule",
]
