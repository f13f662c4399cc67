from __future__ import annotations


class GraterError(Exception):
    """Base class for failures that abort a grater command."""


class DiscoveryError(GraterError):
    """The imported-by listing could not be fetched or parsed."""


class ScoreFetchError(GraterError):
    """A single scoring API call failed. Callers degrade the score to 0.0."""


class ExecutorInvocationError(GraterError):
    """The test runner failed to run or returned an invalid payload."""


class ReportParseError(GraterError):
    """Persisted results could not be read or decoded."""


class WorkspaceError(GraterError):
    """A workspace artifact could not be read or written."""
