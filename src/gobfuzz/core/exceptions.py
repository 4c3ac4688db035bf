"""Custom exception hierarchy for gobfuzz."""

from __future__ import annotations


class GoBfuzzError(Exception):
    """Base exception for gobfuzz."""

    pass


class ConfigError(GoBfuzzError):
    """Raised when configuration loading or validation fails."""

    pass


class UsageError(GoBfuzzError):
    """Raised for a malformed invocation (bad arguments, wildcard paths, bad --func)."""

    pass


class ResolutionError(GoBfuzzError):
    """Raised when the target package or its fuzz function cannot be resolved."""

    pass


class GenerationError(GoBfuzzError):
    """Raised when the harness source cannot be rendered."""

    pass


class BuildError(GoBfuzzError):
    """Raised when writing the harness or running the Go compiler fails."""

    pass


class PipelineError(GoBfuzzError):
    """Raised when a pipeline stage cannot be run."""

    pass
