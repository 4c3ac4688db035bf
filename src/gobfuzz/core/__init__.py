"""Framework core: registry, pipeline, schema, config, exceptions."""

from gobfuzz.core.config import AppConfig, ConfigManager
from gobfuzz.core.exceptions import (
    BuildError,
    ConfigError,
    GenerationError,
    GoBfuzzError,
    PipelineError,
    ResolutionError,
    UsageError,
)
from gobfuzz.core.pipeline import DEFAULT_STAGES, PipelineConfig, PipelineEngine
from gobfuzz.core.registry import ComponentRegistry
from gobfuzz.core.schema import (
    BuildConfig,
    BuildResult,
    FuzzFunction,
    GeneratedHarness,
    PackageKind,
    PipelineContext,
    PipelineResult,
    StageResult,
    TargetPackage,
)

__all__ = [
    "AppConfig",
    "BuildConfig",
    "BuildError",
    "BuildResult",
    "ComponentRegistry",
    "ConfigError",
    "ConfigManager",
    "DEFAULT_STAGES",
    "FuzzFunction",
    "GenerationError",
    "GeneratedHarness",
    "GoBfuzzError",
    "PackageKind",
    "PipelineConfig",
    "PipelineContext",
    "PipelineEngine",
    "PipelineError",
    "PipelineResult",
    "ResolutionError",
    "StageResult",
    "TargetPackage",
    "UsageError",
]
