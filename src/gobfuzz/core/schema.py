"""Pydantic models and data structures for the framework."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PackageKind(str, Enum):
    """Structural kind of a Go package."""

    LIBRARY = "library"
    EXECUTABLE = "executable"


class FuzzFunction(BaseModel):
    """A top-level Go function declaration considered as a fuzz entry point."""

    name: str
    params: list[str] = Field(default_factory=list, description="Parameter types in order")
    results: list[str] = Field(default_factory=list, description="Result types in order")
    variadic: bool = False
    file_path: str = ""
    line: int = 0

    @property
    def signature(self) -> str:
        """Render the declaration as Go source, e.g. ``func FuzzX([]byte) ([]byte, error)``."""
        params = list(self.params)
        if self.variadic and params:
            params[-1] = "..." + params[-1].removeprefix("[]")
        results = ", ".join(self.results)
        if len(self.results) > 1:
            results = f"({results})"
        return f"func {self.name}({', '.join(params)}) {results}".rstrip()


class TargetPackage(BaseModel):
    """The package a harness is built for. Resolved once per run, read-only after."""

    import_path: str
    name: str
    dir: str = ""
    go_files: list[str] = Field(default_factory=list)
    kind: PackageKind = PackageKind.LIBRARY
    fuzz_functions: list[FuzzFunction] = Field(default_factory=list)


class BuildConfig(BaseModel):
    """Effective settings for one invocation. Immutable once computed."""

    model_config = ConfigDict(frozen=True)

    package_path: str = "."
    tags: str = ""
    output: str = ""
    func_name: str = "Fuzz"
    func_explicit: bool = False
    work: bool = False
    race: bool = False
    print_commands: bool = False
    verbose: bool = False
    preserve: tuple[str, ...] = ()
    cover_runtime: bool = False
    cover_main: bool = False
    typecheck: bool = False
    discover: bool = True
    go_bin: str = "go"
    baseline_tags: tuple[str, ...] = ("gofuzz", "gofuzz_libfuzzer", "libfuzzer")


class GeneratedHarness(BaseModel):
    """Rendered bridging source for a (package, function) pair."""

    pkg_path: str
    func_name: str
    source_code: str = ""


class BuildResult(BaseModel):
    """Outcome of the single ``go build`` invocation."""

    success: bool = True
    artifact_path: str = ""
    harness_path: str = ""
    harness_retained: bool = False
    command: list[str] = Field(default_factory=list)
    returncode: int = 0
    message: str = ""


class StageResult(BaseModel):
    """Result produced by a pipeline stage."""

    stage_name: str
    success: bool = True
    message: str = ""
    data: dict[str, Any] = Field(default_factory=dict)


class PipelineContext(BaseModel):
    """Mutable context passed between pipeline stages."""

    model_config = {"arbitrary_types_allowed": True}

    build_config: BuildConfig = Field(default_factory=BuildConfig)
    work_dir: Path | None = None
    package: TargetPackage | None = None
    entry_function: str | None = None
    scope: list[str] = Field(default_factory=list)
    harness: GeneratedHarness | None = None
    build_result: BuildResult | None = None
    stage_results: list[StageResult] = Field(default_factory=list)

    def update(self, result: StageResult) -> None:
        """Append a stage result and merge its data into context."""
        self.stage_results.append(result)
        if result.data:
            if "package" in result.data:
                self.package = result.data["package"]
            if "entry_function" in result.data:
                self.entry_function = result.data["entry_function"]
            if "scope" in result.data:
                self.scope = result.data["scope"]
            if "harness" in result.data:
                self.harness = result.data["harness"]
            if "build_result" in result.data:
                self.build_result = result.data["build_result"]

    def finalize(self) -> PipelineResult:
        """Build final pipeline result from context."""
        failed = next((r for r in self.stage_results if not r.success), None)
        return PipelineResult(
            success=failed is None and bool(self.stage_results),
            stage_results=self.stage_results,
            package=self.package,
            entry_function=self.entry_function,
            artifact_path=self.build_result.artifact_path if self.build_result else None,
            error_kind=failed.data.get("error_kind") if failed else None,
            message=failed.message if failed else "",
        )


class PipelineResult(BaseModel):
    """Final result of a pipeline run."""

    success: bool = True
    stage_results: list[StageResult] = Field(default_factory=list)
    package: TargetPackage | None = None
    entry_function: str | None = None
    artifact_path: str | None = None
    error_kind: str | None = None
    message: str = ""
