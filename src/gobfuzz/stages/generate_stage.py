"""Generate stage: render the cgo harness for the resolved entry function."""

from __future__ import annotations

from gobfuzz.core.exceptions import GenerationError
from gobfuzz.core.schema import PipelineContext, StageResult
from gobfuzz.generation.harness_generator import HarnessGenerator
from gobfuzz.utils import stage_failure


class GenerateStage:
    """Pipeline stage that renders the harness source (kept in memory)."""

    name = "generate"

    def execute(self, context: PipelineContext) -> StageResult:
        if context.package is None or not context.entry_function:
            return StageResult(
                stage_name=self.name,
                success=False,
                message="No resolved package in context (run resolve stage first).",
                data={"error_kind": GenerationError.__name__},
            )
        try:
            harness = HarnessGenerator().generate(context.package.import_path, context.entry_function)
        except GenerationError as e:
            return stage_failure(self.name, e)
        return StageResult(
            stage_name=self.name,
            success=True,
            message=f"Generated harness for {harness.pkg_path}.{harness.func_name}",
            data={"harness": harness},
        )
