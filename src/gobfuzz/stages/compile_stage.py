"""Compile stage: build the harness into an instrumented c-archive."""

from __future__ import annotations

import logging

from gobfuzz.build.build_driver import BuildDriver, build_flags, default_output
from gobfuzz.build.scope import compute_scope
from gobfuzz.core.exceptions import BuildError
from gobfuzz.core.schema import PipelineContext, StageResult
from gobfuzz.utils import resolve_work_dir, stage_failure

log = logging.getLogger(__name__)


class CompileStage:
    """Pipeline stage that runs ``go build -buildmode c-archive`` on the generated harness.

    Everything is instrumented with ``-d=libfuzzer`` except the instrumentation
    scope: ``syscall``, runtime support packages unless ``cover_runtime``, the
    generated ``main`` unless ``cover_main``, and the user's ``preserve`` list.
    """

    name = "compile"

    def execute(self, context: PipelineContext) -> StageResult:
        if context.harness is None or context.package is None:
            return StageResult(
                stage_name=self.name,
                success=False,
                message="No generated harness in context (run generate stage first).",
                data={"error_kind": BuildError.__name__},
            )
        cfg = context.build_config
        scope = compute_scope(
            cfg.preserve,
            exclude_runtime=not cfg.cover_runtime,
            exclude_generated_main=not cfg.cover_main,
        )
        log.debug("Not instrumenting: %s", ", ".join(scope))
        flags = build_flags(cfg, scope)
        output = cfg.output or default_output(context.package.name)

        driver = BuildDriver(
            go_bin=cfg.go_bin,
            work_dir=resolve_work_dir(context),
            keep_harness=cfg.work,
        )
        try:
            result = driver.build(context.harness, output, flags)
        except BuildError as e:
            return stage_failure(self.name, e, scope=scope)

        return StageResult(
            stage_name=self.name,
            success=True,
            message=result.message,
            data={"scope": scope, "build_result": result},
        )
