"""Pipeline engine: run stages in order, stop at the first failure."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from gobfuzz.core.exceptions import PipelineError
from gobfuzz.core.registry import ComponentRegistry
from gobfuzz.core.schema import PipelineContext, PipelineResult

log = logging.getLogger(__name__)

#: Resolve package and entry function, render harness, compile archive.
DEFAULT_STAGES = ["resolve", "generate", "compile"]


@dataclass
class PipelineConfig:
    """Configuration for pipeline execution."""

    stages: list[str] = field(default_factory=lambda: list(DEFAULT_STAGES))
    stop_on_failure: bool = True


class PipelineEngine:
    """Executes pipeline stages sequentially over a shared context."""

    def __init__(
        self,
        registry: ComponentRegistry,
        config: PipelineConfig | None = None,
    ) -> None:
        self._registry = registry
        self._config = config or PipelineConfig()

    @property
    def config(self) -> PipelineConfig:
        return self._config

    @property
    def registry(self) -> ComponentRegistry:
        return self._registry

    def run(self, context: PipelineContext) -> PipelineResult:
        """Run all stages and return the final result.

        Stages report expected failures through ``StageResult``; anything they
        raise is a defect and is re-raised as :class:`PipelineError`.
        """
        for stage_name in self._config.stages:
            stage = self._registry.get_stage(stage_name)
            log.debug("Running stage %s", stage_name)
            try:
                result = stage.execute(context)
            except Exception as e:
                raise PipelineError(f"Stage {stage_name} failed: {e}") from e

            context.update(result)
            if not result.success:
                log.debug("Stage %s failed: %s", stage_name, result.message)
                if self._config.stop_on_failure:
                    break

        return context.finalize()
