"""Central registry for pipeline stages."""

from __future__ import annotations

import logging

from gobfuzz.core.exceptions import PipelineError
from gobfuzz.protocols import PipelineStage

log = logging.getLogger(__name__)


class ComponentRegistry:
    """Maps stage names to stage classes."""

    def __init__(self) -> None:
        self._stages: dict[str, type[PipelineStage]] = {}

    def register_stage(self, name: str, cls: type[PipelineStage]) -> None:
        """Register a pipeline stage class."""
        if name in self._stages:
            log.warning("Overwriting stage registration: %s", name)
        self._stages[name] = cls

    def get_stage(self, name: str) -> PipelineStage:
        """Get a pipeline stage instance by name."""
        if name not in self._stages:
            raise PipelineError(f"Unknown pipeline stage: {name}")
        cls = self._stages[name]
        return cls()  # type: ignore[call-arg]
