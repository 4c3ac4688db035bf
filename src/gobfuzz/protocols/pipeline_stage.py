"""Protocol for pipeline stages."""

from __future__ import annotations

from typing import Protocol

from gobfuzz.core.schema import PipelineContext, StageResult


class PipelineStage(Protocol):
    """Protocol for pipeline stages.

    Attributes:
        name: Unique identifier for this stage.
    """

    name: str

    def execute(self, context: PipelineContext) -> StageResult:
        """Run the stage and return a result. Domain errors become a failed result."""
        ...
