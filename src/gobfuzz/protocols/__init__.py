"""Protocol interfaces for pluggable components."""

from gobfuzz.protocols.pipeline_stage import PipelineStage

__all__ = [
    "PipelineStage",
]
