"""Built-in pipeline stages."""

from gobfuzz.stages.compile_stage import CompileStage
from gobfuzz.stages.generate_stage import GenerateStage
from gobfuzz.stages.resolve_stage import ResolveStage


def register_builtin_stages(registry) -> None:
    """Register built-in pipeline stages on the given registry."""
    registry.register_stage("resolve", ResolveStage)
    registry.register_stage("generate", GenerateStage)
    registry.register_stage("compile", CompileStage)


__all__ = [
    "CompileStage",
    "GenerateStage",
    "ResolveStage",
    "register_builtin_stages",
]
