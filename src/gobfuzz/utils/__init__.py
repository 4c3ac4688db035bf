"""Shared utilities for pipeline stages."""

from __future__ import annotations

import logging
from pathlib import Path

from gobfuzz.core.exceptions import GoBfuzzError
from gobfuzz.core.schema import PipelineContext, StageResult

log = logging.getLogger(__name__)


def stage_failure(stage_name: str, error: GoBfuzzError, **data: object) -> StageResult:
    """Turn a domain error into a failed StageResult tagged with its error kind."""
    log.debug("%s failed: %s", stage_name, error)
    return StageResult(
        stage_name=stage_name,
        success=False,
        message=str(error),
        data={"error_kind": type(error).__name__, **data},
    )


def resolve_work_dir(context: PipelineContext) -> Path:
    """Directory the go tool runs in (and the harness is written to): context, else cwd."""
    return Path(context.work_dir) if context.work_dir else Path.cwd()
