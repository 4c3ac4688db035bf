"""Resolve stage: load the target package and select its fuzz entry function."""

from __future__ import annotations

import logging

from gobfuzz.analysis.resolver import PackageResolver
from gobfuzz.analysis.signature import is_fuzz_func_name
from gobfuzz.build.build_driver import build_flags
from gobfuzz.core.exceptions import GoBfuzzError, UsageError
from gobfuzz.core.schema import PackageKind, PipelineContext, StageResult, TargetPackage
from gobfuzz.utils import resolve_work_dir, stage_failure

log = logging.getLogger(__name__)


class ResolveStage:
    """Pipeline stage that resolves ``package_path`` to one library package and its entry function.

    With ``discover`` enabled (the default) the package sources are scanned and
    the entry function is validated against the fuzz signature; otherwise the
    configured ``--func`` name is trusted.
    """

    name = "resolve"

    def execute(self, context: PipelineContext) -> StageResult:
        cfg = context.build_config
        resolver = PackageResolver(
            go_bin=cfg.go_bin,
            work_dir=resolve_work_dir(context),
            typecheck=cfg.typecheck,
        )
        try:
            if not is_fuzz_func_name(cfg.func_name):
                raise UsageError(
                    f"provided --func={cfg.func_name}, but {cfg.func_name} is not a valid function name"
                )
            load_flags = build_flags(cfg, scope=[])
            if cfg.discover:
                target = resolver.resolve(cfg.package_path, load_flags)
                entry = resolver.resolve_entry(target, cfg.func_name, cfg.func_explicit)
            else:
                pkg = resolver.load(cfg.package_path, load_flags)
                target = TargetPackage(
                    import_path=pkg.import_path,
                    name=pkg.name,
                    dir=pkg.dir,
                    go_files=[str(p) for p in pkg.source_paths],
                    kind=PackageKind.LIBRARY,
                )
                entry = cfg.func_name
        except GoBfuzzError as e:
            return stage_failure(self.name, e)

        log.info("Fuzzing %s.%s", target.import_path, entry)
        return StageResult(
            stage_name=self.name,
            success=True,
            message=f"Resolved {target.import_path}.{entry}",
            data={"package": target, "entry_function": entry},
        )
