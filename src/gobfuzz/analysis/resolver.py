"""Package resolver: load the target package and select its fuzz entry function."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from gobfuzz.analysis.go_list import GoListPackage, go_list
from gobfuzz.analysis.go_source import scan_file
from gobfuzz.analysis.signature import is_fuzz_func_name, is_fuzz_signature
from gobfuzz.core.exceptions import ResolutionError, UsageError
from gobfuzz.core.schema import FuzzFunction, PackageKind, TargetPackage

log = logging.getLogger(__name__)

#: Harness variants select a function with a single byte.
MAX_FUZZ_FUNCS = 255

#: Cap on compiler diagnostics kept in a type-check error message.
MAX_TYPECHECK_ERROR_CHARS = 4000


def check_package_path(path: str) -> None:
    """Reject recursive ``...`` patterns; exactly one package must be selected."""
    if "..." in path:
        raise UsageError("package path must not contain ... wildcards")


def find_fuzz_functions(
    funcs: list[FuzzFunction],
    requested: str | None = None,
    pkg_path: str = "",
) -> list[FuzzFunction]:
    """Filter declarations down to valid fuzz functions, in declaration order.

    If ``requested`` names a declared function with a fuzz name but the wrong
    signature, that is reported instead of silently skipping it.
    """
    found: list[FuzzFunction] = []
    for fn in funcs:
        if not is_fuzz_func_name(fn.name):
            continue
        if not is_fuzz_signature(fn.params, fn.results, fn.variadic):
            if fn.name == requested:
                raise ResolutionError(
                    f"provided --func={requested}, but {requested} is not a fuzz function "
                    f"({fn.signature}; want func {requested}([]byte) ([]byte, error))"
                )
            log.debug("Skipping %s: not a fuzz signature (%s)", fn.name, fn.signature)
            continue
        found.append(fn)

    if not found:
        raise ResolutionError(f"could not find any fuzz functions in {pkg_path}")
    if len(found) > MAX_FUZZ_FUNCS:
        raise ResolutionError(
            f"go-bfuzz-build supports a maximum of {MAX_FUZZ_FUNCS} fuzz functions, found {len(found)}"
        )
    return found


def select_entry_function(
    candidates: list[FuzzFunction],
    requested: str | None,
    explicit: bool,
    pkg_path: str = "",
) -> str:
    """Pick the entry function among ``candidates``.

    An explicitly requested name must exist. A default (implicit) name is used
    when present; otherwise a single candidate is selected automatically.
    """
    names = [fn.name for fn in candidates]
    if requested and requested in names:
        return requested
    if requested and explicit:
        raise ResolutionError(f"could not find fuzz function {requested} in {pkg_path}")
    if len(names) == 1:
        if requested:
            log.info("%s not found in %s; using sole fuzz function %s", requested, pkg_path, names[0])
        return names[0]
    raise ResolutionError(
        f"must specify a fuzz function with --func, found: {', '.join(names)}"
    )


class PackageResolver:
    """Resolves a package path to exactly one non-main Go package."""

    def __init__(
        self,
        go_bin: str = "go",
        work_dir: Path | None = None,
        typecheck: bool = False,
    ) -> None:
        self._go_bin = go_bin
        self._work_dir = work_dir
        self._typecheck = typecheck

    def load(self, path: str, build_flags: list[str]) -> GoListPackage:
        """Load metadata for ``path``; fail unless it names exactly one package."""
        check_package_path(path)
        pkgs = go_list([path], build_flags, go_bin=self._go_bin, cwd=self._work_dir)

        errors = [e for p in pkgs for e in p.errors]
        if errors:
            for e in errors:
                log.debug("package error: %s", e)
            raise ResolutionError(
                f"failed to load package {path}:\n" + "\n".join(errors)
            )
        if len(pkgs) != 1:
            matched = ", ".join(p.import_path for p in pkgs) or "(none)"
            raise ResolutionError(f"package path: {path} matched {len(pkgs)} packages: {matched}")

        pkg = pkgs[0]
        if pkg.name == "main":
            raise ResolutionError("cannot fuzz package main")
        return pkg

    def resolve(self, path: str, build_flags: list[str]) -> TargetPackage:
        """Load the package and scan its sources for fuzz functions.

        Raises:
            UsageError: ``path`` contains a ``...`` wildcard.
            ResolutionError: loading failed, the path is ambiguous or empty,
                the package is ``main``, it does not type-check, or one of
                its source files cannot be read.
        """
        pkg = self.load(path, build_flags)
        if self._typecheck:
            self.typecheck(pkg, build_flags)

        funcs: list[FuzzFunction] = []
        for source in pkg.source_paths:
            try:
                funcs.extend(scan_file(source))
            except OSError as e:
                raise ResolutionError(f"failed to read {source}: {e}") from e
        log.debug("Scanned %d file(s) in %s: %d top-level function(s)", len(pkg.source_paths), pkg.import_path, len(funcs))
        return TargetPackage(
            import_path=pkg.import_path,
            name=pkg.name,
            dir=pkg.dir,
            go_files=[str(p) for p in pkg.source_paths],
            kind=PackageKind.EXECUTABLE if pkg.name == "main" else PackageKind.LIBRARY,
            fuzz_functions=funcs,
        )

    def resolve_entry(
        self,
        target: TargetPackage,
        requested: str | None,
        explicit: bool,
    ) -> str:
        """Validate and select the fuzz entry function of an already resolved package."""
        candidates = find_fuzz_functions(
            target.fuzz_functions,
            requested=requested if explicit else None,
            pkg_path=target.import_path,
        )
        log.info(
            "Found %d fuzz function(s) in %s: %s",
            len(candidates), target.import_path, ", ".join(fn.name for fn in candidates),
        )
        return select_entry_function(candidates, requested, explicit, pkg_path=target.import_path)

    def typecheck(self, pkg: GoListPackage, build_flags: list[str]) -> None:
        """Compile (without instrumentation or output) to surface type errors early."""
        cmd = [self._go_bin, "build", *_selection_flags(build_flags), pkg.import_path]
        log.info("Type-checking %s: %s", pkg.import_path, " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                cwd=str(self._work_dir) if self._work_dir else None,
                capture_output=True,
                text=True,
            )
        except OSError as e:
            raise ResolutionError(f"typechecking of {pkg.import_path} failed: {e}") from e
        if result.returncode != 0:
            detail = (result.stderr or result.stdout or f"exit code {result.returncode}").strip()
            raise ResolutionError(
                f"typechecking of {pkg.import_path} failed:\n{detail[:MAX_TYPECHECK_ERROR_CHARS]}"
            )


def _selection_flags(build_flags: list[str]) -> list[str]:
    """Keep only the flags that change which files are compiled (``-tags``, ``-race``)."""
    kept: list[str] = []
    i = 0
    while i < len(build_flags):
        flag = build_flags[i]
        if flag == "-tags" and i + 1 < len(build_flags):
            kept.extend(build_flags[i:i + 2])
            i += 2
            continue
        if flag.startswith("-tags=") or flag == "-race":
            kept.append(flag)
        i += 1
    return kept
