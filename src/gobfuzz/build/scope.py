"""Instrumentation scope: import paths compiled without libFuzzer instrumentation."""

from __future__ import annotations

from typing import Iterable

#: Never instrumented.
ALWAYS_EXCLUDED = frozenset({"syscall"})

#: Runtime support packages; excluded unless runtime coverage is requested.
RUNTIME_EXCLUDED = frozenset({"runtime/cgo", "runtime/pprof", "runtime/race"})

#: Package of the generated harness.
GENERATED_MAIN = "main"


def compute_scope(
    user_exclusions: Iterable[str] = (),
    exclude_runtime: bool = True,
    exclude_generated_main: bool = True,
) -> list[str]:
    """Return the sorted set of import paths excluded from instrumentation.

    Each entry of ``user_exclusions`` may itself be a comma-separated list.
    Paths are not validated; unknown ones simply have no effect at build time.
    """
    excluded = set(ALWAYS_EXCLUDED)
    if exclude_runtime:
        excluded |= RUNTIME_EXCLUDED
    if exclude_generated_main:
        excluded.add(GENERATED_MAIN)
    for entry in user_exclusions:
        excluded.update(p for p in entry.split(",") if p)
    return sorted(excluded)


def scope_gcflags(scope: Iterable[str]) -> list[str]:
    """``-gcflags <path>=-d=libfuzzer=0`` for every excluded path."""
    flags: list[str] = []
    for path in scope:
        flags.extend(["-gcflags", f"{path}=-d=libfuzzer=0"])
    return flags
