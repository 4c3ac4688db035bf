"""Build driver: compose go build flags, write the harness, run the compiler."""

from __future__ import annotations

import logging
import subprocess
import tempfile
from pathlib import Path
from typing import Iterable

from gobfuzz.build.scope import scope_gcflags
from gobfuzz.core.config import BASELINE_TAGS, split_list
from gobfuzz.core.exceptions import BuildError
from gobfuzz.core.schema import BuildConfig, BuildResult, GeneratedHarness

log = logging.getLogger(__name__)

#: Instrument everything for libFuzzer; excluded paths are switched back off afterwards.
INSTRUMENT_ALL_GCFLAGS = "all=-d=libfuzzer"


def get_tags(user_tags: str | Iterable[str] = "", baseline: Iterable[str] = BASELINE_TAGS) -> str:
    """Baseline tags followed by user tags, comma-separated."""
    tags = list(baseline)
    if isinstance(user_tags, str):
        user_tags = [user_tags]
    tags.extend(split_list(list(user_tags)))
    return ",".join(tags)


def default_output(pkg_name: str) -> str:
    """Default archive name for a package."""
    return f"{pkg_name}-fuzz.a"


def build_flags(config: BuildConfig, scope: list[str]) -> list[str]:
    """All ``go build`` flags except ``-o`` and the harness file, in a fixed order."""
    flags = [
        "-buildmode", "c-archive",
        "-gcflags", INSTRUMENT_ALL_GCFLAGS,
        "-tags", get_tags(config.tags, config.baseline_tags),
        "-trimpath",
    ]
    flags.extend(scope_gcflags(scope))
    if config.race:
        flags.append("-race")
    if config.verbose:
        flags.append("-v")
    if config.work:
        flags.append("-work")
    if config.print_commands:
        flags.append("-x")
    return flags


class BuildDriver:
    """Runs the single ``go build`` that produces the fuzz archive.

    The harness is written to a uniquely named ``main.*.go`` file in
    ``work_dir``; it is removed on every exit path unless ``keep_harness`` is set.
    """

    def __init__(
        self,
        go_bin: str = "go",
        work_dir: Path | None = None,
        keep_harness: bool = False,
    ) -> None:
        self._go_bin = go_bin
        self._work_dir = Path(work_dir) if work_dir else Path.cwd()
        self._keep_harness = keep_harness

    def write_harness(self, harness: GeneratedHarness) -> Path:
        """Write the harness source to a fresh temporary file and return its path."""
        path: Path | None = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="w",
                prefix="main.",
                suffix=".go",
                dir=self._work_dir,
                delete=False,
                encoding="utf-8",
            ) as f:
                path = Path(f.name)
                f.write(harness.source_code)
        except OSError as e:
            if path is not None and not self._keep_harness:
                path.unlink(missing_ok=True)
            raise BuildError(f"failed to create temporary file: {e}") from e
        log.debug("Wrote harness to %s", path)
        return path

    def build_command(self, output: str, flags: list[str], harness_path: Path) -> list[str]:
        """``go build -o <output> <flags...> <harness>``."""
        return [self._go_bin, "build", "-o", output, *flags, str(harness_path)]

    def build(self, harness: GeneratedHarness, output: str, flags: list[str]) -> BuildResult:
        """Write the harness, compile it, clean up. Raises :class:`BuildError` on failure."""
        harness_path = self.write_harness(harness)
        output_path = Path(output) if Path(output).is_absolute() else self._work_dir / output
        existed_before = output_path.exists()
        cmd = self.build_command(output, flags, harness_path)
        try:
            log.info("Building %s: %s", output, " ".join(cmd))
            try:
                # stdout/stderr are inherited so compiler diagnostics pass through unchanged.
                proc = subprocess.run(cmd, cwd=str(self._work_dir))
            except OSError as e:
                raise BuildError(f"failed to build packages: {e}") from e
            if proc.returncode != 0:
                if not existed_before and output_path.exists():
                    output_path.unlink()
                raise BuildError(f"failed to build packages: exit status {proc.returncode}")
        finally:
            if self._keep_harness:
                log.info("Generated main file kept at %s", harness_path)
            else:
                harness_path.unlink(missing_ok=True)

        return BuildResult(
            success=True,
            artifact_path=str(output_path),
            harness_path=str(harness_path),
            harness_retained=self._keep_harness,
            command=cmd,
            returncode=proc.returncode,
            message=f"Built {output_path}",
        )
