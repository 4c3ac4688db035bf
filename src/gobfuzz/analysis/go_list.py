"""Load Go package metadata with ``go list -e -json``."""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from gobfuzz.core.exceptions import ResolutionError

log = logging.getLogger(__name__)


class GoListPackage(BaseModel):
    """The subset of a ``go list -json`` record the resolver needs."""

    import_path: str = ""
    name: str = ""
    dir: str = ""
    go_files: list[str] = Field(default_factory=list)
    cgo_files: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    @property
    def source_paths(self) -> list[Path]:
        """Absolute paths of the files compiled into the package."""
        return [Path(self.dir) / f for f in self.go_files + self.cgo_files]

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> GoListPackage:
        errors: list[str] = []
        err = record.get("Error")
        if err:
            errors.append(_format_error(err))
        for dep_err in record.get("DepsErrors") or []:
            errors.append(_format_error(dep_err))
        return cls(
            import_path=record.get("ImportPath", ""),
            name=record.get("Name", ""),
            dir=record.get("Dir", ""),
            go_files=list(record.get("GoFiles") or []),
            cgo_files=list(record.get("CgoFiles") or []),
            errors=errors,
        )


def _format_error(err: dict[str, Any]) -> str:
    """Render a go list PackageError as ``pos: message``."""
    msg = str(err.get("Err", "")).strip()
    pos = err.get("Pos")
    return f"{pos}: {msg}" if pos else msg


def parse_go_list_output(stdout: str) -> list[dict[str, Any]]:
    """Decode the stream of concatenated JSON objects printed by ``go list -json``."""
    decoder = json.JSONDecoder()
    records: list[dict[str, Any]] = []
    idx = 0
    text = stdout.strip()
    while idx < len(text):
        try:
            obj, end = decoder.raw_decode(text, idx)
        except json.JSONDecodeError as e:
            raise ResolutionError(f"could not parse go list output: {e}") from e
        records.append(obj)
        idx = end
        while idx < len(text) and text[idx].isspace():
            idx += 1
    return records


def go_list(
    patterns: list[str],
    build_flags: list[str] | None = None,
    go_bin: str = "go",
    cwd: Path | None = None,
) -> list[GoListPackage]:
    """Run ``go list -e -json`` and return one record per matched package.

    Package errors are reported in ``GoListPackage.errors`` rather than raised;
    only a failure to run ``go list`` at all raises :class:`ResolutionError`.
    """
    cmd = [go_bin, "list", "-e", "-json", *(build_flags or []), *patterns]
    log.debug("Loading packages: %s", " ".join(cmd))
    try:
        result = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as e:
        raise ResolutionError(f"failed to load packages: {go_bin} not found") from e
    except OSError as e:
        raise ResolutionError(f"failed to load packages: {e}") from e

    records = parse_go_list_output(result.stdout or "")
    if result.returncode != 0 and not records:
        detail = (result.stderr or result.stdout or f"exit code {result.returncode}").strip()
        raise ResolutionError(f"failed to load packages: {detail}")
    if result.stderr:
        log.debug("go list stderr:\n%s", result.stderr.strip())
    return [GoListPackage.from_record(r) for r in records]
