"""Generation module: cgo harness rendering."""

from gobfuzz.generation.harness_generator import (
    EXPORTED_SYMBOLS,
    GO_HARNESS_TEMPLATE,
    HarnessGenerator,
    go_quote,
)

__all__ = [
    "EXPORTED_SYMBOLS",
    "GO_HARNESS_TEMPLATE",
    "HarnessGenerator",
    "go_quote",
]
