"""Harness generator: render the cgo bridge exporting TestOneInput/GetReturnData."""

from __future__ import annotations

import json
import logging

from gobfuzz.analysis.signature import is_fuzz_func_name
from gobfuzz.core.exceptions import GenerationError
from gobfuzz.core.schema import GeneratedHarness

log = logging.getLogger(__name__)

#: Local alias the target package is imported under.
TARGET_ALIAS = "target"

#: Symbols exported by every harness.
EXPORTED_SYMBOLS = ("TestOneInput", "GetReturnData")

# Go c-archive harness. The file carries an ignore constraint so it is never
# compiled as part of the target package when it lands in the package directory;
# go build still accepts it when the file is named on the command line.
GO_HARNESS_TEMPLATE = '''// Code generated by go-bfuzz-build. DO NOT EDIT.
// NOTE: not safe for concurrent use, only 1 result is stored at a time.

//go:build ignore
// +build ignore

package main

import (
	"fmt"
	"unsafe"

	{alias} {pkg_path}
)

// #include <stdint.h>
import "C"

// bfuzzReturnData holds the result of the last successful TestOneInput until
// GetReturnData copies it out and clears it.
var bfuzzReturnData []byte

// TestOneInput runs the fuzz function on size bytes at data.
// It returns the size of the result, and errnum 1 if the function
// returned an error or a nil result.
//
//export TestOneInput
func TestOneInput(data *C.char, size C.size_t) (resultSize C.size_t, errnum C.int) {{
	input := unsafe.Slice((*byte)(unsafe.Pointer(data)), int(size))

	result, err := {alias}.{func_name}(input)
	if err != nil || result == nil {{
		return 0, 1
	}}

	bfuzzReturnData = result
	return C.size_t(len(bfuzzReturnData)), 0
}}

// GetReturnData copies the previous result into buf, which must be at least
// as large as the size returned by TestOneInput. It may only be called once per
// successful TestOneInput, as it releases the stored result.
//
//export GetReturnData
func GetReturnData(buf *C.char) {{
	size := len(bfuzzReturnData)
	output := unsafe.Slice((*byte)(unsafe.Pointer(buf)), size)

	nCopied := copy(output, bfuzzReturnData)
	if nCopied != size {{
		panic(fmt.Sprintf("Go: Unable to copy entire result. Expected %v, but only copied %v", size, nCopied))
	}}

	bfuzzReturnData = nil
}}

func main() {{
}}
'''


def go_quote(s: str) -> str:
    """Quote ``s`` as a Go interpreted string literal."""
    return json.dumps(s, ensure_ascii=False)


class HarnessGenerator:
    """Generates the bridging ``main`` package for one fuzz function."""

    def __init__(self, template: str = GO_HARNESS_TEMPLATE) -> None:
        self._template = template

    def generate(self, pkg_path: str, func_name: str) -> GeneratedHarness:
        """Render the harness for ``pkg_path``'s ``func_name``.

        Output is deterministic for identical inputs.
        """
        if not pkg_path:
            raise GenerationError("failed to execute template: empty package path")
        if not is_fuzz_func_name(func_name):
            raise GenerationError(f"failed to execute template: {func_name!r} is not a valid function name")
        try:
            source = self._template.format(
                alias=TARGET_ALIAS,
                pkg_path=go_quote(pkg_path),
                func_name=func_name,
            )
        except (KeyError, IndexError, ValueError) as e:
            raise GenerationError(f"failed to execute template: {e}") from e
        log.debug("Rendered harness for %s.%s (%d bytes)", pkg_path, func_name, len(source))
        return GeneratedHarness(pkg_path=pkg_path, func_name=func_name, source_code=source)
