"""Tests for the cgo harness generator."""

from __future__ import annotations

import pytest

from gobfuzz.core.exceptions import GenerationError
from gobfuzz.generation.harness_generator import (
    EXPORTED_SYMBOLS,
    GO_HARNESS_TEMPLATE,
    HarnessGenerator,
    go_quote,
)


@pytest.fixture()
def harness():
    return HarnessGenerator().generate("example.com/decode", "FuzzDecode")


class TestGenerate:
    def test_deterministic(self) -> None:
        gen = HarnessGenerator()
        first = gen.generate("example.com/decode", "FuzzDecode")
        second = gen.generate("example.com/decode", "FuzzDecode")
        assert first.source_code == second.source_code
        assert first.pkg_path == "example.com/decode"
        assert first.func_name == "FuzzDecode"

    def test_main_package_with_target_import(self, harness) -> None:
        src = harness.source_code
        assert "\npackage main\n" in src
        assert 'target "example.com/decode"' in src
        assert 'import "C"' in src
        assert "#include <stdint.h>" in src
        assert "func main() {\n}" in src

    def test_generated_header_and_constraint(self, harness) -> None:
        src = harness.source_code
        assert src.startswith("// Code generated by go-bfuzz-build. DO NOT EDIT.")
        assert "//go:build ignore" in src

    def test_calls_entry_function(self, harness) -> None:
        assert "result, err := target.FuzzDecode(input)" in harness.source_code

    def test_exports(self, harness) -> None:
        for symbol in EXPORTED_SYMBOLS:
            assert f"//export {symbol}\nfunc {symbol}(" in harness.source_code

    def test_test_one_input_contract(self, harness) -> None:
        src = harness.source_code
        assert "func TestOneInput(data *C.char, size C.size_t) (resultSize C.size_t, errnum C.int) {" in src
        assert "if err != nil || result == nil {\n\t\treturn 0, 1\n\t}" in src
        assert "return C.size_t(len(bfuzzReturnData)), 0" in src

    def test_get_return_data_contract(self, harness) -> None:
        src = harness.source_code
        assert "func GetReturnData(buf *C.char) {" in src
        assert "Go: Unable to copy entire result. Expected %v, but only copied %v" in src
        assert "bfuzzReturnData = nil" in src

    def test_no_unformatted_braces(self, harness) -> None:
        assert "{{" not in harness.source_code
        assert "{alias}" not in harness.source_code

    def test_different_function(self) -> None:
        src = HarnessGenerator().generate("example.com/decode", "FuzzOther").source_code
        assert "target.FuzzOther(input)" in src
        assert "FuzzDecode" not in src

    def test_custom_template(self) -> None:
        gen = HarnessGenerator(template="package main // {alias} {pkg_path} {func_name}\n")
        assert gen.generate("a/b", "FuzzX").source_code == 'package main // target "a/b" FuzzX\n'


class TestGenerateErrors:
    def test_empty_package_path(self) -> None:
        with pytest.raises(GenerationError, match="empty package path"):
            HarnessGenerator().generate("", "FuzzDecode")

    @pytest.mark.parametrize("name", ["", "fuzzLower", "Fuzz-Bad", "Decode"])
    def test_invalid_function_name(self, name: str) -> None:
        with pytest.raises(GenerationError, match="not a valid function name"):
            HarnessGenerator().generate("example.com/decode", name)

    def test_broken_template(self) -> None:
        with pytest.raises(GenerationError, match="failed to execute template"):
            HarnessGenerator(template="{missing}").generate("a/b", "FuzzX")


class TestGoQuote:
    def test_plain(self) -> None:
        assert go_quote("example.com/decode") == '"example.com/decode"'

    def test_escapes(self) -> None:
        assert go_quote('a"b\\c') == '"a\\"b\\\\c"'

    def test_non_ascii_kept(self) -> None:
        assert go_quote("example.com/données") == '"example.com/données"'


def test_template_names_placeholders() -> None:
    for placeholder in ("{alias}", "{pkg_path}", "{func_name}"):
        assert placeholder in GO_HARNESS_TEMPLATE
