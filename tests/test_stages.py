"""Tests for the resolve, generate and compile stages."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

from gobfuzz.core.schema import GeneratedHarness, PipelineContext
from gobfuzz.stages.compile_stage import CompileStage
from gobfuzz.stages.generate_stage import GenerateStage
from gobfuzz.stages.resolve_stage import ResolveStage

from _helpers import (
    FakeGo,
    go_list_record,
    make_build_config,
    make_go_package,
    make_pipeline_context,
    make_target_package,
)

RUN = "gobfuzz.analysis.go_list.subprocess.run"
BUILD_RUN = "gobfuzz.build.build_driver.subprocess.run"

TWO_FUZZ_SRC = '''package multi

func FuzzA(data []byte) ([]byte, error) { return data, nil }

func FuzzB(data []byte) ([]byte, error) { return nil, nil }
'''


class TestResolveStage:
    def test_discovers_single_function(self, decode_pkg: Path) -> None:
        context = make_pipeline_context(decode_pkg)
        fake = FakeGo([go_list_record(decode_pkg)])
        with patch(RUN, side_effect=fake):
            result = ResolveStage().execute(context)
        assert result.success, result.message
        assert result.data["entry_function"] == "FuzzDecode"
        assert result.data["package"].import_path == "example.com/decode"
        list_cmd = fake.calls[0]
        assert list_cmd[:4] == ["go", "list", "-e", "-json"]
        assert "gofuzz,gofuzz_libfuzzer,libfuzzer" in list_cmd
        assert list_cmd[-1] == "."

    def test_explicit_missing_function(self, decode_pkg: Path) -> None:
        cfg = make_build_config(func_name="FuzzMissing", func_explicit=True)
        context = make_pipeline_context(decode_pkg, build_config=cfg)
        with patch(RUN, side_effect=FakeGo([go_list_record(decode_pkg)])):
            result = ResolveStage().execute(context)
        assert not result.success
        assert result.data["error_kind"] == "ResolutionError"
        assert "could not find fuzz function FuzzMissing" in result.message

    def test_ambiguous_default(self, tmp_path: Path) -> None:
        pkg_dir = make_go_package(tmp_path / "multi", {"multi.go": TWO_FUZZ_SRC}, module="example.com/multi")
        context = make_pipeline_context(pkg_dir)
        record = go_list_record(pkg_dir, name="multi", import_path="example.com/multi")
        with patch(RUN, side_effect=FakeGo([record])):
            result = ResolveStage().execute(context)
        assert not result.success
        assert "found: FuzzA, FuzzB" in result.message

    def test_explicit_choice_among_many(self, tmp_path: Path) -> None:
        pkg_dir = make_go_package(tmp_path / "multi", {"multi.go": TWO_FUZZ_SRC}, module="example.com/multi")
        cfg = make_build_config(func_name="FuzzB", func_explicit=True)
        context = make_pipeline_context(pkg_dir, build_config=cfg)
        record = go_list_record(pkg_dir, name="multi", import_path="example.com/multi")
        with patch(RUN, side_effect=FakeGo([record])):
            result = ResolveStage().execute(context)
        assert result.data["entry_function"] == "FuzzB"

    def test_wildcard_is_usage_error(self, tmp_path: Path) -> None:
        context = make_pipeline_context(tmp_path, build_config=make_build_config(package_path="./..."))
        fake = FakeGo([])
        with patch(RUN, side_effect=fake):
            result = ResolveStage().execute(context)
        assert result.data["error_kind"] == "UsageError"
        assert fake.calls == []

    def test_invalid_func_name(self, tmp_path: Path) -> None:
        context = make_pipeline_context(tmp_path, build_config=make_build_config(func_name="notFuzz"))
        result = ResolveStage().execute(context)
        assert result.data["error_kind"] == "UsageError"
        assert "provided --func=notFuzz, but notFuzz is not a valid function name" in result.message

    def test_unreadable_source_is_resolution_error(self, decode_pkg: Path) -> None:
        context = make_pipeline_context(decode_pkg)
        record = go_list_record(decode_pkg, go_files=["decode.go", "gone.go"])
        with patch(RUN, side_effect=FakeGo([record])):
            result = ResolveStage().execute(context)
        assert not result.success
        assert result.data["error_kind"] == "ResolutionError"
        assert "failed to read" in result.message

    def test_no_discover_trusts_func(self, decode_pkg: Path) -> None:
        cfg = make_build_config(func_name="FuzzWhatever", discover=False)
        context = make_pipeline_context(decode_pkg, build_config=cfg)
        with patch(RUN, side_effect=FakeGo([go_list_record(decode_pkg)])):
            result = ResolveStage().execute(context)
        assert result.success
        assert result.data["entry_function"] == "FuzzWhatever"
        assert result.data["package"].fuzz_functions == []


class TestGenerateStage:
    def test_requires_resolved_package(self, tmp_path: Path) -> None:
        result = GenerateStage().execute(make_pipeline_context(tmp_path))
        assert not result.success
        assert result.data["error_kind"] == "GenerationError"

    def test_renders_harness(self, tmp_path: Path) -> None:
        context = make_pipeline_context(tmp_path, package=make_target_package(), entry_function="FuzzDecode")
        result = GenerateStage().execute(context)
        assert result.success
        harness = result.data["harness"]
        assert harness.pkg_path == "example.com/decode"
        assert "target.FuzzDecode(input)" in harness.source_code
        assert list(tmp_path.iterdir()) == []


class TestCompileStage:
    def _context(self, tmp_path: Path, **cfg) -> PipelineContext:
        return make_pipeline_context(
            tmp_path,
            build_config=make_build_config(**cfg),
            package=make_target_package(),
            entry_function="FuzzDecode",
            harness=GeneratedHarness(pkg_path="example.com/decode", func_name="FuzzDecode", source_code="package main\n"),
        )

    def test_requires_harness(self, tmp_path: Path) -> None:
        result = CompileStage().execute(make_pipeline_context(tmp_path))
        assert not result.success
        assert result.data["error_kind"] == "BuildError"

    def test_builds_default_output(self, tmp_path: Path) -> None:
        fake = FakeGo([])
        with patch(BUILD_RUN, side_effect=fake):
            result = CompileStage().execute(self._context(tmp_path))
        assert result.success, result.message
        assert result.data["build_result"].artifact_path == str(tmp_path / "decode-fuzz.a")
        assert result.data["scope"] == ["main", "runtime/cgo", "runtime/pprof", "runtime/race", "syscall"]
        cmd = fake.build_calls[0]
        assert cmd[2:4] == ["-o", "decode-fuzz.a"]
        assert "runtime/cgo=-d=libfuzzer=0" in cmd

    def test_cover_flags_and_preserve(self, tmp_path: Path) -> None:
        with patch(BUILD_RUN, side_effect=FakeGo([])):
            result = CompileStage().execute(
                self._context(tmp_path, cover_runtime=True, cover_main=True, preserve=("example.com/dep",))
            )
        assert result.data["scope"] == ["example.com/dep", "syscall"]

    def test_custom_output(self, tmp_path: Path) -> None:
        with patch(BUILD_RUN, side_effect=FakeGo([])):
            result = CompileStage().execute(self._context(tmp_path, output="custom.a"))
        assert (tmp_path / "custom.a").exists()
        assert result.data["build_result"].artifact_path == str(tmp_path / "custom.a")

    def test_build_failure(self, tmp_path: Path) -> None:
        with patch(BUILD_RUN, side_effect=FakeGo([], build_returncode=1)):
            result = CompileStage().execute(self._context(tmp_path))
        assert not result.success
        assert result.data["error_kind"] == "BuildError"
        assert result.message == "failed to build packages: exit status 1"
        assert list(tmp_path.glob("main.*.go")) == []
