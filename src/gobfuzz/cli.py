"""CLI entry point for go-bfuzz-build."""

from __future__ import annotations

import contextlib
from pathlib import Path
from typing import NoReturn

import click

from gobfuzz import __version__
from gobfuzz.analysis.resolver import check_package_path
from gobfuzz.analysis.signature import is_fuzz_func_name
from gobfuzz.build.build_log import build_log_context, configure_console
from gobfuzz.core.config import ConfigManager, split_list
from gobfuzz.core.exceptions import ConfigError, PipelineError, UsageError
from gobfuzz.core.pipeline import PipelineEngine
from gobfuzz.core.registry import ComponentRegistry
from gobfuzz.core.schema import BuildConfig, PipelineContext, PipelineResult
from gobfuzz.stages import register_builtin_stages

USAGE_EPILOG = (
    'pkg default: ".". Use the module path to load go.mod dependencies correctly.'
)


def _fail(message: str) -> NoReturn:
    click.echo(f"go-bfuzz-build: {message}", err=True)
    raise SystemExit(1)


def _make_build_config(
    config_manager: ConfigManager,
    path: str,
    *,
    tags: str | None,
    output: str | None,
    func_name: str | None,
    work: bool,
    race: bool,
    print_commands: bool,
    verbose: bool,
    preserve: str | None,
    cover_runtime: bool,
    cover_main: bool,
    typecheck: bool,
    no_discover: bool,
) -> BuildConfig:
    """Merge CLI options over the loaded configuration."""
    cfg = config_manager.config
    return BuildConfig(
        package_path=path,
        tags=tags if tags is not None else cfg.tags,
        output=output or "",
        func_name=func_name if func_name is not None else cfg.default_func,
        func_explicit=func_name is not None,
        work=work,
        race=race,
        print_commands=print_commands,
        verbose=verbose,
        preserve=tuple(split_list(preserve) if preserve is not None else cfg.preserve),
        cover_runtime=cover_runtime or cfg.build.cover_runtime,
        cover_main=cover_main or cfg.build.cover_main,
        typecheck=typecheck or cfg.build.typecheck,
        discover=cfg.build.discover and not no_discover,
        go_bin=cfg.go_bin,
        baseline_tags=tuple(cfg.baseline_tags),
    )


def run_pipeline(build_config: BuildConfig, work_dir: Path | None = None) -> PipelineResult:
    """Run resolve -> generate -> compile for one build configuration."""
    registry = ComponentRegistry()
    register_builtin_stages(registry)
    context = PipelineContext(build_config=build_config, work_dir=work_dir)
    return PipelineEngine(registry).run(context)


@click.command(epilog=USAGE_EPILOG)
@click.version_option(version=__version__)
@click.argument("paths", nargs=-1, metavar="[PKG_OR_MODULE]")
@click.option("--tags", default=None, help="A comma-separated list of build tags to consider satisfied during the build.")
@click.option("-o", "--output", default=None, help="Output file. (default [pkgName]-fuzz.a)")
@click.option("--func", "func_name", default=None, help="Preferred entry function. (default Fuzz)")
@click.option("--work", is_flag=True, help="Do not delete the generated main file; print and keep the go work directory.")
@click.option("--race", is_flag=True, help="Enable race detection.")
@click.option("-x", "print_commands", is_flag=True, help="Print the commands.")
@click.option("--verbose", "-v", is_flag=True, help="Verbose build (also enables debug logging).")
@click.option("--preserve", default=None, help="A comma-separated list of import paths not to instrument.")
@click.option("--cover-runtime", is_flag=True, help="Provide coverage instrumentation for runtime.")
@click.option("--cover-main", is_flag=True, help="Provide coverage instrumentation for the generated main package.")
@click.option("--typecheck", is_flag=True, help="Type-check the target package before generating the harness.")
@click.option("--no-discover", is_flag=True, help="Trust --func without scanning the package for fuzz functions.")
@click.option("--log-file", type=click.Path(path_type=Path), default=None, help="Also write the run log to this file.")
@click.pass_context
def main(
    ctx: click.Context,
    paths: tuple[str, ...],
    tags: str | None,
    output: str | None,
    func_name: str | None,
    work: bool,
    race: bool,
    print_commands: bool,
    verbose: bool,
    preserve: str | None,
    cover_runtime: bool,
    cover_main: bool,
    typecheck: bool,
    no_discover: bool,
    log_file: Path | None,
) -> None:
    """Build a Go package's Fuzz function into a libFuzzer-style c-archive."""
    if len(paths) > 1:
        click.echo(ctx.get_usage(), err=True)
        raise SystemExit(1)
    path = paths[0] if paths else "."

    configure_console(verbose)
    try:
        config_manager = ConfigManager()
        config_manager.load()
        build_config = _make_build_config(
            config_manager,
            path,
            tags=tags,
            output=output,
            func_name=func_name,
            work=work,
            race=race,
            print_commands=print_commands,
            verbose=verbose,
            preserve=preserve,
            cover_runtime=cover_runtime,
            cover_main=cover_main,
            typecheck=typecheck,
            no_discover=no_discover,
        )
        check_package_path(path)
        if not is_fuzz_func_name(build_config.func_name):
            raise UsageError(
                f"provided --func={build_config.func_name}, but {build_config.func_name} is not a valid function name"
            )
    except (ConfigError, UsageError) as e:
        _fail(str(e))

    log_ctx = build_log_context(log_file, verbose=verbose) if log_file else contextlib.nullcontext()
    try:
        with log_ctx:
            result = run_pipeline(build_config)
    except PipelineError as e:
        _fail(f"internal error: {e}")

    if not result.success:
        _fail(result.message or "build failed")
    click.echo(f"Fuzz archive: {result.artifact_path}")


if __name__ == "__main__":
    main()
