"""Build: instrumentation scope, go build flags, compiler invocation, run logging."""

from gobfuzz.build.build_driver import BuildDriver, build_flags, default_output, get_tags
from gobfuzz.build.build_log import build_log_context, configure_console, get_logger
from gobfuzz.build.scope import compute_scope, scope_gcflags

__all__ = [
    "BuildDriver",
    "build_flags",
    "build_log_context",
    "compute_scope",
    "configure_console",
    "default_output",
    "get_logger",
    "get_tags",
    "scope_gcflags",
]
