"""Analysis: Go package loading, source scanning and fuzz-function validation."""

from gobfuzz.analysis.go_list import GoListPackage, go_list, parse_go_list_output
from gobfuzz.analysis.go_source import parse_field_list, scan_files, scan_source
from gobfuzz.analysis.resolver import (
    MAX_FUZZ_FUNCS,
    PackageResolver,
    check_package_path,
    find_fuzz_functions,
    select_entry_function,
)
from gobfuzz.analysis.signature import is_fuzz_func_name, is_fuzz_signature

__all__ = [
    "GoListPackage",
    "MAX_FUZZ_FUNCS",
    "PackageResolver",
    "check_package_path",
    "find_fuzz_functions",
    "go_list",
    "is_fuzz_func_name",
    "is_fuzz_signature",
    "parse_field_list",
    "parse_go_list_output",
    "scan_files",
    "scan_source",
    "select_entry_function",
]
