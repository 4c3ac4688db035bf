"""Fuzz entry-point contract: name and signature predicates.

A fuzz function has the form::

    func FuzzXxx(data []byte) ([]byte, error)

Both :func:`is_fuzz_func_name` and :func:`is_fuzz_signature` must hold; they are
checked independently so that callers can report which one failed.
"""

from __future__ import annotations

import re
from typing import Sequence

#: Marker prefix every fuzz entry point starts with.
FUZZ_FUNC_PREFIX = "Fuzz"

#: Parameter types of the fuzz contract.
FUZZ_PARAM_TYPES = ("[]byte",)

#: Result types of the fuzz contract.
FUZZ_RESULT_TYPES = ("[]byte", "error")

GO_KEYWORDS = frozenset({
    "break", "case", "chan", "const", "continue", "default", "defer", "else",
    "fallthrough", "for", "func", "go", "goto", "if", "import", "interface",
    "map", "package", "range", "return", "select", "struct", "switch", "type",
    "var",
})

_RE_IDENT_CHARS = re.compile(r"[^\W\d]\w*")

# Spaces Go allows but type strings never contain, e.g. "[ ]byte" or "* T".
_RE_TYPE_SPACE = re.compile(r"\s*([\[\]\*\(\),])\s*")


def is_identifier(name: str) -> bool:
    """True if ``name`` is a syntactically valid Go identifier (and not a keyword)."""
    if not name or name in GO_KEYWORDS:
        return False
    return _RE_IDENT_CHARS.fullmatch(name) is not None


def is_exported(name: str) -> bool:
    """True if ``name`` starts with an upper-case letter."""
    return bool(name) and name[0].isupper()


def is_fuzz_func_name(name: str) -> bool:
    """True if ``name`` is an identifier, exported, and starts with ``Fuzz``."""
    return is_identifier(name) and is_exported(name) and name.startswith(FUZZ_FUNC_PREFIX)


def normalize_type(type_str: str) -> str:
    """Canonical spelling of a Go type expression for comparisons."""
    collapsed = " ".join(type_str.split())
    normalized = _RE_TYPE_SPACE.sub(r"\1", collapsed)
    return normalized.replace(",", ", ")


def tuple_has_types(tuple_types: Sequence[str], types: Sequence[str]) -> bool:
    """True if ``tuple_types`` is composed of exactly ``types``, in order."""
    if len(tuple_types) != len(types):
        return False
    return all(normalize_type(t) == want for t, want in zip(tuple_types, types))


def is_fuzz_signature(
    params: Sequence[str],
    results: Sequence[str],
    variadic: bool = False,
) -> bool:
    """True if the signature is ``func([]byte) ([]byte, error)``, not variadic."""
    if variadic:
        return False
    return tuple_has_types(params, FUZZ_PARAM_TYPES) and tuple_has_types(results, FUZZ_RESULT_TYPES)
