"""Go source scanner: extract top-level function declarations and their signatures."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from gobfuzz.analysis.signature import GO_KEYWORDS, normalize_type
from gobfuzz.core.schema import FuzzFunction

log = logging.getLogger(__name__)

_RE_IDENT = re.compile(r"[^\W\d]\w*")
_RE_NOT_NEWLINE = re.compile(r"[^\n]")

_OPEN = "([{"
_CLOSE = ")]}"


def _blank(text: str) -> str:
    """Replace everything but newlines with spaces (keeps offsets and line numbers)."""
    return _RE_NOT_NEWLINE.sub(" ", text)


def strip_comments_and_strings(src: str) -> str:
    """Blank out comments and the contents of string/rune literals.

    The result has the same length and line structure as ``src``; literal
    delimiters are kept so that ``"..."`` still reads as one token.
    """
    out: list[str] = []
    i, n = 0, len(src)
    while i < n:
        c = src[i]
        if src.startswith("//", i):
            j = src.find("\n", i)
            j = n if j == -1 else j
            out.append(_blank(src[i:j]))
        elif src.startswith("/*", i):
            j = src.find("*/", i + 2)
            j = n if j == -1 else j + 2
            out.append(_blank(src[i:j]))
        elif c in "\"'":
            j = i + 1
            while j < n and src[j] != c and src[j] != "\n":
                j += 2 if src[j] == "\\" else 1
            j = min(j + 1, n)
            seg = src[i:j]
            out.append(seg[0] + _blank(seg[1:-1]) + seg[-1] if len(seg) > 1 else seg)
        elif c == "`":
            j = src.find("`", i + 1)
            j = n if j == -1 else j + 1
            seg = src[i:j]
            out.append(seg[0] + _blank(seg[1:-1]) + seg[-1] if len(seg) > 1 else seg)
        else:
            j = i + 1
            out.append(c)
        i = j
    return "".join(out)


def _match_close(text: str, start: int) -> int:
    """Index of the bracket closing the one at ``start`` (or ``len(text)`` if unbalanced)."""
    depth = 0
    for i in range(start, len(text)):
        if text[i] in _OPEN:
            depth += 1
        elif text[i] in _CLOSE:
            depth -= 1
            if depth == 0:
                return i
    return len(text)


def split_top_level(text: str, sep: str = ",") -> list[str]:
    """Split ``text`` on ``sep`` outside of brackets."""
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for c in text:
        if c in _OPEN:
            depth += 1
        elif c in _CLOSE:
            depth -= 1
        if c == sep and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(c)
    parts.append("".join(current))
    return parts


def _is_param_name(word: str) -> bool:
    return word not in GO_KEYWORDS and _RE_IDENT.fullmatch(word) is not None


def parse_field_list(text: str) -> tuple[list[str], bool]:
    """Parse a parameter or result list (without parentheses).

    Returns ``(types, variadic)``. Grouped names (``a, b []byte``) expand to one
    type per name; a trailing ``...T`` is reported as ``[]T`` with variadic set.
    """
    items = [item.strip() for item in split_top_level(text)]
    items = [item for item in items if item]
    if not items:
        return [], False

    split_items: list[tuple[str, str]] = []
    for item in items:
        head, *tail = item.split(None, 1)
        rest = tail[0].strip() if tail else ""
        if rest and _is_param_name(head):
            split_items.append((head, rest))
        else:
            split_items.append(("", item))

    named = any(name for name, _ in split_items)
    types: list[str] = []
    if named:
        pending = 0
        for name, type_str in split_items:
            if not name and _is_param_name(type_str):
                # Name sharing the type of a later field.
                pending += 1
                continue
            types.extend([type_str] * (pending + 1))
            pending = 0
        if pending:
            log.debug("Unresolved names in field list: %r", text)
            return [normalize_type(item) for item in items], False
    else:
        types = [type_str for _, type_str in split_items]

    variadic = False
    if types and types[-1].startswith("..."):
        variadic = True
        types[-1] = "[]" + types[-1][3:].strip()
    return [normalize_type(t) for t in types], variadic


def _skip_space(text: str, i: int, newlines: bool = True) -> int:
    chars = " \t\r\n" if newlines else " \t\r"
    while i < len(text) and text[i] in chars:
        i += 1
    return i


def _read_single_result(text: str, i: int) -> tuple[str, int]:
    """Read an unparenthesized result type ending at the body brace or end of line."""
    start = i
    n = len(text)
    while i < n:
        c = text[i]
        if c in "\n;":
            break
        if c == "{":
            before = text[start:i].rstrip()
            if not (before.endswith("struct") or before.endswith("interface")):
                break
            i = _match_close(text, i) + 1
            continue
        if c in "([":
            i = _match_close(text, i) + 1
            continue
        i += 1
    return text[start:i].strip(), i


def _parse_func_decl(clean: str, start: int, file_path: str) -> FuzzFunction | None:
    """Parse the declaration whose ``func`` keyword is at ``start``.

    Methods, generic functions and function literals yield ``None``.
    """
    i = _skip_space(clean, start + len("func"))
    if i >= len(clean) or clean[i] == "(":
        return None
    m = _RE_IDENT.match(clean, i)
    if not m:
        return None
    name = m.group(0)
    i = _skip_space(clean, m.end())
    if i < len(clean) and clean[i] == "[":
        log.debug("Skipping generic function %s in %s", name, file_path)
        return None
    if i >= len(clean) or clean[i] != "(":
        return None
    close = _match_close(clean, i)
    params, variadic = parse_field_list(clean[i + 1:close])

    i = _skip_space(clean, close + 1, newlines=False)
    results: list[str] = []
    if i < len(clean) and clean[i] == "(":
        close = _match_close(clean, i)
        results, _ = parse_field_list(clean[i + 1:close])
    elif i < len(clean) and clean[i] not in "{\n;":
        result, _ = _read_single_result(clean, i)
        if result:
            results = [normalize_type(result)]

    return FuzzFunction(
        name=name,
        params=params,
        results=results,
        variadic=variadic,
        file_path=file_path,
        line=clean.count("\n", 0, start) + 1,
    )


def scan_source(src: str, file_path: str = "") -> list[FuzzFunction]:
    """Return every top-level, non-method, non-generic function declared in ``src``."""
    clean = strip_comments_and_strings(src)
    funcs: list[FuzzFunction] = []
    depth = 0
    for m in re.finditer(r"[()\[\]{}]|\bfunc\b", clean):
        token = m.group(0)
        if token in _OPEN:
            depth += 1
        elif token in _CLOSE:
            depth = max(0, depth - 1)
        elif depth == 0:
            decl = _parse_func_decl(clean, m.start(), file_path)
            if decl is not None:
                funcs.append(decl)
    return funcs


def scan_file(path: Path) -> list[FuzzFunction]:
    """Scan a single Go source file."""
    src = Path(path).read_text(encoding="utf-8", errors="replace")
    return scan_source(src, str(path))


def scan_files(paths: list[Path]) -> list[FuzzFunction]:
    """Scan several files, keeping declaration order."""
    funcs: list[FuzzFunction] = []
    for path in paths:
        funcs.extend(scan_file(path))
    return funcs
