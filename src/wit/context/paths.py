"""Path identities and the directory chain of a file.

A path identity is a root-relative, ``/``-separated path optionally followed
by ``#``-prefixed symbol names::

    src                  folder
    src/a.ts             file
    src/a.ts#Bar         symbol inside the file
    src/a.ts#Bar#foo     symbol nested in Bar

Everything here is pure string/path manipulation; nothing touches the
filesystem.
"""

from __future__ import annotations

import posixpath
from collections.abc import Sequence
from pathlib import PurePath

from wit.config.constants import PATH_SEPARATOR, SYMBOL_SEPARATOR
from wit.context.models import NodeType


def resolve_path_chain(absolute_path: str | PurePath, project_root: str | PurePath) -> list[str]:
    """Return the ancestor-to-leaf relative paths of a file under a root.

    The project root itself is never an entry::

        resolve_path_chain("/repo/a/b/c.py", "/repo") == ["a", "a/b", "a/b/c.py"]

    Files outside the root (or the root itself) degrade to ``[basename]``.
    """
    file_path = PurePath(absolute_path)
    root = PurePath(project_root)
    try:
        relative = file_path.relative_to(root)
    except ValueError:
        return [file_path.name]

    parts = relative.parts
    if not parts:
        return [file_path.name]

    chain: list[str] = []
    for i in range(1, len(parts) + 1):
        chain.append(PATH_SEPARATOR.join(parts[:i]))
    return chain


def has_symbols(path: str) -> bool:
    return SYMBOL_SEPARATOR in path


def symbol_path(file_path: str, symbol_names: Sequence[str]) -> str:
    """Join a file identity with outer-to-inner symbol names."""
    return SYMBOL_SEPARATOR.join([file_path, *symbol_names])


def symbol_chain_paths(file_path: str, symbol_names: Sequence[str]) -> list[str]:
    """Path identity of every prefix of a symbol chain, outermost first."""
    return [symbol_path(file_path, symbol_names[:i]) for i in range(1, len(symbol_names) + 1)]


def name_of(path: str) -> str:
    """Display name: innermost symbol if present, else the base name."""
    if has_symbols(path):
        return path.rsplit(SYMBOL_SEPARATOR, 1)[1]
    return posixpath.basename(path.rstrip(PATH_SEPARATOR)) or path


def type_of(path: str) -> NodeType:
    """Node type implied by the shape of a path identity alone.

    Symbols whose host kind is unknown default to FUNCTION.
    """
    if has_symbols(path):
        return NodeType.FUNCTION
    if posixpath.splitext(name_of(path))[1]:
        return NodeType.FILE
    return NodeType.FOLDER


def parent_of(path: str) -> str | None:
    """Enclosing identity, or None for a top-level entry.

    The symbol separator takes precedence: ``src/a.ts#Bar`` belongs to
    ``src/a.ts`` even though a ``/`` appears earlier.
    """
    if has_symbols(path):
        return path.rsplit(SYMBOL_SEPARATOR, 1)[0]
    if PATH_SEPARATOR in path:
        return path.rsplit(PATH_SEPARATOR, 1)[0]
    return None
