"""Mapping recorded source paths onto workspace files."""

from __future__ import annotations

import os
from collections.abc import Sequence
from pathlib import Path

_SEPARATORS = tuple(sep for sep in (os.sep, os.altsep) if sep)


def _remainder(path: str, root: str) -> str | None:
    """Path below ``root`` if ``root`` is a whole-segment prefix of ``path``."""
    for sep in _SEPARATORS:
        prefix = root if root.endswith(sep) else root + sep
        if not path.startswith(prefix):
            continue
        # A doubled separator after the root would make the rest absolute
        rest = path[len(prefix) :].lstrip("".join(_SEPARATORS))
        if rest:
            return rest
    return None


def resolve_uri(section_path: str, roots: Sequence[str | Path]) -> Path:
    """Resolve a section's recorded path to a workspace file.

    The first root (in the given order) that contains ``section_path``
    wins, and the file is that root joined with the rest of the path.
    ``/ws/a`` contains ``/ws/a/x.c`` but not ``/ws/ab/x.c``. Without a
    matching root the recorded path is used as-is.
    """
    for root in roots:
        rest = _remainder(section_path, str(root))
        if rest is not None:
            return Path(root) / rest
    return Path(section_path)


def relative_label(path: Path, roots: Sequence[str | Path]) -> str:
    """Label a file relative to the first root containing it."""
    for root in roots:
        rest = _remainder(str(path), str(root))
        if rest is not None:
            return rest
    return str(path)
