"""Locate and order the segments of a split archive from its last segment."""

from __future__ import annotations

import logging
import re
import warnings
from pathlib import Path
from typing import List, Protocol, Sequence

from .core.model import InvalidTerminalSegmentError
from .core.util import TERMINAL_EXTENSION, get_base_name, get_extension, split_number, split_pattern

logger = logging.getLogger(__name__)


class SiblingLister(Protocol):
    """Capability used by discovery to find the other parts of an archive."""

    def list_siblings(self, path: Path, pattern: re.Pattern) -> List[Path]:
        """Return files next to `path` whose whole name matches `pattern`, excluding `path`."""
        ...


class DirectorySiblingLister:
    """List siblings by scanning the directory that holds the path."""

    def list_siblings(self, path: Path, pattern: re.Pattern) -> List[Path]:
        siblings = []
        for candidate in path.parent.iterdir():
            if candidate.name == path.name or not pattern.fullmatch(candidate.name):
                continue
            if not candidate.is_file():
                continue
            siblings.append(candidate)
        return siblings


def order_segments(paths: Sequence[Path]) -> List[Path]:
    """Sort split parts by their numeric `.z<digits>` suffix, ascending.

    Paths without such a suffix are not split parts and are dropped.
    """
    numbered = []
    for p in paths:
        if split_number(p.name) is None:
            logger.debug("ignoring %s: no .z<digits> suffix", p)
            continue
        numbered.append(p)
    return sorted(numbered, key=lambda p: (split_number(p.name), p.name))


def _check_numbering(ordered: Sequence[Path]) -> None:
    numbers = [split_number(p.name) for p in ordered]
    expected = list(range(1, len(numbers) + 1))
    if numbers != expected:
        warnings.warn(f"Split segment numbering is not contiguous from 1: "
                      f"found {[p.name for p in ordered]}")


def discover_segments(
    terminal_path: str | Path,
    *,
    lister: SiblingLister | None = None,
    extension: str = TERMINAL_EXTENSION,
) -> List[Path]:
    """Return every segment path of the archive ending in `terminal_path`, in disk order.

    The terminal (`.zip`) file is always last. Having no `.z<digits>`
    siblings is fine: the result is then just the terminal path.
    """
    terminal = Path(terminal_path).resolve()
    if get_extension(terminal) != extension:
        raise InvalidTerminalSegmentError(terminal, extension)

    lister = lister or DirectorySiblingLister()
    siblings = lister.list_siblings(terminal, split_pattern(get_base_name(terminal)))
    ordered = order_segments(siblings)
    if ordered:
        _check_numbering(ordered)

    logger.debug("discovered %d split part(s) for %s", len(ordered), terminal)
    return ordered + [terminal]
