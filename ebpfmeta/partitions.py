"""Disk partitions listed by the kernel, keyed by device number and name."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterable, Iterator

PARTITIONS_PATH = "/proc/partitions"

MINORBITS = 20
MINORMASK = (1 << MINORBITS) - 1
_UINT_MASK = 0xFFFFFFFF


def mkdev(major: int, minor: int) -> int:
    """Combine a major and minor number into a kernel device number."""
    return ((major << MINORBITS) | minor) & _UINT_MASK


@dataclass(frozen=True)
class Partition:
    """A partition's name and device number."""

    name: str
    dev: int


def _parse_line(line: str, lineno: int) -> Partition:
    parts = line.split()
    if len(parts) < 4:
        raise ValueError(f"malformed partitions line {lineno}: {line.rstrip()!r}")
    try:
        major, minor = int(parts[0]), int(parts[1])
        int(parts[2])
    except ValueError:
        raise ValueError(f"malformed partitions line {lineno}: {line.rstrip()!r}") from None
    if major < 0 or minor < 0:
        raise ValueError(f"negative device number on partitions line {lineno}")
    return Partition(name=parts[3], dev=mkdev(major, minor))


class Partitions:
    """The partitions table in file order."""

    def __init__(self, items: Iterable[Partition] = ()) -> None:
        self._items: list[Partition] = list(items)

    @classmethod
    def load(cls, path: str | os.PathLike[str] = PARTITIONS_PATH) -> Partitions:
        """Read a partitions file. Lines not starting with a space are headings.

        Raises OSError if unreadable and ValueError if an entry is malformed.
        """
        items = []
        with open(path, encoding="utf-8", errors="replace") as handle:
            for lineno, line in enumerate(handle, start=1):
                if not line.startswith(" "):
                    continue
                items.append(_parse_line(line, lineno))
        return cls(items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Partition]:
        return iter(self._items)

    def get_by_dev(self, dev: int) -> Partition | None:
        """The first partition with device number ``dev``, or None."""
        return next((item for item in self._items if item.dev == dev), None)

    def get_by_name(self, name: str) -> Partition | None:
        """The first partition called ``name``, or None."""
        return next((item for item in self._items if item.name == name), None)