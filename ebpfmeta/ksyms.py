"""Kernel symbol table lookups and kernel feature probes."""

from __future__ import annotations

import bisect
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator

logger = logging.getLogger(__name__)

KALLSYMS_PATH = "/proc/kallsyms"
FILTER_FUNCTIONS_PATH = "/sys/kernel/debug/tracing/available_filter_functions"
MODULES_PATH = "/proc/modules"
BTF_DIR = "/sys/kernel/btf"
VMLINUX_BTF_PATH = f"{BTF_DIR}/vmlinux"


@dataclass(frozen=True, order=True)
class Ksym:
    """A kernel symbol: its address and name. Orders by address, then name."""

    addr: int
    name: str


def _parse_kallsyms_line(line: str, lineno: int) -> Ksym:
    parts = line.split()
    if len(parts) < 3 or len(parts[1]) != 1:
        raise ValueError(f"malformed kallsyms line {lineno}: {line.rstrip()!r}")
    try:
        addr = int(parts[0], 16)
    except ValueError:
        raise ValueError(f"malformed address on kallsyms line {lineno}: {parts[0]!r}") from None
    return Ksym(addr=addr, name=parts[2])


class Ksyms:
    """Kernel symbols sorted by address, with address and name lookups."""

    def __init__(self, symbols: Iterable[Ksym] = ()) -> None:
        self._syms: list[Ksym] = sorted(symbols)
        self._addrs: list[int] = [sym.addr for sym in self._syms]
        self._by_name: dict[str, Ksym] = {}
        for sym in self._syms:
            self._by_name.setdefault(sym.name, sym)

    @classmethod
    def load(cls, path: str | os.PathLike[str] = KALLSYMS_PATH) -> Ksyms:
        """Read a kallsyms file. Raises OSError if unreadable, ValueError if malformed."""
        symbols = []
        with open(path, encoding="utf-8", errors="replace") as handle:
            for lineno, line in enumerate(handle, start=1):
                if not line.strip():
                    continue
                symbols.append(_parse_kallsyms_line(line, lineno))
        return cls(symbols)

    def __len__(self) -> int:
        return len(self._syms)

    def __iter__(self) -> Iterator[Ksym]:
        return iter(self._syms)

    def map_addr(self, addr: int) -> Ksym | None:
        """Return the symbol with the largest address not above ``addr``."""
        index = bisect.bisect_right(self._addrs, addr) - 1
        if index < 0:
            return None
        return self._syms[index]

    def get_symbol(self, name: str) -> Ksym | None:
        """Return the lowest-addressed symbol called ``name``, or None."""
        return self._by_name.get(name)


def _scan_names(path: str | os.PathLike[str], column: int, what: str) -> Iterator[str]:
    with open(path, encoding="utf-8", errors="replace") as handle:
        for line in handle:
            parts = line.split()
            if not parts:
                continue
            if len(parts) <= column:
                logger.error("failed to read symbol from %s", what)
                return
            yield parts[column]


def kprobe_exists(
    name: str,
    filter_path: str | os.PathLike[str] = FILTER_FUNCTIONS_PATH,
    kallsyms_path: str | os.PathLike[str] = KALLSYMS_PATH,
) -> bool:
    """Whether kernel function ``name`` can be probed.

    Scans the tracing filter-function list; when that cannot be opened, falls
    back to the kernel symbol table.
    """
    try:
        return any(sym == name for sym in _scan_names(filter_path, 0, "available_filter_functions"))
    except OSError:
        pass
    try:
        return any(sym == name for sym in _scan_names(kallsyms_path, 2, "kallsyms"))
    except OSError:
        return False


def is_kernel_module(name: str, modules_path: str | os.PathLike[str] = MODULES_PATH) -> bool:
    """Whether ``name`` is listed as a loaded kernel module."""
    try:
        with open(modules_path, encoding="utf-8", errors="replace") as handle:
            for line in handle:
                parts = line.split()
                if not parts:
                    break
                if parts[0] == name:
                    return True
    except OSError:
        return False
    return False


def vmlinux_btf_exists() -> bool:
    """Whether the kernel exposes readable BTF type information."""
    return os.access(VMLINUX_BTF_PATH, os.R_OK)


def module_btf_exists(mod: str | None) -> bool:
    """Whether kernel module ``mod`` exposes readable BTF type information."""
    if not mod:
        return False
    return os.access(str(Path(BTF_DIR) / mod), os.R_OK)