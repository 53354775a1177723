"""Locate the binaries and libraries that user-space probes attach to."""

from __future__ import annotations

import logging
import os
import shutil

logger = logging.getLogger(__name__)


class BinaryPathError(LookupError):
    """Raised when a program or library path cannot be resolved."""


def get_pid_binary_path(pid: int) -> str:
    """The full path of the program that process ``pid`` runs."""
    try:
        return os.readlink(f"/proc/{pid}/exe")
    except OSError as exc:
        logger.warning("No such pid %d", pid)
        raise BinaryPathError(f"No such pid {pid}") from exc


def _matches_lib(path: str, lib: str) -> bool:
    slash = path.rfind("/")
    if slash < 0:
        return False
    tail = path[slash:]
    if not tail.startswith("/lib"):
        return False
    rest = tail[len("/lib"):]
    if not rest.startswith(lib):
        return False
    # Libraries carry a '.' or '-' right after the name.
    return rest[len(lib):len(lib) + 1] in (".", "-")


def get_pid_lib_path(
    pid: int,
    lib: str,
    maps_path: str | os.PathLike[str] | None = None,
) -> str:
    """The full path of library ``lib`` (e.g. ``c`` for libc) mapped into ``pid``."""
    path = maps_path if maps_path is not None else f"/proc/{pid}/maps"
    try:
        with open(path, encoding="utf-8", errors="replace") as handle:
            for line in handle:
                parts = line.split()
                if len(parts) < 6:
                    continue
                candidate = parts[5]
                if _matches_lib(candidate, lib):
                    return candidate
    except OSError as exc:
        logger.warning("No such pid %d", pid)
        raise BinaryPathError(f"No such pid {pid}") from exc
    logger.warning("Cannot find library %s", lib)
    raise BinaryPathError(f"Cannot find library {lib}")


def which_program(prog: str) -> str:
    """The full path of program ``prog`` found on the search path."""
    found = shutil.which(prog)
    if not found:
        raise BinaryPathError(f"which {prog} failed")
    return found


def resolve_binary_path(binary: str, pid: int) -> str:
    """Resolve the file a user-space probe should attach to.

    With a pid and no binary, the process's program; with both, the library
    ``lib<binary>`` loaded in the process; with only a binary, the program of
    that name on the search path. Neither is an error.
    """
    if binary == "":
        if not pid:
            logger.warning("Uprobes need a pid or a binary")
            raise BinaryPathError("Uprobes need a pid or a binary")
        return get_pid_binary_path(pid)
    if pid:
        return get_pid_lib_path(pid, binary)
    try:
        return which_program(binary)
    except BinaryPathError as exc:
        message = f"Can't find {binary} (Need a PID if this is a library)"
        logger.warning("%s", message)
        raise BinaryPathError(message) from exc