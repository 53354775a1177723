"""Text histograms of bucketed counts, and a monotonic clock in nanoseconds."""

from __future__ import annotations

import time
from collections.abc import Sequence

_STARS_MAX = 40


def stars(val: int, val_max: int, width: int) -> str:
    """A bar of ``width`` cells, filled in proportion to ``val / val_max``.

    A ``+`` is appended when ``val`` exceeds ``val_max``.
    """
    if val_max <= 0:
        raise ValueError("val_max must be positive")
    num_stars = min(val, val_max) * width // val_max
    num_spaces = width - num_stars
    bar = "*" * num_stars + " " * num_spaces
    if val > val_max:
        bar += "+"
    return bar


def _nonzero_range(vals: Sequence[int]) -> tuple[int, int, int] | None:
    """Indices of the first and last non-zero values, and the largest value."""
    nonzero = [index for index, val in enumerate(vals) if val > 0]
    if not nonzero:
        return None
    return nonzero[0], nonzero[-1], max(vals)


def format_log2_hist(vals: Sequence[int], val_type: str) -> str:
    """Render power-of-two buckets as a histogram; empty when all counts are zero."""
    found = _nonzero_range(vals)
    if found is None:
        return ""
    _, idx_max, val_max = found
    narrow = idx_max <= 32
    pad, type_width = (5, 19) if narrow else (15, 29)
    bar_width = _STARS_MAX if narrow else _STARS_MAX // 2
    num_width = 10 if narrow else 20

    lines = [f"{'':>{pad}}{val_type:<{type_width}} : count    distribution"]
    for index, val in enumerate(vals[: idx_max + 1]):
        low = (1 << (index + 1)) >> 1
        high = (1 << (index + 1)) - 1
        if low == high:
            low -= 1
        lines.append(
            f"{low:>{num_width}} -> {high:<{num_width}} : {val:<8} |"
            f"{stars(val, val_max, bar_width)}|"
        )
    return "\n".join(lines) + "\n"


def format_linear_hist(vals: Sequence[int], base: int, step: int, val_type: str) -> str:
    """Render evenly spaced buckets starting at ``base``; empty when all counts are zero."""
    found = _nonzero_range(vals)
    if found is None:
        return ""
    idx_min, idx_max, val_max = found
    lines = [f"     {val_type:<13} : count     distribution"]
    for index in range(idx_min, idx_max + 1):
        val = vals[index]
        bucket = base + index * step
        lines.append(f"        {bucket:<10} : {val:<8} |{stars(val, val_max, _STARS_MAX)}|")
    return "\n".join(lines) + "\n"


def get_ktime_ns() -> int:
    """Nanoseconds on the monotonic clock."""
    return time.monotonic_ns()