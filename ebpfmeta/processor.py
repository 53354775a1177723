"""Apply runtime arguments from a program package to its data sections."""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

from .meta import BtfType, MapMeta, MetaError, ProgramMeta

logger = logging.getLogger(__name__)

_INT_SIZES = frozenset({1, 2, 4, 8})
_CHAR_ARRAY_PREFIX = "char["


def _write(buffer: bytearray, offset: int, data: bytes) -> None:
    end = offset + len(data)
    if end > len(buffer):
        raise MetaError(
            f"section data at offset {offset} needs {len(data)} bytes, buffer holds {len(buffer)}"
        )
    buffer[offset:end] = data


def _int_bytes(sec: BtfType, value: Any) -> bytes:
    if value is None or isinstance(value, (str, list, dict)):
        raise MetaError(f"runtime arg {sec.name!r} must be a number")
    mask = (1 << (8 * sec.size)) - 1
    return (int(value) & mask).to_bytes(sec.size, sys.byteorder)


def _array_length(type_name: str) -> int:
    text = type_name[len(_CHAR_ARRAY_PREFIX):-1]
    try:
        length = int(text)
    except ValueError:
        raise MetaError(f"cannot read array length from type {type_name!r}") from None
    if length < 0:
        raise MetaError(f"negative array length in type {type_name!r}")
    return length


class RawProcessor:
    """Builds program metadata and writes runtime arguments into .rodata/.bss buffers."""

    def __init__(self) -> None:
        self.runtime_args: dict[str, Any] = {}

    def create_meta_from_json(self, json_str: str) -> ProgramMeta:
        """Parse program metadata and keep its ``runtime_args`` for later use."""
        meta = ProgramMeta.from_json_str(json_str)
        doc = json.loads(json_str)
        args = doc.get("runtime_args") if isinstance(doc, dict) else None
        self.runtime_args = args if isinstance(args, dict) else {}
        return meta

    def load_section_data(self, map_meta: MapMeta, buffer: bytearray | None) -> None:
        """Write each known section variable's runtime value into ``buffer``."""
        if buffer is None or not self.runtime_args:
            return
        args = self.runtime_args
        offset = 0
        for sec in map_meta.sec_data:
            if sec.size in _INT_SIZES:
                if sec.name in args:
                    value = args[sec.name]
                    logger.info("load runtime arg: %s %s", sec.name, value)
                    _write(buffer, offset, _int_bytes(sec, value))
                offset += sec.size
            elif sec.type.startswith(_CHAR_ARRAY_PREFIX):
                length = _array_length(sec.type)
                value = args.get(sec.name)
                if value is None:
                    offset += sec.size
                    continue
                if not isinstance(value, str):
                    raise MetaError(f"runtime arg {sec.name!r} must be a string")
                logger.info("load runtime arg: %s %s", sec.name, value)
                _write(buffer, offset, value.encode()[:length])
                offset += length
            else:
                logger.error("unsupported type: %s", sec.type)
                offset += sec.size

    def load_map_data(self, meta: ProgramMeta, rodata: bytearray | None) -> None:
        """Fill the section buffer for every .rodata and .bss map of ``meta``."""
        if not self.runtime_args:
            return
        for map_meta in meta.maps:
            if map_meta.is_rodata() or map_meta.is_bss():
                self.load_section_data(map_meta, rodata)