"""Format events received from eBPF maps as plain text, JSON or raw bytes."""

from __future__ import annotations

import logging
import re
import sys
import time
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Callable

from .meta import ExportField, ExportTypes

logger = logging.getLogger(__name__)

EventHandler = Callable[[Any, Any], None]

DEFAULT_BUFFER_SIZE = 2048


class ExportFormat(IntEnum):
    """How exported events are rendered."""

    PLANT_TEXT = 0
    JSON = 1
    RAW_EVENT = 2


class ExportError(RuntimeError):
    """Raised when events cannot be formatted or exported."""


@dataclass
class ExportTypeInfo:
    """A checked export field with the format used to print it."""

    print_fmt: str
    field_offset: int
    width: int
    name: str
    llvm_type: str


# (conversion, C type name, LLVM type name), matched in order.
_BASE_TYPES: tuple[tuple[str, str, str], ...] = (
    ("%llx", "unsigned __int128", "i128"),
    ("%llu", "unsigned long long", "i64"),
    ("%lld", "long long", "i64"),
    ("%d", "int", "i32"),
    ("%u", "unsigned int", "i32"),
    ("%hu", "unsigned short", "i16"),
    ("%hd", "short", "i16"),
    ("%d", "unsigned char", "i8"),
    ("%c", "char", "i8"),
    ("%c", "_Bool", "i8"),
)

_INT_READ_SIZES = {"i8": 1, "i16": 2, "i32": 4, "i64": 8, "i128": 16}
_CSTRING = "cstring"

_INT_CONVERSIONS = {
    "%d": (32, True),
    "%u": (32, False),
    "%hd": (16, True),
    "%hu": (16, False),
    "%lld": (64, True),
    "%llu": (64, False),
}

_CONVERSION_RE = re.compile(r"%(?:ll[dux]|h[du]|[ducs])")


def _render_int(conversion: str, raw: int) -> str:
    if conversion == "%llx":
        return format(raw & ((1 << 64) - 1), "x")
    if conversion == "%c":
        return chr(raw & 0xFF)
    if conversion not in _INT_CONVERSIONS:
        return str(raw)
    bits, signed = _INT_CONVERSIONS[conversion]
    value = raw & ((1 << bits) - 1)
    if signed and value >= 1 << (bits - 1):
        value -= 1 << bits
    return str(value)


def _substitute(print_fmt: str, render: Callable[[str], str]) -> str:
    return _CONVERSION_RE.sub(lambda m: render(m.group(0)), print_fmt, count=1)


def _render_field(event: bytes, info: ExportTypeInfo) -> str:
    start = info.field_offset // 8
    if info.llvm_type == _CSTRING:
        if start > len(event):
            raise ExportError(f"event too short for field {info.name!r}")
        end = event.find(b"\0", start)
        raw = event[start:] if end < 0 else event[start:end]
        text = raw.decode("utf-8", errors="backslashreplace")
        return _substitute(info.print_fmt, lambda _conv: text)
    size = _INT_READ_SIZES[info.llvm_type]
    chunk = event[start:start + size]
    if len(chunk) < size:
        raise ExportError(f"event too short for field {info.name!r}")
    raw_value = int.from_bytes(chunk, sys.byteorder)
    return _substitute(info.print_fmt, lambda conv: _render_int(conv, raw_value))


def _is_printable(info: ExportTypeInfo) -> bool:
    return info.llvm_type == _CSTRING or info.llvm_type in _INT_READ_SIZES


class _Printer:
    """Accumulates output and enforces the exporter's buffer limit."""

    def __init__(self, limit: int) -> None:
        self._limit = limit
        self._used = 0
        self._parts: list[str] = []

    def append(self, text: str) -> None:
        self._used += len(text.encode("utf-8"))
        if self._limit - self._used <= 1:
            raise ExportError("failed to format event: buffer size limited")
        self._parts.append(text)

    def text(self) -> str:
        return "".join(self._parts)


class EventExporter:
    """Turns raw event bytes into text according to the exported struct layout."""

    def __init__(self, buffer_size: int = DEFAULT_BUFFER_SIZE) -> None:
        self.buffer_size = buffer_size
        self.format_type = ExportFormat.PLANT_TEXT
        self.handler: EventHandler | None = None
        self.ctx: Any = None
        self.export_types: list[ExportTypeInfo] = []
        self._processor: Callable[[bytes], None] | None = None

    def set_export_type(
        self,
        format_type: ExportFormat | int,
        handler: EventHandler | None = None,
        ctx: Any = None,
    ) -> None:
        """Choose the output format and an optional ``handler(ctx, output)``."""
        try:
            fmt = ExportFormat(format_type)
        except ValueError:
            fmt = ExportFormat.PLANT_TEXT
        self.format_type = fmt
        self.handler = handler
        self.ctx = ctx
        if fmt is ExportFormat.JSON:
            self._processor = self._export_json
        elif fmt is ExportFormat.RAW_EVENT:
            self._processor = self._export_raw
        else:
            self._processor = self._export_plain_text

    def _add_export_type(self, info: ExportTypeInfo) -> None:
        if self.format_type is ExportFormat.JSON:
            if info.llvm_type == _CSTRING:
                info.print_fmt = f'"{info.name}":"{info.print_fmt}"'
            else:
                info.print_fmt = f'"{info.name}":{info.print_fmt}'
        self.export_types.append(info)

    def _check_and_add(self, fld: ExportField, width: int) -> None:
        for conversion, type_str, llvm_type_str in _BASE_TYPES:
            if fld.type == type_str or fld.llvm_type == llvm_type_str:
                self._add_export_type(
                    ExportTypeInfo(conversion, fld.field_offset, width, fld.name, fld.llvm_type)
                )
                return
            if (
                fld.llvm_type.startswith("[")
                and len(fld.type) > 4
                and fld.type.startswith("char")
            ):
                self._add_export_type(
                    ExportTypeInfo("%s", fld.field_offset, width, fld.name, _CSTRING)
                )
                return
        logger.error("Unsupported type: %s %s", fld.type, fld.llvm_type)

    def create_export_format(self, types: ExportTypes) -> None:
        """Build the per-field formats for ``types``; prints the header for plain text."""
        self.export_types = []
        fields = types.fields
        for index, fld in enumerate(fields):
            if index < len(fields) - 1:
                width = fields[index + 1].field_offset - fld.field_offset
            else:
                width = types.data_size - fld.field_offset
            self._check_and_add(fld, width // 8)
        if not self.export_types:
            raise ExportError("No available format type!")
        if self.handler is None and self.format_type is ExportFormat.PLANT_TEXT:
            print(self.header_line())

    def header_line(self) -> str:
        """The plain-text column header: ``time`` followed by each field name."""
        return "time " + "".join(f"{info.name} " for info in self.export_types)

    def _emit(self, text: str) -> None:
        if self.handler is not None:
            self.handler(self.ctx, text)
        else:
            print(text)

    def _export_json(self, event: bytes) -> None:
        printer = _Printer(self.buffer_size)
        printer.append("{")
        last = len(self.export_types) - 1
        for index, info in enumerate(self.export_types):
            if _is_printable(info):
                printer.append(_render_field(event, info))
            if index < last:
                printer.append(",")
        printer.append("}")
        self._emit(printer.text())

    def _export_raw(self, event: bytes) -> None:
        if self.handler is not None:
            self.handler(self.ctx, event)

    def _export_plain_text(self, event: bytes) -> None:
        printer = _Printer(self.buffer_size)
        stamp = time.strftime("%H:%M:%S", time.localtime())
        printer.append(f"{stamp:<8} ")
        for info in self.export_types:
            if _is_printable(info):
                printer.append(_render_field(event, info))
                printer.append(" ")
        self._emit(printer.text())

    def handle_event(self, event: bytes | None) -> None:
        """Format one raw event and pass it to the handler or print it."""
        if event is None:
            return
        if self._processor is None:
            raise ExportError("No export event handler!")
        self._processor(bytes(event))