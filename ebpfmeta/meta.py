"""Metadata describing a packaged eBPF program: maps, programs and event layouts."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any


class MetaError(ValueError):
    """Raised when program metadata is missing fields or malformed."""


def _field(data: Any, key: str, owner: str) -> Any:
    if not isinstance(data, dict):
        raise MetaError(f"{owner}: expected an object, got {type(data).__name__}")
    try:
        return data[key]
    except KeyError:
        raise MetaError(f"{owner}: missing field {key!r}") from None


def _as_str(value: Any, key: str, owner: str) -> str:
    if not isinstance(value, str):
        raise MetaError(f"{owner}: field {key!r} must be a string")
    return value


def _as_int(value: Any, key: str, owner: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MetaError(f"{owner}: field {key!r} must be a number")
    return int(value)


def _as_list(value: Any, key: str, owner: str) -> list:
    if not isinstance(value, list):
        raise MetaError(f"{owner}: field {key!r} must be a list")
    return value


def _str_at(data: Any, key: str, owner: str) -> str:
    return _as_str(_field(data, key, owner), key, owner)


def _int_at(data: Any, key: str, owner: str) -> int:
    return _as_int(_field(data, key, owner), key, owner)


def _load_json(text: str) -> Any:
    try:
        return json.loads(text)
    except (TypeError, ValueError) as exc:
        raise MetaError(f"invalid json: {exc}") from exc


@dataclass
class ExportField:
    """One field of a kernel struct that is delivered to user space."""

    name: str
    type: str
    llvm_type: str
    field_offset: int

    @classmethod
    def from_dict(cls, data: Any) -> ExportField:
        owner = "export field"
        return cls(
            name=_str_at(data, "Name", owner),
            type=_str_at(data, "Type", owner),
            field_offset=_int_at(data, "FieldOffset", owner),
            llvm_type=_str_at(data, "LLVMType", owner),
        )


@dataclass
class ExportTypes:
    """Layout of the struct delivered through a ring buffer or perf event map."""

    fields: list[ExportField] = field(default_factory=list)
    struct_name: str = ""
    size: int = 0
    data_size: int = 0
    alignment: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> ExportTypes:
        owner = "export types"
        alignment = _int_at(data, "Alignment", owner)
        data_size = _int_at(data, "DataSize", owner)
        size = _int_at(data, "Size", owner)
        struct_name = _str_at(data, "Struct Name", owner)
        fields = [
            ExportField.from_dict(item)
            for item in _as_list(_field(data, "Fields", owner), "Fields", owner)
        ]
        return cls(
            fields=fields,
            struct_name=struct_name,
            size=size,
            data_size=data_size,
            alignment=alignment,
        )

    @classmethod
    def from_json_str(cls, text: str) -> ExportTypes:
        return cls.from_dict(_load_json(text))


@dataclass
class BtfType:
    """A named variable in a data section, with its C type and byte size."""

    name: str
    type: str
    size: int

    @classmethod
    def from_dict(cls, data: Any) -> BtfType:
        owner = "section data"
        return cls(
            name=_str_at(data, "name", owner),
            type=_str_at(data, "type", owner),
            size=_int_at(data, "size", owner),
        )


@dataclass
class MapMeta:
    """An eBPF map: its name, type, optional event layout and section variables."""

    name: str
    type: str
    export_data_types: ExportTypes = field(default_factory=ExportTypes)
    sec_data: list[BtfType] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> MapMeta:
        owner = "map"
        name = _str_at(data, "name", owner)
        map_type = _str_at(data, "type", owner)
        export_types = ExportTypes()
        if "export_data_types" in data:
            export_types = ExportTypes.from_dict(data["export_data_types"])
        sec_data: list[BtfType] = []
        if "sec_data" in data:
            sec_data = [
                BtfType.from_dict(item)
                for item in _as_list(data["sec_data"], "sec_data", owner)
            ]
        return cls(
            name=name,
            type=map_type,
            export_data_types=export_types,
            sec_data=sec_data,
        )

    def is_rodata(self) -> bool:
        return self.name.endswith(".rodata")

    def is_bss(self) -> bool:
        return self.name.endswith(".bss")


@dataclass
class ProgMeta:
    """An eBPF program entry point."""

    name: str
    type: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> ProgMeta:
        owner = "prog"
        name = _str_at(data, "name", owner)
        prog_type = ""
        if "type" in data:
            prog_type = _as_str(data["type"], "type", owner)
        return cls(name=name, type=prog_type)


@dataclass
class ProgramMeta:
    """Everything needed to build an eBPF object: maps, programs and the object data."""

    ebpf_name: str
    maps: list[MapMeta]
    progs: list[ProgMeta]
    data_sz: int
    ebpf_data: str

    @classmethod
    def from_json_str(cls, text: str) -> ProgramMeta:
        doc = _load_json(text)
        owner = "program"
        name = _str_at(doc, "name", owner)
        maps = [
            MapMeta.from_dict(item)
            for item in _as_list(_field(doc, "maps", owner), "maps", owner)
        ]
        progs = [
            ProgMeta.from_dict(item)
            for item in _as_list(_field(doc, "progs", owner), "progs", owner)
        ]
        data_sz = _int_at(doc, "data_sz", owner)
        data = _str_at(doc, "data", owner)
        return cls(ebpf_name=name, maps=maps, progs=progs, data_sz=data_sz, ebpf_data=data)


@dataclass
class RuntimeConfig:
    """Settings that control how a program is loaded and polled."""

    perf_buffer_pages: int = 64
    perf_buffer_time_ms: int = 10
    poll_timeout_ms: int = 100
    print_header: bool = True
    libbpf_debug_verbose: bool = False
    print_kernel_debug: bool = False