import json

import pytest

from ebpfmeta.meta import (
    BtfType,
    ExportField,
    ExportTypes,
    MapMeta,
    MetaError,
    ProgMeta,
    ProgramMeta,
    RuntimeConfig,
)

OPENSNOOP_META_TYPES = (
    '{"Fields": [{"Name": "ts", "Type": "unsigned long long",'
    ' "LLVMType": "i64", "FieldOffset": 0}, {"Name": "pid", "Type": "int", "LLVMType":'
    ' "i32", "FieldOffset": 64}, {"Name": "uid", "Type": "int", "LLVMType": "i32",'
    ' "FieldOffset": 96}, {"Name": "ret", "Type": "int", "LLVMType": "i32", '
    '"FieldOffset": 128}, {"Name": "flags", "Type": "int", "LLVMType": "i32",'
    ' "FieldOffset": 160}, {"Name": "comm", "Type": "char [16]", "LLVMType": "[16 x i8]",'
    ' "FieldOffset": 192}, {"Name": "fname", "Type": "char [255]", "LLVMType":'
    ' "[255 x i8]", "FieldOffset": 320}], "Struct Name": "event", "Size": 2368,'
    ' "DataSize": 2368, "Alignment": 64}'
)


def _program_doc():
    return {
        "name": "opensnoop",
        "maps": [
            {"name": "rb", "type": "BPF_MAP_TYPE_RINGBUF",
             "export_data_types": json.loads(OPENSNOOP_META_TYPES)},
            {"name": "opensnoop.rodata", "type": "BPF_MAP_TYPE_ARRAY",
             "sec_data": [{"name": "targ_pid", "type": "int", "size": 4}]},
        ],
        "progs": [{"name": "handle_exec", "type": "tracepoint"}, {"name": "handle_exit"}],
        "data_sz": 12,
        "data": "AAAA",
    }


def test_export_types_from_json_str():
    types = ExportTypes.from_json_str(OPENSNOOP_META_TYPES)
    assert types.struct_name == "event"
    assert types.size == 2368
    assert types.data_size == 2368
    assert types.alignment == 64
    assert [f.name for f in types.fields] == ["ts", "pid", "uid", "ret", "flags", "comm", "fname"]
    comm = types.fields[5]
    assert comm == ExportField(name="comm", type="char [16]", llvm_type="[16 x i8]", field_offset=192)


def test_export_field_missing_key_raises():
    with pytest.raises(MetaError):
        ExportField.from_dict({"Name": "ts", "Type": "int", "FieldOffset": 0})


def test_export_types_invalid_json_raises():
    with pytest.raises(MetaError):
        ExportTypes.from_json_str("{not json")


def test_export_types_wrong_type_raises():
    doc = json.loads(OPENSNOOP_META_TYPES)
    doc["Size"] = "big"
    with pytest.raises(MetaError):
        ExportTypes.from_dict(doc)


def test_btf_type_from_dict():
    btf = BtfType.from_dict({"name": "targ_pid", "type": "int", "size": 4})
    assert btf == BtfType(name="targ_pid", type="int", size=4)
    with pytest.raises(MetaError):
        BtfType.from_dict({"name": "targ_pid", "type": "int"})


def test_map_meta_optional_fields_default():
    map_meta = MapMeta.from_dict({"name": "counts", "type": "BPF_MAP_TYPE_HASH"})
    assert map_meta.sec_data == []
    assert map_meta.export_data_types.fields == []
    assert not map_meta.is_rodata()
    assert not map_meta.is_bss()


@pytest.mark.parametrize(
    "name, rodata, bss",
    [
        ("prog.rodata", True, False),
        ("prog.bss", False, True),
        (".rodata", True, False),
        ("rodata", False, False),
        ("prog.bss.extra", False, False),
    ],
)
def test_map_section_kind(name, rodata, bss):
    map_meta = MapMeta(name=name, type="BPF_MAP_TYPE_ARRAY")
    assert map_meta.is_rodata() is rodata
    assert map_meta.is_bss() is bss


def test_prog_meta_type_optional():
    assert ProgMeta.from_dict({"name": "handle_exit"}).type == ""
    assert ProgMeta.from_dict({"name": "h", "type": "kprobe"}).type == "kprobe"
    with pytest.raises(MetaError):
        ProgMeta.from_dict({"type": "kprobe"})


def test_program_meta_from_json_str():
    meta = ProgramMeta.from_json_str(json.dumps(_program_doc()))
    assert meta.ebpf_name == "opensnoop"
    assert meta.data_sz == 12
    assert meta.ebpf_data == "AAAA"
    assert [m.name for m in meta.maps] == ["rb", "opensnoop.rodata"]
    assert meta.maps[0].export_data_types.struct_name == "event"
    assert meta.maps[1].sec_data[0].name == "targ_pid"
    assert [p.name for p in meta.progs] == ["handle_exec", "handle_exit"]


@pytest.mark.parametrize("missing", ["name", "maps", "progs", "data_sz", "data"])
def test_program_meta_missing_field_raises(missing):
    doc = _program_doc()
    del doc[missing]
    with pytest.raises(MetaError):
        ProgramMeta.from_json_str(json.dumps(doc))


def test_program_meta_not_an_object_raises():
    with pytest.raises(MetaError):
        ProgramMeta.from_json_str("[1, 2, 3]")


def test_runtime_config_defaults():
    config = RuntimeConfig()
    assert config.perf_buffer_pages == 64
    assert config.perf_buffer_time_ms == 10
    assert config.poll_timeout_ms == 100
    assert config.print_header is True
    assert config.libbpf_debug_verbose is False
    assert config.print_kernel_debug is False