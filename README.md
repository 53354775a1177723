# ebpfmeta

User-space tools for eBPF programs that are described by a JSON package:
reading the package's metadata, writing runtime arguments into section
buffers, turning raw event records into text or JSON, and a set of helpers
for tracing tools that read kernel and process information from `/proc`
and `/sys`.

## Installation

```
pip install ebpfmeta
```

Python 3.11 or later is needed. The package has no dependencies outside
the standard library. `ebpfmeta.url_resolver` runs the `wget` program when
a direct HTTP fetch fails, so that fallback needs `wget` on the search path.

## What is in it

- `ebpfmeta.meta` — dataclasses for the program metadata (`ProgramMeta`,
  `MapMeta`, `ProgMeta`, `ExportTypes`, `ExportField`, `BtfType`) and the
  load settings (`RuntimeConfig`). `ProgramMeta.from_json_str` and
  `ExportTypes.from_json_str` parse JSON and raise `MetaError` when it is
  invalid or a required key is missing or of the wrong kind.
  `MapMeta.is_rodata()` and `MapMeta.is_bss()` tell section maps apart by
  name suffix.
- `ebpfmeta.processor` — `RawProcessor.create_meta_from_json` parses a
  package and keeps its `runtime_args` object. `load_section_data` writes
  those values into a `bytearray` at the offsets given by a map's section
  variables (integers of 1, 2, 4 or 8 bytes in native byte order, and
  `char[N]` strings); `load_map_data` does this with one buffer for every
  `.rodata` and `.bss` map of a `ProgramMeta`.
- `ebpfmeta.exporter` — `EventExporter` builds per-field formats from an
  `ExportTypes` description with `create_export_format`, then
  `handle_event` renders each raw event as a plain-text line with an
  `HH:MM:SS` time stamp, as a JSON object, or passes the bytes on
  unchanged, according to `ExportFormat` (`PLANT_TEXT`, `JSON`,
  `RAW_EVENT`). Output goes to a `handler(ctx, output)` set with
  `set_export_type`, or is printed when no handler is set. Formatting
  failures raise `ExportError`.
- `ebpfmeta.config` — `TrackerConfig` (from a dict or a JSON string) and
  `EunomiaConfig` (from a dict, a JSON file or a TOML file). Missing or
  ill-typed fields keep their defaults.
- `ebpfmeta.url_resolver` — `resolve_json_data` fills a `TrackerConfig`'s
  `json_data` from its `url`: a local file, or an `http` URL fetched
  directly, falling back to `download_with_wget` into `/tmp/ebpm`. It
  raises `FileNotFoundError` for a URL that is neither, and `OSError` when
  a download fails.
- `ebpfmeta.syscalls` — `syscall_name` maps x86-64 system call numbers to
  names; `SYSCALL_NAMES` holds the whole table.
- `ebpfmeta.ksyms` — `Ksyms.load` reads `/proc/kallsyms`; `map_addr` finds
  the symbol at or below an address and `get_symbol` looks one up by name.
  `kprobe_exists`, `is_kernel_module`, `vmlinux_btf_exists` and
  `module_btf_exists` probe the running kernel.
- `ebpfmeta.partitions` — `Partitions.load` reads `/proc/partitions`, with
  `get_by_dev` and `get_by_name`; `mkdev` builds a device number.
- `ebpfmeta.histogram` — `format_log2_hist` and `format_linear_hist`
  return star histograms as text; `stars` draws one bar; `get_ktime_ns`
  reads the monotonic clock.
- `ebpfmeta.uprobe` — `resolve_binary_path`, `get_pid_binary_path`,
  `get_pid_lib_path` and `which_program` find the binary or shared library
  to attach a user-space probe to, raising `BinaryPathError`.

## Example

```python
from ebpfmeta.meta import ExportTypes
from ebpfmeta.exporter import EventExporter, ExportFormat

with open("event_types.json") as handle:
    types = ExportTypes.from_json_str(handle.read())

lines = []
exporter = EventExporter()
exporter.set_export_type(ExportFormat.JSON, lambda ctx, text: lines.append(text), None)
exporter.create_export_format(types)
exporter.handle_event(raw_event_bytes)
print(lines[0])
```

```python
from ebpfmeta.histogram import format_log2_hist

print(format_log2_hist([0, 3, 10, 4, 1], "usecs"), end="")
```

## What it does not do

The package works only in user space on metadata, buffers and text. It
does not load or attach eBPF programs to the kernel, does not poll ring
buffers or perf event maps, and has no command-line tool and no HTTP
control server for starting and stopping programs. Events must be handed
to `EventExporter.handle_event` as bytes by the caller.

## Running the tests

```
pip install ebpfmeta[test]
pytest
```