"""Metadata, section data, event export and tracing helpers for JSON-described eBPF programs."""

__version__ = "0.1.0"

__all__ = [
    "config",
    "exporter",
    "histogram",
    "ksyms",
    "meta",
    "partitions",
    "processor",
    "syscalls",
    "uprobe",
    "url_resolver",
]