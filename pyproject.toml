[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ebpfmeta"
version = "0.1.0"
description = "Metadata, event export and tracing helpers for JSON-described eBPF programs"
requires-python = ">=3.11"
dependencies = []
keywords = ["ebpf", "bpf", "tracing", "monitoring", "kallsyms", "uprobe", "syscalls"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ebpfmeta"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
