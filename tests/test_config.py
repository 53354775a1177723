import json

import pytest

from ebpfmeta.config import EunomiaConfig, TrackerConfig
from ebpfmeta.exporter import ExportFormat


def test_tracker_defaults():
    cfg = TrackerConfig()
    assert cfg.url == ""
    assert cfg.json_data == ""
    assert cfg.args == []
    assert cfg.export_format is ExportFormat.PLANT_TEXT


def test_tracker_from_dict_reads_fields():
    cfg = TrackerConfig.from_dict({"url": "package.json", "json_data": "{}", "args": ["-v", "1"]})
    assert cfg.url == "package.json"
    assert cfg.json_data == "{}"
    assert cfg.args == ["-v", "1"]


def test_tracker_from_dict_bad_types_use_defaults():
    cfg = TrackerConfig.from_dict({"url": 3, "json_data": None, "args": [1, 2]})
    assert cfg == TrackerConfig()


def test_tracker_from_dict_non_mapping_is_default():
    assert TrackerConfig.from_dict("not an object") == TrackerConfig()


def test_tracker_from_json_str_round_trip():
    text = json.dumps({"url": "package.json", "args": ["a"]})
    cfg = TrackerConfig.from_json_str(text)
    assert cfg.url == "package.json"
    assert cfg.args == ["a"]
    assert cfg.json_data == ""


def test_tracker_from_json_str_invalid_returns_default():
    assert TrackerConfig.from_json_str("{not json") == TrackerConfig()


def test_eunomia_defaults():
    cfg = EunomiaConfig()
    assert cfg.run_selected == "server"
    assert cfg.enabled_trackers == []
    assert cfg.exit_after == 0
    assert cfg.server_port == 8527
    assert cfg.server_host == "localhost"


def test_eunomia_from_dict_full():
    cfg = EunomiaConfig.from_dict(
        {
            "run_selected": "run",
            "enabled_trackers": [{"url": "package.json"}, "junk"],
            "server_host": "0.0.0.0",
            "server_port": 9000,
            "exit_after": 5,
        }
    )
    assert cfg.run_selected == "run"
    assert cfg.server_host == "0.0.0.0"
    assert cfg.server_port == 9000
    assert cfg.exit_after == 5
    assert [t.url for t in cfg.enabled_trackers] == ["package.json", ""]


def test_eunomia_from_dict_bad_types_use_defaults():
    cfg = EunomiaConfig.from_dict(
        {"run_selected": 1, "enabled_trackers": {}, "server_port": "x", "exit_after": True}
    )
    assert cfg == EunomiaConfig()


def test_from_toml_file(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(
        'run_selected = "run"\n'
        "server_port = 9100\n"
        "exit_after = 2\n"
        "[[enabled_trackers]]\n"
        'url = "package.json"\n'
        'args = ["--flag"]\n',
        encoding="utf-8",
    )
    cfg = EunomiaConfig.from_toml_file(str(path))
    assert cfg.run_selected == "run"
    assert cfg.server_port == 9100
    assert cfg.exit_after == 2
    assert cfg.server_host == "localhost"
    assert cfg.enabled_trackers == [TrackerConfig(url="package.json", args=["--flag"])]


def test_from_toml_file_invalid_returns_default(tmp_path):
    path = tmp_path / "bad.toml"
    path.write_text("this is = = not toml", encoding="utf-8")
    assert EunomiaConfig.from_toml_file(str(path)) == EunomiaConfig()


def test_from_toml_file_missing_returns_default(tmp_path):
    assert EunomiaConfig.from_toml_file(str(tmp_path / "absent.toml")) == EunomiaConfig()


def test_from_json_file(tmp_path):
    path = tmp_path / "config.json"
    original = EunomiaConfig(run_selected="run", server_port=1234, exit_after=3)
    path.write_text(
        json.dumps(
            {
                "run_selected": original.run_selected,
                "server_port": original.server_port,
                "exit_after": original.exit_after,
                "server_host": original.server_host,
                "enabled_trackers": [],
            }
        ),
        encoding="utf-8",
    )
    assert EunomiaConfig.from_json_file(str(path)) == original


def test_from_json_file_invalid_raises(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{oops", encoding="utf-8")
    with pytest.raises(ValueError):
        EunomiaConfig.from_json_file(str(path))


def test_from_json_file_missing_raises(tmp_path):
    with pytest.raises(OSError):
        EunomiaConfig.from_json_file(str(tmp_path / "absent.json"))