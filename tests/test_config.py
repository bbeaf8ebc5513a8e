from __future__ import annotations

from pathlib import Path

import pytest

from graymix.config import default_config, load_config
from graymix.models.errors import ConfigError


def test_missing_file_gives_defaults(tmp_path: Path):
    cfg = load_config(tmp_path / "absent.yaml")
    assert cfg == default_config()
    assert cfg["width"] == 512
    assert cfg["blend"]["alpha_value"] == 128


def test_defaults_are_copies():
    cfg = load_config()
    cfg["mask"]["inputs"].append("extra.png")
    assert "extra.png" not in load_config()["mask"]["inputs"]


def test_yaml_is_deep_merged(tmp_path: Path):
    path = tmp_path / "graymix.yaml"
    path.write_text("width: 64\nblend:\n  alpha_value: 200\n", encoding="utf-8")
    cfg = load_config(path)
    assert cfg["width"] == 64
    assert cfg["height"] == 512
    assert cfg["blend"]["alpha_value"] == 200
    assert len(cfg["blend"]["inputs"]) == 3


def test_empty_file_gives_defaults(tmp_path: Path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == default_config()


@pytest.mark.parametrize(
    "text",
    [
        "- just\n- a list\n",
        "width: -3\n",
        "blend:\n  alpha_value: 256\n",
        "png:\n  compress_level: 12\n",
        "mask:\n  inputs: [a.png]\n",
        "width: [unclosed\n",
        "blend: 5\n",
        "png: [1, 2]\n",
        "mask: null\n",
        "blend:\n  alpha_value: true\n",
        "png:\n  compress_level: true\n",
        "mask:\n  inputs: a.png\n  outputs: b.png\n",
        "blend:\n  outputs: 7\n",
    ],
)
def test_invalid_config_rejected(tmp_path: Path, text: str):
    path = tmp_path / "bad.yaml"
    path.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path)
