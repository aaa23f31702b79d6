from pathlib import Path
from unittest.mock import Mock

import pytest

from focusdim import config_loader
from focusdim.config import Configuration, coerce_to_bool
from focusdim.config_loader import ConfigLoader
from focusdim.models import ExitCode, FocusdimError
from focusdim.schema import FOCUSDIM_CONFIG_SCHEMA
from focusdim.validation import ConfigField, ConfigItems, ConfigValidator


@pytest.fixture
def loader(test_logger):
    return ConfigLoader(test_logger)


@pytest.fixture
def config_file(tmp_path):
    "Write `content` to a config file, returns its path"

    def _write(content: str) -> str:
        path = tmp_path / "config.toml"
        path.write_text(content)
        return str(path)

    return _write


@pytest.mark.parametrize(
    ("value", "expected"),
    [(None, False), (True, True), ("yes", True), ("off", False), ("Disabled", False), ("", False), (0, False), (1, True)],
)
def test_coerce_to_bool(value, expected):
    assert coerce_to_bool(value) is expected


def test_configuration_defaults(test_logger):
    config = Configuration({"dim_opacity": 0.5}, logger=test_logger, schema=FOCUSDIM_CONFIG_SCHEMA)
    assert config.get_float("dim_opacity") == 0.5
    assert config.get_str("backend") == "sway"
    assert config.get_bool("restore_on_exit") is True
    assert "backend" not in config
    assert config.get("missing", "x") == "x"


def test_configuration_invalid_float():
    logger = Mock()
    config = Configuration({"dim_opacity": "dark"}, logger=logger)
    assert config.get_float("dim_opacity", 0.7) == 0.7
    logger.warning.assert_called_once()


def test_validator():
    schema = ConfigItems(
        ConfigField("name", str, required=True),
        ConfigField("level", float, validator=lambda v: ["too high"] if v > 1 else []),
        ConfigField("mode", str, choices=["a", "b"]),
        ConfigField("enabled", bool),
    )
    assert schema.get("mode").choices == ["a", "b"]
    assert schema.get("nope") is None

    assert ConfigValidator({"name": "x", "level": 1, "mode": "b", "enabled": "yes"}, "test", Mock()).validate(schema) == []

    errors = ConfigValidator({"level": 2.5, "mode": "c", "enabled": "maybe"}, "test", Mock()).validate(schema)
    assert len(errors) == 4
    assert any("Missing required field" in e for e in errors)
    assert any("too high" in e for e in errors)
    assert any("Valid options: 'a', 'b'" in e for e in errors)
    assert any("Expected bool" in e for e in errors)

    errors = ConfigValidator({"name": 3, "level": "1"}, "test", Mock()).validate(schema)
    assert len(errors) == 2


def test_unknown_keys():
    logger = Mock()
    warnings = ConfigValidator({"dim_opacty": 0.5, "colour": "red"}, "focusdim", logger).warn_unknown_keys(FOCUSDIM_CONFIG_SCHEMA)
    assert len(warnings) == 2
    assert "did you mean 'dim_opacity'" in warnings[0]
    assert "will be ignored" in warnings[1]
    assert logger.warning.call_count == 2


@pytest.mark.asyncio
async def test_load_file(loader, config_file):
    fname = config_file('[focusdim]\ndim_opacity = 0.5\nbackend = "i3"\nrestore_on_exit = false\n')
    config = await loader.load(fname)
    assert config.get_float("dim_opacity") == 0.5
    assert config.get_str("backend") == "i3"
    assert config.get_bool("restore_on_exit", True) is False


@pytest.mark.asyncio
async def test_load_without_default_file(loader, monkeypatch, tmp_path):
    monkeypatch.setattr(config_loader, "CONFIG_FILE", tmp_path / "nothing.toml")
    config = await loader.load()
    assert config == {}
    assert config.get_float("dim_opacity") == 0.7
    assert config.get_str("backend") == "sway"


@pytest.mark.asyncio
async def test_load_default_file(loader, monkeypatch, config_file):
    monkeypatch.setattr(config_loader, "CONFIG_FILE", Path(config_file("[focusdim]\ndim_opacity = 0.4\n")))
    config = await loader.load()
    assert config.get_float("dim_opacity") == 0.4


@pytest.mark.asyncio
async def test_overrides_win(loader, config_file):
    fname = config_file('[focusdim]\ndim_opacity = 0.5\nbackend = "i3"\n')
    config = await loader.load(fname, {"dim_opacity": 0.9, "socket_path": "/tmp/wm.sock"})
    assert config.get_float("dim_opacity") == 0.9
    assert config.get_str("backend") == "i3"
    assert config.get_str("socket_path") == "/tmp/wm.sock"


@pytest.mark.asyncio
async def test_missing_explicit_file(loader, tmp_path):
    with pytest.raises(FocusdimError) as exc:
        await loader.load(str(tmp_path / "missing.toml"))
    assert exc.value.args[0] == ExitCode.CONFIG_ERROR


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "content",
    [
        "[focusdim]\ndim_opacity = 1.5\n",
        "[focusdim]\ndim_opacity = -0.1\n",
        '[focusdim]\ndim_opacity = "0.5"\n',
        '[focusdim]\nbackend = "hyprland"\n',
        '[focusdim]\nbackend = "static"\n',
        "[focusdim\ndim_opacity = 0.5\n",
    ],
    ids=["too_high", "negative", "quoted", "unknown_backend", "static_without_socket", "bad_toml"],
)
async def test_invalid_config(loader, config_file, content):
    with pytest.raises(FocusdimError) as exc:
        await loader.load(config_file(content))
    assert exc.value.args[0] == ExitCode.CONFIG_ERROR


@pytest.mark.asyncio
async def test_static_backend(loader, config_file):
    config = await loader.load(config_file('[focusdim]\nbackend = "static"\nsocket_path = "/run/wm.sock"\n'))
    assert config.get_str("socket_path") == "/run/wm.sock"


@pytest.mark.asyncio
async def test_other_sections_are_ignored(loader, config_file):
    config = await loader.load(config_file("[other]\nvalue = 1\n\n[focusdim]\ndim_opacity = 0.6\n"))
    assert dict(config) == {"dim_opacity": 0.6}
