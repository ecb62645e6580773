import pytest

from epochimg import config


def test_missing_file_gives_defaults(tmp_path):
    cfg = config.load(tmp_path / "nope.yaml")
    assert cfg == config.DEFAULTS
    assert cfg is not config.DEFAULTS


def test_save_default_round_trips(tmp_path):
    path = config.save_default(tmp_path / "sub" / "config.yaml")
    assert path.exists()
    assert config.load(path) == config.DEFAULTS


def test_file_overrides_merge_with_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("image:\n  default_width: 640\nserver:\n  host: 0.0.0.0\n")
    cfg = config.load(path)
    assert cfg["image"]["default_width"] == 640
    assert cfg["image"]["max_width"] == 10000
    assert cfg["server"] == {"host": "0.0.0.0", "port": None}


@pytest.mark.parametrize("text", ["image: [unclosed\n", "- just\n- a list\n"])
def test_bad_file_is_config_error(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text)
    with pytest.raises(config.ConfigError):
        config.load(path)


def test_dev_defaults():
    assert config.resolve_bind(config.DEFAULTS, {"APP_ENV": "dev"}) == ("localhost", 8055)
    assert config.resolve_bind(config.DEFAULTS, {"APP_ENV": "development", "PORT": "9000"}) == ("localhost", 9000)


def test_production_requires_host_and_port():
    with pytest.raises(config.ConfigError, match="Host not set"):
        config.resolve_bind(config.DEFAULTS, {})
    with pytest.raises(config.ConfigError, match="Port not set"):
        config.resolve_bind(config.DEFAULTS, {"HOST": "0.0.0.0"})


def test_environment_beats_file():
    cfg = {"server": {"host": "127.0.0.1", "port": 8000}}
    assert config.resolve_bind(cfg, {}) == ("127.0.0.1", 8000)
    assert config.resolve_bind(cfg, {"HOST": "0.0.0.0", "PORT": "80"}) == ("0.0.0.0", 80)


def test_bad_port():
    with pytest.raises(config.ConfigError):
        config.resolve_bind(config.DEFAULTS, {"HOST": "h", "PORT": "eighty"})
