"""
Тесты конфигурации: загрузчик config.yaml и pydantic схема.

Покрывает:
- дефолты → YAML → переменные окружения
- validate_config → ConfigError
- SyncOptions / SnapshotOptions из Config
"""

import pytest

from server_registrar.config import Config
from server_registrar.core.config_schema import validate_config, get_default_config
from server_registrar.core.exceptions import ConfigError
from server_registrar.core.models import ModuleCategory
from server_registrar.netbox.sync import SyncOptions
from server_registrar.observer import SnapshotOptions


@pytest.fixture
def clean_env(monkeypatch):
    monkeypatch.delenv("NETBOX_URL", raising=False)
    monkeypatch.delenv("NETBOX_TOKEN", raising=False)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        """
netbox:
  url: https://netbox.example.com
  token: from-yaml
defaults:
  site: dc1
blades:
  PowerEdge M640: PowerEdge M1000e
modules:
  categories: [cpu, memory]
  profiles:
    CPU: Processor
device:
  update_mode: replace
ip:
  create_prefixes: false
""",
        encoding="utf-8",
    )
    return str(path)


class TestConfigLoader:
    """Слои конфигурации."""

    def test_yaml_merged_with_defaults(self, clean_env, config_file):
        cfg = Config(config_file)

        assert cfg.source == config_file
        assert cfg.netbox.url == "https://netbox.example.com"
        assert cfg.netbox.verify_ssl is True
        assert cfg.defaults.site == "dc1"
        assert cfg.defaults.role == "Server"
        assert cfg.get("blades") == {"PowerEdge M640": "PowerEdge M1000e"}
        # Вложенные словари мержатся, а не заменяются
        assert cfg.modules.profiles.get("CPU") == "Processor"
        assert cfg.modules.profiles.get("PSU") == "Power supply"
        assert cfg.modules.sync_attributes is True

    def test_env_overrides_yaml(self, monkeypatch, config_file):
        monkeypatch.setenv("NETBOX_URL", "https://env.example.com")
        monkeypatch.setenv("NETBOX_TOKEN", "from-env")

        cfg = Config(config_file)

        assert cfg.netbox.url == "https://env.example.com"
        assert cfg.netbox.token == "from-env"

    def test_reload_resets_to_defaults(self, clean_env, config_file, tmp_path):
        cfg = Config(config_file)
        cfg.reload(str(tmp_path / "missing.yaml"))

        assert cfg.defaults.site == "office"

    def test_broken_yaml_ignored(self, clean_env, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("netbox: [unclosed", encoding="utf-8")

        cfg = Config(str(path))

        assert cfg.source is None
        assert cfg.netbox.url == "http://localhost:8000/"

    def test_to_dict_is_copy(self, clean_env, config_file):
        cfg = Config(config_file)
        data = cfg.to_dict()
        data["defaults"]["site"] = "changed"
        assert cfg.defaults.site == "dc1"


class TestValidateConfig:
    """Pydantic схема."""

    def test_defaults_valid(self, clean_env, config_file):
        app_config = validate_config(Config(config_file).to_dict())
        assert app_config.netbox.url == "https://netbox.example.com/"
        assert app_config.modules.categories == ["CPU", "Memory"]
        assert app_config.device.update_mode == "replace"

    def test_default_config(self):
        assert get_default_config().defaults.site == "office"

    @pytest.mark.parametrize("data,key", [
        ({"netbox": {"url": "netbox.local"}}, "netbox.url"),
        ({"netbox": {"timeout": 0}}, "netbox.timeout"),
        ({"modules": {"categories": ["FPGA"]}}, "modules.categories"),
        ({"device": {"update_mode": "merge"}}, "device.update_mode"),
        ({"roles": {"color": "blue"}}, "roles.color"),
        ({"logging": {"level": "VERBOSE"}}, "logging.level"),
    ])
    def test_invalid(self, data, key):
        with pytest.raises(ConfigError) as exc:
            validate_config(data, "custom.yaml")
        assert exc.value.key == key
        assert exc.value.config_file == "custom.yaml"


class TestOptionsFromConfig:
    """Опции регистрации и снимка из Config."""

    def test_sync_options(self, clean_env, config_file):
        options = SyncOptions.from_config(Config(config_file))

        assert options.device_update_mode == "replace"
        assert options.create_prefixes is False
        assert options.module_profiles["CPU"] == "Processor"
        assert options.module_profiles["PSU"] == "Power supply"
        assert options.chassis_role == "Chassis"

    def test_snapshot_options_overrides(self, clean_env, config_file):
        options = SnapshotOptions.from_config(Config(config_file), site="dc2", role=None, serial="")

        assert options.site == "dc2"
        assert options.role == "Server"
        assert options.serial == ""
        assert options.blades == {"PowerEdge M640": "PowerEdge M1000e"}
        assert options.categories == [ModuleCategory.CPU, ModuleCategory.MEMORY]
