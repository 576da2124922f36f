"""
Runtime Configuration Unit Tests
Tests for core/config/runtime.py
"""
import pytest

from core.config import RuntimeConfig


ENV_VARS = [
    "IDSTATE_SMT_MAX_DEPTH",
    "IDSTATE_HISTORY_PAGE_LIMIT",
    "IDSTATE_DEFAULT_ID_TYPE",
    "IDSTATE_SUPPORTED_ID_TYPES",
    "IDSTATE_OWNER",
    "IDSTATE_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    def test_defaults(self):
        config = RuntimeConfig()
        assert config.tree.max_depth == 64
        assert config.history.page_limit == 1000
        assert config.registry.default_id_type == "0x0212"
        assert config.registry.supported_id_types == []
        assert config.registry.owner == "owner"
        assert config.api.port == 8000

    def test_all_id_types_deduplicates(self):
        config = RuntimeConfig.from_dict(
            {"registry": {"default_id_type": "0x0212", "supported_id_types": ["0x0112", "0X0212"]}}
        )
        assert config.registry.all_id_types() == ["0x0212", "0x0112"]


class TestFromEnv:
    def test_reads_env(self, monkeypatch):
        monkeypatch.setenv("IDSTATE_SMT_MAX_DEPTH", "40")
        monkeypatch.setenv("IDSTATE_HISTORY_PAGE_LIMIT", "50")
        monkeypatch.setenv("IDSTATE_DEFAULT_ID_TYPE", "0x0112")
        monkeypatch.setenv("IDSTATE_SUPPORTED_ID_TYPES", "0x0100, 0x0211,")
        monkeypatch.setenv("IDSTATE_OWNER", "alice")
        monkeypatch.setenv("IDSTATE_LOG_LEVEL", "debug")

        config = RuntimeConfig.from_env()

        assert config.tree.max_depth == 40
        assert config.history.page_limit == 50
        assert config.registry.default_id_type == "0x0112"
        assert config.registry.supported_id_types == ["0x0100", "0x0211"]
        assert config.registry.owner == "alice"
        assert config.api.log_level == "DEBUG"

    def test_with_env_overrides_keeps_file_values(self, monkeypatch):
        base = RuntimeConfig.from_dict({"tree": {"max_depth": 20}, "registry": {"owner": "bob"}})
        monkeypatch.setenv("IDSTATE_OWNER", "carol")

        merged = base.with_env_overrides()

        assert merged.tree.max_depth == 20
        assert merged.registry.owner == "carol"
        assert base.registry.owner == "bob"

    def test_with_env_overrides_without_env_returns_self(self):
        base = RuntimeConfig()
        assert base.with_env_overrides() is base


class TestFromYaml:
    def test_load_yaml(self, tmp_path):
        path = tmp_path / "idstate.yaml"
        path.write_text(
            "tree:\n"
            "  max_depth: 32\n"
            "registry:\n"
            "  owner: dao\n"
            "  supported_id_types: ['0x0112']\n"
        )
        config = RuntimeConfig.from_yaml(path)

        assert config.tree.max_depth == 32
        assert config.registry.owner == "dao"
        assert config.registry.supported_id_types == ["0x0112"]
        assert config.history.page_limit == 1000

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert RuntimeConfig.from_yaml(path).to_dict() == RuntimeConfig().to_dict()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            RuntimeConfig.from_yaml(tmp_path / "missing.yaml")


class TestSerialization:
    def test_to_dict_round_trips_through_from_dict(self):
        config = RuntimeConfig.from_dict(
            {"tree": {"max_depth": 33}, "api": {"port": 9000}, "extra": {"k": "v"}}
        )
        assert RuntimeConfig.from_dict(config.to_dict()).to_dict() == config.to_dict()

