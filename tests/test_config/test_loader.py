"""配置加载器测试

测试 YAML 配置加载和树配置的衔接
"""

import pytest

from ytree.config import (
    AncestrySettings,
    AppSettings,
    ConfigLoader,
    LoggingSettings,
    load_yaml_config,
)
from ytree.orm.tree import AncestryConfig, OrphanStrategy


class TestConfigLoader:
    """ConfigLoader 测试"""

    def test_load_yaml_config(self, sample_yaml_config):
        """测试加载 YAML 配置"""
        config = ConfigLoader.load(sample_yaml_config, use_cache=False)

        assert config["database"]["url"] == "sqlite:///test.db"
        assert config["ancestry"]["orphan_strategy"] == "rootify"

    def test_config_caching(self, sample_yaml_config):
        """测试配置缓存"""
        ConfigLoader.clear_cache()

        config1 = ConfigLoader.load(sample_yaml_config, use_cache=True)
        config2 = ConfigLoader.load(sample_yaml_config, use_cache=True)

        assert config1 is config2
        assert len(ConfigLoader.get_cached_paths()) == 1

    def test_reload_config(self, temp_file):
        """测试重新加载会读取文件的新内容"""
        path = temp_file("reload.yaml", "ancestry:\n  delimiter: '/'\n")
        ConfigLoader.load(path)

        with open(path, "w", encoding="utf-8") as f:
            f.write("ancestry:\n  delimiter: '.'\n")

        assert ConfigLoader.load(path)["ancestry"]["delimiter"] == "/"
        assert ConfigLoader.reload(path)["ancestry"]["delimiter"] == "."

    def test_missing_file(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            ConfigLoader.load("missing.yaml", base_dir=temp_dir)

    def test_empty_file(self, temp_file):
        path = temp_file("empty.yaml", "")
        assert ConfigLoader.load(path, use_cache=False) == {}


class TestLoadYamlConfig:
    """load_yaml_config 测试"""

    def test_load_app_settings(self, sample_yaml_config):
        settings = load_yaml_config(sample_yaml_config, AppSettings)

        assert settings.database.url == "sqlite:///test.db"
        assert settings.ancestry.orphan_strategy == "rootify"
        assert settings.ancestry.cache_depth is True
        assert settings.ancestry.delimiter == "/"
        assert settings.logging.level == "DEBUG"
        assert settings.logging.file_backup_count == 3

    def test_overrides(self, temp_file):
        path = temp_file("ancestry.yaml", "orphan_strategy: rootify\n")
        settings = load_yaml_config(path, AncestrySettings, orphan_strategy="restrict")

        assert settings.orphan_strategy == "restrict"

    def test_overrides_do_not_touch_cache(self, temp_file):
        path = temp_file("logging.yaml", "level: INFO\n")
        load_yaml_config(path, LoggingSettings, level="DEBUG")

        assert ConfigLoader.load(path)["level"] == "INFO"

    def test_settings_feed_ancestry_config(self, sample_yaml_config):
        settings = load_yaml_config(sample_yaml_config, AppSettings)
        config = AncestryConfig.from_settings(settings.ancestry)

        assert config.orphan_strategy == OrphanStrategy.ROOTIFY
        assert config.cache_depth is True
