"""配置加载器测试

测试 YAML 配置加载和配置缓存
"""

import pytest

from orderable.config import (
    AppSettings,
    ConfigLoader,
    load_yaml_config,
)


@pytest.fixture(autouse=True)
def clear_config_cache():
    ConfigLoader.clear_cache()
    yield
    ConfigLoader.clear_cache()


class TestConfigLoader:
    """ConfigLoader 测试"""

    def test_load_yaml_config(self, sample_yaml_config):
        """测试加载 YAML 配置"""
        config = ConfigLoader.load(sample_yaml_config, use_cache=False)

        assert config["database"]["url"] == "sqlite:///test.db"
        assert config["ordering"]["strict_batch"] is True

    def test_config_caching(self, sample_yaml_config):
        """测试配置缓存"""
        config1 = ConfigLoader.load(sample_yaml_config)
        config2 = ConfigLoader.load(sample_yaml_config)

        assert config1 is config2
        assert len(ConfigLoader.get_cached_paths()) == 1

    def test_reload_reads_new_content(self, temp_file):
        """测试缓存不会自动刷新，需显式 reload"""
        path = temp_file("reload.yaml", "ordering:\n  strict_batch: false\n")

        assert ConfigLoader.load(path)["ordering"]["strict_batch"] is False

        with open(path, "w", encoding="utf-8") as f:
            f.write("ordering:\n  strict_batch: true\n")
        assert ConfigLoader.load(path)["ordering"]["strict_batch"] is False
        assert ConfigLoader.reload(path)["ordering"]["strict_batch"] is True

    def test_relative_path_with_base_dir(self, temp_dir, temp_file):
        """测试基于 base_dir 解析相对路径"""
        temp_file("nested/app.yaml", "logging:\n  level: WARNING\n")

        config = ConfigLoader.load("nested/app.yaml", base_dir=temp_dir)
        assert config["logging"]["level"] == "WARNING"

    def test_empty_file_returns_empty_dict(self, temp_file):
        """测试空文件返回空字典"""
        path = temp_file("empty.yaml", "")
        assert ConfigLoader.load(path) == {}

    def test_missing_file(self, temp_dir):
        """测试文件不存在"""
        with pytest.raises(FileNotFoundError):
            ConfigLoader.load("missing.yaml", base_dir=temp_dir)


class TestLoadYamlConfig:
    """load_yaml_config 测试"""

    def test_build_app_settings(self, sample_yaml_config):
        """测试从 YAML 构建嵌套配置"""
        settings = load_yaml_config(sample_yaml_config, AppSettings)

        assert settings.database.url == "sqlite:///test.db"
        assert settings.database.pool_size == 5
        assert settings.logging.level == "DEBUG"
        assert settings.ordering.strict_batch is True
        assert settings.ordering.default_field == "display_order"

    def test_overrides_do_not_pollute_cache(self, sample_yaml_config):
        """测试覆盖参数不会修改缓存内容"""
        settings = load_yaml_config(
            sample_yaml_config,
            AppSettings,
            ordering={"strict_batch": False},
        )
        assert settings.ordering.strict_batch is False

        cached = ConfigLoader.load(sample_yaml_config)
        assert cached["ordering"]["strict_batch"] is True
