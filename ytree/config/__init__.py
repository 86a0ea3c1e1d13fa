"""配置模块

- AppSettings: 应用基础配置，支持 YAML + 环境变量
- 子配置类: AncestrySettings, DatabaseSettings, LoggingSettings
- ConfigLoader: YAML 配置加载

快速开始:
    from ytree.config import AppSettings, load_yaml_config

    settings = load_yaml_config("config/settings.yaml", AppSettings)
"""

from .settings import (
    AppSettings,
    AncestrySettings,
    DatabaseSettings,
    LoggingSettings,
)

from .loader import (
    ConfigLoader,
    load_yaml_config,
)

__all__ = [
    "AppSettings",
    "AncestrySettings",
    "DatabaseSettings",
    "LoggingSettings",
    "ConfigLoader",
    "load_yaml_config",
]
