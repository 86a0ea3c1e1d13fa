"""ytree - 祖先路径树引擎

基于 SQLAlchemy 的物化路径树：每个节点保存祖先 ID 链，
提供层级查询、子树移动、孤儿策略和深度缓存。
"""

from .version import __version__, __author__, __description__

from .exceptions import (
    ErrorCode,
    AncestryException,
    ConfigurationError,
    FormatError,
    ValidationError,
    IntegrityError,
    NotFoundError,
    Err,
    register_exception_handlers,
)

from .orm import (
    Base,
    CoreModel,
    init_database,
    db_session_scope,
    transaction_scope,
)

from .orm.tree import (
    AncestryMixin,
    AncestryFieldsMixin,
    AncestryConfig,
    OrphanStrategy,
    AncestryBehavior,
)

from .log import get_logger, setup_logger, setup_root_logger

from .config import AppSettings, ConfigLoader, load_yaml_config

__all__ = [
    "__version__",
    "__author__",
    "__description__",
    # 异常
    "ErrorCode",
    "AncestryException",
    "ConfigurationError",
    "FormatError",
    "ValidationError",
    "IntegrityError",
    "NotFoundError",
    "Err",
    "register_exception_handlers",
    # ORM
    "Base",
    "CoreModel",
    "init_database",
    "db_session_scope",
    "transaction_scope",
    # 树
    "AncestryMixin",
    "AncestryFieldsMixin",
    "AncestryConfig",
    "OrphanStrategy",
    "AncestryBehavior",
    # 日志
    "get_logger",
    "setup_logger",
    "setup_root_logger",
    # 配置
    "AppSettings",
    "ConfigLoader",
    "load_yaml_config",
]
