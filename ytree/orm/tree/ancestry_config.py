"""
祖先路径树 - 模型级配置

每个启用祖先路径的模型持有一份独立的 AncestryConfig，
由 AncestryBehavior 在所有操作中传递使用，不存在全局共享状态。
"""

import re
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError, model_validator

from ytree.exceptions import ConfigurationError, ErrorCode


class OrphanStrategy(str, Enum):
    """孤儿策略：删除有子节点的节点时如何处理子节点

    - DESTROY:  删除整棵子树
    - ROOTIFY:  子节点上移，成为被删节点父节点的子节点（被删节点是根时子节点成为根）
    - RESTRICT: 存在子节点时拒绝删除
    - NONE:     子节点成为根节点，后代保留子节点以下的路径
    """
    DESTROY = "destroy"
    ROOTIFY = "rootify"
    RESTRICT = "restrict"
    NONE = "none"


# 默认的 ID 片段格式
INT_ID_PATTERN = r"[0-9]+"
STR_ID_PATTERN = r"[A-Za-z0-9_\-]+"


class AncestryConfig(BaseModel):
    """祖先路径配置

    使用示例:
        config = AncestryConfig(orphan_strategy="restrict", cache_depth=True)

        # 从选项字典创建，未知选项抛出 ConfigurationError
        config = AncestryConfig.from_options(orphan_strategy="rootify")

        # 基于全局默认配置创建
        config = AncestryConfig.from_settings(settings.ancestry, cache_depth=True)
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    path_column: str = Field(default="ancestry", min_length=1, description="祖先路径列（模型属性名）")
    cache_depth: bool = Field(default=False, description="是否启用深度缓存")
    depth_cache_column: str = Field(default="ancestry_depth", min_length=1, description="深度缓存列")
    orphan_strategy: OrphanStrategy = Field(default=OrphanStrategy.DESTROY, description="孤儿策略")
    delimiter: str = Field(default="/", min_length=1, description="路径分隔符")
    id_column: str = Field(default="id", min_length=1, description="主键属性名")
    id_type: Literal["int", "str"] = Field(default="int", description="主键类型")
    id_pattern: Optional[str] = Field(default=None, description="ID 片段正则，默认按 id_type 推断")

    @model_validator(mode="after")
    def _check_delimiter(self):
        # 分隔符中的任何字符都不能出现在 ID 片段中，否则无法无歧义地拆分路径
        token = re.compile(self.token_pattern)
        for char in self.delimiter:
            if token.fullmatch(char):
                raise ValueError(f"分隔符 {self.delimiter!r} 与 ID 格式冲突")
        return self

    @property
    def token_pattern(self) -> str:
        if self.id_pattern:
            return self.id_pattern
        return INT_ID_PATTERN if self.id_type == "int" else STR_ID_PATTERN

    @property
    def depth_column(self) -> Optional[str]:
        """深度缓存列名，未启用时为 None"""
        return self.depth_cache_column if self.cache_depth else None

    @classmethod
    def from_options(cls, **options: Any) -> "AncestryConfig":
        """从选项创建配置

        Raises:
            ConfigurationError: 未知选项或非法取值
        """
        try:
            return cls(**options)
        except PydanticValidationError as e:
            errors = e.errors()
            unknown = [str(err["loc"][0]) for err in errors if err["type"] == "extra_forbidden"]
            if unknown:
                raise ConfigurationError(
                    f"未知的祖先路径配置项: {', '.join(unknown)}",
                    code=ErrorCode.UNKNOWN_OPTION,
                    options=unknown,
                ) from e
            raise ConfigurationError(
                "祖先路径配置不合法",
                details=[f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in errors],
            ) from e

    @classmethod
    def from_settings(cls, settings: Any, **overrides: Any) -> "AncestryConfig":
        """基于 AncestrySettings 的默认值创建配置"""
        options = {
            "path_column": settings.path_column,
            "cache_depth": settings.cache_depth,
            "depth_cache_column": settings.depth_cache_column,
            "orphan_strategy": settings.orphan_strategy,
            "delimiter": settings.delimiter,
        }
        options.update(overrides)
        return cls.from_options(**options)


__all__ = [
    "OrphanStrategy",
    "AncestryConfig",
    "INT_ID_PATTERN",
    "STR_ID_PATTERN",
]
