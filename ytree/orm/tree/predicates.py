"""
祖先路径树 - 查询条件构建

根据节点的 ID 和路径构建 SQLAlchemy 过滤表达式。所有条件都是结构化表达式，
可以直接传给 Query.filter() 或 update().where()。
"""

import operator
from typing import Any, Callable, Dict, Optional

from sqlalchemy import case, false, or_
from sqlalchemy.sql import ColumnElement

from ytree.exceptions import ConfigurationError, ErrorCode
from .ancestry_config import AncestryConfig
from .path_codec import PathCodec


# 深度范围查询: 名称 -> 比较运算
DEPTH_SCOPES: Dict[str, Callable[[Any, Any], Any]] = {
    "before_depth": operator.lt,
    "to_depth": operator.le,
    "at_depth": operator.eq,
    "from_depth": operator.ge,
    "after_depth": operator.gt,
}


class PredicateBuilder:
    """查询条件构建器

    给定节点（ID 为 I，路径为 P，祖先列表为 A）：

    - ancestor_conditions:   id IN A
    - parent_conditions:     id = A[-1]
    - children_conditions:   path = encode(A + [I])
    - descendant_conditions: path = encode(A + [I]) OR path LIKE 'encode(A + [I])/%'
    - subtree_conditions:    id = I OR descendant_conditions
    - sibling_conditions:    path = P（包含节点自身）
    - root_conditions:       path IS NULL OR path = ''

    使用示例:
        builder = PredicateBuilder(Category, config, codec)
        Category.query.filter(builder.descendant_conditions(node)).all()
    """

    def __init__(self, model: type, config: AncestryConfig, codec: PathCodec):
        self.model = model
        self.config = config
        self.codec = codec

    @property
    def path_attr(self):
        return getattr(self.model, self.config.path_column)

    @property
    def id_attr(self):
        return getattr(self.model, self.config.id_column)

    @property
    def depth_attr(self):
        if not self.config.cache_depth:
            return None
        return getattr(self.model, self.config.depth_cache_column)

    def _node_id(self, node: Any) -> Any:
        return getattr(node, self.config.id_column)

    def _node_path(self, node: Any) -> Optional[str]:
        return getattr(node, self.config.path_column)

    # ==================== 节点关系条件 ====================

    def ancestor_conditions(self, node: Any) -> ColumnElement:
        ancestor_ids = self.codec.decode(self._node_path(node))
        if not ancestor_ids:
            return false()
        return self.id_attr.in_(ancestor_ids)

    def parent_conditions(self, node: Any) -> ColumnElement:
        parent_id = self.codec.parent_id(self._node_path(node))
        if parent_id is None:
            return false()
        return self.id_attr == parent_id

    def children_conditions(self, node: Any) -> ColumnElement:
        return self.path_attr == self.codec.child_path(node)

    def descendant_conditions(self, node: Any) -> ColumnElement:
        return self.prefix_conditions(self.codec.child_path(node))

    def subtree_conditions(self, node: Any) -> ColumnElement:
        return or_(self.id_attr == self._node_id(node), self.descendant_conditions(node))

    def sibling_conditions(self, node: Any) -> ColumnElement:
        path = self._node_path(node)
        if not path:
            return self.root_conditions()
        return self.path_attr == path

    def root_conditions(self) -> ColumnElement:
        return or_(self.path_attr.is_(None), self.path_attr == "")

    def prefix_conditions(self, prefix: str) -> ColumnElement:
        """路径等于 prefix 或以 prefix + 分隔符开头（LIKE 通配符会被转义）"""
        return or_(
            self.path_attr == prefix,
            self.path_attr.startswith(prefix + self.codec.delimiter, autoescape=True),
        )

    # ==================== 深度条件 ====================

    def depth_conditions(self, scope: str, depth: int) -> ColumnElement:
        """深度范围条件

        Args:
            scope: before_depth / to_depth / at_depth / from_depth / after_depth
            depth: 深度值

        Raises:
            ConfigurationError: 未启用深度缓存或未知的范围名称
        """
        compare = DEPTH_SCOPES.get(scope)
        if compare is None:
            raise ConfigurationError(f"未知的深度查询: {scope}", scope=scope)
        if not self.config.cache_depth:
            raise ConfigurationError(
                f"{self.model.__name__} 未启用深度缓存，无法使用 {scope} 查询",
                code=ErrorCode.DEPTH_CACHE_DISABLED,
                scope=scope,
            )
        return compare(self.depth_attr, depth)

    # ==================== 排序 ====================

    def ordering(self) -> tuple:
        """按祖先路径排序：根节点在前，其余按路径排序"""
        path = self.path_attr
        return (
            case((or_(path.is_(None), path == ""), 0), else_=1),
            path,
        )


__all__ = ["DEPTH_SCOPES", "PredicateBuilder"]
