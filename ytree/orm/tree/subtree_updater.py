"""
祖先路径树 - 子树路径重写

节点路径变化时，用一条批量 UPDATE 把所有后代路径的前缀从旧前缀替换为新前缀，
后缀保持不变：

    节点 5 从 "1/2" 移到 "1/3"
    旧前缀 "1/2/5"，新前缀 "1/3/5"
    后代 "1/2/5/9" -> "1/3/5/9"

批量更新绕过逐行的保存逻辑，但与触发它的保存处于同一事务中。
"""

from typing import Any, Dict, Optional

from sqlalchemy import String, func, literal, update

from ytree.log import get_logger
from .ancestry_config import AncestryConfig
from .path_codec import PathCodec
from .predicates import PredicateBuilder

logger = get_logger()


class SubtreeUpdater:
    """子树路径重写器"""

    def __init__(self, model: type, config: AncestryConfig, codec: PathCodec, predicates: PredicateBuilder):
        self.model = model
        self.config = config
        self.codec = codec
        self.predicates = predicates

    def update(self, session, node: Any, previous_path: Optional[str]) -> int:
        """节点路径变化后重写其后代路径

        Args:
            session: 当前事务所在的 session
            node: 已持久化的节点（路径已修改，尚未写入）
            previous_path: 数据库中的旧路径

        Returns:
            受影响的行数，路径未变化时为 0
        """
        new_path = getattr(node, self.config.path_column)
        if (previous_path or None) == (new_path or None):
            return 0

        node_id = getattr(node, self.config.id_column)
        old_prefix = self.codec.child_path_of(previous_path, node_id)
        new_prefix = self.codec.child_path_of(new_path, node_id)
        return self.rewrite(session, old_prefix, new_prefix)

    def rewrite(self, session, old_prefix: str, new_prefix: Optional[str] = None) -> int:
        """把路径为 old_prefix 或以 old_prefix + 分隔符开头的行改写到 new_prefix 下

        new_prefix 为 None 时去掉整个前缀：路径等于 old_prefix 的行成为根节点，
        更深的行保留前缀之后的部分。

        Returns:
            受影响的行数
        """
        path_attr = self.predicates.path_attr
        depth_attr = self.predicates.depth_attr
        delimiter = self.codec.delimiter
        delta = self.codec.depth(new_prefix) - self.codec.depth(old_prefix)

        if new_prefix:
            values = {path_attr: literal(new_prefix, String()) + func.substr(path_attr, len(old_prefix) + 1)}
            self._shift_depth(values, depth_attr, delta)
            count = self._execute(session, self.predicates.prefix_conditions(old_prefix), values)
        else:
            # 先处理直接子节点，之后它们的路径为 NULL，不会再被第二条语句匹配
            values = {path_attr: None}
            self._shift_depth(values, depth_attr, delta)
            count = self._execute(session, path_attr == old_prefix, values)

            values = {path_attr: func.substr(path_attr, len(old_prefix) + len(delimiter) + 1)}
            self._shift_depth(values, depth_attr, delta)
            count += self._execute(
                session,
                path_attr.startswith(old_prefix + delimiter, autoescape=True),
                values,
            )

        logger.debug(
            f"{self.model.__name__} 子树路径重写: {old_prefix!r} -> {new_prefix!r}，"
            f"深度变化 {delta:+d}，影响 {count} 行"
        )
        return count

    @staticmethod
    def _shift_depth(values: Dict, depth_attr, delta: int) -> None:
        if depth_attr is not None and delta:
            values[depth_attr] = depth_attr + delta

    def _execute(self, session, condition, values: Dict) -> int:
        stmt = (
            update(self.model)
            .where(condition)
            .values(values)
            .execution_options(synchronize_session="fetch")
        )
        # 禁止自动 flush：后代先于触发节点本身写入
        with session.no_autoflush:
            result = session.execute(stmt)
        return max(result.rowcount or 0, 0)


__all__ = ["SubtreeUpdater"]
