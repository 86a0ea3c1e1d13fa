"""
祖先路径树 - 深度缓存

深度缓存列始终等于路径中的祖先数量，用于带索引的深度范围查询。
"""

from typing import Any

from sqlalchemy import update

from ytree.exceptions import ErrorCode, ValidationError
from ytree.log import get_logger
from .ancestry_config import AncestryConfig
from .path_codec import PathCodec

logger = get_logger()


class DepthCache:
    """深度缓存维护

    未启用时所有方法都是空操作。
    """

    def __init__(self, config: AncestryConfig, codec: PathCodec):
        self.config = config
        self.codec = codec

    @property
    def enabled(self) -> bool:
        return self.config.cache_depth

    def recompute(self, node: Any) -> None:
        """根据路径重新计算深度（每次保存、验证之前无条件执行）"""
        if not self.enabled:
            return
        depth = self.codec.depth(getattr(node, self.config.path_column))
        setattr(node, self.config.depth_cache_column, depth)

    def validate(self, node: Any) -> None:
        """深度必须是非负整数

        Raises:
            ValidationError: 深度为空、非整数或小于 0
        """
        if not self.enabled:
            return
        depth = getattr(node, self.config.depth_cache_column)
        if isinstance(depth, bool) or not isinstance(depth, int) or depth < 0:
            raise ValidationError(
                f"深度缓存必须是非负整数: {depth!r}",
                code=ErrorCode.INVALID_DEPTH,
                node_id=getattr(node, self.config.id_column, None),
                depth=depth,
            )

    def rebuild(self, model: type, session) -> int:
        """按路径重建所有行的深度缓存

        Returns:
            更新的行数
        """
        if not self.enabled:
            return 0
        path_attr = getattr(model, self.config.path_column)
        id_attr = getattr(model, self.config.id_column)
        depth_attr = getattr(model, self.config.depth_cache_column)

        updated = 0
        rows = session.query(id_attr, path_attr, depth_attr).all()
        for node_id, path, cached in rows:
            depth = self.codec.depth(path)
            if cached == depth:
                continue
            session.execute(
                update(model)
                .where(id_attr == node_id)
                .values({depth_attr: depth})
                .execution_options(synchronize_session="fetch")
            )
            updated += 1

        logger.debug(f"{model.__name__} 深度缓存重建完成，更新 {updated} 行")
        return updated


__all__ = ["DepthCache"]
