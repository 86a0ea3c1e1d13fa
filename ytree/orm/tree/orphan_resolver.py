"""
祖先路径树 - 孤儿处理

删除节点之前，按模型配置的孤儿策略处理其子节点：

    删除请求 -> 检查子节点 -> 无子节点: 直接删除
                          -> 有子节点: destroy  删除整棵子树
                                       rootify  子节点上移到被删节点的父节点下
                                       none     子节点成为根节点
                                       restrict 拒绝删除
"""

from typing import Any

from ytree.exceptions import IntegrityError
from ytree.log import get_logger
from .ancestry_config import AncestryConfig, OrphanStrategy
from .path_codec import PathCodec
from .predicates import PredicateBuilder
from .subtree_updater import SubtreeUpdater

logger = get_logger()


class OrphanResolver:
    """孤儿策略执行器"""

    def __init__(
        self,
        model: type,
        config: AncestryConfig,
        codec: PathCodec,
        predicates: PredicateBuilder,
        updater: SubtreeUpdater,
    ):
        self.model = model
        self.config = config
        self.codec = codec
        self.predicates = predicates
        self.updater = updater

    def resolve(self, session, node: Any) -> None:
        """在节点自身被删除之前处理其子节点

        Raises:
            IntegrityError: restrict 策略下节点仍有子节点
        """
        strategy = self.config.orphan_strategy
        node_id = getattr(node, self.config.id_column)

        has_children = session.query(self.predicates.id_attr).filter(
            self.predicates.children_conditions(node)
        ).first() is not None
        if not has_children:
            return

        logger.debug(f"{self.model.__name__}[{node_id}] 删除前执行孤儿策略: {strategy.value}")

        if strategy == OrphanStrategy.RESTRICT:
            logger.warning(f"{self.model.__name__}[{node_id}] 仍有子节点，restrict 策略拒绝删除")
            raise IntegrityError(
                f"{self.model.__name__}[{node_id}] 仍有子节点，不能删除",
                node_id=node_id,
            )

        if strategy == OrphanStrategy.DESTROY:
            self._destroy_descendants(session, node)
        elif strategy == OrphanStrategy.ROOTIFY:
            # 子节点的路径变为被删节点自己的路径
            self.updater.rewrite(
                session,
                self.codec.child_path(node),
                getattr(node, self.config.path_column) or None,
            )
        elif strategy == OrphanStrategy.NONE:
            self.updater.rewrite(session, self.codec.child_path(node), None)

    def _destroy_descendants(self, session, node: Any) -> None:
        descendants = session.query(self.model).filter(
            self.predicates.descendant_conditions(node)
        ).all()
        for descendant in descendants:
            session.delete(descendant)
        logger.debug(
            f"{self.model.__name__}[{getattr(node, self.config.id_column)}] "
            f"级联删除 {len(descendants)} 个后代节点"
        )


__all__ = ["OrphanResolver"]
