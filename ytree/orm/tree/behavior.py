"""
祖先路径树 - 行为组合对象

AncestryBehavior 持有一个模型的配置和根类型，把编解码、条件构建、深度缓存、
子树重写和孤儿处理组合在一起，由模型在保存和删除时显式调用：

    behavior.before_save(node, previous_path)   # 深度缓存 -> 验证 -> 子树重写
    behavior.before_destroy(node)               # 孤儿策略

同时提供 roots() / children_of() / at_depth() 等查询入口。
"""

from typing import Any, Dict, List, Mapping, Optional, Union

from ytree.exceptions import ConfigurationError, ErrorCode, IntegrityError, NotFoundError, ValidationError
from ytree.log import get_logger
from .ancestry_config import AncestryConfig
from .depth_cache import DepthCache
from .navigator import TreeNavigator
from .orphan_resolver import OrphanResolver
from .path_codec import PathCodec
from .predicates import PredicateBuilder
from .subtree_updater import SubtreeUpdater

logger = get_logger()


class AncestryBehavior:
    """祖先路径行为

    Args:
        root_type: 树的根类型（单表继承时为基类），所有查询和批量更新都针对它
        config: AncestryConfig、选项字典或 None（使用默认配置）

    使用示例:
        behavior = AncestryBehavior(Category, {"orphan_strategy": "rootify", "cache_depth": True})

        behavior.roots().all()
        behavior.descendants_of(node).all()
        behavior.at_depth(2).all()
    """

    def __init__(self, root_type: type, config: Union[AncestryConfig, Mapping, None] = None):
        if config is None:
            config = AncestryConfig()
        elif isinstance(config, Mapping):
            config = AncestryConfig.from_options(**config)
        elif not isinstance(config, AncestryConfig):
            raise ConfigurationError(
                f"祖先路径配置必须是 AncestryConfig 或字典: {type(config).__name__}"
            )

        self.root_type = root_type
        self.config = config
        self.codec = PathCodec(config)
        self.predicates = PredicateBuilder(root_type, config, self.codec)
        self.depth_cache = DepthCache(config, self.codec)
        self.updater = SubtreeUpdater(root_type, config, self.codec, self.predicates)
        self.orphans = OrphanResolver(root_type, config, self.codec, self.predicates, self.updater)
        self.navigator = TreeNavigator(config, self.codec)

    def __repr__(self) -> str:
        return f"<AncestryBehavior {self.root_type.__name__} strategy={self.config.orphan_strategy.value}>"

    # ==================== 会话 ====================

    @property
    def query(self):
        """根类型的 Query"""
        query = getattr(self.root_type, "query", None)
        if query is None:
            from ..db_session import db_manager
            return db_manager.get_session().query(self.root_type)
        return query

    @property
    def session(self):
        return self.query.session

    # ==================== 生命周期 ====================

    def before_save(
        self,
        node: Any,
        previous_path: Optional[str] = None,
        new_record: bool = False,
        session=None,
    ) -> None:
        """保存前调用：重算深度缓存、验证、重写子树路径

        Args:
            node: 待保存的节点
            previous_path: 数据库中的旧路径
            new_record: 是否为新建节点（新节点没有后代，不重写子树）
            session: 事务所在的 session，默认使用根类型的 session

        Raises:
            FormatError: 路径格式不正确
            ValidationError: 路径包含自身 ID 或深度缓存非法
        """
        self.depth_cache.recompute(node)
        self.validate(node)
        if not new_record:
            self.updater.update(session or self.session, node, previous_path)

    def validate(self, node: Any) -> None:
        path = getattr(node, self.config.path_column)
        self.codec.decode(path)

        node_id = getattr(node, self.config.id_column)
        if self.codec.contains(path, node_id):
            raise ValidationError(
                f"{self.root_type.__name__}[{node_id}] 的祖先路径不能包含自身",
                code=ErrorCode.SELF_REFERENCE,
                node_id=node_id,
                path=path,
            )

        self.depth_cache.validate(node)

    def before_destroy(self, node: Any, session=None) -> None:
        """删除前调用：执行孤儿策略

        Raises:
            IntegrityError: restrict 策略下仍有子节点
        """
        self.orphans.resolve(session or self.session, node)

    # ==================== 节点解析 ====================

    def to_node(self, obj: Any) -> Any:
        """接受节点实例或 ID，返回节点实例

        Raises:
            NotFoundError: ID 对应的节点不存在
        """
        if isinstance(obj, self.root_type):
            return obj
        node = self.session.get(self.root_type, obj)
        if node is None:
            raise NotFoundError(f"{self.root_type.__name__}[{obj}] 不存在", node_id=obj)
        return node

    # ==================== 查询入口 ====================

    def roots(self):
        return self.query.filter(self.predicates.root_conditions())

    def ancestors_of(self, obj: Any):
        return self.query.filter(self.predicates.ancestor_conditions(self.to_node(obj)))

    def children_of(self, obj: Any):
        return self.query.filter(self.predicates.children_conditions(self.to_node(obj)))

    def descendants_of(self, obj: Any):
        return self.query.filter(self.predicates.descendant_conditions(self.to_node(obj)))

    def subtree_of(self, obj: Any):
        return self.query.filter(self.predicates.subtree_conditions(self.to_node(obj)))

    def siblings_of(self, obj: Any):
        return self.query.filter(self.predicates.sibling_conditions(self.to_node(obj)))

    def depth_scope(self, scope: str, depth: int):
        """深度范围查询

        Raises:
            ConfigurationError: 未启用深度缓存
        """
        return self.query.filter(self.predicates.depth_conditions(scope, depth))

    def before_depth(self, depth: int):
        return self.depth_scope("before_depth", depth)

    def to_depth(self, depth: int):
        return self.depth_scope("to_depth", depth)

    def at_depth(self, depth: int):
        return self.depth_scope("at_depth", depth)

    def from_depth(self, depth: int):
        return self.depth_scope("from_depth", depth)

    def after_depth(self, depth: int):
        return self.depth_scope("after_depth", depth)

    def ordered_by_ancestry(self, *order_by, query=None):
        """根节点在前、其余按路径排序，可追加排序字段"""
        query = query if query is not None else self.query
        return query.order_by(None).order_by(*self.predicates.ordering(), *order_by)

    def arrange(self, query=None) -> Dict[Any, Dict]:
        """加载并组装为嵌套字典，同级节点按 ID 排序"""
        query = query if query is not None else self.query
        nodes = self.ordered_by_ancestry(self.predicates.id_attr, query=query).all()
        return self.navigator.arrange(nodes)

    # ==================== 维护 ====================

    def rebuild_depth_cache(self) -> int:
        """按路径重建深度缓存

        Raises:
            ConfigurationError: 未启用深度缓存
        """
        if not self.depth_cache.enabled:
            raise ConfigurationError(
                f"{self.root_type.__name__} 未启用深度缓存，无法重建",
                code=ErrorCode.DEPTH_CACHE_DISABLED,
            )
        return self.depth_cache.rebuild(self.root_type, self.session)

    def check_ancestry_integrity(self, raise_on_error: bool = True) -> List[str]:
        """检查整张表的路径完整性

        写入时不会检查祖先是否存在，这个方法用于离线排查：
        路径格式、自引用、祖先缺失、祖先路径与前缀不一致。

        Returns:
            问题描述列表

        Raises:
            IntegrityError: raise_on_error=True 且存在问题
        """
        id_attr = self.predicates.id_attr
        path_attr = self.predicates.path_attr
        rows = self.session.query(id_attr, path_attr).all()
        paths = {node_id: path for node_id, path in rows}

        problems = []
        for node_id, path in rows:
            if not self.codec.is_valid(path):
                problems.append(f"{node_id}: 路径格式不正确 {path!r}")
                continue
            ancestor_ids = self.codec.decode(path)
            if self.codec.contains(path, node_id):
                problems.append(f"{node_id}: 路径包含自身 {path!r}")
                continue
            for index, ancestor_id in enumerate(ancestor_ids):
                if ancestor_id not in paths:
                    problems.append(f"{node_id}: 祖先 {ancestor_id} 不存在")
                    break
                if (paths[ancestor_id] or None) != self.codec.encode(ancestor_ids[:index]):
                    problems.append(f"{node_id}: 祖先 {ancestor_id} 的路径与前缀不一致")
                    break

        if problems:
            logger.warning(f"{self.root_type.__name__} 路径完整性检查发现 {len(problems)} 个问题")
            if raise_on_error:
                raise IntegrityError(
                    f"{self.root_type.__name__} 路径完整性检查失败",
                    code=ErrorCode.INTEGRITY_VIOLATION,
                    details=problems,
                )
        return problems


__all__ = ["AncestryBehavior"]
