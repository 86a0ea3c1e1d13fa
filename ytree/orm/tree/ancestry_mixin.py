"""祖先路径树 Mixin

使用祖先路径（Ancestry）模式：每个节点只存储从根到父节点的 ID 链，如 "1/4/9"，
父、子、祖先、后代、兄弟、深度都由这一列推导，不需要递归查询。

    - 查询后代：路径前缀匹配（LIKE '1/4/9/%'）
    - 移动节点：一条批量 UPDATE 重写所有后代的路径前缀
    - 删除节点：按孤儿策略处理子节点

使用示例:
    from ytree.orm import CoreModel
    from ytree.orm.tree import AncestryMixin, AncestryFieldsMixin

    class Category(AncestryMixin, AncestryFieldsMixin, CoreModel):
        __ancestry__ = {"orphan_strategy": "rootify", "cache_depth": True}

        name = mapped_column(String(100))

    root = Category(name="电子产品").save(commit=True)
    phone = Category(name="手机", ancestry=root.child_ancestry()).save(commit=True)

    phone.parent()          # root
    root.children()         # [phone]
    Category.at_depth(1)    # Query: 所有深度为 1 的节点
    phone.move_to(other)    # 移动节点，后代路径同步更新

注意: AncestryMixin 必须写在 CoreModel 之前，保证 save()/delete() 先经过树逻辑。
"""

from typing import Any, List, Optional

from sqlalchemy import event, inspect as sa_inspect
from sqlalchemy.orm.base import NO_VALUE

from ytree.exceptions import ValidationError
from ..transaction import transaction_scope
from .behavior import AncestryBehavior

# InstanceState.info 中的键：路径在上次 save() 之后第一次被修改前的值
PERSISTED_PATH_KEY = "ytree.persisted_ancestry"


class AncestryMixin:
    """祖先路径树 Mixin

    可配置属性（子类可覆盖）:
        - __ancestry__: AncestryConfig 或选项字典，见 AncestryConfig

    单表继承时只在基类上声明 __ancestry__，子类共享基类的行为对象，
    所有查询和批量更新都针对基类。
    """

    __ancestry__ = None
    __ancestry_behavior__ = None

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)

        if cls.__dict__.get("__abstract__", False):
            return

        if "__ancestry__" in cls.__dict__ or cls.__ancestry_behavior__ is None:
            cls.__ancestry_behavior__ = AncestryBehavior(cls, cls.__ancestry__)

    # ==================== 行为与配置 ====================

    @classmethod
    def ancestry_behavior(cls) -> AncestryBehavior:
        return cls.__ancestry_behavior__

    @property
    def _ancestry(self) -> Optional[str]:
        return getattr(self, self.__ancestry_behavior__.config.path_column)

    @property
    def _node_id(self) -> Any:
        return getattr(self, self.__ancestry_behavior__.config.id_column)

    # ==================== 路径 ====================

    def ancestor_ids(self) -> List[Any]:
        """祖先 ID 列表（根 -> 父）"""
        return self.__ancestry_behavior__.codec.decode(self._ancestry)

    def path_ids(self) -> List[Any]:
        """从根到当前节点的 ID 列表"""
        return self.ancestor_ids() + [self._node_id]

    def get_parent_id(self) -> Optional[Any]:
        return self.__ancestry_behavior__.codec.parent_id(self._ancestry)

    def get_root_id(self) -> Any:
        return self.__ancestry_behavior__.codec.root_id(self._ancestry, self._node_id)

    def depth(self) -> int:
        """深度，根节点为 0"""
        return self.__ancestry_behavior__.codec.depth(self._ancestry)

    def child_ancestry(self) -> str:
        """子节点应使用的路径

        Raises:
            ValidationError: 节点尚未保存，没有 ID
        """
        if self._node_id is None:
            raise ValidationError(f"{self.__class__.__name__} 尚未保存，无法生成子节点路径")
        return self.__ancestry_behavior__.codec.child_path(self)

    # ==================== 节点查询方法 ====================

    def parent(self):
        """父节点，根节点返回 None"""
        parent_id = self.get_parent_id()
        if parent_id is None:
            return None
        behavior = self.__ancestry_behavior__
        return behavior.session.get(behavior.root_type, parent_id)

    def root(self):
        """根节点，根节点返回自身"""
        if self.is_root():
            return self
        behavior = self.__ancestry_behavior__
        return behavior.session.get(behavior.root_type, self.get_root_id())

    def ancestors(self) -> List:
        """祖先节点列表（根 -> 父），缺失的祖先被跳过"""
        behavior = self.__ancestry_behavior__
        by_id = {node._node_id: node for node in behavior.ancestors_of(self).all()}
        return behavior.navigator.ancestor_chain(self, by_id, on_missing="skip")

    def path_nodes(self) -> List:
        """从根到当前节点的节点列表"""
        return self.ancestors() + [self]

    def children(self) -> List:
        behavior = self.__ancestry_behavior__
        return behavior.children_of(self).order_by(behavior.predicates.id_attr).all()

    def child_ids(self) -> List[Any]:
        return self._ids(self.__ancestry_behavior__.predicates.children_conditions(self))

    def descendants(self) -> List:
        """所有后代，按祖先路径排序"""
        behavior = self.__ancestry_behavior__
        return behavior.ordered_by_ancestry(
            behavior.predicates.id_attr, query=behavior.descendants_of(self)
        ).all()

    def descendant_ids(self) -> List[Any]:
        return self._ids(self.__ancestry_behavior__.predicates.descendant_conditions(self))

    def subtree(self) -> List:
        """当前节点及所有后代，按祖先路径排序"""
        behavior = self.__ancestry_behavior__
        return behavior.ordered_by_ancestry(
            behavior.predicates.id_attr, query=behavior.subtree_of(self)
        ).all()

    def subtree_ids(self) -> List[Any]:
        return self._ids(self.__ancestry_behavior__.predicates.subtree_conditions(self))

    def siblings(self, include_self: bool = True) -> List:
        """同一父节点下的节点，默认包含自身"""
        behavior = self.__ancestry_behavior__
        query = behavior.siblings_of(self)
        if not include_self:
            query = query.filter(behavior.predicates.id_attr != self._node_id)
        return query.order_by(behavior.predicates.id_attr).all()

    def sibling_ids(self) -> List[Any]:
        return self._ids(self.__ancestry_behavior__.predicates.sibling_conditions(self))

    def _ids(self, condition) -> List[Any]:
        behavior = self.__ancestry_behavior__
        id_attr = behavior.predicates.id_attr
        rows = behavior.session.query(id_attr).filter(condition).order_by(id_attr).all()
        return [row[0] for row in rows]

    # ==================== 节点状态判断 ====================

    def is_root(self) -> bool:
        return not self._ancestry

    def has_children(self) -> bool:
        behavior = self.__ancestry_behavior__
        return behavior.session.query(behavior.predicates.id_attr).filter(
            behavior.predicates.children_conditions(self)
        ).first() is not None

    def is_leaf(self) -> bool:
        return not self.has_children()

    def has_siblings(self) -> bool:
        return len(self.sibling_ids()) > 1

    def is_only_child(self) -> bool:
        return not self.has_siblings()

    def is_ancestor_of(self, node) -> bool:
        """判断当前节点是否为指定节点的祖先（只比较路径，不访问数据库）"""
        return self.__ancestry_behavior__.codec.contains(node._ancestry, self._node_id)

    def is_descendant_of(self, node) -> bool:
        return node.is_ancestor_of(self)

    # ==================== 节点操作方法 ====================

    def set_parent(self, parent) -> None:
        """设置父节点（节点实例、ID 或 None），保存时才会同步后代

        Raises:
            NotFoundError: 父节点 ID 不存在
        """
        config = self.__ancestry_behavior__.config
        if parent is None:
            setattr(self, config.path_column, None)
            return
        parent = self.__ancestry_behavior__.to_node(parent)
        setattr(self, config.path_column, parent.child_ancestry())

    def move_to(self, parent, commit: bool = False):
        """移动到新的父节点下（None 表示成为根节点）并保存

        Raises:
            ValidationError: 移动到自身或自身的后代下
        """
        self.set_parent(parent)
        return self.save(commit=commit)

    # ==================== 持久化 ====================

    def _previous_ancestry(self):
        """返回 (后代路径所基于的旧路径, 是否为新节点)

        旧路径由路径属性的 set 事件记录，不依赖属性历史：
        autoflush 可能在 save() 之前就写入新路径并清空历史。
        """
        state = sa_inspect(self)
        if state.transient or state.pending:
            return None, True
        if PERSISTED_PATH_KEY in state.info:
            return state.info[PERSISTED_PATH_KEY], False
        return self._ancestry, False

    def save(self, commit: bool = False):
        """保存节点

        顺序: 重算深度缓存 -> 验证路径 -> 重写后代路径 -> 写入节点，全部在同一事务中，
        任何一步失败整个 session 回滚。

        Raises:
            FormatError: 路径格式不正确
            ValidationError: 路径包含自身 ID 或深度缓存非法
        """
        previous_path, new_record = self._previous_ancestry()
        with transaction_scope(self.session, commit=commit):
            self.__ancestry_behavior__.before_save(
                self, previous_path, new_record=new_record, session=self.session
            )
            super().save()
        sa_inspect(self).info.pop(PERSISTED_PATH_KEY, None)
        return self

    def delete(self, commit: bool = False):
        """删除节点，先按孤儿策略处理子节点

        Raises:
            IntegrityError: restrict 策略下仍有子节点
        """
        with transaction_scope(self.session, commit=commit):
            self.__ancestry_behavior__.before_destroy(self, session=self.session)
            super().delete()

    # ==================== 类方法（查询入口） ====================

    @classmethod
    def roots(cls):
        return cls.__ancestry_behavior__.roots()

    @classmethod
    def ancestors_of(cls, node):
        return cls.__ancestry_behavior__.ancestors_of(node)

    @classmethod
    def children_of(cls, node):
        return cls.__ancestry_behavior__.children_of(node)

    @classmethod
    def descendants_of(cls, node):
        return cls.__ancestry_behavior__.descendants_of(node)

    @classmethod
    def subtree_of(cls, node):
        return cls.__ancestry_behavior__.subtree_of(node)

    @classmethod
    def siblings_of(cls, node):
        return cls.__ancestry_behavior__.siblings_of(node)

    @classmethod
    def before_depth(cls, depth: int):
        return cls.__ancestry_behavior__.before_depth(depth)

    @classmethod
    def to_depth(cls, depth: int):
        return cls.__ancestry_behavior__.to_depth(depth)

    @classmethod
    def at_depth(cls, depth: int):
        return cls.__ancestry_behavior__.at_depth(depth)

    @classmethod
    def from_depth(cls, depth: int):
        return cls.__ancestry_behavior__.from_depth(depth)

    @classmethod
    def after_depth(cls, depth: int):
        return cls.__ancestry_behavior__.after_depth(depth)

    @classmethod
    def ordered_by_ancestry(cls, *order_by):
        return cls.__ancestry_behavior__.ordered_by_ancestry(*order_by)

    @classmethod
    def arrange(cls, query=None):
        return cls.__ancestry_behavior__.arrange(query)

    @classmethod
    def get_tree_list(cls, root=None, serializer=None) -> List[dict]:
        """获取嵌套的字典树

        Args:
            root: 根节点（实例或 ID），None 表示整个森林
            serializer: 节点转字典函数，默认 to_dict()
        """
        behavior = cls.__ancestry_behavior__
        query = behavior.subtree_of(root) if root is not None else behavior.query
        nodes = behavior.ordered_by_ancestry(behavior.predicates.id_attr, query=query).all()
        return behavior.navigator.to_tree_list(nodes, serializer=serializer)

    @classmethod
    def rebuild_depth_cache(cls) -> int:
        return cls.__ancestry_behavior__.rebuild_depth_cache()

    @classmethod
    def check_ancestry_integrity(cls, raise_on_error: bool = True) -> List[str]:
        return cls.__ancestry_behavior__.check_ancestry_integrity(raise_on_error)


# ==================== 旧路径跟踪 ====================

def _remember_persisted_ancestry(target, value, oldvalue, initiator):
    """已持久化节点的路径第一次被修改时，记下修改前的值"""
    state = sa_inspect(target)
    if state.key is None or PERSISTED_PATH_KEY in state.info or oldvalue is NO_VALUE:
        return
    state.info[PERSISTED_PATH_KEY] = oldvalue


@event.listens_for(AncestryMixin, "mapper_configured", propagate=True)
def _track_ancestry_changes(mapper, cls):
    behavior = cls.__ancestry_behavior__
    # 单表继承的子类共享基类属性上的监听器
    if behavior is None or behavior.root_type is not cls:
        return
    event.listen(
        getattr(cls, behavior.config.path_column),
        "set",
        _remember_persisted_ancestry,
        active_history=True,
        propagate=True,
    )


__all__ = ["AncestryMixin"]
