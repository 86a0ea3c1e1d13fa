"""祖先路径树扩展模块

使用祖先路径（Ancestry）模式：每个节点存储从根到父节点的 ID 链，
如根节点为 NULL，节点 9 的路径为 "1/4"。

主要组件:
- AncestryMixin: 模型 Mixin，提供实例访问方法和类级查询入口
- AncestryFieldsMixin: 默认字段定义（ancestry / ancestry_depth）
- AncestryConfig / OrphanStrategy: 模型级配置
- AncestryBehavior: 组合对象，供不使用 Mixin 的模型显式调用
- 工具函数: 字典树处理

使用示例:
    from ytree.orm import CoreModel
    from ytree.orm.tree import AncestryMixin, AncestryFieldsMixin

    class Menu(AncestryMixin, AncestryFieldsMixin, CoreModel):
        __ancestry__ = {"orphan_strategy": "restrict"}

        title = mapped_column(String(100))

    menu = Menu.get(1)
    menu.children()                 # 直接子节点
    menu.descendants()              # 所有后代
    menu.ancestors()                # 祖先（根 -> 父）
    menu.move_to(new_parent)        # 移动节点

    tree = Menu.get_tree_list()     # 嵌套字典树
"""

from .ancestry_config import AncestryConfig, OrphanStrategy, INT_ID_PATTERN, STR_ID_PATTERN
from .path_codec import PathCodec
from .predicates import DEPTH_SCOPES, PredicateBuilder
from .depth_cache import DepthCache
from .subtree_updater import SubtreeUpdater
from .orphan_resolver import OrphanResolver
from .navigator import TreeNavigator, flatten_tree, find_node_in_tree
from .behavior import AncestryBehavior
from .ancestry_fields import AncestryFieldsMixin
from .ancestry_mixin import AncestryMixin

__all__ = [
    # Mixin
    "AncestryMixin",
    "AncestryFieldsMixin",
    # 配置
    "AncestryConfig",
    "OrphanStrategy",
    "INT_ID_PATTERN",
    "STR_ID_PATTERN",
    # 组件
    "AncestryBehavior",
    "PathCodec",
    "PredicateBuilder",
    "DEPTH_SCOPES",
    "DepthCache",
    "SubtreeUpdater",
    "OrphanResolver",
    "TreeNavigator",
    # 工具函数
    "flatten_tree",
    "find_node_in_tree",
]
