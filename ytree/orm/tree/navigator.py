"""
祖先路径树 - 内存导航

基于已经加载的节点计算祖先链、嵌套结构和遍历顺序，不访问数据库。

使用示例:
    nodes = Category.subtree_of(root).all()
    navigator = Category.ancestry_behavior().navigator

    navigator.arrange(nodes)          # {root: {child: {...}}}
    navigator.walk_preorder(nodes)    # [root, child, grandchild, ...]
    navigator.to_tree_list(nodes)     # [{"id": 1, ..., "children": [...]}]
"""

from collections import defaultdict
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from ytree.exceptions import NotFoundError
from .ancestry_config import AncestryConfig
from .path_codec import PathCodec


class TreeNavigator:
    """内存树导航器"""

    def __init__(self, config: AncestryConfig, codec: PathCodec):
        self.config = config
        self.codec = codec

    def _id(self, node: Any) -> Any:
        return getattr(node, self.config.id_column)

    def _parent_id(self, node: Any) -> Any:
        return self.codec.parent_id(getattr(node, self.config.path_column))

    # ==================== 祖先链 ====================

    def ancestor_chain(
        self,
        node: Any,
        nodes_by_id: Mapping[Any, Any],
        on_missing: str = "raise",
    ) -> List[Any]:
        """按 根 -> 父 顺序返回祖先节点

        Args:
            node: 目标节点
            nodes_by_id: ID -> 节点 的映射
            on_missing: 祖先不在映射中时的处理方式，"raise" 或 "skip"

        Raises:
            NotFoundError: on_missing="raise" 且祖先缺失
        """
        if on_missing not in ("raise", "skip"):
            raise ValueError(f"on_missing 只能是 'raise' 或 'skip': {on_missing!r}")

        chain = []
        for ancestor_id in self.codec.decode(getattr(node, self.config.path_column)):
            ancestor = nodes_by_id.get(ancestor_id)
            if ancestor is None:
                if on_missing == "raise":
                    raise NotFoundError(
                        f"祖先节点不存在: {ancestor_id}",
                        node_id=self._id(node),
                        missing_id=ancestor_id,
                    )
                continue
            chain.append(ancestor)
        return chain

    # ==================== 分组与遍历 ====================

    def _group(self, nodes: Sequence[Any], key: Optional[Callable] = None):
        """按父节点分组，父节点不在集合中的节点视为顶层节点"""
        ids = {self._id(node) for node in nodes}
        tops: List[Any] = []
        children: Dict[Any, List[Any]] = defaultdict(list)
        for node in nodes:
            parent_id = self._parent_id(node)
            if parent_id is not None and parent_id in ids:
                children[parent_id].append(node)
            else:
                tops.append(node)
        if key is not None:
            tops.sort(key=key)
            for group in children.values():
                group.sort(key=key)
        return tops, children

    def arrange(self, nodes: Sequence[Any], key: Optional[Callable] = None) -> Dict[Any, Dict]:
        """组装为嵌套字典 {节点: {子节点: {...}}}"""
        tops, children = self._group(nodes, key)

        def build(node):
            return {child: build(child) for child in children.get(self._id(node), [])}

        return {node: build(node) for node in tops}

    def walk_preorder(
        self,
        nodes: Sequence[Any],
        root: Any = None,
        key: Optional[Callable] = None,
    ) -> List[Any]:
        """先序遍历

        Args:
            nodes: 已加载的节点
            root: 起始节点，为 None 时遍历所有顶层节点
            key: 同级节点排序函数
        """
        tops, children = self._group(nodes, key)
        stack = list(reversed([root] if root is not None else tops))
        result = []
        while stack:
            node = stack.pop()
            result.append(node)
            stack.extend(reversed(children.get(self._id(node), [])))
        return result

    def sort_by_ancestry(self, nodes: Sequence[Any], key: Optional[Callable] = None) -> List[Any]:
        """排序使每个节点都排在其父节点之后"""
        return self.walk_preorder(nodes, key=key)

    def to_tree_list(
        self,
        nodes: Sequence[Any],
        serializer: Optional[Callable[[Any], Dict[str, Any]]] = None,
        children_field: str = "children",
        key: Optional[Callable] = None,
    ) -> List[Dict[str, Any]]:
        """转换为字典树，适合直接作为 API 响应

        Args:
            serializer: 节点转字典的函数，默认使用 node.to_dict()
        """
        serializer = serializer or (lambda node: node.to_dict())

        def convert(arranged):
            result = []
            for node, sub in arranged.items():
                data = dict(serializer(node))
                data[children_field] = convert(sub)
                result.append(data)
            return result

        return convert(self.arrange(nodes, key))


def flatten_tree(
    tree: List[Dict[str, Any]],
    children_field: str = "children",
    level_field: Optional[str] = None,
    _current_level: int = 0,
) -> List[Dict[str, Any]]:
    """将 to_tree_list 的结果展平（先序），可选写入层级（根为 0）"""
    result: List[Dict[str, Any]] = []
    for node in tree:
        node_copy = dict(node)
        children = node_copy.pop(children_field, [])
        if level_field:
            node_copy[level_field] = _current_level
        result.append(node_copy)
        if children:
            result.extend(flatten_tree(children, children_field, level_field, _current_level + 1))
    return result


def find_node_in_tree(
    tree: List[Dict[str, Any]],
    target_id: Any,
    id_field: str = "id",
    children_field: str = "children",
) -> Optional[Dict[str, Any]]:
    """在字典树中查找指定 ID 的节点，未找到返回 None"""
    for node in tree:
        if node.get(id_field) == target_id:
            return node
        found = find_node_in_tree(node.get(children_field, []), target_id, id_field, children_field)
        if found:
            return found
    return None


__all__ = ["TreeNavigator", "flatten_tree", "find_node_in_tree"]
