"""内存导航与字典树工具测试"""

import pytest

from ytree.exceptions import NotFoundError
from ytree.orm.tree import (
    AncestryConfig,
    PathCodec,
    TreeNavigator,
    find_node_in_tree,
    flatten_tree,
)


class Node:
    """内存节点"""

    def __init__(self, id, ancestry=None, name=None):
        self.id = id
        self.ancestry = ancestry
        self.name = name or f"n{id}"

    def to_dict(self):
        return {"id": self.id, "name": self.name}

    def __repr__(self):
        return f"<Node {self.id}>"


@pytest.fixture
def navigator():
    config = AncestryConfig()
    return TreeNavigator(config, PathCodec(config))


@pytest.fixture
def nodes():
    """
        1
        ├── 2
        │   └── 4
        └── 3
        5
    """
    return [
        Node(4, "1/2"),
        Node(1),
        Node(3, "1"),
        Node(5),
        Node(2, "1"),
    ]


def _by_id(nodes):
    return {node.id: node for node in nodes}


class TestAncestorChain:
    """祖先链测试"""

    def test_chain_order(self, navigator, nodes):
        by_id = _by_id(nodes)
        assert navigator.ancestor_chain(by_id[4], by_id) == [by_id[1], by_id[2]]
        assert navigator.ancestor_chain(by_id[1], by_id) == []

    def test_missing_ancestor_raises(self, navigator, nodes):
        by_id = _by_id(nodes)
        del by_id[2]

        with pytest.raises(NotFoundError) as exc_info:
            navigator.ancestor_chain(nodes[0], by_id)
        assert exc_info.value.extra["missing_id"] == 2

    def test_missing_ancestor_skipped(self, navigator, nodes):
        by_id = _by_id(nodes)
        del by_id[2]

        assert navigator.ancestor_chain(nodes[0], by_id, on_missing="skip") == [by_id[1]]

    def test_unknown_policy(self, navigator, nodes):
        with pytest.raises(ValueError):
            navigator.ancestor_chain(nodes[0], _by_id(nodes), on_missing="ignore")


class TestArrange:
    """嵌套结构测试"""

    def test_arrange(self, navigator, nodes):
        by_id = _by_id(nodes)
        arranged = navigator.arrange(nodes, key=lambda n: n.id)

        assert list(arranged) == [by_id[1], by_id[5]]
        assert arranged[by_id[1]] == {by_id[2]: {by_id[4]: {}}, by_id[3]: {}}

    def test_partial_set_treats_orphans_as_tops(self, navigator, nodes):
        by_id = _by_id(nodes)
        arranged = navigator.arrange([by_id[2], by_id[4]])

        assert list(arranged) == [by_id[2]]

    def test_walk_preorder(self, navigator, nodes):
        order = navigator.walk_preorder(nodes, key=lambda n: n.id)
        assert [n.id for n in order] == [1, 2, 4, 3, 5]

    def test_walk_from_root(self, navigator, nodes):
        by_id = _by_id(nodes)
        order = navigator.walk_preorder(nodes, root=by_id[2])
        assert [n.id for n in order] == [2, 4]

    def test_sort_by_ancestry(self, navigator, nodes):
        ordered = navigator.sort_by_ancestry(nodes)
        position = {n.id: i for i, n in enumerate(ordered)}

        for node in nodes:
            parent_id = navigator.codec.parent_id(node.ancestry)
            if parent_id is not None:
                assert position[parent_id] < position[node.id]


class TestTreeList:
    """字典树测试"""

    def test_to_tree_list(self, navigator, nodes):
        tree = navigator.to_tree_list(nodes, key=lambda n: n.id)

        assert [item["id"] for item in tree] == [1, 5]
        assert [child["id"] for child in tree[0]["children"]] == [2, 3]
        assert tree[0]["children"][0]["children"][0]["id"] == 4

    def test_custom_children_field(self, navigator, nodes):
        tree = navigator.to_tree_list(nodes, children_field="items", key=lambda n: n.id)
        assert "items" in tree[0]
        assert "children" not in tree[0]

    def test_flatten_tree(self, navigator, nodes):
        tree = navigator.to_tree_list(nodes, key=lambda n: n.id)
        flat = flatten_tree(tree, level_field="level")

        assert [(item["id"], item["level"]) for item in flat] == [
            (1, 0), (2, 1), (4, 2), (3, 1), (5, 0)
        ]
        assert all("children" not in item for item in flat)

    def test_find_node_in_tree(self, navigator, nodes):
        tree = navigator.to_tree_list(nodes, key=lambda n: n.id)

        assert find_node_in_tree(tree, 4)["name"] == "n4"
        assert find_node_in_tree(tree, 99) is None
