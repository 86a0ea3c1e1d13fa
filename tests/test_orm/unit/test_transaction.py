"""事务范围测试

测试 transaction_scope 的核心功能：
1. 提交与回滚
2. 嵌套作用域
3. 树操作的原子性
"""

import sqlite3

import pytest
from sqlalchemy import event
from sqlalchemy.exc import OperationalError

from ytree.exceptions import IntegrityError, ValidationError
from ytree.orm import current_scope, transaction_scope

from tests.helpers import DestroyNode, RestrictNode, build_tree


class TestTransactionScope:
    """事务范围基础测试"""

    @pytest.fixture(autouse=True)
    def setup_db(self, tree_session):
        self.session = tree_session

    def test_commit(self):
        with transaction_scope(self.session, commit=True) as scope:
            self.session.add(DestroyNode(name="x"))
            assert current_scope() is scope
            assert not scope.is_nested

        assert current_scope() is None
        self.session.rollback()
        assert DestroyNode.query.count() == 1

    def test_flush_without_commit(self):
        with transaction_scope(self.session):
            self.session.add(DestroyNode(name="x"))

        assert DestroyNode.query.count() == 1
        self.session.rollback()
        assert DestroyNode.query.count() == 0

    def test_rollback_on_error(self):
        with pytest.raises(RuntimeError):
            with transaction_scope(self.session, commit=True):
                self.session.add(DestroyNode(name="x"))
                raise RuntimeError("boom")

        assert DestroyNode.query.count() == 0
        assert current_scope() is None

    def test_nested_scope_joins_outer(self):
        with transaction_scope(self.session) as outer:
            with transaction_scope(self.session, commit=True) as inner:
                assert inner is outer
                assert outer.is_nested
                self.session.add(DestroyNode(name="x"))
            assert not outer.is_nested

        self.session.rollback()
        assert DestroyNode.query.count() == 0

    def test_inner_error_rolls_back_outer(self):
        with pytest.raises(ValueError):
            with transaction_scope(self.session, commit=True):
                self.session.add(DestroyNode(name="outer"))
                with transaction_scope(self.session):
                    raise ValueError("inner")

        assert DestroyNode.query.count() == 0


class TestTreeOperationAtomicity:
    """树操作原子性测试"""

    @pytest.fixture(autouse=True)
    def setup_db(self, tree_session):
        self.session = tree_session

    def test_moves_in_one_transaction(self):
        nodes = build_tree(DestroyNode)

        with transaction_scope(self.session, commit=True):
            nodes["a1"].move_to(nodes["b"])
            nodes["a"].move_to(None)

        assert nodes["a1x"].ancestry == f"{nodes['root'].id}/{nodes['b'].id}/{nodes['a1'].id}"
        assert nodes["a"].is_root()

    def test_failed_move_rolls_back_earlier_moves(self):
        nodes = build_tree(DestroyNode)

        with pytest.raises(ValidationError):
            with transaction_scope(self.session, commit=True):
                nodes["a1"].move_to(nodes["b"])
                nodes["root"].move_to(nodes["a1x"])

        assert nodes["a1"].ancestry == f"{nodes['root'].id}/{nodes['a'].id}"
        assert nodes["a1x"].ancestry == f"{nodes['root'].id}/{nodes['a'].id}/{nodes['a1'].id}"

    def test_failed_rewrite_leaves_subtree_untouched(self, memory_engine):
        nodes = build_tree(DestroyNode)
        before = self._paths()

        def fail_subtree_rewrite(conn, cursor, statement, parameters, context, executemany):
            if statement.startswith("UPDATE test_ancestry_destroy") and "substr" in statement:
                raise sqlite3.OperationalError("disk I/O error")

        event.listen(memory_engine, "before_cursor_execute", fail_subtree_rewrite)
        try:
            with pytest.raises(OperationalError):
                with transaction_scope(self.session, commit=True):
                    nodes["b"].name = "renamed"
                    nodes["a"].move_to(nodes["b"])
        finally:
            event.remove(memory_engine, "before_cursor_execute", fail_subtree_rewrite)

        assert self._paths() == before
        assert nodes["b"].name == "b"

        # 回滚后同一节点仍能正常移动
        nodes["a"].move_to(nodes["b"], commit=True)
        assert nodes["a1x"].ancestry == f"{nodes['root'].id}/{nodes['b'].id}/{nodes['a'].id}/{nodes['a1'].id}"

    def _paths(self):
        self.session.expire_all()
        return {node.name: node.ancestry for node in DestroyNode.query.all()}

    def test_restricted_delete_keeps_pending_work_out(self):
        nodes = build_tree(RestrictNode)

        with pytest.raises(IntegrityError):
            with transaction_scope(self.session, commit=True):
                RestrictNode(name="extra").save()
                nodes["root"].delete()

        assert RestrictNode.query.count() == 5
