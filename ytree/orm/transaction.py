"""
事务作用域

树节点的一次保存或删除可能产生多条 SQL（节点本身、子树路径重写、孤儿处理），
这些写操作必须在同一个事务中完成：任何一步失败，整个 session 回滚。

使用示例:
    from ytree.orm import transaction_scope

    with transaction_scope(session, commit=True):
        node.ancestry = new_parent.child_ancestry()
        node.save()
        other.delete()
    # 全部成功后提交；任何异常都会回滚并重新抛出
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Generator, Optional

from sqlalchemy.orm import Session

from ytree.log import transaction_logger as logger


class TransactionScope:
    """事务作用域状态"""

    def __init__(self, session: Session, commit: bool = False):
        self.session = session
        self.commit = commit
        self.nesting_level = 0

    @property
    def is_nested(self) -> bool:
        return self.nesting_level > 0

    def __repr__(self) -> str:
        return f"<TransactionScope commit={self.commit} level={self.nesting_level}>"


_current_scope: ContextVar[Optional[TransactionScope]] = ContextVar(
    "ytree_transaction_scope", default=None
)


def current_scope() -> Optional[TransactionScope]:
    """获取当前活跃的事务作用域"""
    return _current_scope.get()


@contextmanager
def transaction_scope(session: Session, commit: bool = False) -> Generator[TransactionScope, None, None]:
    """创建事务作用域

    已有同一 session 的活跃作用域时加入该作用域：内层正常结束时只 flush，
    不提交、不回滚，异常交给外层处理。最外层作用域正常结束时 flush，
    commit=True 时提交；出现任何异常时回滚 session 并重新抛出。

    Args:
        session: 数据库会话
        commit: 最外层作用域结束时是否提交
    """
    current = _current_scope.get()
    if current is not None and current.session is session:
        current.nesting_level += 1
        try:
            yield current
            # 后续的批量路径重写要看到本层写入的节点
            session.flush()
        finally:
            current.nesting_level -= 1
        return

    scope = TransactionScope(session, commit)
    token = _current_scope.set(scope)
    try:
        yield scope
        session.flush()
        if commit:
            session.commit()
    except Exception as e:
        logger.warning(f"事务回滚: {type(e).__name__}: {e}")
        session.rollback()
        raise
    finally:
        _current_scope.reset(token)


__all__ = ["TransactionScope", "transaction_scope", "current_scope"]
