"""ORM模块

- CoreModel: 模型基类，包含ID、CRUD
- 数据库会话管理
- 事务范围
- 祖先路径树扩展（ytree.orm.tree）

使用示例:
    from ytree.orm import CoreModel, init_database, db_session_scope
    from ytree.orm.tree import AncestryMixin, AncestryFieldsMixin

    init_database("sqlite:///./tree.db")

    class Category(AncestryMixin, AncestryFieldsMixin, CoreModel):
        name = mapped_column(String(100))

    with db_session_scope():
        root = Category(name="根").save()
"""

from .core_model import Base, CoreModel, PKType, to_snake_case
from .db_session import (
    db_manager,
    init_database,
    get_engine,
    db_session_scope,
)
from .transaction import TransactionScope, transaction_scope, current_scope

__all__ = [
    # 模型
    "Base",
    "CoreModel",
    "PKType",
    "to_snake_case",
    # 会话
    "db_manager",
    "init_database",
    "get_engine",
    "db_session_scope",
    # 事务
    "TransactionScope",
    "transaction_scope",
    "current_scope",
]
