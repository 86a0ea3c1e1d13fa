"""
ORM基础模型

提供声明式 Base 和带有常用 CRUD 方法的 CoreModel
"""

from __future__ import annotations

import re
from sqlalchemy import Integer
from sqlalchemy.orm import Mapped, mapped_column, declared_attr, declarative_base, Session, Query
from typing import ClassVar, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from typing_extensions import Self


Base = declarative_base()

# 主键类型别名：整数自增或字符串
PKType = Union[int, str]

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def to_snake_case(name: str) -> str:
    """驼峰命名转下划线（TreeNode -> tree_node，APIMenu -> api_menu）"""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


class CoreModel(Base):
    """ORM基础模型类

    提供功能：
    - 整数自增主键 id（子类可以覆盖为字符串主键）
    - 自动表名生成（驼峰转下划线）
    - save / delete / get 等常用方法

    使用示例:
        from ytree.orm import CoreModel, init_database

        init_database("sqlite:///./tree.db")

        class Department(CoreModel):
            name: Mapped[str] = mapped_column(String(50))

        dept = Department(name="研发部")
        dept.save(commit=True)
    """
    __abstract__ = True

    # 允许非 Mapped[] 的类型注解
    __allow_unmapped__ = True

    # query 属性由 init_database() 通过 scoped_session.query_property() 设置
    query = None
    if TYPE_CHECKING:
        query: ClassVar[Query[Self]]

    _session: Session = None

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return to_snake_case(cls.__name__)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    def __repr__(self):
        return f"<{self.__class__.__name__} id={self.id}>"

    def __getattribute__(self, name):
        """访问 id 时，如果对象处于 pending 状态且 id 为空，自动 flush 获取主键

            parent = Department(name="总部")
            parent.save()
            child.ancestry = parent.child_ancestry()  # parent.id 自动可用
        """
        value = super().__getattribute__(name)

        if name == 'id' and value is None:
            try:
                state = super().__getattribute__('_sa_instance_state')
                session = state.session
                # flush 过程中（如 before_insert 事件）不能再次 flush
                if session is not None and state.pending and not session._flushing:
                    session.flush()
                    return super().__getattribute__(name)
            except (AttributeError, KeyError):
                pass

        return value

    @property
    def session(self) -> Session:
        """获取当前session

        优先从 query 属性获取 session，如果不可用则从全局 scoped_session 获取
        """
        if self._session is None:
            if self.__class__.query is not None:
                self._session = self.__class__.query.session
            else:
                from .db_session import db_manager
                self._session = db_manager.get_session()
        return self._session

    # ==================== CRUD 操作方法 ====================

    def save(self, commit: bool = False) -> Self:
        """保存对象（自动判断新增或更新）

        Args:
            commit: 是否立即提交，默认False

        Returns:
            self: 返回自身，支持链式调用
        """
        self.session.add(self)
        self.__is_commit(commit)
        return self

    def delete(self, commit: bool = False):
        """删除对象"""
        self.session.delete(self)
        self.__is_commit(commit)

    def refresh(self, attribute_names: list = None) -> Self:
        """从数据库重新加载对象状态"""
        if attribute_names:
            self.session.refresh(self, attribute_names)
        else:
            self.session.refresh(self)
        return self

    @classmethod
    def get(cls, id: PKType):
        """根据ID获取对象，不存在返回None"""
        return cls.query.session.get(cls, id)

    @classmethod
    def get_all(cls):
        """获取所有记录"""
        return cls.query.all()

    def to_dict(self, exclude: set = None) -> dict:
        """将列值转换为字典"""
        exclude = exclude or set()
        return {
            column.key: getattr(self, column.key)
            for column in self.__mapper__.column_attrs
            if column.key not in exclude
        }

    def __is_commit(self, commit=False):
        if commit:
            self.session.commit()


__all__ = ["Base", "CoreModel", "PKType", "to_snake_case"]
