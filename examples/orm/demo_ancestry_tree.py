"""祖先路径树使用示例

演示 AncestryMixin 的各种使用场景：
1. 建树与节点查询
2. 移动子树
3. 深度范围查询
4. 孤儿策略
"""

import sys
from pathlib import Path

# 添加项目根目录到 path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from ytree.exceptions import AncestryException, IntegrityError
from ytree.log import setup_logger
from ytree.orm import Base, CoreModel, init_database
from ytree.orm.tree import AncestryMixin, AncestryFieldsMixin


class Department(AncestryMixin, AncestryFieldsMixin, CoreModel):
    """部门 - 删除时子部门上移"""
    __tablename__ = "demo_department"
    __ancestry__ = {"orphan_strategy": "rootify", "cache_depth": True}

    name: Mapped[str] = mapped_column(String(100), comment="部门名称")


class Folder(AncestryMixin, AncestryFieldsMixin, CoreModel):
    """文件夹 - 非空文件夹不能删除"""
    __tablename__ = "demo_folder"
    __ancestry__ = {"orphan_strategy": "restrict"}

    name: Mapped[str] = mapped_column(String(100), comment="文件夹名称")


def print_tree(model):
    for node in model.ordered_by_ancestry(model.id).all():
        print(f"  {'  ' * node.depth()}{node.name}  (ancestry={node.ancestry!r})")


# ==================== 示例 1: 建树与查询 ====================

def demo_build_and_query():
    print("\n[1] 建树与节点查询")

    company = Department(name="总公司").save(commit=True)
    rd = Department(name="研发中心", ancestry=company.child_ancestry()).save(commit=True)
    sales = Department(name="销售部", ancestry=company.child_ancestry()).save(commit=True)
    backend = Department(name="后端组", ancestry=rd.child_ancestry()).save(commit=True)
    Department(name="存储小组", ancestry=backend.child_ancestry()).save(commit=True)
    Department(name="华东区", ancestry=sales.child_ancestry()).save(commit=True)

    print_tree(Department)
    print(f"  后端组的祖先: {[d.name for d in backend.ancestors()]}")
    print(f"  研发中心的后代: {[d.name for d in rd.descendants()]}")
    print(f"  销售部的兄弟: {[d.name for d in sales.siblings(include_self=False)]}")


# ==================== 示例 2: 移动子树 ====================

def demo_move_subtree():
    print("\n[2] 把后端组移到销售部下")

    backend = Department.query.filter_by(name="后端组").one()
    sales = Department.query.filter_by(name="销售部").one()
    backend.move_to(sales, commit=True)

    print_tree(Department)

    try:
        company = Department.query.filter_by(name="总公司").one()
        company.move_to(backend)
    except AncestryException as e:
        print(f"  移动到自己的后代下被拒绝: {e.code} - {e.message}")


# ==================== 示例 3: 深度范围查询 ====================

def demo_depth_scopes():
    print("\n[3] 深度范围查询")

    print(f"  深度为 1: {[d.name for d in Department.at_depth(1).all()]}")
    print(f"  深度 >= 2: {[d.name for d in Department.from_depth(2).all()]}")


# ==================== 示例 4: 孤儿策略 ====================

def demo_orphan_strategies():
    print("\n[4] 孤儿策略")

    sales = Department.query.filter_by(name="销售部").one()
    sales.delete(commit=True)
    print("  删除销售部（rootify）后:")
    print_tree(Department)

    root = Folder(name="/").save(commit=True)
    Folder(name="docs", ancestry=root.child_ancestry()).save(commit=True)
    try:
        root.delete(commit=True)
    except IntegrityError as e:
        print(f"  删除非空文件夹被拒绝（restrict）: {e.message}")


def main():
    setup_logger("ytree", level="INFO")

    engine, session_scope = init_database("sqlite:///:memory:")
    Base.metadata.create_all(bind=engine)

    try:
        demo_build_and_query()
        demo_move_subtree()
        demo_depth_scopes()
        demo_orphan_strategies()

        print("\n" + "=" * 60)
        print("All demos completed successfully!")
        print("=" * 60)
    finally:
        session_scope.remove()


if __name__ == "__main__":
    main()
