"""测试辅助工具模块

提供测试用的树模型和建树函数。
"""

from .tree_models import (
    DestroyNode,
    RootifyNode,
    RestrictNode,
    DetachNode,
    DepthNode,
    DottedNode,
    CodeNode,
    Region,
    City,
    build_tree,
)

__all__ = [
    'DestroyNode',
    'RootifyNode',
    'RestrictNode',
    'DetachNode',
    'DepthNode',
    'DottedNode',
    'CodeNode',
    'Region',
    'City',
    'build_tree',
]
