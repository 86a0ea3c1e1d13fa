"""
祖先路径树 - 路径编解码

路径格式: 从根到父节点的 ID 链，用分隔符连接，如 "1/4/9"。
根节点的路径为 None（空字符串也视为根）。路径不包含节点自身的 ID。
"""

import re
from typing import Any, List, Optional, Sequence

from ytree.exceptions import FormatError
from .ancestry_config import AncestryConfig


class PathCodec:
    """路径编解码器

    纯函数集合，不访问数据库。

    使用示例:
        codec = PathCodec(AncestryConfig())

        codec.decode("1/4/9")        # [1, 4, 9]
        codec.encode([1, 4, 9])      # "1/4/9"
        codec.encode([])             # None
        codec.parent_id("1/4/9")     # 9
        codec.depth("1/4/9")         # 3
        codec.child_path_of("1/4", 9)  # "1/4/9"
    """

    def __init__(self, config: AncestryConfig):
        self.config = config
        self.delimiter = config.delimiter
        token = config.token_pattern
        self._token_re = re.compile(token)
        self._path_re = re.compile(f"(?:{token})(?:{re.escape(self.delimiter)}(?:{token}))*")

    # ==================== 解码 ====================

    def is_valid(self, path: Optional[str]) -> bool:
        """路径格式是否合法（None 和空字符串表示根，视为合法）"""
        if not path:
            return True
        return self._path_re.fullmatch(path) is not None

    def decode(self, path: Optional[str]) -> List[Any]:
        """解码路径为祖先 ID 列表（根 -> 父）

        Raises:
            FormatError: 存在空片段或不符合 ID 链格式
        """
        if not path:
            return []
        if not isinstance(path, str) or self._path_re.fullmatch(path) is None:
            raise FormatError(
                f"祖先路径格式不正确: {path!r}",
                details=[f"路径必须由 ID 片段组成，使用 {self.delimiter!r} 分隔且不能有空片段"],
                path=path,
            )
        return [self._convert(token) for token in path.split(self.delimiter)]

    def _convert(self, token: str) -> Any:
        if self.config.id_type == "int":
            return int(token)
        return token

    # ==================== 编码 ====================

    def encode(self, ancestor_ids: Sequence[Any]) -> Optional[str]:
        """编码祖先 ID 列表为路径，空列表返回 None

        Raises:
            FormatError: ID 为空、包含分隔符或不符合 ID 格式
        """
        if not ancestor_ids:
            return None
        tokens = []
        for node_id in ancestor_ids:
            token = "" if node_id is None else str(node_id)
            if not token or self._token_re.fullmatch(token) is None:
                raise FormatError(
                    f"无法编码的节点 ID: {node_id!r}",
                    node_id=node_id,
                )
            tokens.append(token)
        return self.delimiter.join(tokens)

    # ==================== 派生值 ====================

    def parent_id(self, path: Optional[str]) -> Optional[Any]:
        """父节点 ID，根节点返回 None"""
        ids = self.decode(path)
        return ids[-1] if ids else None

    def root_id(self, path: Optional[str], node_id: Any) -> Any:
        """根节点 ID，根节点自身返回 node_id"""
        ids = self.decode(path)
        return ids[0] if ids else node_id

    def depth(self, path: Optional[str]) -> int:
        """深度：祖先数量，根节点为 0"""
        return len(self.decode(path))

    def child_path_of(self, path: Optional[str], node_id: Any) -> str:
        """路径为 path、ID 为 node_id 的节点的子节点路径"""
        return self.encode(self.decode(path) + [node_id])

    def child_path(self, node: Any) -> str:
        """节点的子节点路径: encode(decode(node.path) + [node.id])"""
        return self.child_path_of(
            getattr(node, self.config.path_column),
            getattr(node, self.config.id_column),
        )

    def contains(self, path: Optional[str], node_id: Any) -> bool:
        """路径中是否包含指定 ID（按字符串比较，兼容 int/str 主键）"""
        if node_id is None:
            return False
        return str(node_id) in (str(i) for i in self.decode(path))


__all__ = ["PathCodec"]
