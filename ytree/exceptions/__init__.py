"""异常模块

使用示例:
    from ytree.exceptions import Err, FormatError, register_exception_handlers

    raise Err.not_found("节点不存在", node_id=42)
"""

from .exceptions import (
    ErrorCode,
    ErrorCodeType,
    AncestryException,
    ConfigurationError,
    FormatError,
    ValidationError,
    IntegrityError,
    NotFoundError,
    Err,
)

from .handlers import (
    ancestry_exception_handler,
    register_exception_handlers,
)

__all__ = [
    "ErrorCode",
    "ErrorCodeType",
    "AncestryException",
    "ConfigurationError",
    "FormatError",
    "ValidationError",
    "IntegrityError",
    "NotFoundError",
    "Err",
    "ancestry_exception_handler",
    "register_exception_handlers",
]
