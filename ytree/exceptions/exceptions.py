"""祖先路径树异常类定义

定义树引擎使用的异常类体系。所有异常都携带 HTTP 状态码和错误代码，
可以直接被 FastAPI 异常处理器转换为统一的 JSON 响应。
"""

import copy
from typing import Optional, List, Any, Dict, Union
from fastapi import status
from enum import Enum


class ErrorCode(str, Enum):
    """错误代码枚举

    继承自 str，可以直接作为字符串使用。

    使用示例:
        from ytree.exceptions import ErrorCode, FormatError

        try:
            node.save()
        except FormatError as e:
            if e.code == ErrorCode.INVALID_FORMAT:
                ...
    """

    # ==================== 通用错误 ====================
    ANCESTRY_ERROR = "ANCESTRY_ERROR"

    # ==================== 配置相关 (500) ====================
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    UNKNOWN_OPTION = "UNKNOWN_OPTION"
    DEPTH_CACHE_DISABLED = "DEPTH_CACHE_DISABLED"

    # ==================== 节点相关 (404) ====================
    NODE_NOT_FOUND = "NODE_NOT_FOUND"

    # ==================== 冲突相关 (409) ====================
    RESTRICT_VIOLATION = "RESTRICT_VIOLATION"
    INTEGRITY_VIOLATION = "INTEGRITY_VIOLATION"

    # ==================== 验证相关 (422) ====================
    INVALID_FORMAT = "INVALID_FORMAT"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    SELF_REFERENCE = "SELF_REFERENCE"
    INVALID_DEPTH = "INVALID_DEPTH"


# 类型别名，支持枚举和字符串
ErrorCodeType = Union[str, ErrorCode]


class AncestryException(Exception):
    """树引擎异常基类

    属性:
        message: 错误消息
        code: 错误代码（ErrorCode 枚举或字符串）
        status_code: HTTP 状态码
        details: 详细错误信息列表
        extra: 额外的上下文信息（如 node_id、path）
    """

    def __init__(
        self,
        message: str,
        code: ErrorCodeType = ErrorCode.ANCESTRY_ERROR,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: Optional[List[str]] = None,
        **extra: Any
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or []
        self.extra = extra
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式"""
        return {
            "message": self.message,
            "code": self.code,
            "status_code": self.status_code,
            "details": copy.deepcopy(self.details),
            "extra": copy.deepcopy(self.extra)
        }

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code!r}, "
            f"status_code={self.status_code})"
        )


class ConfigurationError(AncestryException):
    """配置错误

    未知配置项、非法配置值，或在未启用深度缓存时请求深度范围查询。

    使用示例:
        raise ConfigurationError("未知的配置项: foo", option="foo")
    """

    def __init__(
        self,
        message: str = "树配置错误",
        code: ErrorCodeType = ErrorCode.CONFIGURATION_ERROR,
        details: Optional[List[str]] = None,
        **extra: Any
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details,
            **extra
        )


class FormatError(AncestryException):
    """路径格式错误

    路径不符合 "id(分隔符id)*" 格式，或存在空片段。
    """

    def __init__(
        self,
        message: str = "祖先路径格式不正确",
        code: ErrorCodeType = ErrorCode.INVALID_FORMAT,
        details: Optional[List[str]] = None,
        **extra: Any
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=details,
            **extra
        )


class ValidationError(AncestryException):
    """节点验证错误

    路径中包含节点自身 ID，或缓存深度不是非负整数。

    使用示例:
        raise ValidationError(
            "节点不能成为自己的祖先",
            code=ErrorCode.SELF_REFERENCE,
            node_id=5
        )
    """

    def __init__(
        self,
        message: str = "节点数据验证失败",
        code: ErrorCodeType = ErrorCode.VALIDATION_ERROR,
        details: Optional[List[str]] = None,
        **extra: Any
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=details,
            **extra
        )


class IntegrityError(AncestryException):
    """完整性错误

    restrict 策略下删除仍有子节点的节点时抛出。
    """

    def __init__(
        self,
        message: str = "节点仍有子节点，不能删除",
        code: ErrorCodeType = ErrorCode.RESTRICT_VIOLATION,
        details: Optional[List[str]] = None,
        **extra: Any
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=status.HTTP_409_CONFLICT,
            details=details,
            **extra
        )


class NotFoundError(AncestryException):
    """节点不存在"""

    def __init__(
        self,
        message: str = "节点不存在",
        code: ErrorCodeType = ErrorCode.NODE_NOT_FOUND,
        details: Optional[List[str]] = None,
        **extra: Any
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=status.HTTP_404_NOT_FOUND,
            details=details,
            **extra
        )


class Err:
    """异常快捷创建类

    使用示例:
        from ytree.exceptions import Err

        raise Err.config("未知的配置项: foo")
        raise Err.format("祖先路径格式不正确", path="1//2")
        raise Err.invalid("节点不能成为自己的祖先", node_id=5)
        raise Err.integrity("节点仍有子节点，不能删除")
        raise Err.not_found("节点不存在", node_id=42)
    """

    @staticmethod
    def config(message: str = "树配置错误", **kwargs) -> ConfigurationError:
        """配置错误 (500)"""
        return ConfigurationError(message, **kwargs)

    @staticmethod
    def format(message: str = "祖先路径格式不正确", **kwargs) -> FormatError:
        """路径格式错误 (422)"""
        return FormatError(message, **kwargs)

    @staticmethod
    def invalid(message: str = "节点数据验证失败", **kwargs) -> ValidationError:
        """节点验证错误 (422)"""
        return ValidationError(message, **kwargs)

    @staticmethod
    def integrity(message: str = "节点仍有子节点，不能删除", **kwargs) -> IntegrityError:
        """完整性错误 (409)

        适用场景: restrict 孤儿策略下删除有子节点的节点
        """
        return IntegrityError(message, **kwargs)

    @staticmethod
    def not_found(message: str = "节点不存在", **kwargs) -> NotFoundError:
        """节点不存在 (404)"""
        return NotFoundError(message, **kwargs)


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
]
