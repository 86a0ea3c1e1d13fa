"""全局异常处理器

将树引擎异常转换为统一的 JSON 响应格式。
"""

import os

from fastapi import Request
from fastapi.responses import JSONResponse

from ytree.log import get_logger
from .exceptions import AncestryException

# 创建日志记录器
logger = get_logger()


async def ancestry_exception_handler(
    request: Request,
    exc: AncestryException
) -> JSONResponse:
    """树引擎异常处理器

    Args:
        request: FastAPI 请求对象
        exc: 树引擎异常实例

    Returns:
        JSON 响应
    """
    request_id = getattr(request.state, "request_id", "unknown")

    logger.warning(
        f"Ancestry exception occurred: {exc.code} - {exc.message}",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "error_code": exc.code,
            "status_code": exc.status_code,
            "details": exc.details,
            "extra": exc.extra
        }
    )

    content = {
        "status": "error",
        "message": exc.message,
        "msg_details": exc.details,
        "data": {}
    }

    if exc.code:
        content["error_code"] = exc.code

    # 调试模式下附带上下文（node_id、path 等）
    is_debug = os.getenv("DEBUG", "false").lower() == "true"
    if is_debug and exc.extra:
        content["debug_info"] = exc.extra

    return JSONResponse(
        status_code=exc.status_code,
        content=content
    )


def register_exception_handlers(app) -> None:
    """注册树引擎异常处理器到 FastAPI 应用

    使用示例:
        from fastapi import FastAPI
        from ytree.exceptions import register_exception_handlers

        app = FastAPI()
        register_exception_handlers(app)

    Args:
        app: FastAPI 应用实例
    """
    app.add_exception_handler(AncestryException, ancestry_exception_handler)
    logger.info("Ancestry exception handlers registered successfully")
